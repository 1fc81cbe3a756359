"""Internal utilities."""

from __future__ import annotations

import sys

_PLATFORM_NAMES = {
    "linux": "Linux",
    "win32": "Windows",
    "cygwin": "Windows",
    "darwin": "macOS",
    "ios": "iOS",
    "android": "Android",
    "freebsd": "FreeBSD",
    "netbsd": "NetBSD",
    "openbsd": "OpenBSD",
}


def current_platform_name(platform: str | None = None) -> str:
    """Return the display name of the platform (e.g. ``"Linux"``).

    ``platform`` defaults to :data:`sys.platform`. Version suffixes such as
    ``freebsd14`` are ignored. Unrecognized platforms yield ``"Unknown"``.
    """
    raw = (platform if platform is not None else sys.platform).lower()
    for prefix, name in _PLATFORM_NAMES.items():
        if raw.startswith(prefix):
            return name
    return "Unknown"


def default_user_agent(platform: str | None = None) -> str:
    from pyretdec import __version__

    return f"pyretdec/{__version__} ({current_platform_name(platform)})"

"""Access to the testing service (credential checks and echo)."""

from __future__ import annotations

from typing import Any

from pyretdec.settings import ServiceConfig
from pyretdec.transport import DEFAULT_TIMEOUT, Transport


class Tester:
    __test__ = False

    def __init__(
        self,
        config: ServiceConfig,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Transport | None = None,
    ):
        self.config = config
        self._transport = transport or Transport(config, timeout=timeout)

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> Tester:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def auth(self) -> None:
        """Raise RetdecAuthenticationError unless the API key is accepted."""
        self._transport.get("/test/echo")

    def echo(self, **params: str) -> dict[str, Any]:
        """Send ``params`` as query arguments and return what the API echoes back."""
        return self._transport.get_json("/test/echo", params=params)

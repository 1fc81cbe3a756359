"""Access to the file-decompiling service."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Callable

from pyretdec.jobs import DEFAULT_POLL_INTERVAL, JobRunner, StatusCallback
from pyretdec.models import ArtifactKind, DecompilationArguments, JobHandle, JobKind, JobStatus
from pyretdec.settings import ServiceConfig
from pyretdec.transport import DEFAULT_TIMEOUT, Transport

_OUTPUT_PATHS = {
    ArtifactKind.HLL: "outputs/hll",
    ArtifactKind.DSM: "outputs/dsm",
    ArtifactKind.CG: "outputs/cg",
    ArtifactKind.ARCHIVE: "outputs/archive",
    ArtifactKind.BINARY: "outputs/binary",
}


class Decompiler:
    """Client of the retdec.com decompiler service.

    Usage::

        with Decompiler(ServiceConfig(api_key="MY-API-KEY")) as decompiler:
            job = decompiler.start(
                DecompilationArguments(input_file=InputFile.from_path("hello.exe"))
            )
            decompiler.wait_until_finished(job)
            print(decompiler.get_output_hll_code(job))
    """

    def __init__(
        self,
        config: ServiceConfig,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        sleep: Callable[[float], None] = time.sleep,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        transport: Transport | None = None,
    ):
        self.config = config
        self._transport = transport or Transport(config, timeout=timeout)
        self._jobs = JobRunner(
            self._transport,
            JobKind.DECOMPILATION,
            "/decompiler/decompilations",
            _OUTPUT_PATHS,
            sleep=sleep,
            poll_interval=poll_interval,
        )

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> Decompiler:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ── API methods ──────────────────────────────────────────────────────

    def start(self, args: DecompilationArguments) -> JobHandle:
        return self._jobs.start(args)

    def get_status(self, handle: JobHandle) -> JobStatus:
        return self._jobs.get_status(handle)

    def wait_until_finished(
        self,
        handle: JobHandle,
        poll_interval: float | None = None,
        on_status: StatusCallback | None = None,
    ) -> None:
        self._jobs.wait_until_finished(handle, poll_interval, on_status)

    def get_output(self, handle: JobHandle, kind: ArtifactKind | str) -> bytes:
        return self._jobs.get_output(handle, kind)

    def get_output_hll_code(self, handle: JobHandle) -> str:
        """Decompiled code in the target high-level language (C or Python)."""
        return self._jobs.get_text(handle, ArtifactKind.HLL)

    def get_output_dsm_code(self, handle: JobHandle) -> str:
        return self._jobs.get_text(handle, ArtifactKind.DSM)

    def save_output(
        self,
        handle: JobHandle,
        kind: ArtifactKind | str,
        directory: str | Path,
        name: str,
    ) -> Path:
        """Fetch an output and write it to ``directory/name``."""
        target = Path(directory) / name
        target.write_bytes(self.get_output(handle, kind))
        return target

"""Access to the file-analyzing service."""

from __future__ import annotations

import time
from typing import Any, Callable

from pyretdec.jobs import DEFAULT_POLL_INTERVAL, JobRunner, StatusCallback
from pyretdec.models import AnalysisArguments, ArtifactKind, JobHandle, JobKind, JobStatus
from pyretdec.settings import ServiceConfig
from pyretdec.transport import DEFAULT_TIMEOUT, Transport


class Fileinfo:
    """Client of the retdec.com fileinfo service.

    Usage::

        with Fileinfo(ServiceConfig(api_key="MY-API-KEY")) as fileinfo:
            job = fileinfo.start(
                AnalysisArguments(input_file=InputFile.from_path("file.exe"), verbose=True)
            )
            fileinfo.wait_until_finished(job)
            print(fileinfo.get_report(job))
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
            JobKind.ANALYSIS,
            "/fileinfo/analyses",
            {ArtifactKind.REPORT: "output"},
            sleep=sleep,
            poll_interval=poll_interval,
        )

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> Fileinfo:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def start(self, args: AnalysisArguments) -> JobHandle:
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

    def get_output(self, handle: JobHandle, kind: ArtifactKind | str = ArtifactKind.REPORT) -> bytes:
        return self._jobs.get_output(handle, kind)

    def get_report(self, handle: JobHandle) -> str:
        return self._jobs.get_text(handle, ArtifactKind.REPORT)

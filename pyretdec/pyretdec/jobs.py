"""Submit/poll/fetch machinery shared by the decompiler and fileinfo services."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Protocol

from pyretdec.errors import (
    InvalidArgumentsError,
    JobFailedError,
    MalformedResponseError,
    NotReadyError,
    UnsupportedArtifactError,
)
from pyretdec.files import InputFile
from pyretdec.models import ArtifactKind, JobHandle, JobKind, JobStatus
from pyretdec.transport import Transport

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.5

StatusCallback = Callable[[JobStatus], None]


class JobArguments(Protocol):
    def validate_for_submission(self) -> None: ...

    def to_form(self) -> tuple[dict[str, str], dict[str, InputFile]]: ...

    def artifacts(self) -> frozenset[ArtifactKind]: ...


class JobService(Protocol):
    """Capabilities offered by every job-based service."""

    def start(self, args: Any) -> JobHandle: ...

    def get_status(self, handle: JobHandle) -> JobStatus: ...

    def wait_until_finished(
        self,
        handle: JobHandle,
        poll_interval: float | None = None,
        on_status: StatusCallback | None = None,
    ) -> None: ...

    def get_output(self, handle: JobHandle, kind: ArtifactKind | str) -> bytes: ...


class JobRunner:
    """Drives jobs living under ``/<service>/<collection>`` on the API.

    ``output_paths`` maps each artifact kind to its path relative to the job
    resource, e.g. ``{ArtifactKind.HLL: "outputs/hll"}``.
    """

    def __init__(
        self,
        transport: Transport,
        kind: JobKind,
        collection_path: str,
        output_paths: dict[ArtifactKind, str],
        sleep: Callable[[float], None] = time.sleep,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        self.transport = transport
        self.kind = kind
        self.collection_path = collection_path.rstrip("/")
        self.output_paths = output_paths
        self.sleep = sleep
        self.poll_interval = poll_interval

    def resource_path(self, handle: JobHandle) -> str:
        return f"{self.collection_path}/{handle.id}"

    def start(self, args: JobArguments) -> JobHandle:
        args.validate_for_submission()
        data, files = args.to_form()
        logger.info("starting %s of %s", self.kind.value, files["input"].name)
        reply = self.transport.post_json(self.collection_path, data=data, files=files)
        job_id = reply.get("id")
        if not isinstance(job_id, str) or not job_id:
            raise MalformedResponseError(f"{self.collection_path} returned no job id")
        logger.info("%s %s started", self.kind.value, job_id)
        return JobHandle(
            id=job_id,
            kind=self.kind,
            config=self.transport.config,
            artifacts=frozenset(args.artifacts() & set(self.output_paths)),
        )

    def get_status(self, handle: JobHandle) -> JobStatus:
        self._check_kind(handle)
        if handle.is_terminal:
            assert handle.status is not None
            return handle.status
        payload = self.transport.get_json(f"{self.resource_path(handle)}/status")
        status = JobStatus.from_payload(payload)
        if status.id is not None and status.id != handle.id:
            raise MalformedResponseError(
                f"status response is for job {status.id}, expected {handle.id}"
            )
        logger.debug("%s %s: %s (%s%%)", self.kind.value, handle.id, status.state.value, status.completion)
        handle.status = status
        return status

    def wait_until_finished(
        self,
        handle: JobHandle,
        poll_interval: float | None = None,
        on_status: StatusCallback | None = None,
    ) -> None:
        interval = self.poll_interval if poll_interval is None else poll_interval
        while True:
            status = self.get_status(handle)
            if on_status is not None:
                on_status(status)
            if status.is_terminal:
                break
            self.sleep(interval)
        if status.failed:
            raise JobFailedError(handle.id, status.error)

    def get_output(self, handle: JobHandle, kind: ArtifactKind | str) -> bytes:
        self._check_kind(handle)
        if handle.status is None or not handle.status.finished:
            raise NotReadyError(handle.id)
        try:
            artifact = ArtifactKind(kind)
        except ValueError:
            raise UnsupportedArtifactError(handle.id, str(kind)) from None
        if artifact not in handle.artifacts:
            raise UnsupportedArtifactError(handle.id, artifact.value)
        path = f"{self.resource_path(handle)}/{self.output_paths[artifact]}"
        return self.transport.get(path).content

    def get_text(self, handle: JobHandle, kind: ArtifactKind | str) -> str:
        content = self.get_output(handle, kind)
        try:
            return content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedResponseError(
                f"output '{ArtifactKind(kind).value}' of job {handle.id} is not valid UTF-8 text"
            ) from e

    def _check_kind(self, handle: JobHandle) -> None:
        if handle.kind is not self.kind:
            raise InvalidArgumentsError(
                f"job {handle.id} is a {handle.kind.value}, not a {self.kind.value}"
            )

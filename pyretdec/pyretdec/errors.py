"""Error types for the retdec client."""

from __future__ import annotations


class RetdecError(Exception):
    """Base error raised by the retdec client."""

    def __init__(self, error_code: str, message: str, details: dict[str, str] | None = None):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{error_code}] {message}")


class InvalidConfigError(RetdecError):
    """Raised when a ServiceConfig cannot be constructed."""

    def __init__(self, message: str):
        super().__init__("INVALID_CONFIG", message)


class InvalidArgumentsError(RetdecError):
    """Raised when job arguments fail local validation (no request is sent)."""

    def __init__(self, message: str):
        super().__init__("INVALID_ARGUMENTS", message)


class RetdecConnectionError(RetdecError):
    """Raised when the service is unreachable."""

    def __init__(self, message: str):
        super().__init__("CONNECTION_ERROR", message)


class RetdecAPIError(RetdecError):
    """Raised when the service answers with a non-2xx status."""

    def __init__(self, status: int, message: str, description: str | None = None):
        self.status = status
        self.description = description
        details = {"description": description} if description else None
        super().__init__(f"HTTP_{status}", message, details)


class RetdecAuthenticationError(RetdecAPIError):
    """Raised when the API key is rejected (HTTP 401)."""


class MalformedResponseError(RetdecError):
    """Raised when a response lacks fields the client depends on."""

    def __init__(self, message: str):
        super().__init__("MALFORMED_RESPONSE", message)


class NotReadyError(RetdecError):
    """Raised when outputs are requested before the job has finished."""

    def __init__(self, job_id: str):
        super().__init__("NOT_READY", f"job {job_id} has not finished yet", {"job_id": job_id})


class UnsupportedArtifactError(RetdecError):
    """Raised when a job does not produce the requested output artifact."""

    def __init__(self, job_id: str, artifact: str):
        super().__init__(
            "UNSUPPORTED_ARTIFACT",
            f"job {job_id} does not produce '{artifact}' output",
            {"job_id": job_id, "artifact": artifact},
        )


class JobFailedError(RetdecError):
    """Raised when the service reports that a job failed."""

    def __init__(self, job_id: str, message: str | None):
        self.job_id = job_id
        super().__init__("JOB_FAILED", message or f"job {job_id} failed", {"job_id": job_id})

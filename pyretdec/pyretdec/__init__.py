"""pyretdec – Python client for the retdec.com decompilation service."""

__version__ = "0.1.0"

from pyretdec.decompiler import Decompiler
from pyretdec.errors import (
    InvalidArgumentsError,
    InvalidConfigError,
    JobFailedError,
    MalformedResponseError,
    NotReadyError,
    RetdecAPIError,
    RetdecAuthenticationError,
    RetdecConnectionError,
    RetdecError,
    UnsupportedArtifactError,
)
from pyretdec.files import InputFile
from pyretdec.fileinfo import Fileinfo
from pyretdec.jobs import JobService
from pyretdec.models import (
    AnalysisArguments,
    ArtifactKind,
    DecompilationArguments,
    DecompilationPhase,
    JobHandle,
    JobKind,
    JobState,
    JobStatus,
)
from pyretdec.settings import ServiceConfig
from pyretdec.tester import Tester
from pyretdec.transport import Transport

__all__ = [
    "Decompiler",
    "Fileinfo",
    "Tester",
    "JobService",
    "Transport",
    "ServiceConfig",
    "InputFile",
    "AnalysisArguments",
    "ArtifactKind",
    "DecompilationArguments",
    "DecompilationPhase",
    "JobHandle",
    "JobKind",
    "JobState",
    "JobStatus",
    "RetdecError",
    "InvalidConfigError",
    "InvalidArgumentsError",
    "RetdecConnectionError",
    "RetdecAPIError",
    "RetdecAuthenticationError",
    "MalformedResponseError",
    "NotReadyError",
    "UnsupportedArtifactError",
    "JobFailedError",
]

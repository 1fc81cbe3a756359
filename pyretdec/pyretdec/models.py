"""Pydantic models mirroring the retdec.com JSON API."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from pyretdec.errors import InvalidArgumentsError, MalformedResponseError
from pyretdec.files import InputFile
from pyretdec.settings import ServiceConfig


class JobKind(str, Enum):
    DECOMPILATION = "decompilation"
    ANALYSIS = "analysis"


class JobState(str, Enum):
    QUEUED = "queued"
    RUNNING = "running"
    FINISHED = "finished"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.FINISHED, JobState.FAILED)


class ArtifactKind(str, Enum):
    HLL = "hll"
    DSM = "dsm"
    CG = "cg"
    ARCHIVE = "archive"
    BINARY = "binary"
    REPORT = "report"


# ── Status ───────────────────────────────────────────────────────────────────


def _drop_invalid(
    model: type[BaseModel], value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
) -> Any:
    """Replace an unusable optional value with the field's default."""
    try:
        return handler(value)
    except ValidationError:
        return model.model_fields[info.field_name].get_default(call_default_factory=True)


class DecompilationPhase(BaseModel):
    part: str | None = None
    name: str = ""
    description: str | None = None
    completion: int | float | None = None
    warnings: list[str] = Field(default_factory=list)

    @field_validator("*", mode="wrap")
    @classmethod
    def _lenient(cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo) -> Any:
        return _drop_invalid(cls, value, handler, info)


class _StatusPayload(BaseModel):
    """Fields of a status response the client understands; the rest is ignored.

    Only ``id``, ``state``, ``finished`` and ``failed`` are checked strictly.
    Other fields with an unexpected shape fall back to their defaults.
    """

    id: str | None = None
    state: JobState | None = None
    finished: StrictBool | None = None
    failed: StrictBool | None = None
    running: StrictBool | None = None
    completion: int | float | None = None
    error: str | None = None
    message: str | None = None
    warnings: list[str] = Field(default_factory=list)
    phases: list[DecompilationPhase] = Field(default_factory=list)

    @field_validator("running", "completion", "error", "message", "warnings", "phases", mode="wrap")
    @classmethod
    def _lenient(cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo) -> Any:
        return _drop_invalid(cls, value, handler, info)


class JobStatus(BaseModel):
    """Snapshot of a job's state as reported by a single status poll."""

    model_config = ConfigDict(frozen=True)

    state: JobState
    id: str | None = None
    completion: int | float | None = None
    error: str | None = None
    warnings: list[str] = Field(default_factory=list)
    phases: list[DecompilationPhase] = Field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    @property
    def finished(self) -> bool:
        return self.state is JobState.FINISHED

    @property
    def failed(self) -> bool:
        return self.state is JobState.FAILED

    @classmethod
    def from_payload(cls, payload: Any) -> JobStatus:
        """Parse a status response.

        An explicit ``state`` wins. Otherwise the state is derived from the
        ``failed``/``finished`` flags, then from ``running``/``completion``.
        The server's state is trusted as-is; no transition checks are made.
        """
        try:
            raw = _StatusPayload.model_validate(payload)
        except ValidationError as e:
            first = e.errors()[0]
            loc = ".".join(str(p) for p in first["loc"]) or "payload"
            raise MalformedResponseError(f"invalid status response ({loc}): {first['msg']}") from e

        state = raw.state
        if state is None:
            if raw.finished is None:
                raise MalformedResponseError("status response lacks the 'finished' field")
            if raw.failed:
                state = JobState.FAILED
            elif raw.finished:
                state = JobState.FINISHED
            elif raw.running or (raw.completion or 0) > 0:
                state = JobState.RUNNING
            else:
                state = JobState.QUEUED

        warnings = list(raw.warnings)
        for phase in raw.phases:
            warnings.extend(phase.warnings)

        return cls(
            state=state,
            id=raw.id,
            completion=raw.completion,
            error=raw.error or (raw.message if state is JobState.FAILED else None),
            warnings=warnings,
            phases=raw.phases,
        )


# ── Job handle ───────────────────────────────────────────────────────────────


class JobHandle(BaseModel):
    """Local handle of a remote job.

    ``status`` holds the last observed snapshot. Once it is terminal the
    handle is inert: further polls return it without contacting the API.
    """

    id: str
    kind: JobKind
    config: ServiceConfig
    artifacts: frozenset[ArtifactKind] = frozenset()
    status: JobStatus | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status is not None and self.status.is_terminal


# ── Arguments ────────────────────────────────────────────────────────────────


MODES = ("bin", "c", "raw")
TARGET_LANGUAGES = ("c", "py")
ENDIANS = ("little", "big")
DECODINGS = ("everything", "only")
OUTPUT_FORMATS = ("plain", "json")


def _bool_field(value: bool) -> str:
    return "1" if value else "0"


class DecompilationArguments(BaseModel):
    """Arguments of a decompilation.

    Only ``input_file`` is required. When ``mode`` is omitted it is detected
    from the input's name (``c`` for ``*.c`` files, ``bin`` otherwise).
    """

    input_file: InputFile | None = None
    mode: str | None = None
    pdb_file: InputFile | None = None
    target_language: str | None = None
    architecture: str | None = None
    file_format: str | None = None
    raw_endian: str | None = None
    raw_entry_point: str | None = None
    raw_section_vma: str | None = None
    ar_index: int | None = None
    ar_name: str | None = None
    sel_decomp_funcs: str | None = None
    sel_decomp_ranges: str | None = None
    sel_decomp_decoding: str | None = None
    generate_cg: bool = False
    generate_archive: bool = False

    def resolved_mode(self) -> str:
        if self.mode is not None:
            return self.mode
        if self.input_file is not None and self.input_file.name.lower().endswith(".c"):
            return "c"
        return "bin"

    def validate_for_submission(self) -> None:
        if self.input_file is None:
            raise InvalidArgumentsError("no input file given")
        mode = self.resolved_mode()
        if mode not in MODES:
            raise InvalidArgumentsError(f"unsupported mode '{mode}' (expected one of {', '.join(MODES)})")
        if self.target_language is not None and self.target_language not in TARGET_LANGUAGES:
            raise InvalidArgumentsError(f"unsupported target language '{self.target_language}'")
        if mode == "raw":
            missing = [
                name
                for name in ("architecture", "raw_endian", "raw_entry_point", "raw_section_vma")
                if getattr(self, name) is None
            ]
            if missing:
                raise InvalidArgumentsError(f"raw mode requires {', '.join(missing)}")
        if self.raw_endian is not None and self.raw_endian not in ENDIANS:
            raise InvalidArgumentsError(f"unsupported endianness '{self.raw_endian}'")
        if mode == "c" and self.pdb_file is not None:
            raise InvalidArgumentsError("a PDB file cannot be used in c mode")
        if self.ar_index is not None and self.ar_name is not None:
            raise InvalidArgumentsError("ar_index and ar_name are mutually exclusive")
        if self.sel_decomp_decoding is not None:
            if self.sel_decomp_decoding not in DECODINGS:
                raise InvalidArgumentsError(f"unsupported decoding '{self.sel_decomp_decoding}'")
            if self.sel_decomp_funcs is None and self.sel_decomp_ranges is None:
                raise InvalidArgumentsError("sel_decomp_decoding requires selected functions or ranges")

    def to_form(self) -> tuple[dict[str, str], dict[str, InputFile]]:
        data: dict[str, str] = {"mode": self.resolved_mode()}
        for name in (
            "target_language",
            "architecture",
            "file_format",
            "raw_endian",
            "raw_entry_point",
            "raw_section_vma",
            "ar_name",
            "sel_decomp_funcs",
            "sel_decomp_ranges",
            "sel_decomp_decoding",
        ):
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        if self.ar_index is not None:
            data["ar_index"] = str(self.ar_index)
        data["generate_cg"] = _bool_field(self.generate_cg)
        data["generate_archive"] = _bool_field(self.generate_archive)

        assert self.input_file is not None
        files = {"input": self.input_file}
        if self.pdb_file is not None:
            files["pdb"] = self.pdb_file
        return data, files

    def artifacts(self) -> frozenset[ArtifactKind]:
        kinds = {ArtifactKind.HLL, ArtifactKind.DSM}
        if self.resolved_mode() != "c":
            kinds.add(ArtifactKind.BINARY)
        if self.generate_cg:
            kinds.add(ArtifactKind.CG)
        if self.generate_archive:
            kinds.add(ArtifactKind.ARCHIVE)
        return frozenset(kinds)


class AnalysisArguments(BaseModel):
    input_file: InputFile | None = None
    output_format: str | None = None
    verbose: bool | None = None

    def validate_for_submission(self) -> None:
        if self.input_file is None:
            raise InvalidArgumentsError("no input file given")
        if self.output_format is not None and self.output_format not in OUTPUT_FORMATS:
            raise InvalidArgumentsError(f"unsupported output format '{self.output_format}'")

    def to_form(self) -> tuple[dict[str, str], dict[str, InputFile]]:
        data: dict[str, str] = {}
        if self.output_format is not None:
            data["output_format"] = self.output_format
        if self.verbose is not None:
            data["verbose"] = _bool_field(self.verbose)
        assert self.input_file is not None
        return data, {"input": self.input_file}

    def artifacts(self) -> frozenset[ArtifactKind]:
        return frozenset({ArtifactKind.REPORT})

"""Command-line tools: ``decompiler`` and ``fileinfo``.

Usage:
    decompiler -k API-KEY hello.exe
    fileinfo -k API-KEY --output-format json --verbose hello.exe

The API key may also be given through RETDEC_API_KEY and a custom API URL
through RETDEC_API_URL.
"""

import logging
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console

from pyretdec.decompiler import Decompiler
from pyretdec.errors import RetdecError
from pyretdec.files import InputFile
from pyretdec.fileinfo import Fileinfo
from pyretdec.jobs import JobService
from pyretdec.models import AnalysisArguments, ArtifactKind, DecompilationArguments, JobHandle, JobStatus
from pyretdec.settings import ServiceConfig

console = Console()
err_console = Console(stderr=True)

decompiler_app = typer.Typer(
    name="decompiler",
    help="Decompiles the given file via retdec.com's API.",
    add_completion=False,
)
fileinfo_app = typer.Typer(
    name="fileinfo",
    help="Analyzes the given file via retdec.com's API.",
    add_completion=False,
)

# Output file extensions, keyed by artifact kind.
_EXTENSIONS = {
    ArtifactKind.DSM: "dsm",
    ArtifactKind.CG: "cg.svg",
    ArtifactKind.ARCHIVE: "archive.zip",
    ArtifactKind.BINARY: "out",
}

ApiKeyOption = Annotated[
    Optional[str], typer.Option("--api-key", "-k", metavar="KEY", help="API key to be used (default: $RETDEC_API_KEY).")
]
ApiUrlOption = Annotated[
    Optional[str], typer.Option("--api-url", "-u", metavar="URL", help="Custom URL to the retdec.com's API (default: $RETDEC_API_URL).")
]
DebugOption = Annotated[bool, typer.Option("--debug", help="Log HTTP traffic to stderr.")]
InputArgument = Annotated[
    Path, typer.Argument(exists=True, dir_okay=False, readable=True, help="Input file")
]


def _fail(err: RetdecError) -> typer.Exit:
    err_console.print(f"error: {err.message}", markup=False, highlight=False, soft_wrap=True)
    description = err.details.get("description")
    if description:
        err_console.print(f"  {description}", markup=False, highlight=False, soft_wrap=True)
    return typer.Exit(1)


def _configure_logging(debug: bool) -> None:
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _progress_printer(quiet: bool):
    last: list[Any] = [None]

    def on_status(status: JobStatus) -> None:
        if quiet:
            return
        current = (status.state, status.completion)
        if current == last[0]:
            return
        last[0] = current
        completion = f" ({status.completion}%)" if status.completion is not None else ""
        err_console.print(f"[dim]{status.state.value}{completion}[/dim]")

    return on_status


def run_job(service: JobService, args: Any, quiet: bool = False) -> JobHandle:
    """Start a job, wait for it and report its warnings."""
    handle = service.start(args)
    if not quiet:
        err_console.print(f"[dim]job {handle.id} submitted[/dim]")
    service.wait_until_finished(handle, on_status=_progress_printer(quiet))
    if not quiet and handle.status is not None:
        for warning in handle.status.warnings:
            err_console.print(f"[yellow]warning:[/yellow] {warning}", highlight=False)
    return handle


def output_name(input_path: Path, output_dir: Path, extension: str) -> str:
    """Name of an output file, never clobbering the input itself."""
    name = f"{input_path.stem}.{extension}"
    if (output_dir / name).resolve() == input_path.resolve():
        name = f"{input_path.stem}.decompiled.{extension}"
    return name


# ── decompiler ───────────────────────────────────────────────────────────────


@decompiler_app.command()
def decompile(
    file: InputArgument,
    api_key: ApiKeyOption = None,
    api_url: ApiUrlOption = None,
    output_dir: Annotated[
        Optional[Path], typer.Option("--output-dir", "-o", file_okay=False, help="Directory for the outputs (default: next to the input)")
    ] = None,
    mode: Annotated[Optional[str], typer.Option("--mode", "-m", help="Decompilation mode: bin, c, raw (default: auto)")] = None,
    target_language: Annotated[
        Optional[str], typer.Option("--target-language", "-l", help="Target high-level language: c, py")
    ] = None,
    architecture: Annotated[Optional[str], typer.Option("--architecture", "-a", help="Architecture (default: auto)")] = None,
    file_format: Annotated[Optional[str], typer.Option("--file-format", "-f", help="File format (default: auto)")] = None,
    pdb: Annotated[
        Optional[Path], typer.Option("--pdb", exists=True, dir_okay=False, help="PDB file with debugging information")
    ] = None,
    select_functions: Annotated[
        Optional[str], typer.Option("--select-functions", help="Comma-separated functions to decompile")
    ] = None,
    select_ranges: Annotated[
        Optional[str], typer.Option("--select-ranges", help="Comma-separated address ranges to decompile")
    ] = None,
    select_decoding: Annotated[
        Optional[str], typer.Option("--select-decoding", help="What to decode in a selective decompilation: everything, only")
    ] = None,
    raw_endian: Annotated[Optional[str], typer.Option("--raw-endian", help="Endianness of a raw input: little, big")] = None,
    raw_entry_point: Annotated[Optional[str], typer.Option("--raw-entry-point", help="Entry point address of a raw input")] = None,
    raw_section_vma: Annotated[Optional[str], typer.Option("--raw-section-vma", help="Section address of a raw input")] = None,
    ar_index: Annotated[Optional[int], typer.Option("--ar-index", help="Index of the object file in an archive")] = None,
    ar_name: Annotated[Optional[str], typer.Option("--ar-name", help="Name of the object file in an archive")] = None,
    with_cg: Annotated[bool, typer.Option("--with-cg", help="Generate the call graph")] = False,
    with_archive: Annotated[bool, typer.Option("--with-archive", help="Generate an archive with all outputs")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Print only the output paths")] = False,
    debug: DebugOption = False,
) -> None:
    """Decompile FILE and store the outputs next to it."""
    _configure_logging(debug)
    output_dir = output_dir or file.parent
    try:
        config = ServiceConfig.from_env(api_key=api_key, api_url=api_url)
        args = DecompilationArguments(
            input_file=InputFile.from_path(file),
            mode=mode,
            pdb_file=InputFile.from_path(pdb) if pdb is not None else None,
            target_language=target_language,
            architecture=architecture,
            file_format=file_format,
            raw_endian=raw_endian,
            raw_entry_point=raw_entry_point,
            raw_section_vma=raw_section_vma,
            ar_index=ar_index,
            ar_name=ar_name,
            sel_decomp_funcs=select_functions,
            sel_decomp_ranges=select_ranges,
            sel_decomp_decoding=select_decoding,
            generate_cg=with_cg,
            generate_archive=with_archive,
        )
        with Decompiler(config) as decompiler:
            handle = run_job(decompiler, args, quiet)
            output_dir.mkdir(parents=True, exist_ok=True)
            extensions = {**_EXTENSIONS, ArtifactKind.HLL: target_language or "c"}
            for kind in sorted(handle.artifacts, key=lambda k: list(ArtifactKind).index(k)):
                name = output_name(file, output_dir, extensions[kind])
                path = decompiler.save_output(handle, kind, output_dir, name)
                console.print(str(path), markup=False, highlight=False, soft_wrap=True)
    except RetdecError as e:
        raise _fail(e) from e
    except OSError as e:
        err_console.print(f"error: {e}", markup=False, highlight=False, soft_wrap=True)
        raise typer.Exit(1) from e


# ── fileinfo ─────────────────────────────────────────────────────────────────


@fileinfo_app.command()
def analyze(
    file: InputArgument,
    api_key: ApiKeyOption = None,
    api_url: ApiUrlOption = None,
    output_format: Annotated[
        Optional[str], typer.Option("--output-format", "-f", help="Format of the report: plain, json")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Print all available information")] = False,
    debug: DebugOption = False,
) -> None:
    """Analyze FILE and print the report."""
    _configure_logging(debug)
    try:
        config = ServiceConfig.from_env(api_key=api_key, api_url=api_url)
        args = AnalysisArguments(
            input_file=InputFile.from_path(file),
            output_format=output_format,
            verbose=verbose,
        )
        with Fileinfo(config) as fileinfo:
            handle = run_job(fileinfo, args, quiet=True)
            typer.echo(fileinfo.get_report(handle), nl=False)
    except RetdecError as e:
        raise _fail(e) from e
    except OSError as e:
        err_console.print(f"error: {e}", markup=False, highlight=False, soft_wrap=True)
        raise typer.Exit(1) from e


#!/usr/bin/env python3
"""
Minimal demo: check the API key → analyze a binary → decompile it.

Usage:
    RETDEC_API_KEY=... python demo.py /path/to/file.exe
"""

from __future__ import annotations

import sys

from pyretdec import (
    AnalysisArguments,
    ArtifactKind,
    DecompilationArguments,
    Decompiler,
    Fileinfo,
    InputFile,
    RetdecError,
    ServiceConfig,
    Tester,
)


def main(path: str) -> None:
    config = ServiceConfig.from_env()
    input_file = InputFile.from_path(path)

    # 1. Credentials
    with Tester(config) as tester:
        tester.auth()
        print(f"Authenticated as {config.user_agent}")
        print()

    # 2. Static analysis
    with Fileinfo(config) as fileinfo:
        print(f"Analyzing {input_file.name} ({len(input_file)} bytes)…")
        analysis = fileinfo.start(AnalysisArguments(input_file=input_file, output_format="plain"))
        fileinfo.wait_until_finished(analysis)
        report = fileinfo.get_report(analysis)
        for line in report.splitlines()[:15]:
            print(f"  {line}")
        print()

    # 3. Decompilation
    with Decompiler(config) as decompiler:
        print(f"Decompiling {input_file.name}…")
        job = decompiler.start(DecompilationArguments(input_file=input_file, generate_cg=True))
        print(f"  job : {job.id}")

        def progress(status):
            print(f"  {status.state.value:8s} {status.completion or 0:3d}%")

        decompiler.wait_until_finished(job, poll_interval=2.0, on_status=progress)
        if job.status and job.status.warnings:
            print(f"  Warnings: {job.status.warnings}")

        code = decompiler.get_output_hll_code(job)
        print(f"  C ({len(code)} chars):")
        for line in code.splitlines()[:20]:
            print(f"    {line}")

        cg = decompiler.get_output(job, ArtifactKind.CG)
        print(f"  Call graph: {len(cg)} bytes")

    print("\nDone.")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(f"Usage: {sys.argv[0]} <binary>")
        sys.exit(1)
    try:
        main(sys.argv[1])
    except RetdecError as e:
        print(f"error: {e.message}", file=sys.stderr)
        sys.exit(1)

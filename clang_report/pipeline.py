"""Build, analyze and summarize, one stage after another.

Functions:
    prepare_output(config, now=None)                   -> OutputPaths
    analyze(records, settings, runner, console)        -> list[FileFailure]
    summarize(paths, config, console)                  -> dict
    run(config, runner, console, now=None)             -> dict

Each stage stops the pipeline by raising; analyzer failures on single files
are collected and reported without stopping the batch.
"""

import shlex
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from clang_report.aggregator import collect_issues, group_by_checker
from clang_report.build import run_build
from clang_report.config import Config
from clang_report.console import Console
from clang_report.models import CompileRecord, load_compile_database
from clang_report.reports.summary import build_report, write_xml
from clang_report.runner import ProcessRunner, RunnerError
from clang_report.translator import AnalyzerSettings, translate


class OutputDirError(Exception):
    """Raised when a fresh report directory cannot be created."""


@dataclass(frozen=True)
class OutputPaths:
    compile_commands: Path
    report_dir: Path
    summary_file: Path


@dataclass(frozen=True)
class FileFailure:
    source: str
    reason: str


def prepare_output(config: Config, now: datetime | None = None) -> OutputPaths:
    """Create the output directory and a fresh timestamped report directory.

    Raises:
        OutputDirError: the report directory for this timestamp already exists.
    """
    output_dir = Path(config.output_dir)
    stamp = (now or datetime.now()).strftime("%Y%m%d%H%M%S")
    report_dir = output_dir / f"report-{stamp}"
    output_dir.mkdir(parents=True, exist_ok=True)
    try:
        report_dir.mkdir()
    except FileExistsError as exc:
        raise OutputDirError(
            f"Report directory '{report_dir}' already exists; another run started in the same second"
        ) from exc

    return OutputPaths(
        compile_commands=output_dir / "compile_commands.json",
        report_dir=report_dir,
        summary_file=report_dir / config.summary_file,
    )


def analyze(
    records: list[CompileRecord],
    settings: AnalyzerSettings,
    runner: ProcessRunner,
    console: Console,
) -> list[FileFailure]:
    """Run the analyzer on every record in order and return the files it failed on."""
    console.step("start clang analyzer ......")

    # Translate everything first so a malformed record aborts before any run
    invocations = [(record, translate(record, settings)) for record in records]

    failures: list[FileFailure] = []
    for record, argv in invocations:
        console.detail(shlex.join(argv))
        try:
            result = runner.run(argv)
        except RunnerError as exc:
            failures.append(FileFailure(record.target_path, str(exc)))
            console.warning(f"{record.target_path}: {exc}")
            continue

        if not result.ok:
            reason = f"analyzer exited with status {result.returncode}"
            failures.append(FileFailure(record.target_path, reason))
            console.warning(f"{record.target_path}: {reason}")

    console.info(f"Analyzed {len(records)} file(s), {len(failures)} failure(s).")
    return failures


def summarize(paths: OutputPaths, config: Config, console: Console) -> dict:
    """Aggregate the report directory and write the XML summary next to it.

    Raises:
        NoDiagnosticFilesError: the analyzer produced no plist file.
    """
    console.step("start generating analysis summary ......")

    groups = group_by_checker(collect_issues(paths.report_dir))
    report = build_report(
        project=config.target,
        report_dir=str(paths.report_dir),
        output_format=config.output_format,
        groups=groups,
    )
    write_xml(report, paths.summary_file)
    console.info(f"Summary written to '{paths.summary_file}'")
    return report


def run(
    config: Config,
    runner: ProcessRunner,
    console: Console,
    now: datetime | None = None,
) -> dict:
    """Execute the whole pipeline and return the report dict."""
    paths = prepare_output(config, now)
    console.detail(f"Report directory: {paths.report_dir}")

    run_build(config, paths.compile_commands, runner, console)

    records = load_compile_database(paths.compile_commands)
    console.detail(f"{len(records)} compile record(s) in {paths.compile_commands}")
    settings = AnalyzerSettings(
        output_format=config.output_format,
        report_dir=str(paths.report_dir),
        clang=config.clang,
    )
    failures = analyze(records, settings, runner, console)

    report = summarize(paths, config, console)
    if failures:
        report["analysis_failures"] = [
            {"source": f.source, "reason": f.reason} for f in failures
        ]
    return report

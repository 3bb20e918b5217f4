"""CLI entry point — command definitions using Click.

Commands:
    init          Generate a template config file
    analyze       Build, analyze every compiled file and summarize the findings
    translate     Print the analyzer command for each compile record (dry run)
    summarize     Summarize an existing report directory
"""

import json
import shlex
import sys
from typing import Any

import click

from clang_report import __version__

_OUTPUT_FORMATS = ("plist", "plist-html")


# ---------------------------------------------------------------------------
# Helpers shared by all data commands
# ---------------------------------------------------------------------------

def _load_config(ctx: click.Context, overrides: dict[str, Any], require_build: bool = True):
    """Load config merged with command-line overrides. Exits on error."""
    from clang_report.config import ConfigError, load

    try:
        config = load(ctx.obj["config_path"], overrides, require_build=require_build)
    except ConfigError as exc:
        ctx.obj["console"].error(f"Configuration error: {exc}")
        sys.exit(1)

    return config


def _emit_json(data: Any, ctx: click.Context) -> None:
    """Write JSON to stdout or to the file specified by --output."""
    obj = ctx.obj
    indent = 2 if obj["pretty"] else None
    text = json.dumps(data, indent=indent, ensure_ascii=False)

    output_path: str | None = obj["output_path"]
    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(text)
        obj["console"].info(f"Report written to '{output_path}'")
    else:
        click.echo(text)


def _handle_pipeline_errors(func):
    """Decorator that catches pipeline exceptions, reports them on the console and exits."""
    import functools

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        from clang_report.aggregator import DiagnosticFileError, NoDiagnosticFilesError
        from clang_report.build import BuildError
        from clang_report.models import CompileDatabaseError
        from clang_report.pipeline import OutputDirError
        from clang_report.runner import RunnerError
        from clang_report.translator import TranslationError

        # OSError last: filesystem failures not raised as one of the above
        handlers = (
            (BuildError,             "Build error"),
            (CompileDatabaseError,   "Compilation database error"),
            (TranslationError,       "Translation error"),
            (NoDiagnosticFilesError, "Summary error"),
            (DiagnosticFileError,    "Diagnostic file error"),
            (RunnerError,            "Process error"),
            (OutputDirError,         "Output error"),
            (OSError,                "I/O error"),
        )
        try:
            return func(*args, **kwargs)
        except tuple(cls for cls, _ in handlers) as exc:
            kind = next(label for cls, label in handlers if isinstance(exc, cls))
            click.get_current_context().obj["console"].error(f"{kind}: {exc}")
            sys.exit(1)

    return wrapper


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--config", "config_path", default=None,
              help="Path to the configuration file (default: clang-report.yaml if present).")
@click.option("--output", "output_path", default=None,
              help="Write JSON output to a file instead of stdout.")
@click.option("--pretty", is_flag=True, default=False,
              help="Pretty-print the JSON output.")
@click.option("--verbose", is_flag=True, default=False,
              help="Enable verbose logging.")
@click.version_option(__version__, prog_name="clang-report")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, output_path: str | None,
        pretty: bool, verbose: bool) -> None:
    """Run the clang static analyzer over an Xcode build and report the findings as JSON."""
    from clang_report.console import Console

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["output_path"] = output_path
    ctx.obj["pretty"] = pretty
    ctx.obj["verbose"] = verbose
    ctx.obj["console"] = Console(verbose=verbose)


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

@cli.command("init")
@click.option("--output", "output_path", default="clang-report.yaml", show_default=True,
              help="Path where the template config file will be written.")
@click.pass_context
def init_command(ctx: click.Context, output_path: str) -> None:
    """Generate a template clang-report.yaml file."""
    from clang_report.config import ConfigError, generate_template
    try:
        generate_template(output_path)
        click.echo(f"Template written to '{output_path}'.")
        click.echo("Edit it with your Xcode project, configuration and tool paths.")
    except ConfigError as exc:
        ctx.obj["console"].error(str(exc))
        sys.exit(1)


# ---------------------------------------------------------------------------
# analyze
# ---------------------------------------------------------------------------

@cli.command("analyze")
@click.option("--project", default=None, help="The Xcode project.")
@click.option("--workspace", default=None, help="The Xcode workspace.")
@click.option("--scheme", default=None, help="The scheme to build (with --workspace).")
@click.option("--configuration", default=None, help="The build configuration, e.g. Debug.")
@click.option("--output-format", type=click.Choice(_OUTPUT_FORMATS), default=None,
              help="Analyzer output format [default: plist-html].")
@click.option("--output-dir", default=None,
              help="Output directory of static analysis [default: ./static_analysis].")
@click.option("--clang", default=None, help="Use this clang instead of the build's compiler.")
@click.option("--xcodebuild", default=None, help="Path to xcodebuild.")
@click.option("--xcpretty", default=None, help="Path to xcpretty.")
@click.option("--timeout", type=float, default=None,
              help="Seconds allowed for each external command.")
@click.pass_context
@_handle_pipeline_errors
def analyze_command(ctx: click.Context, **options: Any) -> None:
    """Build the project, analyze each compiled file and summarize the findings."""
    from clang_report.pipeline import run
    from clang_report.runner import ProcessRunner

    config = _load_config(ctx, options)
    console = ctx.obj["console"]
    console.detail(f"Analyzing {config.target} ({config.configuration})")

    report = run(config, ProcessRunner(timeout=config.timeout), console)
    _emit_json(report, ctx)


# ---------------------------------------------------------------------------
# translate
# ---------------------------------------------------------------------------

@cli.command("translate")
@click.argument("compile_commands", type=click.Path(dir_okay=False))
@click.option("--report-dir", required=True, help="Directory the analyzer should write to.")
@click.option("--output-format", type=click.Choice(_OUTPUT_FORMATS), default=None,
              help="Analyzer output format [default: plist-html].")
@click.option("--clang", default=None, help="Use this clang instead of the build's compiler.")
@click.pass_context
@_handle_pipeline_errors
def translate_command(ctx: click.Context, compile_commands: str, report_dir: str,
                      output_format: str | None, clang: str | None) -> None:
    """Print the analyzer command for every record of COMPILE_COMMANDS."""
    from clang_report.models import load_compile_database
    from clang_report.translator import AnalyzerSettings, translate

    config = _load_config(ctx, {"output_format": output_format, "clang": clang},
                          require_build=False)
    settings = AnalyzerSettings(
        output_format=config.output_format,
        report_dir=report_dir,
        clang=config.clang,
    )

    for record in load_compile_database(compile_commands):
        click.echo(shlex.join(translate(record, settings)))


# ---------------------------------------------------------------------------
# summarize
# ---------------------------------------------------------------------------

@cli.command("summarize")
@click.argument("report_dir", type=click.Path(exists=True, file_okay=False))
@click.option("--output-format", type=click.Choice(_OUTPUT_FORMATS), default=None,
              help="Output format the report directory was produced with.")
@click.option("--xml/--no-xml", "write_xml", default=False,
              help="Also write the XML summary into REPORT_DIR.")
@click.pass_context
@_handle_pipeline_errors
def summarize_command(ctx: click.Context, report_dir: str, output_format: str | None,
                      write_xml: bool) -> None:
    """Summarize the plist files of an existing REPORT_DIR."""
    from pathlib import Path

    from clang_report.aggregator import collect_issues, group_by_checker
    from clang_report.pipeline import OutputPaths, summarize
    from clang_report.reports.summary import build_report

    config = _load_config(ctx, {"output_format": output_format}, require_build=False)
    console = ctx.obj["console"]

    if write_xml:
        paths = OutputPaths(
            compile_commands=Path(config.output_dir) / "compile_commands.json",
            report_dir=Path(report_dir),
            summary_file=Path(report_dir) / config.summary_file,
        )
        report = summarize(paths, config, console)
    else:
        groups = group_by_checker(collect_issues(report_dir))
        report = build_report(config.target, str(Path(report_dir)), config.output_format, groups)

    console.detail(f"{report['summary']['total']} issue(s) from "
                   f"{report['summary']['checker_count']} checker(s)")
    _emit_json(report, ctx)

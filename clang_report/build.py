"""Xcode build step producing the JSON compilation database.

xcodebuild's output is piped into ``xcpretty -r json-compilation-database``,
which writes one compile record per source file.
"""

from pathlib import Path

from clang_report.config import Config
from clang_report.console import Console
from clang_report.runner import ProcessRunner, RunnerError

# Markers xcodebuild prints even when it exits with status 0
_FAILURE_MARKERS = ("clang: error: ", "BUILD FAILED")


class BuildError(Exception):
    """Raised when the Xcode build or the compilation database export fails."""


def xcodebuild_command(config: Config) -> list[str]:
    argv = [config.xcodebuild]
    if config.project:
        argv += ["-project", config.project]
    else:
        argv += ["-workspace", config.workspace, "-scheme", config.scheme]
    argv += ["-configuration", config.configuration]
    argv += ["clean", "build"]
    return argv


def xcpretty_command(config: Config, output_path: str | Path) -> list[str]:
    return [config.xcpretty, "-r", "json-compilation-database", "--output", str(output_path)]


def run_build(
    config: Config,
    compile_commands_path: str | Path,
    runner: ProcessRunner,
    console: Console,
) -> None:
    """Build the project and export its compilation database to *compile_commands_path*.

    Raises:
        BuildError: non-zero exit, a failure marker in the build log, or no
                    compilation database written.
    """
    console.step("start xcodebuild ......")

    build_argv = xcodebuild_command(config)
    console.detail(f"running : {' '.join(build_argv)}")
    try:
        build = runner.run(build_argv)
    except RunnerError as exc:
        raise BuildError(str(exc)) from exc

    if not build.ok:
        raise BuildError(f"xcodebuild exited with status {build.returncode}")
    for marker in _FAILURE_MARKERS:
        if marker in build.output:
            raise BuildError(f"xcodebuild reported '{marker.strip()}'")

    export_argv = xcpretty_command(config, compile_commands_path)
    console.detail(f"running : {' '.join(export_argv)}")
    try:
        export = runner.run(export_argv, input=build.output)
    except RunnerError as exc:
        raise BuildError(str(exc)) from exc

    if not export.ok:
        raise BuildError(f"xcpretty exited with status {export.returncode}")
    if not Path(compile_commands_path).exists():
        raise BuildError(f"No compilation database was written to '{compile_commands_path}'")

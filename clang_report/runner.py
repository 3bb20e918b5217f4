"""External process execution.

Usage:
    runner = ProcessRunner(timeout=600)
    result = runner.run(["xcodebuild", "-project", "App.xcodeproj", "build"])
    result.ok, result.returncode, result.output
"""

import subprocess
from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class RunnerError(Exception):
    """Base exception for all process execution errors."""


class CommandNotFoundError(RunnerError):
    """Raised when the executable does not exist or is not executable."""


class CommandTimeoutError(RunnerError):
    """Raised when a command is still running after the configured timeout."""


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

@dataclass
class RunResult:
    argv: list[str]
    returncode: int
    output: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class ProcessRunner:
    """Run commands as argv lists (no shell), capturing stdout and stderr together."""

    def __init__(self, timeout: float | None = None) -> None:
        self._timeout = timeout

    def run(self, argv: list[str], input: str | None = None) -> RunResult:
        """Run *argv* to completion and return its exit status and output.

        Raises:
            CommandNotFoundError: the executable could not be started
            CommandTimeoutError:  the command exceeded the timeout
        """
        try:
            completed = subprocess.run(
                argv,
                input=input,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=self._timeout,
            )
        except FileNotFoundError as exc:
            raise CommandNotFoundError(f"Command not found: '{argv[0]}'") from exc
        except PermissionError as exc:
            raise CommandNotFoundError(f"Command is not executable: '{argv[0]}'") from exc
        except subprocess.TimeoutExpired as exc:
            raise CommandTimeoutError(
                f"'{argv[0]}' did not finish within {self._timeout}s"
            ) from exc

        return RunResult(argv=list(argv), returncode=completed.returncode, output=completed.stdout or "")

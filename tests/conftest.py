"""Shared fixtures: a scripted process runner, a recording console and plist writers."""

import plistlib
from pathlib import Path

import pytest

from clang_report.runner import RunResult


class FakeRunner:
    """Records every argv and answers from a list of (predicate, result) rules."""

    def __init__(self) -> None:
        self.calls: list[tuple[list[str], str | None]] = []
        self._rules: list = []

    def on(self, executable: str, returncode: int = 0, output: str = "", effect=None, raises=None):
        self._rules.append((executable, returncode, output, effect, raises))
        return self

    def run(self, argv, input=None):
        self.calls.append((list(argv), input))
        for executable, returncode, output, effect, raises in self._rules:
            if argv[0] == executable:
                if raises is not None:
                    raise raises
                if effect is not None:
                    effect(argv, input)
                return RunResult(argv=list(argv), returncode=returncode, output=output)
        return RunResult(argv=list(argv), returncode=0, output="")

    def argvs(self, executable: str) -> list[list[str]]:
        return [argv for argv, _ in self.calls if argv[0] == executable]


class RecordingConsole:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def step(self, message):
        self.messages.append(("step", message))

    def info(self, message):
        self.messages.append(("info", message))

    def detail(self, message):
        self.messages.append(("detail", message))

    def warning(self, message):
        self.messages.append(("warning", message))

    def error(self, message):
        self.messages.append(("error", message))

    def of(self, kind: str) -> list[str]:
        return [m for k, m in self.messages if k == kind]


def diagnostic(check_name="core.NullDereference", file_index=0, line=10, col=5, **extra) -> dict:
    item = {
        "check_name": check_name,
        "category": "Logic error",
        "type": "Dereference of null pointer",
        "description": "Dereference of null pointer (loaded from variable 'p')",
        "location": {"file": file_index, "line": line, "col": col},
        "issue_context": "-[ViewController viewDidLoad]",
        "issue_context_kind": "Objective-C method",
        "HTMLDiagnostics_files": ["report-1a2b3c.html"],
    }
    item.update(extra)
    return item


def write_plist(path: Path, files=None, diagnostics=None) -> Path:
    document = {"clang_version": "Apple clang version 15.0.0"}
    if files is not None:
        document["files"] = files
    if diagnostics is not None:
        document["diagnostics"] = diagnostics
    with path.open("wb") as fp:
        plistlib.dump(document, fp)
    return path


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def console() -> RecordingConsole:
    return RecordingConsole()

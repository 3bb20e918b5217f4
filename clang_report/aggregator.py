"""Parse analyzer plist files and group the findings by checker.

Functions:
    parse_diagnostic_file(path)     -> list[Issue]
    group_by_checker(issues)        -> dict[str, list[Issue]]
    find_diagnostic_files(dir)      -> list[Path]
    collect_issues(dir)             -> list[Issue]
"""

import plistlib
from pathlib import Path
from typing import Any, Iterable
from xml.parsers.expat import ExpatError

from clang_report.models import Issue

DIAGNOSTIC_SUFFIX = ".plist"


class DiagnosticFileError(Exception):
    """Raised when a diagnostic file cannot be read, is malformed, or references a missing source file."""


class NoDiagnosticFilesError(Exception):
    """Raised when the report directory holds no diagnostic file at all."""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_diagnostic_file(path: str | Path) -> list[Issue]:
    """Return the issues recorded in one analyzer plist file.

    A document without ``files`` or ``diagnostics`` describes a clean
    translation unit and yields an empty list.

    Raises:
        DiagnosticFileError: the file is not a readable plist, a diagnostic is
                             malformed, or it points outside the ``files`` array.
    """
    path = Path(path)
    try:
        with path.open("rb") as fp:
            plist = plistlib.load(fp)
    except (OSError, plistlib.InvalidFileException, ExpatError, ValueError) as exc:
        raise DiagnosticFileError(f"Failed to read '{path}': {exc}") from exc

    if not isinstance(plist, dict):
        return []

    # Current analyzer versions write exactly one source file per document
    files = plist.get("files") or []
    diagnostics = plist.get("diagnostics") or []
    if not files or not diagnostics:
        return []
    if not isinstance(files, list) or not isinstance(diagnostics, list):
        raise DiagnosticFileError(f"'{path}': 'files' and 'diagnostics' must be arrays")

    return [_extract_issue(item, files, path) for item in diagnostics]


def group_by_checker(issues: Iterable[Issue]) -> dict[str, list[Issue]]:
    """Group *issues* by checker, keeping first-encounter order for groups and issues."""
    groups: dict[str, list[Issue]] = {}
    for issue in issues:
        groups.setdefault(issue.checker, []).append(issue)
    return groups


def find_diagnostic_files(report_dir: str | Path) -> list[Path]:
    """Return every ``.plist`` file directly inside *report_dir*, sorted by name."""
    return sorted(
        (p for p in Path(report_dir).iterdir() if p.suffix == DIAGNOSTIC_SUFFIX and p.is_file()),
        key=lambda p: p.name,
    )


def collect_issues(report_dir: str | Path) -> list[Issue]:
    """Parse every diagnostic file in *report_dir* and concatenate the issues.

    Raises:
        NoDiagnosticFilesError: no ``.plist`` file was found, which usually
                                means the analyzer never produced output.
        DiagnosticFileError:    a diagnostic file could not be parsed.
    """
    paths = find_diagnostic_files(report_dir)
    if not paths:
        raise NoDiagnosticFilesError(
            f"No {DIAGNOSTIC_SUFFIX} files found in '{report_dir}'. "
            "Only the plist output formats are supported for summaries."
        )

    issues: list[Issue] = []
    for path in paths:
        issues.extend(parse_diagnostic_file(path))
    return issues


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _extract_issue(item: Any, files: list[str], path: Path) -> Issue:
    if not isinstance(item, dict):
        raise DiagnosticFileError(f"'{path}': diagnostic entry must be a dictionary, got {item!r}")
    location = item.get("location")
    if not isinstance(location, dict) or "file" not in location:
        raise DiagnosticFileError(f"'{path}': diagnostic has no location file index")
    file_index = location["file"]
    if isinstance(file_index, bool) or not isinstance(file_index, int) or not 0 <= file_index < len(files):
        raise DiagnosticFileError(
            f"'{path}': diagnostic references file index {file_index!r} "
            f"but only {len(files)} file(s) are listed"
        )
    source_file = files[file_index]

    return Issue(
        checker=item.get("check_name"),
        category=item.get("category"),
        type=item.get("type"),
        message=item.get("description"),
        source_file=source_file,
        line=location.get("line"),
        col=location.get("col"),
        context=item.get("issue_context"),
        context_kind=item.get("issue_context_kind"),
        html_details=tuple(item.get("HTMLDiagnostics_files") or ()),
    )

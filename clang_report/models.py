"""Data models for compile records and analyzer findings.

Contains dataclasses used to structure and serialize the JSON output:
    - CompileRecord    one entry of a compilation database
    - Issue            one diagnostic reported by the analyzer

Usage:
    records = load_compile_database("static_analysis/compile_commands.json")
    records[0].target_path                     # "/p/m.m"
"""

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any


class CompileDatabaseError(Exception):
    """Raised when a compilation database is missing or malformed."""


_RECORD_FIELDS = ("directory", "file", "command")


# ---------------------------------------------------------------------------
# Compile records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CompileRecord:
    directory: str
    file: str
    command: str

    @property
    def target_path(self) -> str:
        return f"{self.directory}/{self.file}"

    @classmethod
    def from_dict(cls, raw: Any) -> "CompileRecord":
        if not isinstance(raw, dict):
            raise CompileDatabaseError(f"Compile record must be an object, got {type(raw).__name__}")

        missing = [k for k in _RECORD_FIELDS if not isinstance(raw.get(k), str)]
        if missing:
            raise CompileDatabaseError(
                f"Compile record is missing string field(s): {', '.join(missing)}"
            )
        return cls(directory=raw["directory"], file=raw["file"], command=raw["command"])


def load_compile_database(path: str | Path) -> list[CompileRecord]:
    """Read a JSON compilation database and return its records in file order.

    Raises:
        CompileDatabaseError: missing file, invalid JSON, or a malformed entry.
    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError as exc:
        raise CompileDatabaseError(f"Compilation database not found: '{path}'") from exc
    except json.JSONDecodeError as exc:
        raise CompileDatabaseError(f"Failed to parse '{path}': {exc}") from exc

    if not isinstance(raw, list):
        raise CompileDatabaseError(f"'{path}' must contain a JSON array at the top level.")

    return [CompileRecord.from_dict(entry) for entry in raw]


# ---------------------------------------------------------------------------
# Issues
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Issue:
    checker: str
    category: str | None
    type: str | None
    message: str | None
    source_file: str
    line: int | None
    col: int | None
    context: str | None = None
    context_kind: str | None = None
    html_details: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["html_details"] = list(self.html_details)
        return data

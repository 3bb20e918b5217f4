"""Translate compile records into clang static-analyzer invocations.

Usage:
    settings = AnalyzerSettings(output_format="plist", report_dir="out/report")
    argv = translate(record, settings)
    # ['/usr/bin/clang', '-w', '--analyze', '-Xclang', '-analyzer-output=plist', ...,
    #  '/p/m.m', '-o', 'out/report/m.plist']

Tokenization is a plain whitespace split: quoted arguments in the compile
command are not supported.
"""

import os
from dataclasses import dataclass

from clang_report.models import CompileRecord


class TranslationError(ValueError):
    """Raised when a compile record cannot be turned into an analyzer command."""


# Flags that take the following token as their argument; both are dropped.
_DROPPED_WITH_ARGUMENT = ("-c", "-o", "-index-store-path")
_WARNING_PREFIX = "-W"

#: Checker groups enabled / disabled on every invocation
CHECKER_POLICY: tuple[str, ...] = (
    "-analyzer-checker=core",
    "-analyzer-checker=cplusplus",
    "-analyzer-checker=deadcode",
    "-analyzer-checker=nullability",
    "-analyzer-checker=osx",
    "-analyzer-checker=security",
    "-analyzer-checker=unix",
    "-analyzer-checker=valist",
    "-analyzer-disable-checker=apiModeling",
    "-analyzer-disable-checker=optin",
    "-analyzer-disable-checker=alpha",
)

_PLIST_FORMATS = ("plist", "plist-html")


@dataclass(frozen=True)
class AnalyzerSettings:
    output_format: str
    report_dir: str
    clang: str | None = None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def filter_flags(tokens: list[str]) -> list[str]:
    """Drop warning flags and the compile/output/index-store flags with their argument.

    Single forward pass: ``-W*`` is dropped alone; ``-c``, ``-o`` and
    ``-index-store-path`` (prefix match) are dropped together with the next
    token, whatever it looks like. Everything else is kept verbatim.
    """
    kept: list[str] = []
    discard_next = False

    for token in tokens:
        if discard_next:
            discard_next = False
        elif token.startswith(_WARNING_PREFIX):
            pass
        elif token.startswith(_DROPPED_WITH_ARGUMENT):
            discard_next = True
        else:
            kept.append(token)

    return kept


def report_path_for(record: CompileRecord, settings: AnalyzerSettings) -> str:
    """Return the path the analyzer writes its diagnostics for *record* to.

    Only the plist formats get an extension; other formats keep the bare stem.
    """
    stem, _ = os.path.splitext(os.path.basename(record.target_path))
    if settings.output_format in _PLIST_FORMATS:
        stem += ".plist"
    return f"{settings.report_dir}/{stem}"


def translate(record: CompileRecord, settings: AnalyzerSettings) -> list[str]:
    """Return the analyzer argv equivalent to *record*'s compile command.

    Raises:
        TranslationError: the compile command is empty.
    """
    tokens = record.command.split()
    if not tokens:
        raise TranslationError(f"Empty compile command for '{record.target_path}'")

    compiler, *arguments = tokens
    argv = [settings.clang or compiler]
    argv += filter_flags(arguments)

    argv += ["-w", "--analyze"]
    argv += ["-Xclang", f"-analyzer-output={settings.output_format}"]
    for flag in CHECKER_POLICY:
        argv += ["-Xclang", flag]

    argv.append(record.target_path)
    argv += ["-o", report_path_for(record, settings)]
    return argv

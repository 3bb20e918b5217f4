"""Consolidated analyzer report.

Functions:
    build_report(project, report_dir, output_format, groups)  -> dict
    to_xml(report)                                            -> bytes
    write_xml(report, path)                                   -> None

The XML layout keeps the element names of the historical
``clang_analyzer_summary.xml`` file (``IssueList`` / ``Issue`` / ``Checker`` ...)
so existing CI parsers keep working.
"""

import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from clang_report.models import Issue

# Issue dict key -> XML element name
_XML_FIELDS = (
    ("checker",      "Checker"),
    ("category",     "Category"),
    ("type",         "Type"),
    ("message",      "Message"),
    ("source_file",  "Source"),
    ("line",         "Line"),
    ("col",          "Col"),
    ("context",      "Context"),
    ("context_kind", "ContextKind"),
)

_SUMMARY_FIELDS = (
    ("project",       "Project"),
    ("report_dir",    "ReportDir"),
    ("output_format", "OutputFormat"),
    ("checker_count", "CheckerCount"),
    ("total",         "IssueCount"),
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_report(
    project: str | None,
    report_dir: str,
    output_format: str,
    groups: dict[str, list[Issue]],
) -> dict:
    """Return the report dict for issues already grouped by checker."""
    report: dict[str, Any] = {
        "report_type":  "clang_analyzer",
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "summary":      _build_summary(project, report_dir, output_format, groups),
    }
    issues = [issue.to_dict() for group in groups.values() for issue in group]
    if issues:
        report["issues"] = issues
    return report


def to_xml(report: dict) -> bytes:
    root = ET.Element("AnalysisReport")

    summary_el = ET.SubElement(root, "Summary")
    summary = report["summary"]
    for key, tag in _SUMMARY_FIELDS:
        _text_element(summary_el, tag, summary.get(key))

    issues = report.get("issues") or []
    if issues:
        issue_list = ET.SubElement(root, "IssueList")
        for issue in issues:
            issue_el = ET.SubElement(issue_list, "Issue")
            for key, tag in _XML_FIELDS:
                _text_element(issue_el, tag, issue.get(key))
            attachments = ET.SubElement(issue_el, "HtmlAttachments")
            for html in issue.get("html_details") or []:
                _text_element(attachments, "Attachment", html)

    ET.indent(root)
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)


def write_xml(report: dict, path: str | Path) -> None:
    Path(path).write_bytes(to_xml(report))


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _build_summary(
    project: str | None,
    report_dir: str,
    output_format: str,
    groups: dict[str, list[Issue]],
) -> dict:
    by_checker = {checker: len(issues) for checker, issues in groups.items()}
    return {
        "project":       project,
        "report_dir":    report_dir,
        "output_format": output_format,
        "checker_count": len(groups),
        "total":         sum(by_checker.values()),
        "by_checker":    by_checker,
    }


def _text_element(parent: ET.Element, tag: str, value: Any) -> ET.Element:
    el = ET.SubElement(parent, tag)
    if value is not None:
        el.text = str(value)
    return el

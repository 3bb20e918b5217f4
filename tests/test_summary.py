"""Tests for clang_report/reports/summary.py"""

import xml.etree.ElementTree as ET

from clang_report.aggregator import group_by_checker
from clang_report.models import Issue
from clang_report.reports.summary import build_report, to_xml, write_xml

REPORT_DIR = "static_analysis/report-20260101120000"


def _issue(checker="core.NullDereference", line=10, html=("report-1.html",)) -> Issue:
    return Issue(
        checker=checker, category="Logic error", type="Null dereference",
        message="Dereference of null pointer", source_file="/p/m.m",
        line=line, col=3, context="main", context_kind="function",
        html_details=html,
    )


def _report(issues):
    return build_report("App.xcodeproj", REPORT_DIR, "plist-html", group_by_checker(issues))


# ---------------------------------------------------------------------------
# build_report()
# ---------------------------------------------------------------------------

def test_report_structure():
    report = _report([_issue(), _issue(line=20)])

    assert report["report_type"] == "clang_analyzer"
    assert "generated_at" in report
    summary = report["summary"]
    assert summary["project"]       == "App.xcodeproj"
    assert summary["report_dir"]    == REPORT_DIR
    assert summary["output_format"] == "plist-html"
    assert summary["checker_count"] == 1
    assert summary["total"]         == 2
    assert summary["by_checker"]    == {"core.NullDereference": 2}
    assert len(report["issues"])    == 2


def test_report_issues_follow_group_order():
    report = _report([_issue("A", 1), _issue("B", 2), _issue("A", 3)])
    assert [(i["checker"], i["line"]) for i in report["issues"]] == [("A", 1), ("A", 3), ("B", 2)]
    assert list(report["summary"]["by_checker"]) == ["A", "B"]


def test_report_without_issues_has_no_issue_list():
    report = _report([])
    assert report["summary"]["checker_count"] == 0
    assert report["summary"]["total"] == 0
    assert "issues" not in report


def test_report_issue_dict_is_json_friendly():
    issue = _report([_issue()])["issues"][0]
    assert issue["html_details"] == ["report-1.html"]
    assert issue["source_file"] == "/p/m.m"


# ---------------------------------------------------------------------------
# to_xml() / write_xml()
# ---------------------------------------------------------------------------

def test_xml_contains_summary_and_issues():
    root = ET.fromstring(to_xml(_report([_issue(), _issue("deadcode.DeadStores", html=())])))

    assert root.tag == "AnalysisReport"
    assert root.findtext("Summary/Project") == "App.xcodeproj"
    assert root.findtext("Summary/CheckerCount") == "2"
    assert root.findtext("Summary/IssueCount") == "2"

    issues = root.findall("IssueList/Issue")
    assert [i.findtext("Checker") for i in issues] == ["core.NullDereference", "deadcode.DeadStores"]
    first = issues[0]
    assert first.findtext("Source") == "/p/m.m"
    assert first.findtext("Line") == "10"
    assert first.findtext("ContextKind") == "function"
    assert [a.text for a in first.findall("HtmlAttachments/Attachment")] == ["report-1.html"]
    assert issues[1].findall("HtmlAttachments/Attachment") == []


def test_xml_without_issues_omits_issue_list():
    root = ET.fromstring(to_xml(_report([])))
    assert root.find("IssueList") is None
    assert root.findtext("Summary/IssueCount") == "0"


def test_write_xml(tmp_path):
    out = tmp_path / "clang_analyzer_summary.xml"
    write_xml(_report([_issue()]), out)
    assert out.read_bytes().startswith(b"<?xml")
    assert ET.parse(out).getroot().findtext("IssueList/Issue/Checker") == "core.NullDereference"

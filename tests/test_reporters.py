import json

import pytest

from easyaudit.report import HtmlReporter, JsonReporter, SarifReporter, get_reporter
from easyaudit.report.html_reporter import RuleGroup
from easyaudit.result import Finding, Occurrence, Report, ReportMetadata
from easyaudit.severity import Severity

METADATA = ReportMetadata(scan_path="/work/shop", generated_at="2024-05-01 10:00:00")


def _report(*findings):
    return Report.create(findings, METADATA)


def _finding(rule_id, occurrences):
    return Finding(
        rule_id=rule_id,
        name=f"{rule_id} name",
        short_description=f"{rule_id} short",
        long_description=f"{rule_id} long",
        occurrences=tuple(occurrences),
    )


def test_get_reporter():
    assert isinstance(get_reporter("JSON"), JsonReporter)
    assert get_reporter("sarif").extension == "sarif"
    with pytest.raises(ValueError):
        get_reporter("xml")


def test_json_reporter_is_lossless():
    report = _report(_finding("a", [Occurrence("/work/shop/a.php", 3, message="m", severity=Severity.ERROR)]))

    payload = JsonReporter().generate(report)

    assert json.loads(payload) == report.to_dict()
    assert Report.from_dict(json.loads(payload)) == report


def test_sarif_one_result_per_occurrence():
    report = _report(
        _finding(
            "a",
            [
                Occurrence("/work/shop/app/code/A.php", 4, message="first", severity=Severity.ERROR),
                Occurrence("/elsewhere/B.php", 0, message=""),
            ],
        ),
        _finding("empty", []),
    )

    sarif = json.loads(SarifReporter(workspace="/work/shop").generate(report))

    assert sarif["version"] == "2.1.0"
    assert "$schema" in sarif
    run = sarif["runs"][0]
    assert run["tool"]["driver"]["name"] == "EasyAudit"
    assert "version" in run["tool"]["driver"]
    assert [rule["id"] for rule in run["tool"]["driver"]["rules"]] == ["a"]
    assert len(run["results"]) == 2

    first, second = run["results"]
    assert first["level"] == "error"
    assert first["message"]["text"] == "first"
    location = first["locations"][0]["physicalLocation"]
    assert location["artifactLocation"] == {"uri": "app/code/A.php", "uriBaseId": "SRCROOT"}
    assert location["region"]["startLine"] == 4
    assert second["level"] == "warning"
    assert second["message"]["text"] == ""
    assert second["locations"][0]["physicalLocation"]["region"]["startLine"] == 1


def test_sarif_empty_finding_produces_nothing():
    sarif = SarifReporter(workspace="/work/shop").to_sarif(_report(_finding("empty", [])))

    assert sarif["runs"][0]["results"] == []
    assert sarif["runs"][0]["tool"]["driver"]["rules"] == []


def test_html_empty_report():
    document = HtmlReporter().generate(_report())

    assert document.startswith("<!DOCTYPE html>")
    assert document.rstrip().endswith("</html>")
    assert "No issues found." in document


def test_html_escapes_messages():
    report = _report(
        _finding("xss", [Occurrence("/work/shop/a.phtml", 1, message="<script>alert(1)</script>")])
    )

    document = HtmlReporter().generate(report)

    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in document
    assert "<script>alert" not in document
    assert document.count("<script>") == 1


def test_html_strips_scan_root_and_keeps_title():
    report = _report(_finding("a", [Occurrence("/work/shop/app/code/A.php", 2, message="m")]))

    document = HtmlReporter().generate(report)

    assert 'title="/work/shop/app/code/A.php">app/code/A.php</td>' in document


def test_rule_group_counts_and_badge():
    group = RuleGroup.from_finding(
        _finding(
            "mixed",
            [
                Occurrence("/a", 1, severity=Severity.WARNING),
                Occurrence("/a", 2, severity=Severity.ERROR),
                Occurrence("/a", 3, severity=Severity.NOTE),
            ],
        )
    )

    assert (group.error_count, group.warning_count, group.note_count) == (1, 1, 1)
    assert group.severity == "error"


def test_rule_group_unset_severity_counts_as_warning():
    group = RuleGroup.from_finding(_finding("plain", [Occurrence("/a", 1)]))

    assert group.warning_count == 1
    assert group.severity == "warning"
    assert RuleGroup.from_finding(_finding("none", [])).severity == "note"

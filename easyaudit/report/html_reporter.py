"""Self-contained HTML rendering of a report."""

from __future__ import annotations

import html
from dataclasses import dataclass
from importlib import resources
from typing import List

from easyaudit.result import Finding, Occurrence, Report
from easyaudit.severity import Severity, highest

LOGO_URL = "https://crealoz.fr/wp-content/uploads/2023/09/Crealoz-logo-white-01-1-2048x720.png"

BADGES = {
    "error": '<span class="badge badge-error">Error</span>',
    "warning": '<span class="badge badge-warning">Warning</span>',
    "note": '<span class="badge badge-note">Note</span>',
}

FILTER_SCRIPT = """(function(){
    var container = document.querySelector('.container');
    document.querySelectorAll('.summary-card[data-filter]').forEach(function(card){
        card.addEventListener('click', function(){
            var f = card.getAttribute('data-filter');
            var current = container.getAttribute('data-filter');
            container.setAttribute('data-filter', (f === current || f === 'all') ? '' : f);
        });
    });
})();"""


def escape(value: object) -> str:
    return html.escape(str(value), quote=True)


def load_stylesheet() -> str:
    return resources.files("easyaudit.report").joinpath("assets", "report.css").read_text(encoding="utf-8")


def occurrence_level(occurrence: Occurrence) -> str:
    return (occurrence.severity or Severity.WARNING).value


@dataclass
class RuleGroup:
    """Per-rule severity counts for one finding."""

    finding: Finding
    error_count: int = 0
    warning_count: int = 0
    note_count: int = 0

    @classmethod
    def from_finding(cls, finding: Finding) -> "RuleGroup":
        group = cls(finding=finding)
        for occurrence in finding.occurrences:
            level = occurrence_level(occurrence)
            if level == "error":
                group.error_count += 1
            elif level == "warning":
                group.warning_count += 1
            else:
                group.note_count += 1
        return group

    @property
    def severity(self) -> str:
        """Highest level present; a group without occurrences reads as a note."""

        return highest(Severity(occurrence_level(occ)) for occ in self.finding.occurrences).value


def display_path(path: str, scan_path: str) -> str:
    if scan_path and path.startswith(scan_path):
        return path[len(scan_path):].lstrip("/")
    return path


class HtmlReporter:
    extension = "html"

    def generate(self, report: Report) -> str:
        scan_path = report.metadata.scan_path
        generated_at = report.metadata.generated_at
        groups = [RuleGroup.from_finding(finding) for finding in report if finding.occurrences]

        errors = sum(group.error_count for group in groups)
        warnings = sum(group.warning_count for group in groups)
        notes = sum(group.note_count for group in groups)
        total = errors + warnings + notes

        if total == 0:
            rules_html = '<div class="no-issues">No issues found.</div>'
        else:
            rules_html = "\n".join(self._rule_card(group, scan_path) for group in groups)

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>EasyAudit Report</title>
<style>
{load_stylesheet()}
</style>
</head>
<body>
<div class="container">
    <div class="header">
        <button class="print-btn" onclick="window.print()">Print / PDF</button>
        <div class="header-top">
            <img src="{LOGO_URL}" alt="Crealoz" class="header-logo">
            <h1>EasyAudit Report</h1>
        </div>
        <div class="meta">
            <span>Path: {escape(scan_path or "Unknown")}</span>
            <span>Date: {escape(generated_at)}</span>
        </div>
    </div>

    <div class="summary">
        {self._summary_card("all", "Total Issues", total, "card-total")}
        {self._summary_card("error", "Errors", errors, "card-error")}
        {self._summary_card("warning", "Warnings", warnings, "card-warning")}
        {self._summary_card("note", "Notes", notes, "card-note")}
    </div>

    {rules_html}

    <div class="footer">Generated by EasyAudit &mdash; {escape(generated_at)}</div>
</div>
<script>
{FILTER_SCRIPT}
</script>
</body>
</html>
"""

    @staticmethod
    def _summary_card(data_filter: str, label: str, value: int, css_class: str) -> str:
        return (
            f'<div class="summary-card {css_class}" data-filter="{data_filter}">'
            f'<div class="label">{label}</div><div class="value">{value}</div></div>'
        )

    def _rule_card(self, group: RuleGroup, scan_path: str) -> str:
        finding = group.finding
        rows: List[str] = [self._row(occurrence, scan_path) for occurrence in finding.occurrences]
        return f"""<details class="rule-card" data-severity="{group.severity}">
    <summary class="rule-header">
        <span class="rule-title">{escape(finding.name or finding.rule_id)}</span>
        {BADGES[group.severity]}
        <span class="rule-count">{len(finding.occurrences)} issue(s)</span>
    </summary>
    <div class="rule-body">
        <p class="rule-description">{escape(finding.short_description)}</p>
        <table class="findings-table">
            <thead>
                <tr><th>File</th><th>Line</th><th>Severity</th><th>Message</th></tr>
            </thead>
            <tbody>
{"".join(rows)}
            </tbody>
        </table>
    </div>
</details>"""

    @staticmethod
    def _row(occurrence: Occurrence, scan_path: str) -> str:
        shown = escape(display_path(occurrence.file, scan_path))
        return (
            "                <tr>"
            f'<td class="cell-file" title="{escape(occurrence.file)}">{shown}</td>'
            f'<td class="cell-line">{int(occurrence.start_line or 1)}</td>'
            f'<td class="cell-severity">{BADGES[occurrence_level(occurrence)]}</td>'
            f'<td class="cell-message">{escape(occurrence.message)}</td>'
            "</tr>\n"
        )

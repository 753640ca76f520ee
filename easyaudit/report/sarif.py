"""SARIF 2.1.0 rendering of a report."""

from __future__ import annotations

import json
import os
from typing import Any, Dict, List, Optional

from easyaudit import __version__
from easyaudit.result import Occurrence, Report

SARIF_SCHEMA = "https://schemastore.azurewebsites.net/schemas/json/sarif-2.1.0.json"
SARIF_VERSION = "2.1.0"
TOOL_NAME = "EasyAudit"
INFORMATION_URI = "https://github.com/crealoz/easyaudit-cli"
SRCROOT = "SRCROOT"


def scan_root_prefix(report: Report, workspace: Optional[str] = None) -> str:
    """Root that result URIs are made relative to, with a trailing slash.

    ``GITHUB_WORKSPACE`` wins when set so code scanning can map results onto
    the checkout, then the report's scan path, then the working directory.
    """

    root = workspace or os.environ.get("GITHUB_WORKSPACE") or report.metadata.scan_path or os.getcwd()
    if os.path.exists(root):
        root = os.path.realpath(root)
    return root.replace("\\", "/").rstrip("/") + "/"


def relative_uri(path: str, root: str) -> str:
    absolute = path.replace("\\", "/")
    relative = absolute.replace(root, "", 1).lstrip("/") if absolute.startswith(root) else absolute.lstrip("/")
    return relative or os.path.basename(absolute)


class SarifReporter:
    """One SARIF ``result`` per occurrence; rules without occurrences are omitted."""

    extension = "sarif"

    def __init__(self, workspace: Optional[str] = None) -> None:
        self.workspace = workspace

    def generate(self, report: Report) -> str:
        return json.dumps(self.to_sarif(report), indent=2)

    def to_sarif(self, report: Report) -> Dict[str, Any]:
        root = scan_root_prefix(report, self.workspace)
        rules: List[Dict[str, Any]] = []
        results: List[Dict[str, Any]] = []
        for finding in report:
            if not finding.occurrences:
                continue
            rules.append(
                {
                    "id": finding.rule_id,
                    "name": finding.name or finding.rule_id,
                    "shortDescription": {"text": finding.short_description},
                    "fullDescription": {"text": finding.long_description},
                    "help": {"text": finding.long_description},
                }
            )
            for occurrence in finding.occurrences:
                results.append(self._result(finding.rule_id, occurrence, root))

        return {
            "$schema": SARIF_SCHEMA,
            "version": SARIF_VERSION,
            "runs": [
                {
                    "tool": {
                        "driver": {
                            "name": TOOL_NAME,
                            "informationUri": INFORMATION_URI,
                            "version": __version__,
                            "rules": rules,
                        }
                    },
                    "originalUriBaseIds": {SRCROOT: {"uri": "file:///"}},
                    "results": results,
                }
            ],
        }

    @staticmethod
    def _result(rule_id: str, occurrence: Occurrence, root: str) -> Dict[str, Any]:
        level = occurrence.severity.value if occurrence.severity is not None else "warning"
        return {
            "ruleId": rule_id,
            "level": level,
            "message": {"text": occurrence.message or ""},
            "locations": [
                {
                    "physicalLocation": {
                        "artifactLocation": {
                            "uri": relative_uri(occurrence.file, root),
                            "uriBaseId": SRCROOT,
                        },
                        "region": {"startLine": occurrence.start_line or 1},
                    }
                }
            ],
        }

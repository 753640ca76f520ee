"""Lossless JSON rendering of a report."""

from __future__ import annotations

import json

from easyaudit.result import Report


class JsonReporter:
    extension = "json"

    def generate(self, report: Report) -> str:
        return json.dumps(report.to_dict(), indent=2)

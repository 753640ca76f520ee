"""Reporters turning a :class:`~easyaudit.result.Report` into text."""

from __future__ import annotations

from typing import Dict, Protocol, Type

from easyaudit.result import Report

from .html_reporter import HtmlReporter
from .json_reporter import JsonReporter
from .sarif import SarifReporter


class Reporter(Protocol):
    extension: str

    def generate(self, report: Report) -> str:
        """Render ``report``; the report is never modified."""


REPORTERS: Dict[str, Type[Reporter]] = {
    "json": JsonReporter,
    "sarif": SarifReporter,
    "html": HtmlReporter,
}


def get_reporter(report_format: str) -> Reporter:
    try:
        return REPORTERS[report_format.lower()]()
    except KeyError:
        raise ValueError(f"Unknown report format: {report_format}") from None


__all__ = ["HtmlReporter", "JsonReporter", "Reporter", "REPORTERS", "SarifReporter", "get_reporter"]

"""Rule processor contract and shared base class."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from easyaudit.collector import FileClassification
from easyaudit.config import ScanConfiguration
from easyaudit.result import Finding, Occurrence, format_error
from easyaudit.session import ScanSession
from easyaudit.severity import Severity


@dataclass
class ScanContext:
    """Bundle inputs shared across processors."""

    files: FileClassification
    session: ScanSession
    config: ScanConfiguration

    def files_of(self, file_type: str) -> List[str]:
        return self.files.files(file_type)


class Processor(Protocol):
    """Protocol implemented by all rule processors."""

    identifier: str
    file_type: str
    found_count: int

    def process(self, context: ScanContext) -> None:
        """Analyze the classified files and record occurrences."""

    def report(self) -> List[Finding]:
        """Return one finding per rule that has occurrences."""


@dataclass(frozen=True)
class RuleSpec:
    rule_id: str
    name: str
    short_description: str
    long_description: str
    severity: Severity = Severity.WARNING


class BaseProcessor:
    """Common bookkeeping: found count and per-rule occurrence lists.

    Subclasses declare ``identifier``, ``file_type`` and an ordered ``rules``
    table, then call ``_add`` while processing.
    """

    identifier = ""
    file_type = "php"
    rules: Sequence[RuleSpec] = ()

    def __init__(self) -> None:
        self.found_count = 0
        self._specs: Dict[str, RuleSpec] = {spec.rule_id: spec for spec in self.rules}
        self._occurrences: Dict[str, List[Occurrence]] = {spec.rule_id: [] for spec in self.rules}

    def process(self, context: ScanContext) -> None:  # pragma: no cover - abstract
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------
    def _record(self, rule_id: str, occurrence: Occurrence, count: bool = True) -> None:
        if rule_id not in self._occurrences:
            raise KeyError(f"{self.identifier} has no rule '{rule_id}'")
        self._occurrences[rule_id].append(occurrence)
        if count:
            self.found_count += 1

    def _add(
        self,
        rule_id: str,
        file: str,
        line: Optional[int],
        message: str,
        severity: Optional[Severity] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> None:
        spec = self._specs[rule_id]
        self._record(
            rule_id,
            format_error(file, line or 1, message, severity or spec.severity, metadata=metadata),
        )

    def occurrences(self, rule_id: str) -> List[Occurrence]:
        return list(self._occurrences.get(rule_id, ()))

    def report(self) -> List[Finding]:
        findings = []
        for spec in self.rules:
            occurrences = self._occurrences[spec.rule_id]
            if not occurrences:
                continue
            findings.append(
                Finding(
                    rule_id=spec.rule_id,
                    name=spec.name,
                    short_description=spec.short_description,
                    long_description=spec.long_description,
                    occurrences=tuple(occurrences),
                )
            )
        return findings

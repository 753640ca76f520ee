"""Core result data structures for the scanner."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from .severity import Severity

SEVERITY_ORDER: Sequence[Severity] = (
    Severity.ERROR,
    Severity.WARNING,
    Severity.NOTE,
)

METADATA_KEY = "metadata"


@dataclass(frozen=True)
class Occurrence:
    """One concrete rule violation at a file/line."""

    file: str
    start_line: int = 1
    end_line: int = 0
    message: str = ""
    severity: Optional[Severity] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.end_line <= 0:
            object.__setattr__(self, "end_line", self.start_line)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "file": self.file,
            "startLine": self.start_line,
            "endLine": self.end_line,
            "message": self.message,
        }
        if self.severity is not None:
            data["severity"] = self.severity.value
        if self.metadata:
            data["metadata"] = self.metadata
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Occurrence":
        start_line = int(data.get("startLine", data.get("line", 1)) or 1)
        return cls(
            file=str(data.get("file", "")),
            start_line=start_line,
            end_line=int(data.get("endLine", 0) or 0),
            message=str(data.get("message", "") or ""),
            severity=Severity.parse(data.get("severity")),
            metadata=dict(data.get("metadata") or {}),
        )


def format_error(
    file: str,
    line: int,
    message: str = "",
    severity: Severity = Severity.WARNING,
    end_line: int = 0,
    metadata: Optional[Mapping[str, Any]] = None,
) -> Occurrence:
    """Build a normalized occurrence; ``end_line`` defaults to ``line``."""

    return Occurrence(
        file=file,
        start_line=line,
        end_line=end_line,
        message=message,
        severity=severity,
        metadata=dict(metadata or {}),
    )


@dataclass(frozen=True)
class Finding:
    """A rule's aggregated occurrences plus its descriptive metadata."""

    rule_id: str
    name: str = ""
    short_description: str = ""
    long_description: str = ""
    occurrences: Tuple[Occurrence, ...] = ()

    def merged(self, other: "Finding") -> "Finding":
        """Return a copy with ``other``'s occurrences appended."""

        return Finding(
            rule_id=self.rule_id,
            name=self.name or other.name,
            short_description=self.short_description or other.short_description,
            long_description=self.long_description or other.long_description,
            occurrences=self.occurrences + other.occurrences,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ruleId": self.rule_id,
            "name": self.name,
            "shortDescription": self.short_description,
            "longDescription": self.long_description,
            "files": [occurrence.to_dict() for occurrence in self.occurrences],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], rule_id: str = "") -> "Finding":
        files = data.get("files") or []
        return cls(
            rule_id=str(data.get("ruleId") or rule_id),
            name=str(data.get("name", "") or ""),
            short_description=str(data.get("shortDescription", "") or ""),
            long_description=str(data.get("longDescription", "") or ""),
            occurrences=tuple(Occurrence.from_dict(item) for item in files if isinstance(item, Mapping)),
        )


@dataclass(frozen=True)
class ReportMetadata:
    """Reserved report entry; never counted as a finding."""

    scan_path: str = ""
    generated_at: str = ""

    @classmethod
    def now(cls, scan_path: str) -> "ReportMetadata":
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        return cls(scan_path=scan_path, generated_at=stamp)

    def to_dict(self) -> Dict[str, str]:
        return {"scan_path": self.scan_path, "generated_at": self.generated_at}


@dataclass
class Summary:
    """Aggregate occurrence counts by severity."""

    errors: int = 0
    warnings: int = 0
    notes: int = 0

    def increment(self, severity: Optional[Severity]) -> None:
        if severity is None or severity is Severity.WARNING:
            self.warnings += 1
        elif severity is Severity.ERROR:
            self.errors += 1
        else:
            self.notes += 1

    def to_dict(self) -> Dict[str, int]:
        return {"errors": self.errors, "warnings": self.warnings, "notes": self.notes}

    def as_rows(self) -> List[Tuple[str, int]]:
        """Return severity/count pairs ordered for reporting."""

        counts = {Severity.ERROR: self.errors, Severity.WARNING: self.warnings, Severity.NOTE: self.notes}
        return [(severity.value, counts[severity]) for severity in SEVERITY_ORDER]

    @property
    def total(self) -> int:
        return self.errors + self.warnings + self.notes


@dataclass(frozen=True)
class Report:
    """Canonical aggregation: ruleId -> Finding plus the reserved metadata entry."""

    findings: Mapping[str, Finding]
    metadata: ReportMetadata = field(default_factory=ReportMetadata)

    @classmethod
    def create(cls, findings: Iterable[Finding], metadata: Optional[ReportMetadata] = None) -> "Report":
        """Merge findings sharing a ruleId, keeping first-seen order."""

        merged: Dict[str, Finding] = {}
        for finding in findings:
            if finding.rule_id in merged:
                merged[finding.rule_id] = merged[finding.rule_id].merged(finding)
            else:
                merged[finding.rule_id] = finding
        return cls(findings=MappingProxyType(merged), metadata=metadata or ReportMetadata())

    def __iter__(self) -> Iterator[Finding]:
        return iter(self.findings.values())

    def __len__(self) -> int:
        return len(self.findings)

    def summary(self) -> Summary:
        summary = Summary()
        for finding in self.findings.values():
            for occurrence in finding.occurrences:
                summary.increment(occurrence.severity)
        return summary

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {rule_id: finding.to_dict() for rule_id, finding in self.findings.items()}
        data[METADATA_KEY] = self.metadata.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Report":
        findings = []
        for key, value in data.items():
            if key == METADATA_KEY or not isinstance(value, Mapping):
                continue
            findings.append(Finding.from_dict(value, rule_id=key))
        raw_meta = data.get(METADATA_KEY) or {}
        metadata = ReportMetadata(
            scan_path=str(raw_meta.get("scan_path", "") or ""),
            generated_at=str(raw_meta.get("generated_at", "") or ""),
        )
        return cls.create(findings, metadata)


@dataclass
class ScanResult:
    """Bundle the assembled report with collection-level errors.

    ``tool_suggestions`` counts occurrences of rules left to external fixers,
    keyed by rule id; those occurrences are not part of ``report``.
    """

    report: Report
    errors: List[str] = field(default_factory=list)
    tool_suggestions: Dict[str, int] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return self.report.summary().errors == 0

    def exit_code(self) -> int:
        summary = self.report.summary()
        if summary.errors > 0:
            return 2
        if summary.warnings > 0:
            return 1
        return 0

    def top_findings(self, limit: int = 5) -> List[Finding]:
        """Return findings ordered by their most severe occurrence, then size."""

        def rank(finding: Finding) -> Tuple[int, int, str]:
            worst = max(
                ((occ.severity or Severity.WARNING).rank for occ in finding.occurrences),
                default=Severity.NOTE.rank,
            )
            return (-worst, -len(finding.occurrences), finding.rule_id)

        return sorted(self.report, key=rank)[:limit]


def format_summary_table(result: ScanResult, max_findings: int = 5) -> str:
    """Create a human-readable summary table for console output."""

    summary = result.report.summary()
    lines: List[str] = []
    lines.append("Scan Summary")
    lines.append("=" * 40)
    header = f"{'Severity':<10} | {'Count':>5}"
    lines.append(header)
    lines.append("-" * len(header))
    for severity, count in summary.as_rows():
        lines.append(f"{severity:<10} | {count:>5}")
    lines.append("-" * len(header))
    status = "PASS" if result.passed else "FAIL"
    lines.append(f"Status    : {status}")
    lines.append(f"Findings  : {summary.total}")

    if result.errors:
        lines.append("")
        lines.append("Errors")
        lines.append("-" * 40)
        for error in result.errors:
            lines.append(f"  {error}")

    findings = result.top_findings(max_findings)
    if findings:
        lines.append("")
        lines.append("Top Rules")
        lines.append("-" * 40)
        for finding in findings:
            lines.append(f"{finding.rule_id} ({len(finding.occurrences)}) {finding.name}")
    return "\n".join(lines)

"""Scan orchestration: collect files, dispatch processors, assemble the report."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Tuple

from .collector import collect_files
from .config import ScanConfiguration
from .fixability import FixabilityProvider, StaticFixability, is_externally_fixable
from .result import Finding, Report, ReportMetadata, ScanResult
from .rules import ScanContext
from .rules.registry import ProcessorRegistry, build_registry
from .session import ScanSession

logger = logging.getLogger(__name__)


class Scanner:
    """Runs every registered processor once over a freshly collected tree.

    Each ``run`` builds its own registry and session, so no state carries
    over between invocations.
    """

    def __init__(
        self,
        config: ScanConfiguration,
        fixability: Optional[FixabilityProvider] = None,
        registry_factory: Callable[[], ProcessorRegistry] = build_registry,
    ) -> None:
        self.config = config
        self.fixability = fixability or StaticFixability()
        self.registry_factory = registry_factory
        self.registry: Optional[ProcessorRegistry] = None

    def run(self) -> ScanResult:
        logger.info("Scanning %s", self.config.root)
        collection = collect_files(self.config)
        errors = list(collection.errors)
        metadata = ReportMetadata.now(self.config.root)
        if collection.classification.is_empty():
            return ScanResult(report=Report.create((), metadata), errors=errors)

        self.registry = self.registry_factory()
        fixable = self.fixability.fixable_rules() if self.config.fixable_only else frozenset()
        context = ScanContext(
            files=collection.classification,
            session=ScanSession(self.config.root),
            config=self.config,
        )

        findings: List[Finding] = []
        for processor in self.registry.processors:
            identifier = processor.identifier
            if self.config.fixable_only and identifier not in fixable:
                logger.info("Skipping %s: not fixable", identifier)
                continue
            if not collection.classification.get(processor.file_type):
                logger.info("Skipping %s: no %s files", identifier, processor.file_type)
                continue
            logger.info("Running %s", identifier)
            processor.process(context)
            if processor.found_count > 0:
                findings.extend(processor.report())

        kept, suggestions = split_tool_suggestions(findings)
        return ScanResult(
            report=Report.create(kept, metadata),
            errors=errors,
            tool_suggestions=suggestions,
        )


def split_tool_suggestions(findings: List[Finding]) -> Tuple[List[Finding], Dict[str, int]]:
    """Separate findings an external tool can fix, counting their occurrences by rule id."""

    kept: List[Finding] = []
    suggestions: Dict[str, int] = {}
    for finding in findings:
        if is_externally_fixable(finding.rule_id):
            suggestions[finding.rule_id] = suggestions.get(finding.rule_id, 0) + len(finding.occurrences)
            continue
        kept.append(finding)
    return kept, suggestions


def scan(config: ScanConfiguration, fixability: Optional[FixabilityProvider] = None) -> ScanResult:
    return Scanner(config, fixability).run()

"""Several preferences for the same interface within one DI area."""

from __future__ import annotations

from typing import Dict, List, NamedTuple

from easyaudit.severity import Severity
from easyaudit.utils.content import get_line_number
from easyaudit.utils.di_scope import get_scope
from easyaudit.utils.fileio import read_text_file
from easyaudit.utils.xml import load_xml

from . import BaseProcessor, RuleSpec, ScanContext


class Preference(NamedTuple):
    type: str
    file: str
    scope: str


class DuplicatePreferencesProcessor(BaseProcessor):
    identifier = "duplicatePreferences"
    file_type = "di"
    rules = (
        RuleSpec(
            rule_id="duplicatePreferences",
            name="Duplicate Preferences",
            short_description="Multiple preferences found for the same interface/class.",
            long_description=(
                "Only the last preference for an interface applies, depending on the module load "
                "sequence. Remove duplicates or declare the sequence in module.xml."
            ),
            severity=Severity.ERROR,
        ),
    )

    def process(self, context: ScanContext) -> None:
        preferences: Dict[str, List[Preference]] = {}
        for file in context.files_of("di"):
            root = load_xml(file)
            if root is None:
                continue
            for node in root.iter("preference"):
                for_class, type_class = node.get("for", ""), node.get("type", "")
                if not for_class or not type_class:
                    continue
                preferences.setdefault(for_class, []).append(Preference(type_class, file, get_scope(file)))

        for interface, declared in preferences.items():
            by_scope: Dict[str, List[Preference]] = {}
            for preference in declared:
                by_scope.setdefault(preference.scope, []).append(preference)
            for scoped in by_scope.values():
                if len(scoped) > 1:
                    self._report_duplicates(interface, scoped)

    def _report_duplicates(self, interface: str, preferences: List[Preference]) -> None:
        reported = set()
        for preference in preferences:
            if preference.file in reported:
                continue
            reported.add(preference.file)
            self._add(
                "duplicatePreferences",
                preference.file,
                get_line_number(read_text_file(preference.file), interface),
                f"Multiple preferences found for '{interface}'. This preference uses "
                f"'{preference.type}'. Total preferences: {len(preferences)}",
                metadata={"interface": interface},
            )

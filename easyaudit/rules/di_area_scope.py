"""Plugins and preferences in global ``di.xml`` that target area-specific classes."""

from __future__ import annotations

from easyaudit.severity import Severity
from easyaudit.utils import di_scope
from easyaudit.utils.content import get_line_number
from easyaudit.utils.fileio import read_text_file
from easyaudit.utils.xml import load_xml

from . import BaseProcessor, RuleSpec, ScanContext

RULE_ID = "magento.di.global-area-scope"


class DiAreaScopeProcessor(BaseProcessor):
    identifier = RULE_ID
    file_type = "di"
    rules = (
        RuleSpec(
            rule_id=RULE_ID,
            name="DI Area Scope Misplacement",
            short_description="Detects plugins/preferences in global di.xml that should be in area-specific di.xml.",
            long_description=(
                "Plugins and preferences in the global etc/di.xml are loaded for every area. When "
                "they target frontend or admin classes, move them to etc/frontend/di.xml or "
                "etc/adminhtml/di.xml."
            ),
            severity=Severity.NOTE,
        ),
    )

    def process(self, context: ScanContext) -> None:
        for file in context.files_of("di"):
            if not di_scope.is_global(file):
                continue
            root = load_xml(file)
            if root is None:
                continue
            content = read_text_file(file)

            for type_node in root.iter("type"):
                class_name = type_node.get("name", "")
                if not class_name or type_node.find("plugin") is None:
                    continue
                area = di_scope.detect_class_area(class_name)
                if area is None:
                    continue
                self._add(
                    RULE_ID,
                    file,
                    get_line_number(content, class_name),
                    f"Plugin on area-specific class '{class_name}' is declared in global di.xml. "
                    f"Consider moving to etc/{area}/di.xml.",
                )

            for preference in root.iter("preference"):
                for_class = preference.get("for", "")
                if not for_class:
                    continue
                area = di_scope.detect_class_area(for_class) or di_scope.detect_class_area(
                    preference.get("type", "")
                )
                if area is None:
                    continue
                self._add(
                    RULE_ID,
                    file,
                    get_line_number(content, for_class),
                    f"Preference for area-specific class '{for_class}' is declared in global di.xml. "
                    f"Consider moving to etc/{area}/di.xml.",
                )

"""Helpers extending ``AbstractHelper`` and helpers used from templates."""

from __future__ import annotations

import re
from typing import Dict, List

from easyaudit.severity import Severity
from easyaudit.utils import classes
from easyaudit.utils.fileio import read_text_file

from . import BaseProcessor, RuleSpec, ScanContext

ABSTRACT_HELPER = "Magento\\Framework\\App\\Helper\\AbstractHelper"
HELPER_CALL = re.compile(r"\$this->helper\((.*?)\)", re.S)
IGNORED_HELPERS = {
    "Magento\\Customer\\Helper\\Address",
    "Magento\\Tax\\Helper\\Data",
    "Magento\\Msrp\\Helper\\Data",
    "Magento\\Catalog\\Helper\\Output",
    "Magento\\Directory\\Helper\\Data",
}
TEST_DIRS = ("/Test/", "/tests/")


class HelpersProcessor(BaseProcessor):
    identifier = "helpers"
    file_type = "php"
    rules = (
        RuleSpec(
            rule_id="extensionOfAbstractHelper",
            name="Extension of AbstractHelper",
            short_description="Helper class extends deprecated AbstractHelper.",
            long_description=(
                "Helper classes should not extend Magento\\Framework\\App\\Helper\\AbstractHelper. "
                "Move presentation logic to ViewModels and business logic to service classes."
            ),
            severity=Severity.WARNING,
        ),
        RuleSpec(
            rule_id="helpersInsteadOfViewModels",
            name="Helpers Instead of ViewModels",
            short_description="Template uses helper instead of ViewModel.",
            long_description=(
                "Templates should not use helpers for presentation logic. ViewModels separate "
                "concerns more clearly and are easier to test."
            ),
            severity=Severity.ERROR,
        ),
    )

    def __init__(self) -> None:
        super().__init__()
        self._helpers_in_templates: Dict[str, List[str]] = {}

    def process(self, context: ScanContext) -> None:
        for file in context.files_of("phtml"):
            self._scan_template(file)

        for file in context.files_of("php"):
            if any(marker in file for marker in TEST_DIRS):
                continue
            self._check_helper_class(file)

    def _scan_template(self, file: str) -> None:
        content = read_text_file(file)
        for raw in HELPER_CALL.findall(content):
            class_name = raw.strip("'\" ").replace("::class", "")
            if class_name in IGNORED_HELPERS:
                continue
            if "\\" not in class_name:
                imported = re.search(r"use\s+(.*\\" + re.escape(class_name) + r");", content)
                if imported:
                    class_name = imported.group(1)
            self._helpers_in_templates.setdefault(class_name.lstrip("\\"), []).append(file)

    def _check_helper_class(self, file: str) -> None:
        content = read_text_file(file)
        if not content or not classes.extends_class(content, ABSTRACT_HELPER):
            return
        class_name = classes.extract_class_name(content)
        if class_name is None:
            return

        line = classes.find_class_declaration_line(content, "AbstractHelper")
        templates = self._helpers_in_templates.get(class_name, [])
        if templates:
            self._add(
                "helpersInsteadOfViewModels",
                file,
                line,
                f"Helper class '{class_name}' extends AbstractHelper and is used in {len(templates)} "
                "template(s). Move presentation logic to ViewModel instead.",
                metadata={"templates": sorted(set(templates))},
            )
        else:
            self._add(
                "extensionOfAbstractHelper",
                file,
                line,
                f"Helper class '{class_name}' extends deprecated AbstractHelper. Consider refactoring "
                "to a simple utility class or service.",
            )

"""Template anti-patterns: ``$this`` instead of ``$block`` and data crunching through blocks."""

from __future__ import annotations

import re
from typing import List

from easyaudit.severity import Severity
from easyaudit.utils.content import get_line_number
from easyaudit.utils.fileio import read_text_file

from . import BaseProcessor, RuleSpec, ScanContext

THIS_CALL = re.compile(r"\$this->(?:get|is|has|can)\w+\s*\(")
BLOCK_GETTER = re.compile(r"\$block->(get|is)(\w+)\s*\(")
VIEW_MODEL_PATTERNS = (
    re.compile(r"\$viewModel"),
    re.compile(r"\$block->getViewModel\(\)"),
    re.compile(r"\$block->getData\(['\"]view_model['\"]\)"),
)
ALLOWED_METHODS = {
    "getJsLayout",
    "getChildHtml",
    "getChildChildHtml",
    "getBlockHtml",
    "escapeHtml",
    "escapeUrl",
    "escapeJs",
    "getUrl",
    "getBaseUrl",
    "getViewFileUrl",
}
LAYOUT_SUFFIXES = {"Child", "ChildHtml", "Html"}
DATA_CRUNCH_THRESHOLD = 3
LISTED_CALLS = 5


class AdvancedBlockVsViewModelProcessor(BaseProcessor):
    identifier = "advancedBlockVsVM"
    file_type = "phtml"
    rules = (
        RuleSpec(
            rule_id="thisToBlock",
            name="Use of $this instead of $block",
            short_description="Template uses $this instead of $block variable.",
            long_description=(
                "Using $this in phtml templates is not recommended as it may not be compatible with "
                "alternative templating systems. Using $block ensures broader compatibility."
            ),
            severity=Severity.ERROR,
        ),
        RuleSpec(
            rule_id="dataCrunchInPhtml",
            name="Potential Data Crunch in Template",
            short_description="Template may be retrieving data through blocks instead of ViewModels.",
            long_description=(
                "Using blocks to retrieve data or configuration is discouraged. ViewModels keep data "
                "preparation out of the presentation layer and are easier to test."
            ),
            severity=Severity.WARNING,
        ),
    )

    def process(self, context: ScanContext) -> None:
        for file in context.files_of("phtml"):
            content = read_text_file(file)
            if not content:
                continue
            self._check_use_of_this(file, content)
            self._check_data_crunch(file, content)

    def _check_use_of_this(self, file: str, content: str) -> None:
        calls = THIS_CALL.findall(content)
        if not calls:
            return
        methods = ", ".join(dict.fromkeys(call.strip() for call in calls))
        self._add(
            "thisToBlock",
            file,
            get_line_number(content, calls[0]),
            f"Template uses $this instead of $block. Found methods: {methods}. "
            "This may cause compatibility issues.",
        )

    def _check_data_crunch(self, file: str, content: str) -> None:
        if any(pattern.search(content) for pattern in VIEW_MODEL_PATTERNS):
            return

        suspicious: List[str] = []
        for match in BLOCK_GETTER.finditer(content):
            method_type, method_name = match.group(1), match.group(2)
            if method_type + method_name in ALLOWED_METHODS or method_name in LAYOUT_SUFFIXES:
                continue
            suspicious.append(match.group(0))

        if len(suspicious) < DATA_CRUNCH_THRESHOLD:
            return

        unique = list(dict.fromkeys(suspicious))
        listed = ", ".join(unique[:LISTED_CALLS])
        if len(unique) > LISTED_CALLS:
            listed += f", ... ({len(unique) - LISTED_CALLS} more)"
        self._add(
            "dataCrunchInPhtml",
            file,
            1,
            f"Template has {len(unique)} data retrieval calls: {listed}. "
            "Consider using a ViewModel for better separation of concerns.",
        )

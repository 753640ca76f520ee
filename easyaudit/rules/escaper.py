"""Escape helpers called on ``$block``/``$this`` instead of ``$escaper``."""

from __future__ import annotations

import re

from easyaudit.severity import Severity
from easyaudit.utils.content import line_at_offset
from easyaudit.utils.fileio import read_text_file

from . import BaseProcessor, RuleSpec, ScanContext

ESCAPE_CALL = re.compile(r"\$(block|this)->(escapeHtml|escapeUrl|escapeJs|escapeHtmlAttr|escapeCss|escapeQuote)\s*\(")


class DeprecatedEscaperProcessor(BaseProcessor):
    identifier = "useEscaper"
    file_type = "phtml"
    rules = (
        RuleSpec(
            rule_id="useEscaper",
            name="Deprecated Escaper Usage",
            short_description="Detects deprecated escape method calls on $block or $this instead of $escaper.",
            long_description=(
                "Since Magento 2.3.5 escape methods should be called on the $escaper variable. "
                "$block->escapeHtml() is deprecated and $this->escapeHtml() also relies on $this "
                "inside templates."
            ),
        ),
    )

    def process(self, context: ScanContext) -> None:
        for file in context.files_of("phtml"):
            content = read_text_file(file)
            for match in ESCAPE_CALL.finditer(content):
                variable, method = match.group(1), match.group(2)
                self._add(
                    "useEscaper",
                    file,
                    line_at_offset(content, match.start()),
                    f"Use $escaper->{method}() instead of ${variable}->{method}(). "
                    f"Escape methods on ${variable} are deprecated since Magento 2.3.5.",
                    severity=Severity.ERROR if variable == "this" else Severity.WARNING,
                )

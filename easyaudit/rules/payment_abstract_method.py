"""Payment methods extending the deprecated ``AbstractMethod``."""

from __future__ import annotations

import re

from easyaudit.severity import Severity
from easyaudit.utils.content import get_line_number
from easyaudit.utils.fileio import read_text_file

from . import BaseProcessor, RuleSpec, ScanContext

DEPRECATED_CLASS = "Magento\\Payment\\Model\\Method\\AbstractMethod"
EXTENDS_ABSTRACT_METHOD = re.compile(r"class\s+\w+\s+extends\s+.*AbstractMethod")
TEST_DIRS = ("/Test/", "/tests/")


def extends_abstract_method(content: str) -> bool:
    return f"extends \\{DEPRECATED_CLASS}" in content or f"extends {DEPRECATED_CLASS}" in content


def declaration_line(content: str) -> int:
    for index, line in enumerate(content.split("\n")):
        if EXTENDS_ABSTRACT_METHOD.search(line):
            return index + 1
    return (
        get_line_number(content, f"extends \\{DEPRECATED_CLASS}")
        or get_line_number(content, f"extends {DEPRECATED_CLASS}")
        or 1
    )


class PaymentAbstractMethodProcessor(BaseProcessor):
    identifier = "extensionOfAbstractMethod"
    file_type = "php"
    rules = (
        RuleSpec(
            rule_id="extensionOfAbstractMethod",
            name="Extension of Deprecated Payment AbstractMethod",
            short_description="Payment method extends deprecated AbstractMethod class.",
            long_description=(
                "\\Magento\\Payment\\Model\\Method\\AbstractMethod is deprecated. Payment methods "
                "should implement PaymentMethodInterface or use the payment gateway adapters."
            ),
            severity=Severity.ERROR,
        ),
    )

    def process(self, context: ScanContext) -> None:
        for file in context.files_of("php"):
            if any(marker in file for marker in TEST_DIRS):
                continue
            content = read_text_file(file)
            if not extends_abstract_method(content):
                continue
            self._add(
                "extensionOfAbstractMethod",
                file,
                declaration_line(content),
                f"This payment method extends the deprecated \\{DEPRECATED_CLASS}. Consider implementing "
                "PaymentMethodInterface or using a modern payment base class instead.",
            )

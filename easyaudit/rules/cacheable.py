"""Layout blocks marked ``cacheable="false"``."""

from __future__ import annotations

import os

from easyaudit.severity import Severity
from easyaudit.utils.content import get_line_number
from easyaudit.utils.fileio import read_text_file
from easyaudit.utils.xml import load_xml

from . import BaseProcessor, RuleSpec, ScanContext

ALLOWED_AREAS = ("sales", "customer", "gift", "message")


class CacheableProcessor(BaseProcessor):
    identifier = "useCacheable"
    file_type = "xml"
    rules = (
        RuleSpec(
            rule_id="useCacheable",
            name='Use of cacheable="false"',
            short_description='Block with cacheable="false" found in layout XML.',
            long_description=(
                'A block with cacheable="false" usually makes the whole page uncacheable. Use '
                "customer sections (private content) or ESI for user-specific data instead."
            ),
            severity=Severity.NOTE,
        ),
    )

    def process(self, context: ScanContext) -> None:
        for file in context.files_of("xml"):
            if os.path.basename(file).endswith("di.xml"):
                continue
            root = load_xml(file)
            if root is None:
                continue

            content = None
            for block in root.iter("block"):
                if block.get("cacheable") != "false":
                    continue
                name = block.get("name", "")
                if any(area in name.lower() for area in ALLOWED_AREAS):
                    continue
                if content is None:
                    content = read_text_file(file)
                line = get_line_number(content, name) if name else None
                self._add(
                    "useCacheable",
                    file,
                    line,
                    f"Block '{name}' uses cacheable=\"false\", which can impact performance. "
                    "Consider using customer sections or ESI instead.",
                )

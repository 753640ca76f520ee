"""N+1 loading: models or entities loaded inside loop bodies."""

from __future__ import annotations

import re
from typing import Set, Tuple

from easyaudit.utils.content import find_approximate_line, line_at_offset, remove_comments
from easyaudit.utils.fileio import read_text_file
from easyaudit.utils.functions import extract_brace_block

from . import BaseProcessor, RuleSpec, ScanContext

LOAD_PATTERNS = (
    ("->load(", "Model ->load() call inside loop"),
    ("->getFirstItem()", "Collection ->getFirstItem() call inside loop"),
    ("->getById(", "Repository ->getById() call inside loop"),
    ("::load(", "Static Model::load() call inside loop"),
    ("::loadFromDb(", "Static ::loadFromDb() call inside loop"),
)
LOOP_PATTERN = re.compile(r"\b(foreach|for|while|do)\s*[({]")


class CollectionInLoopProcessor(BaseProcessor):
    identifier = "magento.performance.collection-in-loop"
    file_type = "php"
    rules = (
        RuleSpec(
            rule_id="magento.performance.collection-in-loop",
            name="Collection/Model Loading in Loop",
            short_description="Detects N+1 query patterns: model or repository loading inside loops.",
            long_description=(
                "Loading models or fetching single entities inside loops runs one query per "
                "iteration. Batch-load the entities before the loop with getList() and search "
                "criteria, or a filtered collection."
            ),
        ),
    )

    def process(self, context: ScanContext) -> None:
        for file in context.files_of("php"):
            original = read_text_file(file)
            if not original:
                continue
            self._detect(file, original, remove_comments(original))

    def _detect(self, file: str, original: str, cleaned: str) -> None:
        seen: Set[Tuple[int, str]] = set()
        for loop in LOOP_PATTERN.finditer(cleaned):
            body = extract_brace_block(cleaned, loop.start())
            if body is None:
                continue
            body_start = cleaned.find("{", loop.start()) + 1
            for pattern, description in LOAD_PATTERNS:
                position = body.find(pattern)
                if position == -1:
                    continue
                approximate = line_at_offset(cleaned, body_start + position)
                line = find_approximate_line(original, pattern, approximate)
                if (line, pattern) in seen:
                    continue
                seen.add((line, pattern))
                self._add(
                    "magento.performance.collection-in-loop",
                    file,
                    line,
                    f"{description}. This causes N+1 queries. Load all needed entities before the "
                    "loop using getList() or a filtered collection.",
                )

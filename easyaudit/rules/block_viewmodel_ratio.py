"""Flag modules whose PHP classes are mostly Blocks."""

from __future__ import annotations

import os

from easyaudit.utils.modules import group_files_by_module, is_block_file

from . import BaseProcessor, RuleSpec, ScanContext

BLOCK_RATIO_THRESHOLD = 0.5


class BlockViewModelRatioProcessor(BaseProcessor):
    identifier = "blockViewModelRatio"
    file_type = "php"
    rules = (
        RuleSpec(
            rule_id="blockViewModelRatio",
            name="Block vs ViewModel Ratio",
            short_description="Module has a high ratio of Block classes compared to ViewModels.",
            long_description=(
                "A high ratio of Block classes (> 50%) may indicate poor code organization. ViewModels "
                "should be preferred for presentation logic as they are easier to test and reuse."
            ),
        ),
    )

    def process(self, context: ScanContext) -> None:
        for module, files in group_files_by_module(context.files_of("php")).items():
            block_count = sum(1 for file in files if is_block_file(file))
            ratio = block_count / len(files)
            if ratio <= BLOCK_RATIO_THRESHOLD:
                continue
            self._add(
                "blockViewModelRatio",
                os.path.commonpath(files),
                1,
                f"Module '{module}' has {block_count} Block classes out of {len(files)} total classes "
                f"({round(ratio * 100, 1)}%). Consider using ViewModels for presentation logic.",
                metadata={
                    "module": module,
                    "ratio": round(ratio, 2),
                    "blockCount": block_count,
                    "totalCount": len(files),
                },
            )

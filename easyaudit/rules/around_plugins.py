"""Classify ``around*`` plugin methods by where the callable is invoked."""

from __future__ import annotations

import re
from typing import List, Optional

from easyaudit.utils.content import line_at_offset
from easyaudit.utils.fileio import read_text_file
from easyaudit.utils.functions import (
    get_function_content,
    get_function_inner_content,
    get_occurring_line_in_function,
)

from . import BaseProcessor, RuleSpec, ScanContext

AROUND_METHOD = re.compile(r"\bfunction\s+(around\w+)\s*\(([^)]*)\)")
CALLABLE_TYPES = {"callable", "Closure", "\\Closure", "mixed"}


class AroundPluginsProcessor(BaseProcessor):
    """An around plugin calling ``$proceed`` first is an after plugin; last, a before plugin."""

    identifier = "around_plugins"
    file_type = "php"
    rules = (
        RuleSpec(
            rule_id="before-plugin",
            name="Around plugin acting as a before plugin",
            short_description="This is a before plugin. The callable is invoked after other code in the function.",
            long_description=(
                "Around plugins add overhead to every call and complicate stack traces. When the "
                "callable is invoked last, a before plugin does the same job."
            ),
        ),
        RuleSpec(
            rule_id="after-plugin",
            name="Around plugin acting as an after plugin",
            short_description="This is an after plugin. The callable is invoked before other code in the function.",
            long_description=(
                "When the callable is invoked first and its result is only post-processed, an after "
                "plugin is cheaper and clearer."
            ),
        ),
        RuleSpec(
            rule_id="override-not-plugin",
            name="Around plugin never calling the original method",
            short_description="This is not a plugin, but an override. The callable is never invoked.",
            long_description=(
                "An around plugin that never invokes the callable silently replaces the original "
                "method and breaks other plugins. Use a preference or call the callable."
            ),
        ),
    )

    def process(self, context: ScanContext) -> None:
        for file in context.files_of("php"):
            code = read_text_file(file)
            if "function around" not in code:
                continue
            self._check_file(file, code)

    def _check_file(self, file: str, code: str) -> None:
        for match in AROUND_METHOD.finditer(code):
            line = line_at_offset(code, match.start())
            function = get_function_content(code, line).content

            callable_name = self._find_callable(match.group(2), function)
            if callable_name is None:
                self._add("override-not-plugin", file, line, f"{match.group(1)} never invokes its callable.")
                continue

            lines = get_function_inner_content(function).split("\n")
            if self._first_statement_calls(lines, callable_name):
                self._add("after-plugin", file, line, f"{match.group(1)} invokes {callable_name} first.")
            elif self._first_statement_calls(list(reversed(lines)), callable_name):
                self._add("before-plugin", file, line, f"{match.group(1)} invokes {callable_name} last.")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _find_callable(self, raw_params: str, function: str) -> Optional[str]:
        names: List[str] = []
        for param in (part.strip() for part in raw_params.split(",")):
            if not param:
                continue
            parts = param.split("=", 1)[0].split()
            name = parts[-1]
            if name == "$proceed":
                return name
            if len(parts) > 1 and parts[0].lstrip("?") in CALLABLE_TYPES:
                return name
            names.append(name)

        for name in names:
            if get_occurring_line_in_function(function, name + "(") is not None:
                return name
        return None

    def _first_statement_calls(self, lines: List[str], callable_name: str) -> bool:
        for line in lines:
            if not line.strip():
                continue
            return callable_name + "(" in line
        return False

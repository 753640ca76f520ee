"""Plugins whose class lives in the same module as the class they plug."""

from __future__ import annotations

from easyaudit.utils.content import get_line_number
from easyaudit.utils.fileio import read_text_file
from easyaudit.utils.modules import is_same_module
from easyaudit.utils.xml import load_xml

from . import BaseProcessor, RuleSpec, ScanContext


class SameModulePluginsProcessor(BaseProcessor):
    identifier = "same-module-plugins"
    file_type = "di"
    rules = (
        RuleSpec(
            rule_id="same-module-plugins",
            name="Plugin in the same module",
            short_description="A module plugs one of its own classes.",
            long_description=(
                "A module owns the classes it plugs, so the plugin logic can be written in the class "
                "itself. Plugins add interception overhead and make the flow harder to follow."
            ),
        ),
    )

    def process(self, context: ScanContext) -> None:
        for file in context.files_of("di"):
            root = load_xml(file)
            if root is None:
                continue
            content = None
            for type_node in root.iter("type"):
                plugged = type_node.get("name", "").lstrip("\\")
                for plugin in type_node.findall("plugin"):
                    plugging = plugin.get("type", "").lstrip("\\")
                    if plugin.get("disabled") == "true" or not plugging or not plugged:
                        continue
                    if not is_same_module(plugging, plugged):
                        continue
                    if content is None:
                        content = read_text_file(file)
                    self._add(
                        "same-module-plugins",
                        file,
                        get_line_number(content, plugging),
                        f"Class '{plugging}' is plugging {plugged} that is in the same module.",
                    )

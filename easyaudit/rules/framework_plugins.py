"""Plugins declared on ``Magento\\Framework`` classes."""

from __future__ import annotations

from easyaudit.utils.content import get_line_number
from easyaudit.utils.fileio import read_text_file
from easyaudit.utils.xml import load_xml

from . import BaseProcessor, RuleSpec, ScanContext

FRAMEWORK_NAMESPACE = "Magento\\Framework"


class MagentoFrameworkPluginProcessor(BaseProcessor):
    identifier = "magento-framework-plugins"
    file_type = "di"
    rules = (
        RuleSpec(
            rule_id="magento-framework-plugins",
            name="Plugin on Magento Framework class",
            short_description="Framework classes should not be plugged.",
            long_description=(
                "Plugins on Magento\\Framework classes run for a large share of all requests and "
                "are fragile across upgrades. Plug the module-level class or API instead."
            ),
        ),
    )

    def process(self, context: ScanContext) -> None:
        for file in context.files_of("di"):
            root = load_xml(file)
            if root is None:
                continue
            content = read_text_file(file)
            for type_node in root.iter("type"):
                class_name = type_node.get("name", "")
                if type_node.find("plugin") is None or FRAMEWORK_NAMESPACE not in class_name:
                    continue
                self._add(
                    "magento-framework-plugins",
                    file,
                    get_line_number(content, class_name),
                    f"Class '{class_name}' is a core Magento class and should not be plugged.",
                )

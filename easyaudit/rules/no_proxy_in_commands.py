"""Console commands whose constructor dependencies are not proxied."""

from __future__ import annotations

import logging
from typing import Dict, List, Set, Tuple
from xml.etree.ElementTree import Element

from easyaudit.utils import classes
from easyaudit.utils.fileio import read_text_file
from easyaudit.utils.xml import load_xml

from . import BaseProcessor, RuleSpec, ScanContext

logger = logging.getLogger(__name__)

COMMAND_LIST = "Magento\\Framework\\Console\\CommandList"


def _text(node: Element) -> str:
    return (node.text or "").strip().lstrip("\\")


class NoProxyInCommandsProcessor(BaseProcessor):
    """Commands are instantiated for every ``bin/magento`` call, so their dependencies must be lazy."""

    identifier = "no-proxy-in-commands"
    file_type = "di"
    rules = (
        RuleSpec(
            rule_id="no-proxy-in-commands",
            name="No proxy in console commands",
            short_description="Console command dependencies should be injected through proxies.",
            long_description=(
                "Every registered console command is constructed whenever bin/magento runs. "
                "Injecting dependencies through \\Proxy arguments in di.xml avoids building them "
                "until the command is actually executed."
            ),
        ),
    )

    def process(self, context: ScanContext) -> None:
        commands: List[Tuple[str, str]] = []
        proxies: Dict[str, Set[str]] = {}

        for file in context.files_of("di"):
            root = load_xml(file)
            if root is None:
                continue
            for type_node in root.iter("type"):
                name = type_node.get("name", "").lstrip("\\")
                if name == COMMAND_LIST:
                    commands.extend((_text(item), file) for item in type_node.iter("item") if _text(item))
                    continue
                for argument in type_node.iter("argument"):
                    value = _text(argument)
                    if "Proxy" in value:
                        proxies.setdefault(name, set()).add(value)

        if commands:
            context.session.index(context.files_of("php"))
        for command, di_file in commands:
            self._check_command(context, command, di_file, proxies.get(command, set()))

    def _check_command(self, context: ScanContext, command: str, di_file: str, proxies: Set[str]) -> None:
        command_file = context.session.locate_class(command)
        if command_file is None:
            logger.debug("Command class %s not found below %s", command, context.session.root)
            return

        content = read_text_file(command_file)
        parameters = classes.parse_constructor_parameters(content)
        if proxies and len(proxies) >= len(parameters) - 1:
            return

        consolidated = classes.consolidate_parameters(
            parameters, classes.parse_imported_classes(content), classes.extract_namespace(content)
        )
        line = classes.find_class_declaration_line(content)
        for argument, class_name in consolidated.items():
            if "Factory" in class_name or class_name + "\\Proxy" in proxies:
                continue
            self._add(
                "no-proxy-in-commands",
                command_file,
                line,
                f"Command '{command}' injects '{class_name}' ({argument}) without a proxy. "
                f"Configure '{class_name}\\Proxy' for it in di.xml.",
                metadata={
                    "diFile": di_file,
                    "type": command,
                    "argument": argument.lstrip("$"),
                    "proxy": class_name + "\\Proxy",
                },
            )

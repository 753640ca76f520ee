"""Heavy classes injected without a ``\\Proxy`` argument configured in ``di.xml``."""

from __future__ import annotations

from typing import Dict, List, Tuple

from easyaudit.severity import Severity
from easyaudit.utils import classes
from easyaudit.utils.content import get_line_number
from easyaudit.utils.fileio import read_text_file
from easyaudit.utils.modules import find_di_xml_for_file
from easyaudit.utils.proxies import is_proxy_required
from easyaudit.utils.xml import load_xml

from . import BaseProcessor, RuleSpec, ScanContext

HEAVY_CLASS_PATTERNS = ("Session", "Collection")
TEST_DIRS = ("/Test/", "/tests/")

ArgumentKey = Tuple[str, str]


def is_heavy_class(class_name: str) -> bool:
    if class_name.endswith(("Factory", "Interface")):
        return False
    if any(pattern in class_name for pattern in HEAVY_CLASS_PATTERNS):
        return True
    return is_proxy_required(class_name)


def index_arguments(di_files: List[str]) -> Dict[ArgumentKey, List[str]]:
    """Map (type name, argument name) to every configured argument value."""

    arguments: Dict[ArgumentKey, List[str]] = {}
    for file in di_files:
        root = load_xml(file)
        if root is None:
            continue
        for type_node in root.iter("type"):
            type_name = type_node.get("name", "").lstrip("\\")
            for argument in type_node.iter("argument"):
                key = (type_name, argument.get("name", ""))
                arguments.setdefault(key, []).append((argument.text or "").strip())
    return arguments


class ProxyForHeavyClassesProcessor(BaseProcessor):
    identifier = "noProxyUsedForHeavyClasses"
    file_type = "php"
    rules = (
        RuleSpec(
            rule_id="noProxyUsedForHeavyClasses",
            name="No Proxy for Heavy Classes",
            short_description="Heavy classes injected without proxy configuration.",
            long_description=(
                "Session, Collection and similar classes are expensive to build and should be "
                "injected through a proxy, which delays instantiation until the first method call."
            ),
            severity=Severity.ERROR,
        ),
    )

    def process(self, context: ScanContext) -> None:
        di_files = context.files_of("di")
        if not di_files:
            return
        arguments = index_arguments(di_files)
        for file in context.files_of("php"):
            if any(marker in file for marker in TEST_DIRS):
                continue
            self._check_file(file, arguments)

    def _check_file(self, file: str, arguments: Dict[ArgumentKey, List[str]]) -> None:
        content = read_text_file(file)
        class_name = classes.extract_class_name(content)
        if class_name is None:
            return
        parameters = classes.parse_constructor_parameters(content)
        if not parameters:
            return

        consolidated = classes.consolidate_parameters(
            parameters, classes.parse_imported_classes(content), classes.extract_namespace(content)
        )
        for param_name, param_class in consolidated.items():
            if not is_heavy_class(param_class):
                continue
            argument = param_name.lstrip("$")
            configured = arguments.get((class_name, argument), [])
            if any(value.endswith("\\Proxy") for value in configured):
                continue
            self._add(
                "noProxyUsedForHeavyClasses",
                file,
                get_line_number(content, param_name),
                f"Class '{class_name}' injects heavy class '{param_class}' (parameter {param_name}) "
                "without a proxy. Consider configuring a proxy in di.xml to improve performance.",
                metadata={
                    "diFile": find_di_xml_for_file(file),
                    "type": class_name,
                    "argument": argument,
                    "proxy": param_class + "\\Proxy",
                },
            )

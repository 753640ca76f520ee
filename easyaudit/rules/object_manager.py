"""Direct ObjectManager usage outside factories."""

from __future__ import annotations

import re
from typing import List, Optional

from easyaudit.severity import Severity
from easyaudit.utils import classes
from easyaudit.utils.content import line_at_offset
from easyaudit.utils.fileio import read_text_file

from . import BaseProcessor, RuleSpec, ScanContext

OM_INTERFACE = "Magento\\Framework\\ObjectManagerInterface"
OM_CLASS = "Magento\\Framework\\App\\ObjectManager"

_GET_INSTANCE = r"\\?(?:Magento\\Framework\\App\\)?ObjectManager::getInstance"
_REQUESTED_CLASS = r"\s*->(?:get|create)\s*\(\s*['\"]?\\?([A-Za-z0-9_\\]+)(?:::class|['\"])"

LOCAL_ASSIGNMENT = re.compile(r"(\$\w+)\s*=\s*" + _GET_INSTANCE)
PROPERTY_ASSIGNMENT = re.compile(r"\$this->(\w+)\s*=\s*" + _GET_INSTANCE)
DIRECT_CALL = re.compile(r"ObjectManager::getInstance\s*\(\s*\)" + _REQUESTED_CLASS)


def derive_property_name(class_name: str) -> str:
    short_name = class_name.split("\\")[-1]
    return short_name[:1].lower() + short_name[1:]


def _usage_pattern(receiver: str) -> "re.Pattern[str]":
    return re.compile(re.escape(receiver) + _REQUESTED_CLASS)


class ObjectManagerProcessor(BaseProcessor):
    """Flags ``get``/``create`` calls made through the ObjectManager.

    The receiver may be ``ObjectManager::getInstance()`` itself, a local
    variable or property assigned from it, or the property holding an
    injected ObjectManager. Imports with no such call are reported
    separately.
    """

    identifier = "replaceObjectManager"
    file_type = "php"
    rules = (
        RuleSpec(
            rule_id="replaceObjectManager",
            name="Use of ObjectManager",
            short_description="ObjectManager should not be used directly",
            long_description=(
                "The ObjectManager should not be used directly in Magento 2 code. Use dependency "
                "injection in constructors instead. Direct ObjectManager usage bypasses the DI "
                "container, makes testing difficult, and is considered an anti-pattern. The only "
                "exception is Factory classes which are designed to use ObjectManager internally."
            ),
            severity=Severity.ERROR,
        ),
        RuleSpec(
            rule_id="magento.code.useless-object-manager-import",
            name="Useless ObjectManager Import",
            short_description="ObjectManager imported but not used",
            long_description=(
                "The ObjectManager was imported but does not seem to be used in the code. Please "
                "remove the unused import to keep the code clean."
            ),
            severity=Severity.WARNING,
        ),
    )

    def process(self, context: ScanContext) -> None:
        for file in context.files_of("php"):
            content = read_text_file(file)
            if content:
                self._analyze_file(file, content)

    def _analyze_file(self, file: str, content: str) -> None:
        if classes.is_factory_class(content):
            return
        if OM_INTERFACE not in content and OM_CLASS not in content:
            return

        has_import = classes.has_imported_classes((OM_INTERFACE, OM_CLASS), content)
        parameters = classes.parse_constructor_parameters(content)
        parameter_types = classes.get_constructor_parameter_types(content)

        patterns: List["re.Pattern[str]"] = []
        injected = [
            name for name, type_name in parameter_types.items() if OM_INTERFACE in type_name or OM_CLASS in type_name
        ]
        if injected:
            holder = classes.get_instantiation(parameters, injected[0], content)
            if holder is None:
                patterns.append(DIRECT_CALL)
            else:
                patterns.append(_usage_pattern(holder))
        else:
            patterns.append(DIRECT_CALL)

        for variable in LOCAL_ASSIGNMENT.findall(content):
            patterns.append(_usage_pattern(variable))
        for prop in PROPERTY_ASSIGNMENT.findall(content):
            patterns.append(_usage_pattern("$this->" + prop))

        usages = 0
        for pattern in patterns:
            for match in pattern.finditer(content):
                self._add_usage(file, line_at_offset(content, match.start()), match.group(1))
                usages += 1

        if has_import and not usages:
            self._add(
                "magento.code.useless-object-manager-import",
                file,
                self._import_line(content),
                "ObjectManager imported but not used. Remove the unused import.",
            )

    def _add_usage(self, file: str, line: Optional[int], class_name: str) -> None:
        self._add(
            "replaceObjectManager",
            file,
            line,
            f"Direct use of ObjectManager to get '{class_name}'. Use dependency injection instead.",
            metadata={"injections": {class_name: derive_property_name(class_name)}},
        )

    @staticmethod
    def _import_line(content: str) -> Optional[int]:
        for name in (OM_INTERFACE, OM_CLASS):
            match = re.search(r"\buse\s+\\?" + re.escape(name) + r"\b", content)
            if match:
                return line_at_offset(content, match.start())
        return None

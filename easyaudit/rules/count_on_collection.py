"""``count()`` on collections instead of ``getSize()``, in classes and templates."""

from __future__ import annotations

import re
from typing import Dict, List, Set

from easyaudit.utils import classes, type_names
from easyaudit.utils.content import line_at_offset
from easyaudit.utils.fileio import read_text_file
from easyaudit.utils.functions import extract_brace_block

from . import BaseProcessor, RuleSpec, ScanContext

RULE_ID = "magento.performance.count-on-collection"
METHOD_DECLARATION = re.compile(r"function\s+(\w+)\s*\([^)]*\)[^{]*\{")
BLOCK_VAR_ANNOTATION = re.compile(r"@var\s+\\?([\w\\]+)\s+\$block\b")


class CountOnCollectionProcessor(BaseProcessor):
    """Also follows collection factories into the block methods templates call."""

    identifier = RULE_ID
    file_type = "php"
    rules = (
        RuleSpec(
            rule_id=RULE_ID,
            name="count() on Collection",
            short_description="Detects count() usage on collections instead of getSize().",
            long_description=(
                "count() on a Magento collection loads every item into memory just to count "
                "them. getSize() runs a COUNT(*) query instead. This applies to both PHP's "
                "count($collection) and the collection's own ->count() method."
            ),
        ),
    )

    def __init__(self) -> None:
        super().__init__()
        self._collection_methods: Dict[str, Set[str]] = {}

    def process(self, context: ScanContext) -> None:
        for file in context.files_of("php"):
            content = read_text_file(file)
            if not content:
                continue
            self._analyze_class(file, content)

        for file in context.files_of("phtml"):
            content = read_text_file(file)
            if content:
                self._analyze_template(file, content)

    # ------------------------------------------------------------------
    # PHP classes
    # ------------------------------------------------------------------
    def _analyze_class(self, file: str, content: str) -> None:
        parameters = classes.parse_constructor_parameters(content)
        if not parameters:
            return

        consolidated = classes.consolidate_parameters(
            parameters, classes.parse_imported_classes(content), classes.extract_namespace(content)
        )
        factory_properties: List[str] = []
        for name, class_name in consolidated.items():
            is_direct = type_names.is_collection_type(class_name)
            is_factory = type_names.is_collection_factory_type(class_name)
            if not is_direct and not is_factory:
                continue
            prop = classes.get_instantiation(parameters, name, content)
            if prop is None:
                continue
            if is_direct:
                self._detect_count(file, content, prop)
            else:
                factory_properties.append(prop)
                for variable in _created_from(prop, content):
                    self._detect_count(file, content, variable)

        if factory_properties:
            self._map_collection_methods(content, factory_properties)

    def _map_collection_methods(self, content: str, factory_properties: List[str]) -> None:
        fqcn = classes.extract_class_name(content)
        if fqcn is None:
            return
        for prop in factory_properties:
            for variable in _created_from(prop, content):
                escaped = re.escape(variable)
                for method in METHOD_DECLARATION.finditer(content):
                    name = method.group(1)
                    if name == "__construct":
                        continue
                    body = extract_brace_block(content, method.start())
                    if body is None:
                        continue
                    if re.search(escaped + r"\s*=\s*\$this->\w+->create\s*\(", body) and re.search(
                        r"return\s+" + escaped + r"\s*;", body
                    ):
                        self._collection_methods.setdefault(fqcn, set()).add(name)

    def _detect_count(self, file: str, content: str, variable: str) -> None:
        escaped = re.escape(variable)
        metadata = {"variable": variable}

        for match in re.finditer(r"\bcount\s*\(\s*" + escaped + r"\s*\)", content):
            self._add(
                RULE_ID,
                file,
                line_at_offset(content, match.start()),
                f"count({variable}) loads all collection items into memory. "
                f"Use {variable}->getSize() instead for a COUNT(*) SQL query.",
                metadata=metadata,
            )
        for match in re.finditer(escaped + r"->count\s*\(", content):
            self._add(
                RULE_ID,
                file,
                line_at_offset(content, match.start()),
                f"{variable}->count() loads all collection items into memory. "
                f"Use {variable}->getSize() instead for a COUNT(*) SQL query.",
                metadata=metadata,
            )

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------
    def _analyze_template(self, file: str, content: str) -> None:
        annotation = BLOCK_VAR_ANNOTATION.search(content)
        if not annotation:
            return
        block_class = annotation.group(1).replace("\\\\", "\\").lstrip("\\")
        for method in sorted(self._collection_methods.get(block_class, ())):
            escaped = re.escape(method)

            assigned = re.findall(r"(\$\w+)\s*=\s*\$block->" + escaped + r"\s*\(", content)
            for variable in dict.fromkeys(assigned):
                self._detect_count(file, content, variable)

            call = f"$block->{method}()"
            for match in re.finditer(r"\$block->" + escaped + r"\s*\([^)]*\)->count\s*\(", content):
                self._add(
                    RULE_ID,
                    file,
                    line_at_offset(content, match.start()),
                    f"{call}->count() loads all collection items into memory. "
                    f"Use {call}->getSize() instead for a COUNT(*) SQL query.",
                )
            for match in re.finditer(r"\bcount\s*\(\s*\$block->" + escaped + r"\s*\([^)]*\)\s*\)", content):
                self._add(
                    RULE_ID,
                    file,
                    line_at_offset(content, match.start()),
                    f"count({call}) loads all collection items into memory. "
                    f"Use {call}->getSize() instead for a COUNT(*) SQL query.",
                )


def _created_from(prop: str, content: str) -> List[str]:
    """Local variables assigned from ``<prop>->create(...)``."""

    found = re.findall(r"(\$\w+)\s*=\s*" + re.escape(prop) + r"->create\s*\(", content)
    return list(dict.fromkeys(found))

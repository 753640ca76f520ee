"""Concrete classes injected where a factory, interface or repository belongs."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from easyaudit.severity import Severity
from easyaudit.utils import classes, type_names
from easyaudit.utils.classes import ClassHierarchyIndex
from easyaudit.utils.content import get_line_number
from easyaudit.utils.fileio import read_text_file
from easyaudit.utils.proxies import is_proxy_required

from . import BaseProcessor, RuleSpec, ScanContext

IGNORED_CLASSES = {
    "Magento\\Eav\\Model\\Validator\\Attribute\\Backend",
    "Magento\\Eav\\Model\\Config",
    "Magento\\Eav\\Model\\Entity\\Attribute\\Config",
    "Magento\\Cms\\Model\\Page",
    "Magento\\Theme\\Block\\Html\\Header\\Logo",
    "Magento\\Catalog\\Model\\Product\\Visibility",
    "Magento\\Catalog\\Model\\Product\\Attribute\\Source\\Status",
    "Magento\\Catalog\\Model\\Product\\Type",
    "Magento\\Catalog\\Model\\Product\\Media\\Config",
    "Magento\\CatalogInventory\\Model\\Stock",
    "Magento\\Sales\\Model\\Order\\Status",
    "Magento\\Sales\\Model\\Order\\Config",
    "Magento\\Sales\\Model\\Order\\StatusFactory",
    "Magento\\Customer\\Model\\Group",
    "Magento\\Customer\\Model\\Customer\\Attribute\\Source\\Group",
    "Magento\\Store\\Model\\StoreManager",
    "Magento\\Store\\Model\\Store",
    "Magento\\Indexer\\Model\\Indexer\\State",
    "Magento\\Tax\\Model\\Calculation",
    "Magento\\Tax\\Model\\Config",
    "Magento\\Directory\\Model\\Currency",
    "Magento\\Directory\\Model\\Country",
    "Magento\\Directory\\Model\\Region",
    "Magento\\Quote\\Model\\Quote\\Address\\RateResult\\Method",
    "Magento\\Quote\\Model\\Quote\\Item\\Option",
}
IGNORED_SUBSTRINGS = ("Magento\\Framework", "Context", "Session", "Helper", "Stdlib", "Serializer", "Generator")
LEGITIMATE_SUFFIXES = ("Interface", "Factory", "Provider", "Resolver")
CONCRETE_REPOSITORY = re.compile(r"^(.+)\\Model\\(.+)Repository$")


def is_argument_ignored(class_name: str) -> bool:
    if class_name.lower() in classes.BASIC_TYPES:
        return True
    if type_names.matches_suffix(class_name, LEGITIMATE_SUFFIXES):
        return True
    if type_names.matches_substring(class_name, IGNORED_SUBSTRINGS):
        return True
    return is_proxy_required(class_name)


def repository_interface(class_name: str) -> str:
    match = CONCRETE_REPOSITORY.match(class_name)
    if match:
        return f"{match.group(1)}\\Api\\{match.group(2)}RepositoryInterface"
    return class_name + "Interface"


def _short_names(children: List[str]) -> str:
    return ", ".join(child.split("\\")[-1] for child in children)


class SpecificClassInjectionProcessor(BaseProcessor):
    """Classes with children in the scanned code get a manual-fix variant of each rule."""

    identifier = "specificClassInjection"
    file_type = "php"
    rules = (
        RuleSpec(
            rule_id="collectionMustUseFactory",
            name="Collection Must Use Factory",
            short_description="Collections must not be injected directly",
            long_description=(
                "A collection must not be injected in a constructor. Inject its factory instead so "
                "the collection is not built at construction time and carries no shared state."
            ),
            severity=Severity.ERROR,
        ),
        RuleSpec(
            rule_id="collectionWithChildrenMustUseFactory",
            name="Collection With Children Must Use Factory",
            short_description="Collections with children must not be injected directly",
            long_description=(
                "This collection has child classes in the codebase, so the injection cannot be "
                "rewritten automatically. Refactor the children as well."
            ),
            severity=Severity.WARNING,
        ),
        RuleSpec(
            rule_id="repositoryMustUseInterface",
            name="Repository Must Use Interface",
            short_description="Repositories must use interface injection",
            long_description=(
                "A repository must be injected through its interface so that preferences apply "
                "and the Magento coding standard is respected."
            ),
            severity=Severity.ERROR,
        ),
        RuleSpec(
            rule_id="repositoryWithChildrenMustUseInterface",
            name="Repository With Children Must Use Interface",
            short_description="Repositories with children must use interface injection",
            long_description=(
                "This repository has child classes in the codebase, so the injection cannot be "
                "rewritten automatically. Refactor the children as well."
            ),
            severity=Severity.WARNING,
        ),
        RuleSpec(
            rule_id="modelUseApiInterface",
            name="Model Should Use API Interface",
            short_description="Models with API interfaces should inject the interface",
            long_description=(
                "When a model implements an API interface, inject the interface instead of the "
                "concrete class so preferences are not ignored."
            ),
            severity=Severity.ERROR,
        ),
        RuleSpec(
            rule_id="noResourceModelInjection",
            name="Resource Model Should Not Be Injected",
            short_description="Resource models should use repository pattern",
            long_description=(
                "Resource models are the database layer and should stay behind repositories. "
                "Inject a repository instead."
            ),
            severity=Severity.WARNING,
        ),
        RuleSpec(
            rule_id="specificClassInjection",
            name="Specific Class Injection",
            short_description="Consider using factory, builder, or interface",
            long_description=(
                "A class should usually not be injected as a specific class; a factory, builder or "
                "interface is preferable. This check is a heuristic, verify each case manually."
            ),
            severity=Severity.WARNING,
        ),
    )

    def process(self, context: ScanContext) -> None:
        files = context.files_of("php")
        hierarchy = context.session.index(files)
        for file in files:
            content = read_text_file(file)
            if "__construct" not in content:
                continue
            self._analyze_file(file, content, hierarchy)

    def _analyze_file(self, file: str, content: str, hierarchy: ClassHierarchyIndex) -> None:
        if classes.is_factory_class(content) or classes.is_command_class(content):
            return
        parameters = classes.parse_constructor_parameters(content)
        consolidated = classes.consolidate_parameters(
            parameters, classes.parse_imported_classes(content), classes.extract_namespace(content)
        )
        if not consolidated:
            return

        class_name = classes.extract_class_name(content) or ""
        passed_to_parent = set(classes.get_parent_constructor_params(content))
        for param_name, param_class in consolidated.items():
            if param_name.lstrip("$") in passed_to_parent:
                continue
            if param_class in IGNORED_CLASSES or is_argument_ignored(param_class):
                continue
            line = get_line_number(content, param_name)
            if self._model_violation(file, line, param_name, param_class, class_name, hierarchy):
                continue
            if type_names.is_non_magento_library(param_class):
                continue
            self._add(
                "specificClassInjection",
                file,
                line,
                f'Specific class "{param_class}" injected in {param_name}. Consider using a factory, '
                "builder, or interface instead. (Note: This is a suggestion - manual verification recommended)",
                metadata={"specificClasses": {param_class: param_name}},
            )

    def _model_violation(
        self,
        file: str,
        line: Optional[int],
        param_name: str,
        param_class: str,
        class_name: str,
        hierarchy: ClassHierarchyIndex,
    ) -> bool:
        handled = False
        collection_or_repository = False
        children = hierarchy.children_of(param_class)

        if type_names.is_collection_type(param_class):
            self._collection(file, line, param_name, param_class, children)
            handled = collection_or_repository = True
        if type_names.is_repository(param_class):
            self._repository(file, line, param_name, param_class, children)
            handled = collection_or_repository = True

        if type_names.has_api_interface(param_class, hierarchy):
            interface = type_names.get_api_interface(param_class, hierarchy)
            self._add(
                "modelUseApiInterface",
                file,
                line,
                f'Model "{param_class}" implements an API interface but is injected as concrete class in '
                f"{param_name}. Inject the API interface instead to respect preferences and coding standards.",
                metadata={"models": {param_class: {"interface": interface}}},
            )
            handled = True

        if not collection_or_repository and type_names.is_resource_model(param_class):
            if not type_names.is_resource_model(class_name) and not type_names.is_repository(class_name):
                self._add(
                    "noResourceModelInjection",
                    file,
                    line,
                    f'Resource Model "{param_class}" injected in {param_name}. Resource models should not '
                    "be directly injected. Use a repository instead for better separation of concerns. "
                    "(Manual refactoring required - no auto-fix available)",
                )
            return True
        return handled

    def _collection(
        self, file: str, line: Optional[int], param_name: str, param_class: str, children: List[str]
    ) -> None:
        metadata: Dict[str, Any] = {"collections": {param_class: param_name}}
        if children:
            metadata["children"] = children
            self._add(
                "collectionWithChildrenMustUseFactory",
                file,
                line,
                f'Collection "{param_class}" injected in {param_name}. Collections must use Factory pattern. '
                f"However, this class has {len(children)} child class(es): {_short_names(children)}. "
                "Manual refactoring required.",
                metadata=metadata,
            )
            return
        self._add(
            "collectionMustUseFactory",
            file,
            line,
            f'Collection "{param_class}" injected in {param_name}. Collections must use Factory pattern. '
            f'Inject "{param_class}Factory" instead.',
            metadata=metadata,
        )

    def _repository(
        self, file: str, line: Optional[int], param_name: str, param_class: str, children: List[str]
    ) -> None:
        interface = repository_interface(param_class)
        metadata: Dict[str, Any] = {"repositories": {param_class: {"interface": interface}}}
        if children:
            metadata["children"] = children
            self._add(
                "repositoryWithChildrenMustUseInterface",
                file,
                line,
                f'Repository "{param_class}" injected as concrete class in {param_name}. Use interface '
                f'"{interface}" instead. However, this class has {len(children)} child class(es): '
                f"{_short_names(children)}. Manual refactoring required.",
                metadata=metadata,
            )
            return
        self._add(
            "repositoryMustUseInterface",
            file,
            line,
            f'Repository "{param_class}" injected as concrete class in {param_name}. Use interface '
            f'"{interface}" instead.',
            metadata=metadata,
        )

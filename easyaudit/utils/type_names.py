"""Naming-convention predicates over class names."""

from __future__ import annotations

from typing import Iterable, Optional

from .classes import ClassHierarchyIndex

NON_MAGENTO_VENDORS = (
    "GuzzleHttp\\",
    "Monolog\\",
    "Psr\\",
    "Symfony\\",
    "Laminas\\",
    "League\\",
    "Composer\\",
    "Doctrine\\",
    "phpDocumentor\\",
    "PHPUnit\\",
    "Webmozart\\",
    "Ramsey\\",
    "Firebase\\",
    "Google\\",
    "Aws\\",
    "Carbon\\",
    "Brick\\",
    "Sabberworm\\",
    "Pelago\\",
    "Colinodell\\",
    "Fig\\",
    "Zend\\",
)


def is_collection_type(class_name: str) -> bool:
    return "Collection" in class_name and "CollectionFactory" not in class_name


def is_collection_factory_type(class_name: str) -> bool:
    return "CollectionFactory" in class_name


def is_repository(class_name: str) -> bool:
    return "Repository" in class_name


def is_resource_model(class_name: str) -> bool:
    return "ResourceModel" in class_name


def is_non_magento_library(class_name: str) -> bool:
    return class_name.lstrip("\\").startswith(NON_MAGENTO_VENDORS)


def _api_interface(class_name: str, index: Optional[ClassHierarchyIndex]) -> Optional[str]:
    if index is None:
        return None
    for interface in index.interfaces_of(class_name):
        if "Api" in interface:
            return interface
    return None


def has_api_interface(class_name: str, index: Optional[ClassHierarchyIndex] = None) -> bool:
    """True when the scanned source shows ``class_name`` implementing an ``Api`` interface."""

    return _api_interface(class_name, index) is not None


def get_api_interface(class_name: str, index: Optional[ClassHierarchyIndex] = None) -> str:
    """Return the implemented ``Api`` interface, else the conventional ``Api\\Data`` name."""

    interface = _api_interface(class_name, index)
    if interface is not None:
        return interface
    return class_name.replace("Model\\", "Api\\Data\\") + "Interface"


def matches_suffix(class_name: str, suffixes: Iterable[str]) -> bool:
    return any(class_name.endswith(suffix) for suffix in suffixes)


def matches_substring(class_name: str, substrings: Iterable[str]) -> bool:
    return any(substring in class_name for substring in substrings)

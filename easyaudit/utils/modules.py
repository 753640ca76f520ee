"""Magento module naming conventions derived from file paths and class names."""

from __future__ import annotations

import os
import re
from typing import Dict, Iterable, List, Optional

APP_CODE_MODULE = re.compile(r"/app/code/([A-Z][a-zA-Z0-9]+)/([A-Z][a-zA-Z0-9]+)/")
VENDOR_PACKAGE = re.compile(r"/vendor/([a-z0-9-]+)/(?:magento2?-)?([a-z0-9-]+)/", re.I)
GENERIC_MODULE = re.compile(r"/([A-Z][a-zA-Z0-9]*)/([A-Z][a-zA-Z0-9]*)/(?:Block|Model|ViewModel|Controller|Helper)/")
BLOCK_FILE = re.compile(r"/Block/[^/]+\.php$")
APP_CODE_ROOT = re.compile(r"(.*?/app/code/[^/]+/[^/]+)/")


def _studly(kebab: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in kebab.split("-") if part)


def extract_module_name(file_path: str) -> Optional[str]:
    """Derive ``Vendor_Module`` from a path, ``None`` when no layout matches.

    Checked in order: ``app/code/Vendor/Module/``, a composer package under
    ``vendor/`` (kebab-case converted, ``magento2-`` prefix dropped), then a
    generic ``Vendor/Module/<Block|Model|...>/`` layout.
    """

    path = file_path.replace("\\", "/")

    match = APP_CODE_MODULE.search(path)
    if match:
        return f"{match.group(1)}_{match.group(2)}"

    match = VENDOR_PACKAGE.search(path)
    if match:
        return f"{_studly(match.group(1))}_{_studly(match.group(2))}"

    match = GENERIC_MODULE.search(path)
    if match:
        return f"{match.group(1)}_{match.group(2)}"
    return None


def group_files_by_module(files: Iterable[str]) -> Dict[str, List[str]]:
    grouped: Dict[str, List[str]] = {}
    for file in files:
        module = extract_module_name(file)
        if module is None:
            continue
        grouped.setdefault(module, []).append(file)
    return grouped


def is_same_module(class_a: str, class_b: str) -> bool:
    """True when both classes share the ``Vendor\\Module`` prefix."""

    parts_a = class_a.strip("\\").split("\\")
    parts_b = class_b.strip("\\").split("\\")
    if len(parts_a) < 2 or len(parts_b) < 2:
        return False
    return parts_a[:2] == parts_b[:2]


def is_block_file(file_path: str) -> bool:
    return BLOCK_FILE.search(file_path.replace("\\", "/")) is not None


def is_setup_directory(file_path: str) -> bool:
    return "/Setup/" in file_path.replace("\\", "/")


def find_di_xml_for_file(php_file: str) -> Optional[str]:
    """Return the nearest ``etc/di.xml`` for a PHP file, walking up to ``app/code``."""

    path = php_file.replace("\\", "/")
    match = APP_CODE_ROOT.match(path)
    if match:
        candidate = f"{match.group(1)}/etc/di.xml"
        if os.path.isfile(candidate):
            return candidate

    directory = os.path.dirname(path)
    while directory not in ("", "/", "."):
        candidate = os.path.join(directory, "etc", "di.xml")
        if os.path.isfile(candidate):
            return candidate
        if directory.endswith("/app/code"):
            break
        parent = os.path.dirname(directory)
        if parent == directory:
            break
        directory = parent
    return None

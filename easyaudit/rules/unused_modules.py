"""Modules shipped in the codebase but disabled in ``app/etc/config.php``."""

from __future__ import annotations

import logging
import os
import re
import xml.etree.ElementTree as ElementTree
from typing import Dict, Optional

from easyaudit.severity import Severity
from easyaudit.utils.fileio import read_text_file
from easyaudit.utils.xml import element_line, load_xml

from . import BaseProcessor, RuleSpec, ScanContext

logger = logging.getLogger(__name__)

CONFIG_RELATIVE_PATH = os.path.join("app", "etc", "config.php")
MODULES_ARRAY = re.compile(r"['\"]modules['\"]\s*=>\s*(?:\[|array\s*\()")
MODULE_STATUS = re.compile(r"['\"](\w+)['\"]\s*=>\s*(\d+)")


def find_config_path(scan_root: str) -> Optional[str]:
    """Look for ``app/etc/config.php`` at the scan root and up to three levels above it."""

    root = os.path.abspath(scan_root)
    candidates = [root]
    current = root
    for _ in range(3):
        current = os.path.dirname(current)
        candidates.append(current)
    for directory in candidates:
        path = os.path.join(directory, CONFIG_RELATIVE_PATH)
        if os.path.isfile(path):
            return path
    return None


def parse_module_statuses(content: str) -> Optional[Dict[str, int]]:
    """Read the ``'modules' => [...]`` entries of a config.php, ``None`` without that array."""

    start = MODULES_ARRAY.search(content)
    if not start:
        return None
    closing = "]" if content[start.end() - 1] == "[" else ")"
    end = content.find(closing, start.end())
    body = content[start.end():end if end != -1 else len(content)]
    return {name: int(status) for name, status in MODULE_STATUS.findall(body)}


def module_element(path: str) -> Optional[ElementTree.Element]:
    root = load_xml(path)
    if root is None:
        return None
    module = root.find("module")
    if module is None or not module.get("name"):
        return None
    return module


class UnusedModulesProcessor(BaseProcessor):
    identifier = "unusedModules"
    file_type = "xml"
    rules = (
        RuleSpec(
            rule_id="unusedModules",
            name="Unused Modules",
            short_description="Modules present in codebase but disabled in configuration.",
            long_description=(
                "The following modules are present in the codebase but are disabled in "
                "app/etc/config.php. Consider removing them to reduce disk space usage and avoid "
                "confusion. Disabled modules do not load but still consume storage and may contain "
                "security vulnerabilities."
            ),
            severity=Severity.NOTE,
        ),
    )

    def process(self, context: ScanContext) -> None:
        files = [file for file in context.files_of("xml") if os.path.basename(file).endswith("module.xml")]
        if not files:
            return

        config_path = find_config_path(context.config.root)
        statuses = parse_module_statuses(read_text_file(config_path)) if config_path else None
        if statuses is None:
            logger.info("Could not find or read app/etc/config.php; skipping unused modules check")
            return

        for file in files:
            module = module_element(file)
            if module is None:
                continue
            name = module.get("name")
            if statuses.get(name) != 0:
                continue
            line = element_line(read_text_file(file), module)
            self._add(
                "unusedModules",
                file,
                line,
                f"Module '{name}' is disabled in app/etc/config.php but still present in codebase.",
                metadata={"module": name},
            )

"""Tolerant XML loading for Magento configuration files."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ElementTree
from typing import Optional

from .fileio import PathLike

logger = logging.getLogger(__name__)


def load_xml(path: PathLike) -> Optional[ElementTree.Element]:
    """Parse ``path`` and return its root element, ``None`` when unreadable or malformed."""

    try:
        return ElementTree.parse(str(path)).getroot()
    except (ElementTree.ParseError, OSError) as exc:
        logger.debug("Skipping unparsable XML %s: %s", path, exc)
        return None


def element_line(content: str, element: ElementTree.Element, attribute: str = "name") -> int:
    """Best-effort line of ``element`` in ``content``, located through one of its attributes."""

    value = element.get(attribute)
    if value:
        needle = f'{attribute}="{value}"'
        for index, line in enumerate(content.split("\n")):
            if needle in line:
                return index + 1
    return 1

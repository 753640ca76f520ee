"""Recursive file collection into per-type buckets."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from .config import ScanConfiguration

logger = logging.getLogger(__name__)

DI_TYPE = "di"


@dataclass
class FileClassification:
    """File type (``php``, ``phtml``, ``xml``, ``js``, ``di``) -> ordered absolute paths.

    Buckets for allowed types exist even when empty; a missing bucket means
    the type was excluded.
    """

    buckets: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def for_types(cls, file_types) -> "FileClassification":
        return cls(buckets={file_type: [] for file_type in file_types})

    def __contains__(self, file_type: object) -> bool:
        return file_type in self.buckets

    def __getitem__(self, file_type: str) -> List[str]:
        return self.buckets[file_type]

    def get(self, file_type: str) -> Optional[List[str]]:
        return self.buckets.get(file_type)

    def files(self, file_type: str) -> List[str]:
        return list(self.buckets.get(file_type, ()))

    def add(self, file_type: str, path: str) -> None:
        self.buckets.setdefault(file_type, []).append(path)

    def all_files(self) -> Iterator[str]:
        for paths in self.buckets.values():
            yield from paths

    def is_empty(self) -> bool:
        return not any(self.buckets.values())

    def to_dict(self) -> Dict[str, List[str]]:
        return {file_type: list(paths) for file_type, paths in self.buckets.items()}


@dataclass
class CollectionResult:
    classification: FileClassification
    errors: List[str] = field(default_factory=list)


def classify(path: str, config: ScanConfiguration) -> Optional[str]:
    """Return the bucket for ``path``, ``None`` when the file is filtered out."""

    name = os.path.basename(path)
    extension = os.path.splitext(name)[1].lstrip(".").lower()
    if extension not in config.allowed_extensions:
        return None
    if name in config.excluded_files:
        return None
    if path in config.exclude_patterns:
        return None
    if extension == "xml" and name.endswith("di.xml"):
        return DI_TYPE
    return extension


def _walk(directory: str, config: ScanConfiguration, classification: FileClassification) -> None:
    try:
        entries = sorted(os.listdir(directory))
    except OSError as exc:
        logger.debug("Cannot list %s: %s", directory, exc)
        return

    for entry in entries:
        if entry in config.excluded_dirs:
            continue
        path = os.path.join(directory, entry)
        if os.path.isdir(path):
            _walk(path, config, classification)
            continue
        file_type = classify(path, config)
        if file_type is not None:
            classification.add(file_type, path)


def collect_files(config: ScanConfiguration) -> CollectionResult:
    """Walk ``config.root`` and bucket every retained file by type."""

    classification = FileClassification.for_types(config.allowed_extensions)
    result = CollectionResult(classification=classification)
    root = config.root

    if os.path.isdir(root):
        _walk(root, config, classification)
    elif os.path.isfile(root):
        file_type = classify(root, config)
        if file_type is not None:
            classification.add(file_type, root)
    else:
        result.errors.append(f"Path '{root}' is not a valid directory or file.")
        return result

    if classification.is_empty():
        result.errors.append("No files found to scan.")
    return result

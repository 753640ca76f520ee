"""Per-invocation scan state shared between processors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .utils.classes import ClassHierarchyIndex, resolve_class_to_file


@dataclass
class ScanSession:
    """Holds the lazily built class hierarchy for one scan; never reused across scans."""

    root: str
    hierarchy: ClassHierarchyIndex = field(default_factory=ClassHierarchyIndex)

    def index(self, files: Iterable[str]) -> ClassHierarchyIndex:
        self.hierarchy.build(files)
        return self.hierarchy

    def children_of(self, class_name: str) -> List[str]:
        return self.hierarchy.children_of(class_name)

    def locate_class(self, class_name: str) -> Optional[str]:
        """Find the file declaring ``class_name`` via the index, then by path convention."""

        return self.hierarchy.file_of(class_name) or resolve_class_to_file(class_name, self.root)

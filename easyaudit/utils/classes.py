"""Text-level PHP class analysis: imports, constructors, namespaces, hierarchy.

None of this parses PHP. Regular expressions run over raw source and the
results are best effort: constructor parameter lists are split on commas
without regard for nested expressions, and only single ``extends``
inheritance is modelled.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Dict, Iterable, List, Optional, Sequence, Set

from .content import remove_comments
from .fileio import read_text_file

logger = logging.getLogger(__name__)

USE_STATEMENT = re.compile(r"\buse\s+([^;]+);")
CONSTRUCTOR_SIGNATURE = re.compile(r"function\s+__construct\s*\(([^)]*)\)")
PARENT_CONSTRUCTOR_CALL = re.compile(r"parent::__construct\s*\(([^)]*)\)")
NAMESPACE_DECLARATION = re.compile(r"\bnamespace\s+([\w\\]+)\s*;")
CLASS_DECLARATION = re.compile(
    r"\bclass\s+(\w+)"
    r"(?:\s+extends\s+([\\\w]+))?"
    r"(?:\s+implements\s+([\\\w\s,]+?))?\s*\{"
)
CLASS_LINE = re.compile(r"\bclass\s+\w+")
FACTORY_CLASS = re.compile(r"\bclass\s+\w*Factory\b")

PARAMETER_MODIFIERS = {"public", "protected", "private", "readonly", "?"}

BASIC_TYPES = {
    "string",
    "int",
    "float",
    "bool",
    "array",
    "callable",
    "iterable",
    "object",
    "mixed",
    "null",
    "false",
    "true",
    "self",
    "static",
}

UNKNOWN_CLASS = None


def qualify(namespace: Optional[str], short_name: str) -> str:
    if namespace:
        return f"{namespace}\\{short_name}"
    return short_name


# ----------------------------------------------------------------------
# Imports and constructor signatures
# ----------------------------------------------------------------------
def parse_imported_classes(content: str) -> Dict[str, str]:
    """Map short names (or aliases) to the FQCN of each ``use`` statement."""

    imported: Dict[str, str] = {}
    for statement in USE_STATEMENT.findall(content):
        if " as " in statement:
            parts = statement.split(" as ")
            imported[parts[-1].strip()] = parts[0].strip().lstrip("\\")
            continue
        path = statement.strip()
        imported[path.split("\\")[-1].strip()] = path.lstrip("\\")
    return imported


def has_imported_classes(class_names: Iterable[str], content: str) -> bool:
    imported = set(parse_imported_classes(content).values())
    return any(name.lstrip("\\") in imported for name in class_names)


def parse_constructor_parameters(content: str) -> List[str]:
    """Return the raw, comma-split parameters of the first ``__construct`` signature."""

    if "__construct" not in content:
        return []
    match = CONSTRUCTOR_SIGNATURE.search(content)
    if not match:
        return []
    parameters = [parameter.strip() for parameter in match.group(1).split(",")]
    return [parameter for parameter in parameters if parameter]


def _split_parameter(parameter: str) -> List[str]:
    return parameter.split("=", 1)[0].split()


def _resolve_type(type_name: str, imported: Dict[str, str], namespace: Optional[str]) -> str:
    if type_name.startswith("\\"):
        return type_name.lstrip("\\")
    if type_name in imported:
        return imported[type_name]
    first, _, rest = type_name.partition("\\")
    if rest and first in imported:
        return f"{imported[first]}\\{rest}"
    return qualify(namespace, type_name)


def consolidate_parameters(
    parameters: Sequence[str], imported: Dict[str, str], namespace: Optional[str] = None
) -> Dict[str, str]:
    """Map ``$name`` to the parameter's class FQCN.

    Scalar types are skipped. Imported short names and aliases resolve through
    ``imported``; other short names are assumed to live in ``namespace``.
    """

    consolidated: Dict[str, str] = {}
    for parameter in parameters:
        parts = _split_parameter(parameter)
        if not parts:
            continue
        name = parts[-1].lstrip("&.")
        if not name.startswith("$"):
            continue

        type_name = None
        for part in parts[:-1]:
            if part in PARAMETER_MODIFIERS:
                continue
            type_name = part.lstrip("?")
            break

        if not type_name or type_name.lower() in BASIC_TYPES:
            continue

        consolidated[name] = _resolve_type(type_name, imported, namespace)
    return consolidated


def get_constructor_parameter_types(content: str) -> Dict[str, str]:
    return consolidate_parameters(
        parse_constructor_parameters(content),
        parse_imported_classes(content),
        extract_namespace(content),
    )


def get_parent_constructor_params(content: str) -> List[str]:
    """Return bare variable names passed to ``parent::__construct``."""

    match = PARENT_CONSTRUCTOR_CALL.search(content)
    if not match:
        return []
    names = [argument.strip().lstrip("$") for argument in match.group(1).split(",")]
    return [name for name in names if name]


def get_instantiation(parameters: Sequence[str], param_name: str, content: str) -> Optional[str]:
    """Return the ``$this->property`` holding constructor parameter ``param_name``.

    Promoted properties map to ``$this-><name>``; otherwise the first
    ``$this->x = $param;`` assignment wins. ``None`` when the parameter is
    not declared or never assigned.
    """

    declared = None
    for parameter in parameters:
        parts = _split_parameter(parameter)
        if parts and parts[-1].lstrip("&.") == param_name:
            declared = parts
            break
    if declared is None:
        return None

    if any(part in ("public", "protected", "private", "readonly") for part in declared[:-1]):
        return "$this->" + param_name.lstrip("$")

    assignment = re.search(r"\$this->(\w+)\s*=\s*" + re.escape(param_name) + r"\s*;", content)
    if assignment:
        return "$this->" + assignment.group(1)
    return None


# ----------------------------------------------------------------------
# Namespace and class declarations
# ----------------------------------------------------------------------
def extract_namespace(content: str) -> Optional[str]:
    match = NAMESPACE_DECLARATION.search(remove_comments(content))
    return match.group(1).strip("\\") if match else None


def extract_class_name(content: str) -> Optional[str]:
    """Return ``Namespace\\Class`` for the first class declared, ``None`` without both parts."""

    code = remove_comments(content)
    namespace = NAMESPACE_DECLARATION.search(code)
    if not namespace:
        return UNKNOWN_CLASS
    declaration = re.search(r"\bclass\s+(\w+)", code)
    if not declaration:
        return UNKNOWN_CLASS
    return qualify(namespace.group(1).strip("\\"), declaration.group(1))


def resolve_short_class_name(short_name: str, content: str, namespace: Optional[str]) -> str:
    """Resolve a short class name the way PHP would, approximately.

    Names already holding a namespace separator are returned unchanged.
    Otherwise a direct or aliased ``use`` wins, falling back to the file's
    own namespace.
    """

    if "\\" in short_name:
        return short_name

    escaped = re.escape(short_name)
    direct = re.search(r"\buse\s+\\?([\w\\]+\\" + escaped + r")\s*;", content)
    if direct:
        return direct.group(1)
    aliased = re.search(r"\buse\s+\\?([\w\\]+)\s+as\s+" + escaped + r"\s*;", content)
    if aliased:
        return aliased.group(1)
    return qualify(namespace, short_name)


def _parent_of(content: str) -> Optional[str]:
    code = remove_comments(content)
    declaration = CLASS_DECLARATION.search(code)
    if not declaration or not declaration.group(2):
        return None
    parent = resolve_short_class_name(declaration.group(2), content, extract_namespace(code))
    return parent.lstrip("\\")


def extends_class(content: str, class_name: str) -> bool:
    parent = _parent_of(content)
    return parent is not None and parent == class_name.lstrip("\\")


def find_class_declaration_line(content: str, needle: str = "") -> int:
    """Line of the class declaration containing ``needle``, else of any class declaration, else 1."""

    first_class_line = None
    for index, line in enumerate(content.split("\n")):
        if not CLASS_LINE.search(line) or line.lstrip().startswith(("*", "//", "#")):
            continue
        if first_class_line is None:
            first_class_line = index + 1
        if needle in line:
            return index + 1
    return first_class_line or 1


def is_factory_class(content: str) -> bool:
    return FACTORY_CLASS.search(content) is not None


def is_command_class(content: str) -> bool:
    parent = _parent_of(content)
    return parent is not None and parent.split("\\")[-1] == "Command"


def resolve_class_to_file(class_name: str, scan_root: str) -> Optional[str]:
    """Locate a class file below ``scan_root``.

    Tries the full PSR-4 style path first (full Magento install), then the
    path with the ``Vendor\\Module`` prefix stripped (single module scan).
    """

    parts = class_name.strip("\\").split("\\")
    full_path = os.path.join(scan_root, *parts) + ".php"
    if os.path.isfile(full_path):
        return full_path

    if len(parts) > 2:
        relative_path = os.path.join(scan_root, *parts[2:]) + ".php"
        if os.path.isfile(relative_path):
            return relative_path
    return None


# ----------------------------------------------------------------------
# Hierarchy index
# ----------------------------------------------------------------------
class ClassHierarchyIndex:
    """FQCN -> file map and parent -> children adjacency for one scan.

    Each file is parsed at most once; repeated ``build`` calls with the same
    paths are no-ops.
    """

    def __init__(self) -> None:
        self.class_to_file: Dict[str, str] = {}
        self.children: Dict[str, List[str]] = {}
        self.interfaces: Dict[str, List[str]] = {}
        self.processed_files: Set[str] = set()

    def build(self, files: Iterable[str]) -> None:
        for file in files:
            if file in self.processed_files:
                continue
            self.processed_files.add(file)
            self._index_file(file)

    def _index_file(self, file: str) -> None:
        content = read_text_file(file)
        if not content:
            return
        code = remove_comments(content)
        declaration = CLASS_DECLARATION.search(code)
        if not declaration:
            return

        namespace = extract_namespace(code)
        fqcn = qualify(namespace, declaration.group(1))
        self.class_to_file.setdefault(fqcn, file)

        parent = declaration.group(2)
        if parent:
            parent_fqcn = resolve_short_class_name(parent, content, namespace).lstrip("\\")
            siblings = self.children.setdefault(parent_fqcn, [])
            if fqcn not in siblings:
                siblings.append(fqcn)

        implemented = declaration.group(3)
        if implemented:
            self.interfaces[fqcn] = [
                resolve_short_class_name(name.strip(), content, namespace).lstrip("\\")
                for name in implemented.split(",")
                if name.strip()
            ]

    def children_of(self, class_name: str) -> List[str]:
        """Known children of ``class_name``; unknown classes also yield an empty list."""

        return list(self.children.get(class_name.lstrip("\\"), ()))

    def file_of(self, class_name: str) -> Optional[str]:
        return self.class_to_file.get(class_name.lstrip("\\"))

    def interfaces_of(self, class_name: str) -> List[str]:
        return list(self.interfaces.get(class_name.lstrip("\\"), ()))

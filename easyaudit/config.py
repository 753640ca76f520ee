"""Scan configuration: defaults, comma lists and the optional YAML file."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Tuple, Union

import yaml

from .utils.fileio import PathLike, normalize_path, read_yaml_file

ALLOWED_EXTENSIONS: Tuple[str, ...] = ("php", "phtml", "xml", "js", "di")

EXCLUDED_DIRS: Tuple[str, ...] = (
    ".",
    "..",
    ".git",
    ".svn",
    ".idea",
    "node_modules",
    "Tests",
)

EXCLUDED_FILES: Tuple[str, ...] = (
    "LICENSE",
    "README.md",
    "CHANGELOG.md",
    "composer.json",
    "composer.lock",
    "package.json",
    "yarn.lock",
    "webpack.config.js",
    "gulpfile.js",
    "Gruntfile.js",
)

CONFIG_KEYS = ("exclude", "exclude_ext", "excluded_dirs", "excluded_files", "fixable_rules")


class ConfigError(ValueError):
    """Raised when a configuration file cannot be interpreted."""


def split_list(value: Union[str, Iterable[str], None]) -> Tuple[str, ...]:
    """Split a comma-separated string (or flatten a list of them), trimming and dropping blanks."""

    if value is None:
        return ()
    items = value.split(",") if isinstance(value, str) else [part for item in value for part in str(item).split(",")]
    return tuple(item.strip() for item in items if item.strip())


def normalize_extension(extension: str) -> str:
    return extension.strip().lstrip(".").lower()


@dataclass(frozen=True)
class ScanConfiguration:
    """Immutable inputs of one scan."""

    root: str
    allowed_extensions: Tuple[str, ...] = ALLOWED_EXTENSIONS
    excluded_dirs: FrozenSet[str] = frozenset(EXCLUDED_DIRS)
    excluded_files: FrozenSet[str] = frozenset(EXCLUDED_FILES)
    exclude_patterns: Tuple[str, ...] = ()
    fixable_only: bool = False

    @classmethod
    def build(
        cls,
        root: PathLike,
        exclude: Union[str, Iterable[str], None] = "",
        excluded_extensions: Iterable[str] = (),
        fixable_only: bool = False,
        extra_excluded_dirs: Iterable[str] = (),
        extra_excluded_files: Iterable[str] = (),
    ) -> "ScanConfiguration":
        removed = {normalize_extension(ext) for ext in excluded_extensions if ext and ext.strip()}
        return cls(
            root=normalize_path(root),
            allowed_extensions=tuple(ext for ext in ALLOWED_EXTENSIONS if ext not in removed),
            excluded_dirs=frozenset(EXCLUDED_DIRS) | frozenset(extra_excluded_dirs),
            excluded_files=frozenset(EXCLUDED_FILES) | frozenset(extra_excluded_files),
            exclude_patterns=split_list(exclude),
            fixable_only=fixable_only,
        )


def load_config_file(path: PathLike) -> Dict[str, Any]:
    """Read the YAML configuration file; a missing file yields an empty mapping."""

    try:
        data = read_yaml_file(path)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Cannot parse configuration file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigError(f"Configuration file {path} must contain a mapping at the top level.")

    unknown = sorted(set(data) - set(CONFIG_KEYS))
    if unknown:
        raise ConfigError(f"Unknown configuration keys in {path}: {', '.join(map(str, unknown))}")

    config: Dict[str, Any] = {}
    if data.get("exclude") is not None:
        config["exclude"] = split_list(data["exclude"])
    for key in ("exclude_ext", "excluded_dirs", "excluded_files", "fixable_rules"):
        value = data.get(key)
        if value is None:
            continue
        if not isinstance(value, (list, tuple, str)):
            raise ConfigError(f"'{key}' in {path} must be a list of strings.")
        config[key] = split_list(value)
    return config

"""Basic file IO helpers."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Union

import yaml

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def normalize_path(path: PathLike) -> str:
    """Return an absolute, symlink-resolved path; ``""`` and ``"."`` mean the working directory."""

    raw = str(path).strip()
    if raw in ("", ".", "./"):
        return os.getcwd()
    return os.path.realpath(os.path.expanduser(raw))


def read_yaml_file(path: PathLike) -> Any:
    """Return the parsed YAML if the file exists, otherwise ``None``."""

    path = Path(path)
    if not path.exists():
        return None
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)


def read_text_file(path: PathLike) -> str:
    """Return the file contents as UTF-8 text, or an empty string if it cannot be read."""

    try:
        return Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.debug("Cannot read %s: %s", path, exc)
        return ""

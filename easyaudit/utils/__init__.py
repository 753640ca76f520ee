"""Text-level heuristics over PHP, template and XML sources."""

from .content import get_line_number, remove_comments
from .fileio import normalize_path, read_text_file, read_yaml_file

__all__ = [
    "get_line_number",
    "normalize_path",
    "read_text_file",
    "read_yaml_file",
    "remove_comments",
]

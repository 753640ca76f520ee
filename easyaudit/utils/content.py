"""Line-oriented helpers over raw file content."""

from __future__ import annotations

import re
from typing import Optional

_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.S)
_LINE_COMMENT = re.compile(r"//.*$", re.M)
_HASH_COMMENT = re.compile(r"#.*$", re.M)
_WHITESPACE = re.compile(r"\s+")


def get_line_number(content: str, search: str) -> Optional[int]:
    """Return the 1-based line of the first line containing ``search``, ``None`` if absent."""

    for index, line in enumerate(content.split("\n")):
        if search in line:
            return index + 1
    return None


def line_at_offset(content: str, offset: int) -> int:
    """Return the 1-based line holding the character at ``offset``."""

    return content.count("\n", 0, offset) + 1


def remove_comments(content: str) -> str:
    """Remove PHP block, line and hash comments.

    Comment markers inside string literals are removed as well; the line
    structure of block comments is not preserved.
    """

    content = _BLOCK_COMMENT.sub("", content)
    content = _LINE_COMMENT.sub("", content)
    return _HASH_COMMENT.sub("", content)


def find_approximate_line(
    original: str,
    needle: str,
    approx_line: int,
    normalize_whitespace: bool = False,
) -> int:
    """Find ``needle`` within ten lines of ``approx_line`` in ``original``.

    Used to map a position in comment-stripped content back onto the
    original file. Falls back to ``approx_line`` when nothing matches.
    """

    lines = original.split("\n")
    start = max(0, approx_line - 10)
    end = min(len(lines), approx_line + 10)
    wanted = _WHITESPACE.sub(" ", needle).strip() if normalize_whitespace else needle

    for index in range(start, end):
        line = lines[index]
        if normalize_whitespace:
            line = _WHITESPACE.sub(" ", line)
        if wanted in line:
            return index + 1
    return approx_line

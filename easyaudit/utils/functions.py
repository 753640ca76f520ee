"""Brace-counting extraction of function bodies from PHP source.

Everything here is line oriented and counts raw ``{``/``}`` characters, so
braces inside strings or comments skew the balance. Rules depend on this
exact behaviour; do not replace it with a tokenizer.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

FUNCTION_DECLARATION = re.compile(r"^\s*(?:public|protected|private)?\s*function\s+\w+\s*\(", re.I)
_SAME_LINE_BODY = re.compile(r"\{(.*)\}")


class FunctionNotFoundError(LookupError):
    """Raised when no function declaration starts at or after the requested line."""


@dataclass(frozen=True)
class FunctionBlock:
    content: str
    end_line: int


def get_function_content(code: str, start_line: int) -> FunctionBlock:
    """Return the function declared at (or first after) ``start_line``.

    Capture begins on the first declaration line and stops once the brace
    balance returns to zero on a line containing ``}``.
    """

    captured = []
    balance = 0
    in_function = False
    end_line = start_line

    for index, line in enumerate(code.split("\n")):
        number = index + 1
        if number < start_line:
            continue

        if not in_function and FUNCTION_DECLARATION.match(line):
            in_function = True

        if in_function:
            captured.append(line)
            balance += line.count("{")
            balance -= line.count("}")
            end_line = number
            if balance == 0 and "}" in line:
                break

    if not in_function:
        raise FunctionNotFoundError(f"Function starting at line {start_line} not found.")

    return FunctionBlock(content="\n".join(captured), end_line=end_line)


def get_function_inner_content(function_content: str) -> str:
    """Strip the declaration line and the outer braces from a function."""

    inner = []
    balance = 0
    in_inner = False
    first_brace_found = False

    for line in function_content.split("\n"):
        if FUNCTION_DECLARATION.match(line):
            # body entirely on the declaration line
            same_line = _SAME_LINE_BODY.search(line)
            if same_line:
                return same_line.group(1).strip()
            if "{" in line:
                first_brace_found = True
                balance += line.count("{")
            in_inner = True
            continue

        if "{" in line:
            balance += line.count("{")
            if not first_brace_found:
                first_brace_found = True
                continue

        if "}" in line:
            balance -= line.count("}")
            if balance == 0:
                break

        if in_inner:
            inner.append(line)

    return "\n".join(inner)


def get_occurring_line_in_function(function_content: str, search: str) -> Optional[int]:
    for index, line in enumerate(function_content.split("\n")):
        if search in line:
            return index + 1
    return None


def extract_brace_block(code: str, offset: int) -> Optional[str]:
    """Return the text between the first ``{`` at/after ``offset`` and its matching ``}``."""

    opening = code.find("{", offset)
    if opening == -1:
        return None

    depth = 0
    for position in range(opening, len(code)):
        char = code[position]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return code[opening + 1:position]
    return None

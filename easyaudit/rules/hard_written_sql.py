"""Raw SQL statements written directly in PHP code."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Pattern

from easyaudit.severity import Severity
from easyaudit.utils.content import find_approximate_line, line_at_offset, remove_comments
from easyaudit.utils.fileio import read_text_file
from easyaudit.utils.modules import is_setup_directory

from . import BaseProcessor, RuleSpec, ScanContext

SNIPPET_LENGTH = 80
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class SqlStatement:
    keyword: str
    pattern: Pattern[str]
    recommendation: str
    rule: RuleSpec


SQL_STATEMENTS = (
    SqlStatement(
        keyword="SELECT",
        pattern=re.compile(r"SELECT\s+.*?\s+FROM", re.I | re.S),
        recommendation="Use a repository with getList() or getById() methods, or a collection with addFieldToFilter().",
        rule=RuleSpec(
            rule_id="magento.code.hard-written-sql-select",
            name="Hard Written SQL SELECT",
            short_description="SELECT queries must be avoided",
            long_description=(
                "SELECT queries must be avoided. Use the Magento Framework methods or a repository "
                "with getList() and getById(). Raw SQL bypasses the data abstraction layer and events."
            ),
            severity=Severity.ERROR,
        ),
    ),
    SqlStatement(
        keyword="DELETE",
        pattern=re.compile(r"DELETE\s+.*?\s+FROM", re.I | re.S),
        recommendation="Use a repository with delete() or deleteById() methods.",
        rule=RuleSpec(
            rule_id="magento.code.hard-written-sql-delete",
            name="Hard Written SQL DELETE",
            short_description="DELETE queries must be avoided",
            long_description=(
                "DELETE queries must be avoided. Use a repository with delete() or deleteById(). "
                "Raw deletion bypasses the event system and can break referential integrity."
            ),
            severity=Severity.ERROR,
        ),
    ),
    SqlStatement(
        keyword="INSERT",
        pattern=re.compile(r"INSERT\s+.*?\s+INTO", re.I | re.S),
        recommendation="Use a repository with save() method or the resource model's save() method.",
        rule=RuleSpec(
            rule_id="magento.code.hard-written-sql-insert",
            name="Hard Written SQL INSERT",
            short_description="INSERT queries should be avoided",
            long_description=(
                "INSERT queries should be avoided. Use a repository with a save() method. It can be "
                "faster for bulk data but bypasses validation and events."
            ),
            severity=Severity.WARNING,
        ),
    ),
    SqlStatement(
        keyword="UPDATE",
        pattern=re.compile(r"UPDATE\s+.*?\s+SET", re.I | re.S),
        recommendation="Use a repository with save() method or the resource model's save() method.",
        rule=RuleSpec(
            rule_id="magento.code.hard-written-sql-update",
            name="Hard Written SQL UPDATE",
            short_description="UPDATE queries should be avoided",
            long_description=(
                "UPDATE queries should be avoided. Use a repository with a save() method. Raw "
                "updates can lose data and bypass events."
            ),
            severity=Severity.WARNING,
        ),
    ),
    SqlStatement(
        keyword="JOIN",
        pattern=re.compile(r"\s+JOIN\s+.*?\s+ON", re.I | re.S),
        recommendation="Use collection join() methods or addFieldToFilter() with proper table relations.",
        rule=RuleSpec(
            rule_id="magento.code.hard-written-sql-join",
            name="Hard Written SQL JOIN",
            short_description="JOIN queries should be avoided",
            long_description=(
                "JOIN queries should be avoided. Use the join() or addFieldToFilter() methods on "
                "collections instead."
            ),
            severity=Severity.NOTE,
        ),
    ),
)


def truncate_sql(sql: str) -> str:
    sql = _WHITESPACE.sub(" ", sql.strip())
    if len(sql) > SNIPPET_LENGTH:
        return sql[: SNIPPET_LENGTH - 3] + "..."
    return sql


class HardWrittenSqlProcessor(BaseProcessor):
    """Setup directories (install scripts, patches) are exempt."""

    identifier = "hard_written_sql"
    file_type = "php"
    rules = tuple(statement.rule for statement in SQL_STATEMENTS)

    def process(self, context: ScanContext) -> None:
        for file in context.files_of("php"):
            if is_setup_directory(file):
                continue
            original = read_text_file(file)
            if not original:
                continue
            self._detect(file, original, remove_comments(original))

    def _detect(self, file: str, original: str, cleaned: str) -> None:
        for statement in SQL_STATEMENTS:
            for match in statement.pattern.finditer(cleaned):
                text = match.group(0)
                line = find_approximate_line(
                    original,
                    text,
                    line_at_offset(cleaned, match.start()),
                    normalize_whitespace=True,
                )
                self._add(
                    statement.rule.rule_id,
                    file,
                    line,
                    f'Hard-written {statement.keyword} query detected: "{truncate_sql(text)}". '
                    f"{statement.recommendation}",
                )

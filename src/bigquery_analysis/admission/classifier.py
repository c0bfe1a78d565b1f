"""Statement classifier.

Decides whether a query could mutate data, schema, permissions or
transaction state. Classification is lexical: comments are stripped, the
text is upper-cased, and an ordered catalog of word-boundary-anchored
patterns is scanned. The first matching entry wins.

Anything the catalog does not recognize is treated as read-only. Statements
such as CALL, EXPORT DATA or scripting blocks are not in the catalog and
pass through to the dry run.

Comment stripping does not parse string literals. A `--` inside a quoted
string removes the rest of that line, so `SELECT '--' AS x; DROP TABLE t`
classifies as read-only.
"""

from __future__ import annotations

import re
from typing import List, Pattern, Tuple

from .models import StatementClassification


_LINE_COMMENT_RE = re.compile(r"--.*$", flags=re.MULTILINE)
_BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/", flags=re.DOTALL)


def _statement(*keywords: str) -> Pattern[str]:
    """Compile keywords into a word-bounded pattern allowing any whitespace between them."""
    body = r"\s+".join(re.escape(k) for k in keywords)
    return re.compile(rf"\b{body}\b", flags=re.IGNORECASE)


# Ordered (pattern, label) catalog; order decides which label is reported
MUTATING_STATEMENT_PATTERNS: List[Tuple[Pattern[str], str]] = [
    (_statement("CREATE", "TABLE"), "CREATE TABLE"),
    (_statement("CREATE", "OR", "REPLACE", "TABLE"), "CREATE OR REPLACE TABLE"),
    (_statement("DROP", "TABLE"), "DROP TABLE"),
    (_statement("ALTER", "TABLE"), "ALTER TABLE"),
    (_statement("INSERT", "INTO"), "INSERT INTO"),
    (_statement("UPDATE"), "UPDATE"),
    (_statement("DELETE", "FROM"), "DELETE FROM"),
    (_statement("MERGE", "INTO"), "MERGE INTO"),
    (_statement("TRUNCATE", "TABLE"), "TRUNCATE TABLE"),
    (_statement("CREATE", "VIEW"), "CREATE VIEW"),
    (_statement("CREATE", "OR", "REPLACE", "VIEW"), "CREATE OR REPLACE VIEW"),
    (_statement("DROP", "VIEW"), "DROP VIEW"),
    (_statement("CREATE", "FUNCTION"), "CREATE FUNCTION"),
    (_statement("CREATE", "OR", "REPLACE", "FUNCTION"), "CREATE OR REPLACE FUNCTION"),
    (_statement("DROP", "FUNCTION"), "DROP FUNCTION"),
    (_statement("CREATE", "PROCEDURE"), "CREATE PROCEDURE"),
    (_statement("CREATE", "OR", "REPLACE", "PROCEDURE"), "CREATE OR REPLACE PROCEDURE"),
    (_statement("DROP", "PROCEDURE"), "DROP PROCEDURE"),
    (_statement("GRANT"), "GRANT"),
    (_statement("REVOKE"), "REVOKE"),
    (_statement("BEGIN", "TRANSACTION"), "BEGIN TRANSACTION"),
    (_statement("COMMIT"), "COMMIT"),
    (_statement("ROLLBACK"), "ROLLBACK"),
]


def normalize_query(query: str) -> str:
    """Return the copy of a query that classification scans.

    - Remove `--` comments up to end of line
    - Remove `/* ... */` comments, including across lines (non-nested)
    - Trim surrounding whitespace
    - Upper-case

    The order matters: line comments go first, so a `/*` inside a line
    comment cannot open a block comment.

    Examples:
        >>> normalize_query("select 1 -- drop table t")
        'SELECT 1'
        >>> normalize_query("/* insert into t */ select 2")
        'SELECT 2'
    """
    if not query:
        return ""
    text = _LINE_COMMENT_RE.sub("", query)
    text = _BLOCK_COMMENT_RE.sub("", text)
    return text.strip().upper()


def classify(query: str) -> StatementClassification:
    """Classify a query as mutating or read-only.

    Args:
        query: Raw query text. May be empty.

    Returns:
        StatementClassification naming the first matching construct, or a
        non-mutating classification when nothing in the catalog matches.

    Examples:
        >>> classify("INSERT INTO t VALUES (1)").matched_pattern_label
        'INSERT INTO'
        >>> classify("SELECT updated_at FROM t").is_mutating
        False
    """
    normalized = normalize_query(query)
    if not normalized:
        return StatementClassification(is_mutating=False)

    for pattern, label in MUTATING_STATEMENT_PATTERNS:
        if pattern.search(normalized):
            return StatementClassification(is_mutating=True, matched_pattern_label=label)

    return StatementClassification(is_mutating=False)


__all__ = ["MUTATING_STATEMENT_PATTERNS", "normalize_query", "classify"]

"""SQL parsing helpers built on sqlglot."""
import logging
from typing import List, Optional, Set, Tuple

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError

logger = logging.getLogger(__name__)


def extract_table_references(
    sql: str,
    dialect: str = 'tsql'
) -> Optional[List[Tuple[str, str]]]:
    """Extract every table referenced by one or more SQL statements.

    Args:
        sql: SQL text, possibly containing several statements
        dialect: sqlglot dialect used for parsing (default: tsql)

    Returns:
        Sorted list of (schema, table) pairs; schema is an empty string when
        the reference is unqualified. None if the text cannot be parsed.
    """
    try:
        statements = sqlglot.parse(sql, read=dialect)
    except SqlglotError as e:
        logger.warning("Failed to parse SQL for table references: %s", e)
        return None

    tables: Set[Tuple[str, str]] = set()
    for stmt in statements:
        if not stmt:
            continue

        for table in stmt.find_all(exp.Table):
            if not table.name:
                continue
            tables.add((table.db or "", table.name))

    return sorted(tables)

"""Detection of table references inside view and routine source text.

The default detector is a heuristic: a regular expression over the raw
definition, not semantic SQL analysis. It over-matches names that appear in
comments, strings or as column aliases, and it misses dynamically built SQL.
"""
import logging
import re
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Dict, Optional, Type

from sqlexplorer.errors import PatternConstructionError
from sqlexplorer.models.schema import Table
from sqlexplorer.sql.parser import extract_table_references

logger = logging.getLogger(__name__)

# Bracketed, double-quoted, backtick-quoted or plain identifier used as a name
# qualifier; plain qualifiers may contain inner hyphens (my-project.Orders)
_QUALIFIER = r'(?:\[[^\]\r\n]+\]|"[^"\r\n]+"|`[^`\r\n]+`|[\w@#$]+(?:-[\w@#$]+)*)'
_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f]')


class ReferenceDetector(ABC):
    """Decides whether a definition references a table."""

    @abstractmethod
    def references(self, definition: str, table: Table) -> bool:
        """Check whether ``definition`` references ``table``.

        Args:
            definition: Full source text of a view or routine
            table: Candidate table

        Returns:
            True if the definition is considered to reference the table.

        Raises:
            PatternConstructionError: If the table name cannot be matched safely.
        """


def normalize_identifier(identifier: str) -> str:
    """Strip quoting and surrounding whitespace and fold case."""
    identifier = identifier.strip()
    if len(identifier) >= 2 and (
        (identifier[0] == '[' and identifier[-1] == ']')
        or (identifier[0] == '"' and identifier[-1] == '"')
        or (identifier[0] == '`' and identifier[-1] == '`')
    ):
        identifier = identifier[1:-1]
    return identifier.strip().lower()


@lru_cache(maxsize=1024)
def build_reference_pattern(table_name: str) -> re.Pattern:
    """Compile the reference pattern for a table name.

    The pattern matches an optional qualifier and ``.`` followed by the table
    name, each optionally bracket-, double- or backtick-quoted. An unquoted
    name must not run into further identifier characters.

    Raises:
        PatternConstructionError: If the name is blank or contains control characters.
    """
    if table_name is None or not table_name.strip():
        raise PatternConstructionError("Cannot build a reference pattern for a blank table name")
    if _CONTROL_CHARS.search(table_name):
        raise PatternConstructionError(
            f"Table name {table_name!r} contains control characters"
        )

    name = re.escape(table_name)
    pattern = (
        r'(?<![\w@#$])'
        rf'(?:(?P<qualifier>{_QUALIFIER})\s*\.\s*)?'
        rf'(?:\[{name}\]|"{name}"|`{name}`|{name}(?![\w@#$]))'
    )
    try:
        return re.compile(pattern, re.IGNORECASE | re.MULTILINE)
    except re.error as e:
        raise PatternConstructionError(
            f"Invalid reference pattern for table {table_name!r}: {e}"
        ) from e


class RegexReferenceDetector(ReferenceDetector):
    """Heuristic detector matching table names in raw source text.

    A qualified match counts only when the qualifier equals the table's
    schema. A bare match always counts, since the schema may be implicit.
    """

    def references(self, definition: str, table: Table) -> bool:
        pattern = build_reference_pattern(table.name)
        if not definition:
            return False

        schema = normalize_identifier(table.schema_name)
        for match in pattern.finditer(definition):
            qualifier = match.group('qualifier')
            if qualifier is None or normalize_identifier(qualifier) == schema:
                return True
        return False


class SqlglotReferenceDetector(ReferenceDetector):
    """Detector that parses definitions with sqlglot.

    Definitions that fail to parse are treated as referencing nothing.
    """

    def __init__(self, dialect: str = 'tsql'):
        """Initialize with the sqlglot dialect used for parsing."""
        self.dialect = dialect
        self._cache: Dict[str, frozenset] = {}

    def _tables_in(self, definition: str) -> frozenset:
        tables = self._cache.get(definition)
        if tables is None:
            refs = extract_table_references(definition, dialect=self.dialect) or []
            tables = frozenset(
                (normalize_identifier(schema), normalize_identifier(name))
                for schema, name in refs
            )
            self._cache[definition] = tables
        return tables

    def references(self, definition: str, table: Table) -> bool:
        if not definition:
            return False

        name = normalize_identifier(table.name)
        schema = normalize_identifier(table.schema_name)
        for ref_schema, ref_name in self._tables_in(definition):
            if ref_name == name and (not ref_schema or ref_schema == schema):
                return True
        return False


DETECTORS: Dict[str, Type[ReferenceDetector]] = {
    'regex': RegexReferenceDetector,
    'sqlglot': SqlglotReferenceDetector,
}


def get_detector(kind: str = 'regex', dialect: Optional[str] = None) -> ReferenceDetector:
    """Create a reference detector by name.

    Args:
        kind: ``regex`` (default) or ``sqlglot``
        dialect: sqlglot dialect, only used by the sqlglot detector

    Raises:
        ValueError: If the detector kind is unknown.
    """
    detector_class = DETECTORS.get(kind.lower())
    if detector_class is None:
        raise ValueError(
            f"Unknown reference detector: '{kind}'. "
            f"Supported: {', '.join(DETECTORS.keys())}"
        )
    if detector_class is SqlglotReferenceDetector and dialect:
        return SqlglotReferenceDetector(dialect=dialect)
    return detector_class()

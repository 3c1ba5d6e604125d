"""Input source detection and resolution."""
import logging
import os
from enum import Enum
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


class SourceType(Enum):
    """Types of metadata sources."""

    SNAPSHOT = "snapshot"  # JSON snapshot file
    DATABASE = "database"  # Live database (DATABASE or DATABASE.SCHEMA)


class InputResolutionError(ValueError):
    """Raised when input resolution fails."""


def parse_source_identifier(identifier: str) -> Tuple[str, Optional[str]]:
    """Parse a database reference into (database, schema).

    Supports:
    - DATABASE
    - DATABASE.SCHEMA

    Returns:
        Tuple of (database, schema); schema is None when not given.

    Raises:
        InputResolutionError: If the identifier has more than two parts
    """
    parts = [_unquote(part) for part in identifier.split('.')]
    if len(parts) == 1:
        return parts[0], None
    if len(parts) == 2:
        return parts[0], parts[1]
    raise InputResolutionError(
        f"Invalid database reference: '{identifier}'. Expected DATABASE or DATABASE.SCHEMA"
    )


def resolve_source(source: str, warehouse: Optional[str] = None) -> Tuple[SourceType, dict]:
    """Detect and resolve the metadata source of a reporting run.

    Supports two modes:
    1. Snapshot mode: a *.json file written by ``sqlexplorer snapshot``
    2. Database mode: DATABASE or DATABASE.SCHEMA reference
       - Requires warehouse parameter for live catalog reads

    Args:
        source: Snapshot file path or database reference
        warehouse: Optional warehouse type (required for database mode)

    Returns:
        Tuple of (SourceType, metadata_dict) containing:
        {
            'source': str,
            'source_type': str (snapshot|database),
            'database': str (database mode only),
            'schema': Optional[str] (database mode only),
            'warehouse': str (when given),
        }

    Raises:
        InputResolutionError: If the source cannot be resolved
    """
    if not source or not source.strip():
        raise InputResolutionError("A source is required: a snapshot file or DATABASE[.SCHEMA]")

    source_type = _detect_type(source)
    logger.debug("Detected source type: %s", source_type.value)

    metadata = {
        'source': source,
        'source_type': source_type.value,
    }

    if source_type == SourceType.SNAPSHOT:
        if not os.path.exists(source):
            raise InputResolutionError(f"Snapshot file not found: {source}")
    else:
        if not warehouse:
            raise InputResolutionError(
                "Database mode requires --warehouse parameter. "
                "Example: sqlexplorer report --source PROD.SALES --warehouse snowflake "
                "--output-dir reports"
            )
        database, schema = parse_source_identifier(source)
        if not all(_is_valid_identifier(part) for part in (database, schema) if part is not None):
            raise InputResolutionError(f"Invalid database reference: '{source}'")
        metadata['database'] = database
        metadata['schema'] = schema

    if warehouse:
        metadata['warehouse'] = warehouse

    return source_type, metadata


def _detect_type(source: str) -> SourceType:
    """Snapshot if the source looks like or is an existing file, else database."""
    if source.lower().endswith('.json') or os.path.isfile(source):
        return SourceType.SNAPSHOT
    return SourceType.DATABASE


def _unquote(name: str) -> str:
    name = name.strip()
    if len(name) >= 2 and name[0] == name[-1] and name[0] in ('"', '`'):
        return name[1:-1]
    return name


def _is_valid_identifier(name: str) -> bool:
    """Check if string is a plain SQL identifier (alphanumeric, _, -, $)."""
    if not name:
        return False
    return name.replace('_', '').replace('-', '').replace('$', '').isalnum()

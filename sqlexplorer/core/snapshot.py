"""Building Database snapshots from metadata providers, and persisting them."""
import logging
import os
from typing import Dict, List, Optional, Tuple

from sqlexplorer.errors import ReportExistsError
from sqlexplorer.models.database import Database
from sqlexplorer.models.schema import ForeignKey, ForeignKeyRecord, Table
from sqlexplorer.warehouse.base import MetadataProvider
from sqlexplorer.warehouse.snapshot import JsonSnapshotProvider, SnapshotFile

logger = logging.getLogger(__name__)


def resolve_foreign_keys(
    records: List[ForeignKeyRecord],
    tables: List[Table]
) -> List[ForeignKey]:
    """Turn raw foreign key rows into ForeignKey objects over known tables.

    Multi-column constraints produce one row per column; the first row of
    each constraint is kept. Rows naming a table that was not fetched are
    skipped with a warning.

    Args:
        records: Raw catalog rows
        tables: Tables of the snapshot

    Returns:
        Foreign keys in catalog order.
    """
    by_key: Dict[Tuple[str, str], Table] = {t.key: t for t in tables}
    seen = set()
    result = []

    for record in records:
        constraint = (record.schema_name, record.constraint_name)
        if constraint in seen:
            logger.debug("Skipping additional column of foreign key %s.%s", *constraint)
            continue

        child = by_key.get((record.child_schema, record.table_name))
        parent = by_key.get((record.referenced_schema, record.referenced_table))
        if child is None or parent is None:
            logger.warning(
                "Skipping foreign key %s.%s: table %s.%s -> %s.%s not in snapshot",
                record.schema_name, record.constraint_name,
                record.child_schema, record.table_name,
                record.referenced_schema, record.referenced_table
            )
            continue

        seen.add(constraint)
        result.append(ForeignKey(
            schema_name=record.schema_name,
            name=record.constraint_name,
            parent=parent,
            parent_column=record.referenced_column,
            child=child,
            child_column=record.column_name
        ))

    return result


def build_database(
    provider: MetadataProvider,
    database: Optional[str] = None,
    schema: Optional[str] = None
) -> Database:
    """Read a complete catalog from a provider into an immutable snapshot.

    Args:
        provider: Connected metadata provider
        database: Database/catalog name (provider default if omitted)
        schema: Restrict to one schema (all user schemas if omitted)

    Returns:
        Database snapshot.

    Raises:
        MetadataFetchError: If any catalog read fails
        InvalidInputError: If the catalog contains invalid identifiers
    """
    name = provider.current_database(database)
    tables = provider.fetch_tables(name, schema)
    records = provider.fetch_foreign_keys(name, schema)
    views = provider.fetch_views(name, schema)
    routines = provider.fetch_routines(name, schema)

    snapshot = Database(
        name=name,
        warehouse=provider.warehouse,
        tables=tables,
        foreign_keys=resolve_foreign_keys(records, tables),
        views=views,
        routines=routines
    )
    logger.info(
        "Built snapshot of %s: %d tables, %d foreign keys, %d views, %d routines",
        name, len(snapshot.tables), len(snapshot.foreign_keys),
        len(snapshot.views), len(snapshot.routines)
    )
    return snapshot


def dump_snapshot(database: Database, path: str, overwrite: bool = False) -> None:
    """Write a snapshot to a JSON file readable by ``load_snapshot``.

    Raises:
        ReportExistsError: If the file exists and ``overwrite`` is False
    """
    if os.path.exists(path) and not overwrite:
        raise ReportExistsError(f"File '{path}' already exists; use --overwrite to replace it.")

    records = [
        ForeignKeyRecord(
            constraint_name=fk.name,
            schema_name=fk.schema_name,
            table_name=fk.child.name,
            table_schema=fk.child.schema_name,
            column_name=fk.child_column,
            referenced_schema=fk.parent.schema_name,
            referenced_table=fk.parent.name,
            referenced_column=fk.parent_column
        )
        for fk in database.foreign_keys
    ]
    snapshot = SnapshotFile(
        name=database.name,
        warehouse=database.warehouse,
        tables=list(database.tables),
        foreign_keys=records,
        views=list(database.views),
        routines=list(database.routines)
    )
    with open(path, 'w', encoding='utf-8') as f:
        f.write(snapshot.model_dump_json(indent=2))
    logger.info("Wrote snapshot of %s to %s", database.name, path)


def load_snapshot(path: str) -> Database:
    """Load a Database snapshot from a JSON file."""
    provider = JsonSnapshotProvider(path)
    provider.connect()
    try:
        return build_database(provider)
    finally:
        provider.close()

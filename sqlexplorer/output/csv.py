"""CSV listings of tables, views and routines."""
import csv  # pylint: disable=import-self
import io
from typing import Iterable, List, Optional

from sqlexplorer.models.database import Database
from sqlexplorer.models.schema import SchemaObject

DEFINITION_PREVIEW_LENGTH = 50

TABLE_HEADER = [
    "Schema", "Table", "Position", "Column", "Data Type",
    "Precision", "Max Length", "Is Nullable", "Default",
]


def truncate_definition(definition: Optional[str], length: int = DEFINITION_PREVIEW_LENGTH) -> str:
    """First ``length`` characters of a definition with line breaks collapsed to spaces."""
    if not definition:
        return ""
    preview = definition[:length]
    return preview.replace("\r\n", " ").replace("\n", " ").replace("\r", " ")


def _to_csv(header: List[str], rows: Iterable[list]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def _blank(value) -> str:
    return "" if value is None else str(value)


def render_tables_csv(database: Database) -> str:
    """One row per column, tables ordered by full name."""
    rows = []
    for table in sorted(database.tables, key=lambda t: t.full_name):
        for column in table.columns.values():
            rows.append([
                table.schema_name,
                table.name,
                column.ordinal_position,
                column.name,
                column.data_type,
                _blank(column.numeric_precision),
                _blank(column.max_length),
                column.is_nullable,
                _blank(column.column_default),
            ])
    return _to_csv(TABLE_HEADER, rows)


def _render_definitions(kind: str, objects: Iterable[SchemaObject]) -> str:
    rows = [
        [obj.schema_name, obj.name, truncate_definition(obj.definition)]
        for obj in sorted(objects, key=lambda o: o.full_name)
    ]
    return _to_csv(["Schema", kind, "Definition"], rows)


def render_views_csv(database: Database) -> str:
    """One row per view with a truncated definition."""
    return _render_definitions("View", database.views)


def render_routines_csv(database: Database) -> str:
    """One row per routine with a truncated definition."""
    return _render_definitions("Routine", database.routines)

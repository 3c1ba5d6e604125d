"""Database snapshot: the aggregate root over one schema catalog."""
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from sqlexplorer.core.ordering import sort_tables_by_dependency
from sqlexplorer.errors import InvalidInputError
from sqlexplorer.models.schema import (
    ForeignKey,
    Routine,
    SchemaObject,
    Table,
    View,
    require_identifier,
)


def _check_unique(objects: Iterable[SchemaObject], kind: str) -> None:
    seen = set()
    for obj in objects:
        if obj.key in seen:
            raise InvalidInputError(f"Duplicate {kind}: {obj.full_name}")
        seen.add(obj.key)


class Database(BaseModel):
    """Immutable snapshot of tables, foreign keys, views and routines.

    Built once from a fully populated catalog read and never mutated
    afterwards, so any number of readers may share it.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    warehouse: Optional[str] = None
    tables: Tuple[Table, ...] = ()
    foreign_keys: Tuple[ForeignKey, ...] = ()
    views: Tuple[View, ...] = ()
    routines: Tuple[Routine, ...] = ()

    @field_validator('name', mode='before')
    @classmethod
    def _check_name(cls, value):
        return require_identifier(value, "Database name")

    @model_validator(mode='after')
    def _check_identities(self):
        _check_unique(self.tables, "table")
        _check_unique(self.views, "view")
        _check_unique(self.routines, "routine")
        return self

    def get_table(self, schema: str, name: str) -> Optional[Table]:
        """Look up a table by exact schema and name."""
        for table in self.tables:
            if table.schema_name == schema and table.name == name:
                return table
        return None

    def tables_sorted_by_dependency(self) -> List[Table]:
        """Tables ordered so that referenced tables precede their dependents."""
        return sort_tables_by_dependency(self.tables, self.foreign_keys)

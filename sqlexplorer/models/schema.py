"""Schema object models: tables, columns, foreign keys, views and routines."""
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from sqlexplorer.errors import InvalidInputError


def require_identifier(value: Any, label: str) -> Any:
    """Reject missing or blank identifiers before type validation runs."""
    if value is None or not str(value).strip():
        raise InvalidInputError(f"{label} is required")
    return value


class Column(BaseModel):
    """Represents a table column as reported by the catalog."""

    model_config = ConfigDict(frozen=True)

    name: str
    ordinal_position: int
    data_type: str
    numeric_precision: Optional[int] = None
    max_length: Optional[int] = None
    is_nullable: bool = True
    column_default: Optional[str] = None

    @field_validator('name', mode='before')
    @classmethod
    def _check_name(cls, value):
        return require_identifier(value, "Column name")


class SchemaObject(BaseModel):
    """Base for catalog objects identified by (schema, name).

    Equality and hashing use the identity only, so two instances describing
    the same object compare equal even if other attributes differ.
    """

    model_config = ConfigDict(frozen=True)

    schema_name: str
    name: str

    @field_validator('schema_name', mode='before')
    @classmethod
    def _check_schema_name(cls, value):
        return require_identifier(value, f"{cls.__name__} schema")

    @field_validator('name', mode='before')
    @classmethod
    def _check_name(cls, value):
        return require_identifier(value, f"{cls.__name__} name")

    @property
    def key(self) -> Tuple[str, str]:
        """Identity of the object."""
        return (self.schema_name, self.name)

    @property
    def full_name(self) -> str:
        """Schema-qualified name, e.g. ``dbo.Orders``."""
        return f"{self.schema_name}.{self.name}"

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.key == other.key

    def __hash__(self):
        return hash((type(self).__name__,) + self.key)

    def __str__(self):
        return self.full_name


class Table(SchemaObject):
    """Represents a base table and its columns keyed by ordinal position."""

    columns: Dict[int, Column] = Field(default_factory=dict)

    @field_validator('columns', mode='before')
    @classmethod
    def _index_columns(cls, value):
        if value is None:
            return {}
        if isinstance(value, dict):
            return value

        indexed: Dict[int, Any] = {}
        for column in value:
            position = (
                column.ordinal_position if isinstance(column, Column)
                else column.get('ordinal_position')
            )
            if position in indexed:
                raise InvalidInputError(f"Duplicate column ordinal position: {position}")
            indexed[position] = column
        return indexed

    @field_validator('columns')
    @classmethod
    def _check_positions(cls, value: Dict[int, Column]) -> Dict[int, Column]:
        for position, column in value.items():
            if column.ordinal_position != position:
                raise InvalidInputError(
                    f"Column '{column.name}' is keyed by position {position} "
                    f"but declares position {column.ordinal_position}"
                )
        # Gaps are allowed; only the order is normalised.
        return dict(sorted(value.items()))

    @field_serializer('columns')
    def _dump_columns(self, columns: Dict[int, Column]) -> List[Column]:
        return list(columns.values())


class ForeignKey(BaseModel):
    """A foreign key constraint between two tables.

    ``parent`` is the referenced (primary key) side and ``child`` the
    referencing side, so a child table depends on its parent. Identity is
    the constraint name within its schema.
    """

    model_config = ConfigDict(frozen=True)

    schema_name: str
    name: str
    parent: Table
    parent_column: str
    child: Table
    child_column: str

    @field_validator('schema_name', 'name', mode='before')
    @classmethod
    def _check_identifier(cls, value, info):
        return require_identifier(value, f"Foreign key {info.field_name}")

    @property
    def key(self) -> Tuple[str, str]:
        """Identity of the constraint."""
        return (self.schema_name, self.name)

    @property
    def full_name(self) -> str:
        """Schema-qualified constraint name."""
        return f"{self.schema_name}.{self.name}"

    @property
    def is_self_reference(self) -> bool:
        """True when the constraint points back at its own table."""
        return self.parent == self.child

    def __eq__(self, other):
        if not isinstance(other, ForeignKey):
            return NotImplemented
        return self.key == other.key

    def __hash__(self):
        return hash(self.key)


class ForeignKeyRecord(BaseModel):
    """Raw foreign key row as read from a catalog, one row per column pair.

    ``schema_name`` is the constraint's schema and ``table_schema`` the
    referencing table's; rows without ``table_schema`` use ``schema_name``.
    """

    constraint_name: str
    schema_name: str
    table_name: str
    table_schema: Optional[str] = None
    column_name: str
    referenced_schema: str
    referenced_table: str
    referenced_column: str

    @property
    def child_schema(self) -> str:
        """Schema of the referencing table."""
        return self.table_schema or self.schema_name


class View(SchemaObject):
    """A view and its full, untruncated source definition."""

    definition: str = ""

    @field_validator('definition', mode='before')
    @classmethod
    def _default_definition(cls, value):
        return value or ""


class RoutineType(str, Enum):
    """Kinds of stored routines."""

    PROCEDURE = "PROCEDURE"
    FUNCTION = "FUNCTION"


class Routine(SchemaObject):
    """A stored procedure or function and its source definition."""

    definition: str = ""
    routine_type: RoutineType = RoutineType.PROCEDURE

    @field_validator('definition', mode='before')
    @classmethod
    def _default_definition(cls, value):
        return value or ""

    @field_validator('routine_type', mode='before')
    @classmethod
    def _normalise_type(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

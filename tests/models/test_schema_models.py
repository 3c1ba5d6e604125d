"""Tests for schema object models."""
import pytest

from sqlexplorer.errors import InvalidInputError
from sqlexplorer.models.schema import Column, ForeignKey, Routine, RoutineType, Table, View


def test_table_equality_uses_schema_and_name(column_factory):
    """Tables with the same identity are equal regardless of columns."""
    t1 = Table(schema_name="dbo", name="Orders", columns=[column_factory("Id", 1)])
    t2 = Table(schema_name="dbo", name="Orders", columns=[column_factory("Code", 1)])
    t3 = Table(schema_name="sales", name="Orders")

    assert t1 == t2
    assert hash(t1) == hash(t2)
    assert t1 != t3
    assert len({t1, t2, t3}) == 2


def test_table_is_not_equal_to_view_with_same_identity():
    """Identity comparison is per object type."""
    table = Table(schema_name="dbo", name="Orders")
    view = View(schema_name="dbo", name="Orders")
    assert table != view


def test_table_full_name():
    """full_name joins schema and name."""
    table = Table(schema_name="dbo", name="Orders")
    assert table.full_name == "dbo.Orders"
    assert str(table) == "dbo.Orders"


def test_table_columns_keyed_by_position(column_factory):
    """Columns are indexed by ordinal position, ordered, gaps allowed."""
    table = Table(schema_name="dbo", name="T", columns=[
        column_factory("C", 5),
        column_factory("A", 1),
        column_factory("B", 2),
    ])

    assert list(table.columns.keys()) == [1, 2, 5]
    assert table.columns[5].name == "C"
    assert table.columns[2].name == "B"


def test_table_rejects_duplicate_positions(column_factory):
    """Two columns cannot share an ordinal position."""
    with pytest.raises(InvalidInputError, match="Duplicate column ordinal position"):
        Table(schema_name="dbo", name="T", columns=[
            column_factory("A", 1),
            column_factory("B", 1),
        ])


def test_table_accepts_column_dicts():
    """Columns may be given as plain dictionaries."""
    table = Table(schema_name="dbo", name="T", columns=[
        {"name": "Id", "ordinal_position": 1, "data_type": "int", "is_nullable": False},
    ])
    assert isinstance(table.columns[1], Column)
    assert table.columns[1].is_nullable is False


@pytest.mark.parametrize("schema_name,name", [
    ("", "Orders"),
    ("dbo", ""),
    ("   ", "Orders"),
    (None, "Orders"),
])
def test_table_requires_identifiers(schema_name, name):
    """Blank or missing identifiers fail at construction."""
    with pytest.raises(InvalidInputError):
        Table(schema_name=schema_name, name=name)


def test_column_requires_name():
    """Columns need a name."""
    with pytest.raises(InvalidInputError, match="Column name is required"):
        Column(name="", ordinal_position=1, data_type="int")


def test_table_is_immutable():
    """Tables cannot be modified after construction."""
    table = Table(schema_name="dbo", name="Orders")
    with pytest.raises(Exception):
        table.name = "Other"


def test_table_dump_lists_columns(column_factory):
    """Serialised tables list their columns and load back unchanged."""
    table = Table(schema_name="dbo", name="T", columns=[column_factory("Id", 1)])
    data = table.model_dump()

    assert data["columns"][0]["name"] == "Id"
    assert Table(**data).columns[1].name == "Id"


def test_foreign_key_identity(table_factory):
    """Foreign keys compare by schema and constraint name."""
    customers = table_factory("Customers")
    orders = table_factory("Orders")
    fk1 = ForeignKey(
        schema_name="dbo", name="FK_1", parent=customers,
        parent_column="Id", child=orders, child_column="CustomerId"
    )
    fk2 = ForeignKey(
        schema_name="dbo", name="FK_1", parent=customers,
        parent_column="Id", child=orders, child_column="Other"
    )

    assert fk1 == fk2
    assert fk1.full_name == "dbo.FK_1"
    assert fk1.is_self_reference is False


def test_foreign_key_self_reference(table_factory):
    """A foreign key to its own table is a self reference."""
    employees = table_factory("Employees")
    fk = ForeignKey(
        schema_name="dbo", name="FK_Manager", parent=employees,
        parent_column="Id", child=employees, child_column="ManagerId"
    )
    assert fk.is_self_reference is True


def test_foreign_key_requires_name(table_factory):
    """Foreign keys need a constraint name."""
    table = table_factory()
    with pytest.raises(InvalidInputError, match="Foreign key name"):
        ForeignKey(
            schema_name="dbo", name=" ", parent=table,
            parent_column="Id", child=table, child_column="ParentId"
        )


def test_view_keeps_full_definition():
    """Definitions are stored untruncated; None becomes empty."""
    long_sql = "SELECT " + ", ".join(f"col{i}" for i in range(100)) + " FROM dbo.T"
    assert View(schema_name="dbo", name="V", definition=long_sql).definition == long_sql
    assert View(schema_name="dbo", name="V", definition=None).definition == ""


def test_routine_type_normalised():
    """Routine types are case-insensitive."""
    routine = Routine(schema_name="dbo", name="fn", routine_type="function")
    assert routine.routine_type == RoutineType.FUNCTION

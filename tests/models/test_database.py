"""Tests for the Database snapshot model."""
import pytest

from sqlexplorer.errors import InvalidInputError
from sqlexplorer.models.database import Database


def test_database_rejects_duplicate_tables(table_factory):
    """Two tables cannot share a schema and name."""
    with pytest.raises(InvalidInputError, match="Duplicate table: dbo.Orders"):
        Database(name="db", tables=[table_factory("Orders"), table_factory("Orders")])


def test_database_rejects_duplicate_views(view_factory):
    """Two views cannot share a schema and name."""
    with pytest.raises(InvalidInputError, match="Duplicate view"):
        Database(name="db", views=[view_factory("V"), view_factory("V")])


def test_database_rejects_duplicate_routines(routine_factory):
    """Two routines cannot share a schema and name."""
    with pytest.raises(InvalidInputError, match="Duplicate routine"):
        Database(name="db", routines=[routine_factory("P"), routine_factory("P")])


def test_database_allows_same_name_in_different_schemas(table_factory):
    """Identity includes the schema."""
    db = Database(name="db", tables=[
        table_factory("Orders", schema_name="dbo"),
        table_factory("Orders", schema_name="sales"),
    ])
    assert len(db.tables) == 2


def test_database_requires_name():
    """The snapshot needs a database name."""
    with pytest.raises(InvalidInputError):
        Database(name="")


def test_get_table(sales_database):
    """Tables are looked up by exact schema and name."""
    assert sales_database.get_table("dbo", "Orders").name == "Orders"
    assert sales_database.get_table("sales", "Orders") is None


def test_collections_are_immutable(sales_database):
    """Snapshot collections are tuples."""
    assert isinstance(sales_database.tables, tuple)
    with pytest.raises(Exception):
        sales_database.tables = ()


def test_tables_sorted_by_dependency(sales_database):
    """Referenced tables come before the tables that reference them."""
    names = [t.name for t in sales_database.tables_sorted_by_dependency()]
    assert names == ["Customers", "Orders", "OrderItems"]

"""Common test fixtures."""
# pylint: disable=redefined-outer-name,too-many-arguments,too-many-positional-arguments
import pytest

from sqlexplorer.core.snapshot import dump_snapshot
from sqlexplorer.models.database import Database
from sqlexplorer.models.schema import Column, ForeignKey, Routine, RoutineType, Table, View


@pytest.fixture
def column_factory():
    """Factory to create Column instances for testing."""
    def _make_column(
        name="Id",
        ordinal_position=1,
        data_type="int",
        numeric_precision=None,
        max_length=None,
        is_nullable=False,
        column_default=None
    ):
        return Column(
            name=name,
            ordinal_position=ordinal_position,
            data_type=data_type,
            numeric_precision=numeric_precision,
            max_length=max_length,
            is_nullable=is_nullable,
            column_default=column_default
        )
    return _make_column


@pytest.fixture
def table_factory(column_factory):
    """Factory to create Table instances for testing."""
    def _make_table(name="TestTable", schema_name="dbo", columns=None):
        if columns is None:
            columns = [column_factory()]
        return Table(schema_name=schema_name, name=name, columns=columns)
    return _make_table


@pytest.fixture
def fk_factory():
    """Factory to create ForeignKey instances (child references parent)."""
    def _make_fk(parent, child, name=None, parent_column="Id", child_column=None):
        return ForeignKey(
            schema_name=child.schema_name,
            name=name or f"FK_{child.name}_{parent.name}",
            parent=parent,
            parent_column=parent_column,
            child=child,
            child_column=child_column or f"{parent.name}Id"
        )
    return _make_fk


@pytest.fixture
def view_factory():
    """Factory to create View instances for testing."""
    def _make_view(name="TestView", definition="SELECT 1", schema_name="dbo"):
        return View(schema_name=schema_name, name=name, definition=definition)
    return _make_view


@pytest.fixture
def routine_factory():
    """Factory to create Routine instances for testing."""
    def _make_routine(
        name="TestProc",
        definition="SELECT 1",
        schema_name="dbo",
        routine_type=RoutineType.PROCEDURE
    ):
        return Routine(
            schema_name=schema_name,
            name=name,
            definition=definition,
            routine_type=routine_type
        )
    return _make_routine


@pytest.fixture
def sales_database(table_factory, column_factory, fk_factory, view_factory, routine_factory):
    """Customers <- Orders <- OrderItems, plus one view and one procedure.

    Tables are listed in reverse dependency order on purpose.
    """
    customers = table_factory("Customers", columns=[
        column_factory("Id", 1),
        column_factory("Name", 2, "nvarchar", max_length=100, is_nullable=True),
    ])
    orders = table_factory("Orders", columns=[
        column_factory("Id", 1),
        column_factory("CustomerId", 2),
        column_factory("Total", 3, "decimal", numeric_precision=18, column_default="((0))"),
    ])
    order_items = table_factory("OrderItems", columns=[
        column_factory("Id", 1),
        column_factory("OrderId", 2),
    ])
    return Database(
        name="Sales DB",
        tables=[order_items, orders, customers],
        foreign_keys=[
            fk_factory(customers, orders, child_column="CustomerId"),
            fk_factory(orders, order_items, child_column="OrderId"),
        ],
        views=[
            view_factory(
                "CustomerOrders",
                "CREATE VIEW dbo.CustomerOrders AS\r\nSELECT c.Name, o.Total\r\n"
                "FROM [dbo].[Customers] c JOIN dbo.Orders o ON o.CustomerId = c.Id"
            ),
        ],
        routines=[
            routine_factory(
                "usp_CloseOrder",
                "CREATE PROCEDURE dbo.usp_CloseOrder AS UPDATE Orders SET Total = 0"
            ),
        ]
    )


@pytest.fixture
def snapshot_file(sales_database, tmp_path):
    """Path to a JSON snapshot of the sales database."""
    path = tmp_path / "sales.json"
    dump_snapshot(sales_database, str(path))
    return path

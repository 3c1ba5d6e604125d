"""Tests for the JSON snapshot metadata provider."""
# pylint: disable=redefined-outer-name
import json

import pytest

from sqlexplorer.errors import MetadataFetchError
from sqlexplorer.warehouse.snapshot import JsonSnapshotProvider


@pytest.fixture
def snapshot_path(tmp_path):
    """Snapshot file with objects in two schemas."""
    data = {
        "name": "Shop",
        "tables": [
            {"schema_name": "dbo", "name": "Orders", "columns": [
                {"name": "Id", "ordinal_position": 1, "data_type": "int", "is_nullable": False},
            ]},
            {"schema_name": "hr", "name": "Staff", "columns": []},
        ],
        "foreign_keys": [{
            "constraint_name": "FK_Staff_Orders",
            "schema_name": "hr",
            "table_name": "Staff",
            "column_name": "OrderId",
            "referenced_schema": "dbo",
            "referenced_table": "Orders",
            "referenced_column": "Id",
        }],
        "views": [{"schema_name": "dbo", "name": "vOrders", "definition": "SELECT * FROM Orders"}],
        "routines": [{
            "schema_name": "HR",
            "name": "fnStaff",
            "definition": "SELECT * FROM hr.Staff",
            "routine_type": "function",
        }],
    }
    path = tmp_path / "shop.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_connect_and_fetch(snapshot_path):
    """Every collection is served from the file."""
    provider = JsonSnapshotProvider(snapshot_path)
    provider.connect()

    assert provider.current_database() == "Shop"
    assert [t.name for t in provider.fetch_tables("Shop")] == ["Orders", "Staff"]
    assert provider.fetch_foreign_keys("Shop")[0].referenced_table == "Orders"
    assert provider.fetch_views("Shop")[0].definition == "SELECT * FROM Orders"
    assert provider.fetch_routines("Shop")[0].routine_type.value == "FUNCTION"


def test_schema_filter_is_case_insensitive(snapshot_path):
    """Schema filters ignore case."""
    provider = JsonSnapshotProvider(snapshot_path)
    provider.connect()

    assert [t.name for t in provider.fetch_tables("Shop", "HR")] == ["Staff"]
    assert len(provider.fetch_foreign_keys("Shop", "hr")) == 1
    assert provider.fetch_views("Shop", "hr") == []
    assert [r.name for r in provider.fetch_routines("Shop", "hr")] == ["fnStaff"]


def test_fetch_loads_lazily(snapshot_path):
    """Fetching before connect() loads the file."""
    provider = JsonSnapshotProvider(snapshot_path)
    assert len(provider.fetch_tables("Shop")) == 2


def test_close_drops_snapshot(snapshot_path):
    """close() releases the loaded data and is idempotent."""
    provider = JsonSnapshotProvider(snapshot_path)
    provider.connect()
    provider.close()
    provider.close()
    assert provider.snapshot is None


def test_missing_file(tmp_path):
    """A missing file is a fetch error."""
    provider = JsonSnapshotProvider(str(tmp_path / "nope.json"))
    with pytest.raises(MetadataFetchError, match="Snapshot file not found"):
        provider.connect()


def test_invalid_json(tmp_path):
    """Malformed JSON is a fetch error."""
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(MetadataFetchError, match="Invalid snapshot file"):
        JsonSnapshotProvider(str(path)).connect()


def test_invalid_contents(tmp_path):
    """Well-formed JSON with the wrong shape is a fetch error."""
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"tables": "nope"}), encoding="utf-8")
    with pytest.raises(MetadataFetchError, match="Invalid snapshot contents"):
        JsonSnapshotProvider(str(path)).connect()


def test_json_array_is_rejected(tmp_path):
    """A top-level array is not a snapshot."""
    path = tmp_path / "list.json"
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(MetadataFetchError):
        JsonSnapshotProvider(str(path)).connect()


def test_recorded_warehouse(tmp_path):
    """The provider reports the warehouse named in the file."""
    path = tmp_path / "shop.json"
    path.write_text(json.dumps({"name": "Shop", "warehouse": "snowflake"}), encoding="utf-8")
    provider = JsonSnapshotProvider(str(path))

    assert provider.warehouse == "snowflake"


def test_recorded_warehouse_missing(snapshot_path):
    """Files without a warehouse report none."""
    assert JsonSnapshotProvider(snapshot_path).warehouse is None


def test_foreign_keys_filtered_by_table_schema(tmp_path):
    """Foreign keys follow their referencing table's schema."""
    path = tmp_path / "shop.json"
    path.write_text(json.dumps({
        "name": "Shop",
        "foreign_keys": [{
            "constraint_name": "FK_X",
            "schema_name": "audit",
            "table_name": "Orders",
            "table_schema": "dbo",
            "column_name": "CustomerId",
            "referenced_schema": "dbo",
            "referenced_table": "Customers",
            "referenced_column": "Id",
        }],
    }), encoding="utf-8")
    provider = JsonSnapshotProvider(str(path))

    assert len(provider.fetch_foreign_keys("Shop", "dbo")) == 1
    assert provider.fetch_foreign_keys("Shop", "audit") == []

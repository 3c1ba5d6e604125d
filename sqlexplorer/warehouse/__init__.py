"""Registry of metadata providers for live warehouses."""
import logging
from typing import Dict, List, NamedTuple, Optional, Type

from sqlexplorer.warehouse.base import MetadataProvider
from sqlexplorer.warehouse.snowflake import SnowflakeAdapter
from sqlexplorer.warehouse.sqlserver import SqlServerAdapter

logger = logging.getLogger(__name__)

# Dialect of sources that do not name their warehouse
DEFAULT_DIALECT = 'tsql'


class WarehouseNotImplementedError(NotImplementedError):
    """Raised for a known warehouse that has no provider yet."""


class UnsupportedWarehouseError(ValueError):
    """Raised for a warehouse name that is not known at all."""


class WarehouseInfo(NamedTuple):
    """Provider class (None while planned) and the sqlglot dialect of stored SQL."""

    provider: Optional[Type[MetadataProvider]]
    dialect: str


WAREHOUSES: Dict[str, WarehouseInfo] = {
    'snowflake': WarehouseInfo(SnowflakeAdapter, 'snowflake'),
    'sqlserver': WarehouseInfo(SqlServerAdapter, 'tsql'),
    'postgres': WarehouseInfo(None, 'postgres'),
}


def _lookup(warehouse_type: str) -> WarehouseInfo:
    info = WAREHOUSES.get(warehouse_type.lower())
    if info is None:
        raise UnsupportedWarehouseError(
            f"Unsupported warehouse: '{warehouse_type}'. "
            f"Known warehouses: {', '.join(WAREHOUSES)}"
        )
    return info


def get_adapter(warehouse_type: str) -> MetadataProvider:
    """Create the metadata provider for a warehouse.

    Args:
        warehouse_type: Warehouse name (snowflake, sqlserver, postgres), any case

    Raises:
        UnsupportedWarehouseError: If the name is unknown
        WarehouseNotImplementedError: If the warehouse is planned but has no provider
    """
    info = _lookup(warehouse_type)
    if info.provider is None:
        raise WarehouseNotImplementedError(
            f"Warehouse '{warehouse_type}' is not yet implemented. "
            f"Currently supported: {', '.join(list_supported_warehouses())}"
        )

    logger.debug("Creating %s for %s", info.provider.__name__, warehouse_type.lower())
    return info.provider()


def warehouse_dialect(warehouse_type: Optional[str]) -> str:
    """sqlglot dialect of view and routine definitions stored by a warehouse.

    Sources with no recorded warehouse use ``DEFAULT_DIALECT``.
    """
    if not warehouse_type:
        return DEFAULT_DIALECT
    return _lookup(warehouse_type).dialect


def list_supported_warehouses() -> List[str]:
    """Warehouses with a working provider."""
    return [name for name, info in WAREHOUSES.items() if info.provider is not None]


def list_planned_warehouses() -> List[str]:
    """Warehouses that are known but not implemented."""
    return [name for name, info in WAREHOUSES.items() if info.provider is None]

"""Connection settings for live warehouses.

Settings come from the first source that has any: an explicit YAML file,
``~/.sqlexplorer/<warehouse>.yaml``, ``<WAREHOUSE>_*`` environment variables,
and finally built-in defaults.
"""
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = '.sqlexplorer'

ENV_KEYS = (
    'account', 'user', 'password', 'host', 'port',
    'database', 'schema', 'warehouse', 'role', 'driver',
)

_SERVER_DEFAULTS = {'host': 'localhost', 'user': '', 'password': '', 'database': ''}

# Required keys and fallback values per warehouse
WAREHOUSE_SETTINGS: Dict[str, Dict[str, Any]] = {
    'snowflake': {
        'required': ['account', 'user', 'password'],
        'defaults': {
            'account': '', 'user': '', 'password': '',
            'warehouse': 'COMPUTE_WH', 'database': '',
        },
    },
    'sqlserver': {
        'required': ['host', 'user', 'password', 'database'],
        'defaults': dict(_SERVER_DEFAULTS, port=1433, driver='ODBC Driver 18 for SQL Server'),
    },
    'postgres': {
        'required': ['host', 'user', 'password', 'database'],
        'defaults': dict(_SERVER_DEFAULTS, port=5432),
    },
}


class ConnectionConfigError(ValueError):
    """Raised when a connection config file cannot be used."""


def default_config_path(warehouse: str) -> Path:
    """Default config location, ``~/.sqlexplorer/<warehouse>.yaml``."""
    return Path.home() / CONFIG_DIR_NAME / f'{warehouse.lower()}.yaml'


def read_config_file(path: str) -> Dict[str, Any]:
    """Parse a YAML connection file.

    Raises:
        ConnectionConfigError: If the file is missing, unreadable, not YAML,
            or not a mapping
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConnectionConfigError(f"Configuration file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ConnectionConfigError(f"Invalid YAML configuration: {path}\n{e}") from e
    except OSError as e:
        raise ConnectionConfigError(f"Error reading configuration file: {path}\n{e}") from e

    if not isinstance(config, dict):
        raise ConnectionConfigError(
            f"Configuration file must contain a YAML dictionary: {path}"
        )
    return config


def config_from_env(warehouse: str) -> Dict[str, str]:
    """Settings from non-empty ``<WAREHOUSE>_<KEY>`` environment variables."""
    prefix = f"{warehouse.upper()}_"
    return {
        key: os.environ[prefix + key.upper()]
        for key in ENV_KEYS
        if os.environ.get(prefix + key.upper())
    }


def load_connection_config(
    warehouse: str,
    conn_file: Optional[str] = None
) -> Dict[str, Any]:
    """Load connection settings for a warehouse.

    Args:
        warehouse: Warehouse type (snowflake, sqlserver, postgres)
        conn_file: Explicit YAML file, overriding every other source

    Returns:
        Settings passed unchanged to the provider's ``connect``.

    Raises:
        ConnectionConfigError: If a config file is invalid
    """
    if conn_file:
        logger.info("Loading connection config from: %s", conn_file)
        return read_config_file(conn_file)

    default_path = default_config_path(warehouse)
    if default_path.exists():
        logger.info("Loading connection config from: %s", default_path)
        return read_config_file(str(default_path))

    env_config = config_from_env(warehouse)
    if env_config:
        logger.info("Loaded connection config from %s_* environment variables",
                    warehouse.upper())
        return env_config

    logger.warning("No connection config found for %s. Using defaults.", warehouse)
    settings = WAREHOUSE_SETTINGS.get(warehouse.lower(), {})
    return dict(settings.get('defaults', {}))


def validate_connection_config(warehouse: str, config: Dict[str, Any]) -> bool:
    """Check that every required setting is present and non-empty.

    Raises:
        ConnectionConfigError: If required settings are missing
    """
    settings = WAREHOUSE_SETTINGS.get(warehouse.lower(), {})
    missing = [key for key in settings.get('required', []) if not config.get(key)]
    if missing:
        raise ConnectionConfigError(
            f"Missing required connection parameters for {warehouse}: "
            f"{', '.join(missing)}. "
            f"Provide via --conn-file or ~/{CONFIG_DIR_NAME}/{warehouse.lower()}.yaml"
        )
    return True

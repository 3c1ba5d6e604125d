"""Configuration management."""
from sqlexplorer.config.connection import (
    ConnectionConfigError,
    load_connection_config,
    validate_connection_config,
)
from sqlexplorer.config.settings import ReportConfig, ReportFormat

__all__ = [
    'ConnectionConfigError',
    'ReportConfig',
    'ReportFormat',
    'load_connection_config',
    'validate_connection_config',
]

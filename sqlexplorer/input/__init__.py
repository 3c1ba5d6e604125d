"""Input source resolution."""
from sqlexplorer.input.resolver import (
    InputResolutionError,
    SourceType,
    parse_source_identifier,
    resolve_source,
)

__all__ = [
    'InputResolutionError',
    'SourceType',
    'parse_source_identifier',
    'resolve_source',
]

"""Exception types raised by the schema model, resolver and providers."""


class SqlExplorerError(Exception):
    """Base class for SQL Explorer errors."""


class InvalidInputError(SqlExplorerError):
    """Raised when a schema object is built from missing or inconsistent identifiers.

    Must not derive from ``ValueError``: pydantic would wrap it in a
    ``ValidationError`` when raised from a validator.
    """


class PatternConstructionError(SqlExplorerError):
    """Raised when a table name cannot be embedded in a reference pattern."""


class MetadataFetchError(SqlExplorerError):
    """Raised when a metadata provider fails to read the catalog."""


class ReportExistsError(SqlExplorerError):
    """Raised when a report file exists and overwriting is disabled."""

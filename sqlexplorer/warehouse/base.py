"""Abstract base class for schema metadata providers."""
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlexplorer.models.schema import Column, ForeignKeyRecord, Routine, Table, View


def tables_from_column_rows(rows: Iterable[Sequence]) -> List[Table]:
    """Group INFORMATION_SCHEMA column rows into tables, keeping row order.

    Each row holds schema, table, column name, ordinal position, data type,
    numeric precision, maximum length, ``IS_NULLABLE`` and column default.
    """
    grouped: Dict[Tuple[str, str], List[Column]] = {}
    for row in rows:
        grouped.setdefault((row[0], row[1]), []).append(Column(
            name=row[2],
            ordinal_position=row[3],
            data_type=row[4],
            numeric_precision=row[5],
            max_length=row[6],
            is_nullable=(row[7] == 'YES'),
            column_default=row[8]
        ))

    return [
        Table(schema_name=schema, name=name, columns=columns)
        for (schema, name), columns in grouped.items()
    ]


class MetadataProvider(ABC):
    """Abstract base class for catalog metadata sources.

    Implementations read raw schema facts (tables, foreign keys, views and
    routines) from a live database or an offline snapshot. Fetch methods
    raise MetadataFetchError on failure rather than returning partial data.
    """

    #: Registry name of the warehouse the metadata comes from, if known
    warehouse: Optional[str] = None

    @abstractmethod
    def connect(self, config: Dict[str, Any]) -> None:
        """Establish the connection to the metadata source.

        Args:
            config: Source-specific connection configuration.
                For Snowflake: {account, user, password, warehouse, database, role}
                For SQL Server: {host, port, database, user, password, driver}

        Raises:
            Exception: If connection fails (source-specific exception)
        """

    def current_database(self, database: Optional[str] = None) -> str:
        """Name of the database being read.

        Args:
            database: Explicitly requested database, if any

        Returns:
            The database name used to label the snapshot.
        """
        return database or ""

    @abstractmethod
    def fetch_tables(self, database: str, schema: Optional[str] = None) -> List[Table]:
        """Fetch base tables with their columns.

        Args:
            database: Database/catalog name
            schema: Schema name, or None for every user schema

        Returns:
            Tables ordered by schema and name.
        """

    @abstractmethod
    def fetch_foreign_keys(
        self,
        database: str,
        schema: Optional[str] = None
    ) -> List[ForeignKeyRecord]:
        """Fetch foreign key constraints, one record per column pair.

        Args:
            database: Database/catalog name
            schema: Schema name, or None for every user schema

        Returns:
            Foreign key records ordered by schema and table name.
        """

    @abstractmethod
    def fetch_views(self, database: str, schema: Optional[str] = None) -> List[View]:
        """Fetch views with their full source definitions.

        Args:
            database: Database/catalog name
            schema: Schema name, or None for every user schema

        Returns:
            Views ordered by schema and name.
        """

    @abstractmethod
    def fetch_routines(self, database: str, schema: Optional[str] = None) -> List[Routine]:
        """Fetch stored procedures and functions with their source definitions.

        Args:
            database: Database/catalog name
            schema: Schema name, or None for every user schema

        Returns:
            Routines ordered by schema and name.
        """

    @abstractmethod
    def close(self) -> None:
        """Release the connection.

        Should be idempotent (safe to call multiple times).
        """

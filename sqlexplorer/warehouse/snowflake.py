"""Snowflake metadata provider implementation."""
import logging
from typing import Any, Dict, List, Optional, Tuple

import snowflake.connector  # pylint: disable=import-error,no-name-in-module
from snowflake.connector import DictCursor  # pylint: disable=import-error,no-name-in-module

from sqlexplorer.errors import MetadataFetchError
from sqlexplorer.models.schema import ForeignKeyRecord, Routine, Table, View
from sqlexplorer.warehouse.base import MetadataProvider, tables_from_column_rows

logger = logging.getLogger(__name__)

_SYSTEM_SCHEMA = 'INFORMATION_SCHEMA'


class SnowflakeAdapter(MetadataProvider):
    """Snowflake provider reading INFORMATION_SCHEMA and SHOW IMPORTED KEYS."""

    warehouse = 'snowflake'

    def __init__(self):
        """Initialize Snowflake adapter."""
        self.conn = None

    def connect(self, config: Dict[str, Any]) -> None:
        """Establish connection to Snowflake.

        Args:
            config: Connection configuration with keys:
                - account: Snowflake account identifier
                - user: Username
                - password: Password
                - warehouse: Warehouse name (optional)
                - database: Database name (optional)
                - role: Role name (optional)

        Raises:
            snowflake.connector.errors.Error: If connection fails
        """
        try:
            self.conn = snowflake.connector.connect(**config)
            logger.info("Successfully connected to Snowflake")
        except snowflake.connector.errors.Error as e:  # pylint: disable=no-member
            logger.error("Failed to connect to Snowflake: %s", e)
            raise

    def _cursor(self, *args):
        if not self.conn:
            raise MetadataFetchError("Not connected to Snowflake. Call connect() first.")
        return self.conn.cursor(*args)

    def _query(self, sql: str, params: Optional[Tuple] = None, dict_rows: bool = False):
        cursor = self._cursor(DictCursor) if dict_rows else self._cursor()
        try:
            logger.debug("Executing metadata query: %s", sql)
            cursor.execute(sql, params)
            return cursor.fetchall()
        except snowflake.connector.errors.Error as e:  # pylint: disable=no-member
            raise MetadataFetchError(f"Snowflake metadata query failed: {e}") from e
        finally:
            cursor.close()

    @staticmethod
    def _schema_filter(column: str, schema: Optional[str]) -> Tuple[str, Tuple]:
        if schema:
            return f"{column} = %s", (schema.upper(),)
        return f"{column} <> '{_SYSTEM_SCHEMA}'", ()

    def current_database(self, database: Optional[str] = None) -> str:
        """Resolve the database name, falling back to the session default."""
        if database:
            return database.upper()
        rows = self._query("SELECT CURRENT_DATABASE()")
        current = rows[0][0] if rows else None
        if not current:
            raise MetadataFetchError("No database specified and no session default database")
        return current

    def fetch_tables(self, database: str, schema: Optional[str] = None) -> List[Table]:
        """Fetch base tables and their columns from INFORMATION_SCHEMA."""
        database = self.current_database(database)
        condition, params = self._schema_filter("c.TABLE_SCHEMA", schema)

        query = f"""
        SELECT
            c.TABLE_SCHEMA,
            c.TABLE_NAME,
            c.COLUMN_NAME,
            c.ORDINAL_POSITION,
            c.DATA_TYPE,
            c.NUMERIC_PRECISION,
            c.CHARACTER_MAXIMUM_LENGTH,
            c.IS_NULLABLE,
            c.COLUMN_DEFAULT
        FROM {database}.INFORMATION_SCHEMA.COLUMNS c
        JOIN {database}.INFORMATION_SCHEMA.TABLES t
            ON t.TABLE_SCHEMA = c.TABLE_SCHEMA AND t.TABLE_NAME = c.TABLE_NAME
        WHERE t.TABLE_TYPE = 'BASE TABLE' AND {condition}
        ORDER BY c.TABLE_SCHEMA, c.TABLE_NAME, c.ORDINAL_POSITION
        """

        result = tables_from_column_rows(self._query(query, params))
        logger.info("Fetched %d tables from %s", len(result), database)
        return result

    def fetch_foreign_keys(
        self,
        database: str,
        schema: Optional[str] = None
    ) -> List[ForeignKeyRecord]:
        """Fetch foreign keys with SHOW IMPORTED KEYS."""
        database = self.current_database(database)
        scope = f"SCHEMA {database}.{schema.upper()}" if schema else f"DATABASE {database}"

        result = []
        for row in self._query(f"SHOW IMPORTED KEYS IN {scope}", dict_rows=True):
            result.append(ForeignKeyRecord(
                constraint_name=row['fk_name'],
                schema_name=row['fk_schema_name'],
                table_name=row['fk_table_name'],
                table_schema=row['fk_schema_name'],
                column_name=row['fk_column_name'],
                referenced_schema=row['pk_schema_name'],
                referenced_table=row['pk_table_name'],
                referenced_column=row['pk_column_name']
            ))

        result.sort(key=lambda r: (r.child_schema, r.table_name))
        logger.info("Fetched %d foreign key columns from %s", len(result), database)
        return result

    def fetch_views(self, database: str, schema: Optional[str] = None) -> List[View]:
        """Fetch view definitions from INFORMATION_SCHEMA.VIEWS."""
        database = self.current_database(database)
        condition, params = self._schema_filter("TABLE_SCHEMA", schema)

        query = f"""
        SELECT TABLE_SCHEMA, TABLE_NAME, VIEW_DEFINITION
        FROM {database}.INFORMATION_SCHEMA.VIEWS
        WHERE {condition}
        ORDER BY TABLE_SCHEMA, TABLE_NAME
        """
        result = [
            View(schema_name=row[0], name=row[1], definition=row[2])
            for row in self._query(query, params)
        ]
        logger.info("Fetched %d views from %s", len(result), database)
        return result

    def fetch_routines(self, database: str, schema: Optional[str] = None) -> List[Routine]:
        """Fetch procedures and functions from INFORMATION_SCHEMA.

        Snowflake allows overloads sharing one name; only the first
        definition of each (schema, name) is kept.
        """
        database = self.current_database(database)
        proc_condition, proc_params = self._schema_filter("PROCEDURE_SCHEMA", schema)
        func_condition, func_params = self._schema_filter("FUNCTION_SCHEMA", schema)

        query = f"""
        SELECT PROCEDURE_SCHEMA, PROCEDURE_NAME, PROCEDURE_DEFINITION, 'PROCEDURE'
        FROM {database}.INFORMATION_SCHEMA.PROCEDURES
        WHERE {proc_condition}
        UNION ALL
        SELECT FUNCTION_SCHEMA, FUNCTION_NAME, FUNCTION_DEFINITION, 'FUNCTION'
        FROM {database}.INFORMATION_SCHEMA.FUNCTIONS
        WHERE {func_condition}
        ORDER BY 1, 2
        """

        result = []
        seen = set()
        for row in self._query(query, proc_params + func_params):
            if (row[0], row[1]) in seen:
                logger.debug("Skipping overload of routine %s.%s", row[0], row[1])
                continue
            seen.add((row[0], row[1]))
            result.append(Routine(
                schema_name=row[0],
                name=row[1],
                definition=row[2],
                routine_type=row[3]
            ))

        logger.info("Fetched %d routines from %s", len(result), database)
        return result

    def close(self) -> None:
        """Close Snowflake connection."""
        if self.conn:
            try:
                self.conn.close()
                logger.info("Closed Snowflake connection")
            except Exception as e:  # pylint: disable=broad-except
                logger.warning("Error closing connection: %s", e)
            finally:
                self.conn = None

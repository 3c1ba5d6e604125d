"""SQL Server metadata provider implementation."""
import logging
from typing import Any, Dict, List, Optional, Tuple

import pyodbc

from sqlexplorer.errors import MetadataFetchError
from sqlexplorer.models.schema import ForeignKeyRecord, Routine, Table, View
from sqlexplorer.warehouse.base import MetadataProvider, tables_from_column_rows

logger = logging.getLogger(__name__)

DEFAULT_DRIVER = 'ODBC Driver 18 for SQL Server'

_SYSTEM_SCHEMAS = "('sys', 'INFORMATION_SCHEMA')"


def _odbc_value(value: Any) -> str:
    text = str(value)
    if any(ch in text for ch in ';{}') or text != text.strip():
        return '{' + text.replace('}', '}}') + '}'
    return text


def _yes_no(value: Any) -> str:
    if isinstance(value, str):
        return 'yes' if value.lower() in ('yes', 'true', '1') else 'no'
    return 'yes' if value else 'no'


def build_connection_string(config: Dict[str, Any]) -> str:
    """Build an ODBC connection string from connection settings.

    Args:
        config: Connection configuration with keys:
            - host: Server host name, optionally with ``\\INSTANCE``
            - port: TCP port (optional)
            - database: Database name
            - user: Login name
            - password: Password
            - driver: ODBC driver name (optional)
            - encrypt: Require an encrypted connection (optional)
            - trust_server_certificate: Skip certificate validation (optional)
    """
    server = str(config.get('host', 'localhost'))
    if config.get('port'):
        server = f"{server},{config['port']}"

    parts = [
        ('Driver', '{' + str(config.get('driver') or DEFAULT_DRIVER) + '}'),
        ('Server', _odbc_value(server)),
    ]
    for key, attribute in (('database', 'Database'), ('user', 'UID'), ('password', 'PWD')):
        if config.get(key):
            parts.append((attribute, _odbc_value(config[key])))
    if 'encrypt' in config:
        parts.append(('Encrypt', _yes_no(config['encrypt'])))
    if 'trust_server_certificate' in config:
        parts.append(('TrustServerCertificate', _yes_no(config['trust_server_certificate'])))

    return ';'.join(f"{attribute}={value}" for attribute, value in parts) + ';'


def quote_name(name: str) -> str:
    """Bracket-quote an identifier for use in T-SQL text."""
    return '[' + name.replace(']', ']]') + ']'


class SqlServerAdapter(MetadataProvider):
    """SQL Server provider reading INFORMATION_SCHEMA and the sys catalog views."""

    warehouse = 'sqlserver'

    def __init__(self):
        """Initialize SQL Server adapter."""
        self.conn = None

    def connect(self, config: Dict[str, Any]) -> None:
        """Establish connection to SQL Server through ODBC.

        Args:
            config: Connection settings, see ``build_connection_string``

        Raises:
            pyodbc.Error: If connection fails
        """
        try:
            self.conn = pyodbc.connect(build_connection_string(config))
            logger.info("Successfully connected to SQL Server")
        except pyodbc.Error as e:
            logger.error("Failed to connect to SQL Server: %s", e)
            raise

    def _query(self, sql: str, params: Tuple = ()):
        if not self.conn:
            raise MetadataFetchError("Not connected to SQL Server. Call connect() first.")
        cursor = self.conn.cursor()
        try:
            logger.debug("Executing metadata query: %s", sql)
            cursor.execute(sql, *params)
            return cursor.fetchall()
        except pyodbc.Error as e:
            raise MetadataFetchError(f"SQL Server metadata query failed: {e}") from e
        finally:
            cursor.close()

    @staticmethod
    def _schema_filter(column: str, schema: Optional[str]) -> Tuple[str, Tuple]:
        if schema:
            return f"{column} = ?", (schema,)
        return f"{column} NOT IN {_SYSTEM_SCHEMAS}", ()

    def current_database(self, database: Optional[str] = None) -> str:
        """Resolve the database name, falling back to the login's current database."""
        if database:
            return database
        rows = self._query("SELECT DB_NAME()")
        current = rows[0][0] if rows else None
        if not current:
            raise MetadataFetchError("No database specified and no current database")
        return current

    def fetch_tables(self, database: str, schema: Optional[str] = None) -> List[Table]:
        """Fetch base tables and their columns from INFORMATION_SCHEMA."""
        database = self.current_database(database)
        catalog = quote_name(database)
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
        FROM {catalog}.INFORMATION_SCHEMA.COLUMNS c
        JOIN {catalog}.INFORMATION_SCHEMA.TABLES t
            ON t.TABLE_SCHEMA = c.TABLE_SCHEMA AND t.TABLE_NAME = c.TABLE_NAME
        WHERE t.TABLE_TYPE = 'BASE TABLE'
            AND t.TABLE_NAME <> 'sysdiagrams'
            AND {condition}
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
        """Fetch foreign key column pairs from sys.foreign_keys."""
        database = self.current_database(database)
        catalog = quote_name(database)
        condition, params = self._schema_filter("cs.name", schema)

        query = f"""
        SELECT
            f.name,
            fs.name,
            ct.name,
            cs.name,
            cc.name,
            rs.name,
            rt.name,
            rc.name
        FROM {catalog}.sys.foreign_keys f
        JOIN {catalog}.sys.foreign_key_columns fc ON fc.constraint_object_id = f.object_id
        JOIN {catalog}.sys.schemas fs ON fs.schema_id = f.schema_id
        JOIN {catalog}.sys.tables ct ON ct.object_id = fc.parent_object_id
        JOIN {catalog}.sys.schemas cs ON cs.schema_id = ct.schema_id
        JOIN {catalog}.sys.columns cc
            ON cc.object_id = fc.parent_object_id AND cc.column_id = fc.parent_column_id
        JOIN {catalog}.sys.tables rt ON rt.object_id = fc.referenced_object_id
        JOIN {catalog}.sys.schemas rs ON rs.schema_id = rt.schema_id
        JOIN {catalog}.sys.columns rc
            ON rc.object_id = fc.referenced_object_id AND rc.column_id = fc.referenced_column_id
        WHERE {condition}
        ORDER BY cs.name, ct.name, f.name, fc.constraint_column_id
        """

        result = [
            ForeignKeyRecord(
                constraint_name=row[0],
                schema_name=row[1],
                table_name=row[2],
                table_schema=row[3],
                column_name=row[4],
                referenced_schema=row[5],
                referenced_table=row[6],
                referenced_column=row[7]
            )
            for row in self._query(query, params)
        ]
        logger.info("Fetched %d foreign key columns from %s", len(result), database)
        return result

    def fetch_views(self, database: str, schema: Optional[str] = None) -> List[View]:
        """Fetch views from INFORMATION_SCHEMA.VIEWS.

        VIEW_DEFINITION stops at 4000 characters, so the full text is taken
        from sys.sql_modules where it is visible.
        """
        database = self.current_database(database)
        catalog = quote_name(database)
        condition, params = self._schema_filter("v.TABLE_SCHEMA", schema)

        query = f"""
        SELECT v.TABLE_SCHEMA, v.TABLE_NAME, COALESCE(m.definition, v.VIEW_DEFINITION)
        FROM {catalog}.INFORMATION_SCHEMA.VIEWS v
        LEFT JOIN {catalog}.sys.sql_modules m
            ON m.object_id = OBJECT_ID(
                QUOTENAME(v.TABLE_CATALOG) + '.' + QUOTENAME(v.TABLE_SCHEMA)
                + '.' + QUOTENAME(v.TABLE_NAME))
        WHERE {condition}
        ORDER BY v.TABLE_SCHEMA, v.TABLE_NAME
        """
        result = [
            View(schema_name=row[0], name=row[1], definition=row[2])
            for row in self._query(query, params)
        ]
        logger.info("Fetched %d views from %s", len(result), database)
        return result

    def fetch_routines(self, database: str, schema: Optional[str] = None) -> List[Routine]:
        """Fetch procedures and functions from INFORMATION_SCHEMA.ROUTINES."""
        database = self.current_database(database)
        catalog = quote_name(database)
        condition, params = self._schema_filter("r.ROUTINE_SCHEMA", schema)

        query = f"""
        SELECT
            r.ROUTINE_SCHEMA,
            r.ROUTINE_NAME,
            COALESCE(m.definition, r.ROUTINE_DEFINITION),
            r.ROUTINE_TYPE
        FROM {catalog}.INFORMATION_SCHEMA.ROUTINES r
        LEFT JOIN {catalog}.sys.sql_modules m
            ON m.object_id = OBJECT_ID(
                QUOTENAME(r.ROUTINE_CATALOG) + '.' + QUOTENAME(r.ROUTINE_SCHEMA)
                + '.' + QUOTENAME(r.ROUTINE_NAME))
        WHERE {condition}
        ORDER BY r.ROUTINE_SCHEMA, r.ROUTINE_NAME
        """
        result = [
            Routine(
                schema_name=row[0],
                name=row[1],
                definition=row[2],
                routine_type=row[3]
            )
            for row in self._query(query, params)
        ]
        logger.info("Fetched %d routines from %s", len(result), database)
        return result

    def close(self) -> None:
        """Close SQL Server connection."""
        if self.conn:
            try:
                self.conn.close()
                logger.info("Closed SQL Server connection")
            except Exception as e:  # pylint: disable=broad-except
                logger.warning("Error closing connection: %s", e)
            finally:
                self.conn = None

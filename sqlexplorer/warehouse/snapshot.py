"""Offline metadata provider backed by a JSON snapshot file."""
import json
import logging
import os
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ValidationError

from sqlexplorer.errors import MetadataFetchError
from sqlexplorer.models.schema import ForeignKeyRecord, Routine, Table, View
from sqlexplorer.warehouse.base import MetadataProvider

logger = logging.getLogger(__name__)


class SnapshotFile(BaseModel):
    """On-disk layout of a schema snapshot."""

    name: str
    warehouse: Optional[str] = None
    tables: List[Table] = []
    foreign_keys: List[ForeignKeyRecord] = []
    views: List[View] = []
    routines: List[Routine] = []


def _in_schema(schema_name: str, schema: Optional[str]) -> bool:
    return not schema or schema_name.lower() == schema.lower()


class JsonSnapshotProvider(MetadataProvider):
    """Serves catalog metadata from a snapshot written by ``dump_snapshot``."""

    def __init__(self, path: str):
        """Initialize with the snapshot file path."""
        self.path = path
        self.snapshot: Optional[SnapshotFile] = None

    def connect(self, config: Optional[Dict[str, Any]] = None) -> None:
        """Load and validate the snapshot file.

        Raises:
            MetadataFetchError: If the file is missing or malformed
        """
        if not os.path.exists(self.path):
            raise MetadataFetchError(f"Snapshot file not found: {self.path}")

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            self.snapshot = SnapshotFile(**data)
        except (json.JSONDecodeError, TypeError) as e:
            raise MetadataFetchError(f"Invalid snapshot file: {self.path}\n{e}") from e
        except ValidationError as e:
            raise MetadataFetchError(f"Invalid snapshot contents: {self.path}\n{e}") from e

        logger.info("Loaded snapshot '%s' from %s", self.snapshot.name, self.path)

    def _loaded(self) -> SnapshotFile:
        if self.snapshot is None:
            self.connect()
        return self.snapshot

    @property
    def warehouse(self) -> Optional[str]:
        """Warehouse the snapshot was read from, if recorded."""
        return self._loaded().warehouse

    def current_database(self, database: Optional[str] = None) -> str:
        """The database name recorded in the snapshot."""
        return self._loaded().name

    def fetch_tables(self, database: str, schema: Optional[str] = None) -> List[Table]:
        """Tables from the snapshot, optionally limited to one schema."""
        return [t for t in self._loaded().tables if _in_schema(t.schema_name, schema)]

    def fetch_foreign_keys(
        self,
        database: str,
        schema: Optional[str] = None
    ) -> List[ForeignKeyRecord]:
        """Foreign key records from the snapshot, optionally limited to one schema."""
        return [fk for fk in self._loaded().foreign_keys if _in_schema(fk.child_schema, schema)]

    def fetch_views(self, database: str, schema: Optional[str] = None) -> List[View]:
        """Views from the snapshot, optionally limited to one schema."""
        return [v for v in self._loaded().views if _in_schema(v.schema_name, schema)]

    def fetch_routines(self, database: str, schema: Optional[str] = None) -> List[Routine]:
        """Routines from the snapshot, optionally limited to one schema."""
        return [r for r in self._loaded().routines if _in_schema(r.schema_name, schema)]

    def close(self) -> None:
        """Drop the loaded snapshot."""
        self.snapshot = None

"""Dependency graph over a database snapshot."""
import logging
from typing import Dict, FrozenSet, List, Optional

from sqlexplorer.models.database import Database
from sqlexplorer.models.schema import ForeignKey, Routine, Table, View
from sqlexplorer.sql.references import ReferenceDetector, RegexReferenceDetector

logger = logging.getLogger(__name__)


class DependencyGraph:
    """Answers dependency questions about a fixed Database snapshot.

    Table-to-table edges come from foreign keys. View and routine edges come
    from the reference detector applied to each definition. Results are
    memoised per table.
    """

    def __init__(
        self,
        database: Database,
        detector: Optional[ReferenceDetector] = None
    ):
        """Initialize the graph for a snapshot.

        Args:
            database: Snapshot to query
            detector: Reference detector for views and routines
                (default: RegexReferenceDetector)
        """
        self.database = database
        self.detector = detector or RegexReferenceDetector()

        children: Dict[Table, set] = {}
        for fk in database.foreign_keys:
            children.setdefault(fk.parent, set()).add(fk)
        self._child_fks: Dict[Table, FrozenSet[ForeignKey]] = {
            table: frozenset(fks) for table, fks in children.items()
        }
        self._views: Dict[Table, FrozenSet[View]] = {}
        self._routines: Dict[Table, FrozenSet[Routine]] = {}

    def child_foreign_keys(self, table: Table) -> FrozenSet[ForeignKey]:
        """Foreign keys whose parent (referenced) table is ``table``."""
        return self._child_fks.get(table, frozenset())

    def views_referencing(self, table: Table) -> FrozenSet[View]:
        """Views whose definition references ``table``.

        Raises:
            PatternConstructionError: If the table name cannot be matched safely.
        """
        views = self._views.get(table)
        if views is None:
            views = frozenset(
                view for view in self.database.views
                if self.detector.references(view.definition, table)
            )
            logger.debug("%d views reference %s", len(views), table.full_name)
            self._views[table] = views
        return views

    def routines_referencing(self, table: Table) -> FrozenSet[Routine]:
        """Routines whose definition references ``table``.

        Raises:
            PatternConstructionError: If the table name cannot be matched safely.
        """
        routines = self._routines.get(table)
        if routines is None:
            routines = frozenset(
                routine for routine in self.database.routines
                if self.detector.references(routine.definition, table)
            )
            logger.debug("%d routines reference %s", len(routines), table.full_name)
            self._routines[table] = routines
        return routines

    def child_tables(self, table: Table) -> List[Table]:
        """Distinct referencing tables of ``table``, ordered by full name."""
        return sorted(
            {fk.child for fk in self.child_foreign_keys(table)},
            key=lambda t: t.full_name
        )

    def sorted_views_referencing(self, table: Table) -> List[View]:
        """``views_referencing`` ordered by full name."""
        return sorted(self.views_referencing(table), key=lambda v: v.full_name)

    def sorted_routines_referencing(self, table: Table) -> List[Routine]:
        """``routines_referencing`` ordered by full name."""
        return sorted(self.routines_referencing(table), key=lambda r: r.full_name)

    def ordered_tables(self) -> List[Table]:
        """All tables in dependency order."""
        return self.database.tables_sorted_by_dependency()

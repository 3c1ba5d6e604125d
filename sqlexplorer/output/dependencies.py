"""Dependency report model shared by the text, markdown and JSON renderers."""
import logging
from typing import List, Optional

from pydantic import BaseModel

from sqlexplorer.core.graph import DependencyGraph
from sqlexplorer.errors import PatternConstructionError

logger = logging.getLogger(__name__)


class DependencyEntry(BaseModel):
    """Dependents of one table, in report order."""

    table: str
    tables: List[str] = []
    views: List[str] = []
    routines: List[str] = []
    warning: Optional[str] = None


def build_dependency_entries(graph: DependencyGraph) -> List[DependencyEntry]:
    """Collect the dependents of every table in dependency order.

    A table whose name cannot be turned into a reference pattern is reported
    with its foreign key dependents only, and a warning.
    """
    entries = []
    for table in graph.ordered_tables():
        entry = DependencyEntry(
            table=table.full_name,
            tables=[child.full_name for child in graph.child_tables(table)]
        )
        try:
            entry.views = [v.full_name for v in graph.sorted_views_referencing(table)]
            entry.routines = [r.full_name for r in graph.sorted_routines_referencing(table)]
        except PatternConstructionError as e:
            logger.warning("Skipping view/routine references for %s: %s", table.full_name, e)
            entry.warning = str(e)
        entries.append(entry)
    return entries

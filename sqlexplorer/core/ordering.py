"""Dependency ordering of tables based on foreign keys."""
import heapq
import logging
from typing import Dict, Iterable, List, Sequence, Set

from sqlexplorer.models.schema import ForeignKey, Table

logger = logging.getLogger(__name__)


def _cycle_member(start: int, parents: List[Set[int]], placed: List[bool]) -> int:
    """Walk unplaced parents from ``start`` until a table repeats.

    Every unplaced table still has an unplaced parent when no table is
    ready, so the walk always closes a cycle.
    """
    seen = set()
    current = start
    while current not in seen:
        seen.add(current)
        current = min(p for p in parents[current] if not placed[p])
    return current


def sort_tables_by_dependency(
    tables: Sequence[Table],
    foreign_keys: Iterable[ForeignKey]
) -> List[Table]:
    """Order tables so that referenced tables precede the tables referencing them.

    Stable Kahn topological sort: among the tables whose parents have all been
    placed, the one that comes first in the input goes next. When a cycle
    leaves no such table, the cycle reached first from the earliest remaining
    table is broken by placing one of its members, and sorting resumes.
    Self-references and foreign keys to tables outside ``tables`` are ignored.

    Args:
        tables: Tables in their natural order
        foreign_keys: Foreign keys supplying parent -> child edges

    Returns:
        New list containing every input table exactly once.
    """
    position: Dict[Table, int] = {}
    nodes: List[Table] = []
    for table in tables:
        if table not in position:
            position[table] = len(nodes)
            nodes.append(table)

    children: List[Set[int]] = [set() for _ in nodes]
    parents: List[Set[int]] = [set() for _ in nodes]
    for fk in foreign_keys:
        if fk.is_self_reference:
            continue
        parent = position.get(fk.parent)
        child = position.get(fk.child)
        if parent is None or child is None:
            continue
        children[parent].add(child)
        parents[child].add(parent)

    # Number of parents not yet placed
    in_degree = [len(p) for p in parents]
    ready = [index for index, degree in enumerate(in_degree) if degree == 0]
    heapq.heapify(ready)
    placed = [False] * len(nodes)
    next_unplaced = 0
    result: List[Table] = []

    while len(result) < len(nodes):
        if ready:
            index = heapq.heappop(ready)
        else:
            while placed[next_unplaced]:
                next_unplaced += 1
            index = _cycle_member(next_unplaced, parents, placed)
            logger.debug("Breaking dependency cycle at %s", nodes[index].full_name)

        placed[index] = True
        result.append(nodes[index])

        for child in sorted(children[index]):
            in_degree[child] -= 1
            if in_degree[child] == 0 and not placed[child]:
                heapq.heappush(ready, child)

    return result

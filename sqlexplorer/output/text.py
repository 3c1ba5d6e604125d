"""Plain text rendering of the dependency report."""
from typing import List

from sqlexplorer.output.dependencies import DependencyEntry

_SECTIONS = (
    ("Table Dependencies", "tables"),
    ("View Dependencies", "views"),
    ("Routine Dependencies", "routines"),
)


def render_text(entries: List[DependencyEntry]) -> str:
    """Render entries as a tab-indented tree, one block per table."""
    lines = []
    for entry in entries:
        lines.append(entry.table)
        for title, field in _SECTIONS:
            names = getattr(entry, field)
            if names:
                lines.append(f"\t{title}")
                lines.extend(f"\t\t{name}" for name in names)
    return "\n".join(lines) + "\n" if lines else ""

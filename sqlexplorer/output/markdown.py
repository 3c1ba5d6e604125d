"""Markdown output rendering for dependency reports."""
from typing import List

from sqlexplorer.output.dependencies import DependencyEntry


def render_markdown(database_name: str, entries: List[DependencyEntry]) -> str:
    """Render the dependency report as Markdown."""
    lines = [
        f"# Dependency Report: {database_name}",
        f"**Tables:** {len(entries)}",
        ""
    ]

    warnings = [e for e in entries if e.warning]
    if warnings:
        lines.append("### ⚠️ Warnings")
        for entry in warnings:
            lines.append(f"- {entry.table}: {entry.warning}")
        lines.append("")

    if not entries:
        lines.append("No tables found.")
        return "\n".join(lines)

    for entry in entries:
        lines.append(f"## {entry.table}")
        if not (entry.tables or entry.views or entry.routines):
            lines.append("No dependents identified.")
            lines.append("")
            continue

        lines.append("| Object Type | Name |")
        lines.append("|-------------|------|")
        for name in entry.tables:
            lines.append(f"| TABLE | {name} |")
        for name in entry.views:
            lines.append(f"| VIEW | {name} |")
        for name in entry.routines:
            lines.append(f"| ROUTINE | {name} |")
        lines.append("")

    return "\n".join(lines)

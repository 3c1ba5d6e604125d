"""Writes the report files for a database snapshot."""
import logging
import os
from typing import Dict, List, Optional

from sqlexplorer.config.settings import ReportConfig, ReportFormat
from sqlexplorer.core.graph import DependencyGraph
from sqlexplorer.errors import ReportExistsError
from sqlexplorer.models.database import Database
from sqlexplorer.output.csv import render_routines_csv, render_tables_csv, render_views_csv
from sqlexplorer.output.dependencies import build_dependency_entries
from sqlexplorer.output.json import render_json
from sqlexplorer.output.markdown import render_markdown
from sqlexplorer.output.text import render_text
from sqlexplorer.sql.references import get_detector
from sqlexplorer.warehouse import warehouse_dialect

logger = logging.getLogger(__name__)

_DEPENDENCY_SUFFIXES = {
    ReportFormat.TEXT: "Dependency.txt",
    ReportFormat.MARKDOWN: "Dependency.md",
    ReportFormat.JSON: "Dependency.json",
}


def report_file_prefix(database_name: str) -> str:
    """Database name with spaces replaced, used as the report file prefix."""
    return database_name.replace(" ", "_")


def check_existing_file(path: str, overwrite: bool) -> None:
    """Refuse to replace an existing file unless overwriting is enabled.

    Raises:
        ReportExistsError: If the file exists and ``overwrite`` is False
    """
    if os.path.exists(path) and not overwrite:
        raise ReportExistsError(f"File '{path}' already exists; use --overwrite to replace it.")


def write_reports(
    database: Database,
    config: ReportConfig,
    graph: Optional[DependencyGraph] = None
) -> List[str]:
    """Write the dependency report(s) and the table, view and routine CSVs.

    Every target path is checked before anything is written, so an existing
    file aborts the run without leaving a partial report set.

    Args:
        database: Snapshot to report on
        config: Run settings (output directory, overwrite, formats, detector)
        graph: Prebuilt dependency graph (built from ``config`` if omitted)

    Returns:
        Paths of the files written, in write order.

    Raises:
        ReportExistsError: If a report file exists and overwriting is disabled
    """
    if graph is None:
        dialect = config.dialect or warehouse_dialect(database.warehouse)
        graph = DependencyGraph(database, get_detector(config.detector, dialect))

    os.makedirs(config.output_dir, exist_ok=True)
    prefix = os.path.join(config.output_dir, report_file_prefix(database.name))

    targets: Dict[str, str] = {}
    for report_format in config.formats:
        targets[f"{prefix}_{_DEPENDENCY_SUFFIXES[report_format]}"] = report_format.value
    targets[f"{prefix}_Tables.csv"] = "tables"
    targets[f"{prefix}_Views.csv"] = "views"
    targets[f"{prefix}_Routines.csv"] = "routines"

    for path in targets:
        check_existing_file(path, config.overwrite)

    entries = build_dependency_entries(graph)
    renderers = {
        ReportFormat.TEXT.value: lambda: render_text(entries),
        ReportFormat.MARKDOWN.value: lambda: render_markdown(database.name, entries),
        ReportFormat.JSON.value: lambda: render_json(database.name, entries),
        "tables": lambda: render_tables_csv(database),
        "views": lambda: render_views_csv(database),
        "routines": lambda: render_routines_csv(database),
    }

    written = []
    for path, kind in targets.items():
        with open(path, 'w', encoding='utf-8', newline='') as f:
            f.write(renderers[kind]())
        logger.info("Wrote %s report to %s", kind, path)
        written.append(path)

    return written

"""Command-line interface for SQL Explorer - schema dependency reports."""
import argparse
import logging
import sys

from sqlexplorer.config.connection import load_connection_config, validate_connection_config
from sqlexplorer.config.settings import ReportConfig, ReportFormat
from sqlexplorer.core.graph import DependencyGraph
from sqlexplorer.core.snapshot import build_database, dump_snapshot, load_snapshot
from sqlexplorer.input.resolver import SourceType, resolve_source
from sqlexplorer.models.database import Database
from sqlexplorer.output.writer import write_reports
from sqlexplorer.sql.references import DETECTORS, get_detector
from sqlexplorer.warehouse import (
    WAREHOUSES,
    get_adapter,
    list_planned_warehouses,
    list_supported_warehouses,
    warehouse_dialect,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(verbose: bool = False) -> None:
    """Configure root logging for the CLI (DEBUG when verbose, else WARNING)."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr
    )


def _connect_adapter(warehouse_type, conn_file):
    """Create and connect the metadata provider for a warehouse."""
    adapter = get_adapter(warehouse_type)
    config = load_connection_config(warehouse_type, conn_file)
    validate_connection_config(warehouse_type, config)
    try:
        adapter.connect(config)
    except Exception as e:
        raise ConnectionError(
            f"Failed to connect to {warehouse_type}: {e}\n"
            f"Check your connection config at ~/.sqlexplorer/{warehouse_type}.yaml "
            f"or provide --conn-file."
        ) from e
    return adapter


def load_database(source: str, warehouse=None, conn_file=None) -> Database:
    """Load a snapshot file or read a live catalog into a Database."""
    source_type, metadata = resolve_source(source, warehouse)

    if source_type == SourceType.SNAPSHOT:
        return load_snapshot(source)

    adapter = _connect_adapter(warehouse, conn_file)
    try:
        return build_database(adapter, metadata['database'], metadata['schema'])
    finally:
        adapter.close()


def run_report(config: ReportConfig) -> int:
    """Generate all reports for the configured source.

    Returns:
        Process exit code (0 on success).
    """
    # Fails fast on an unknown detector before touching the database
    get_detector(config.detector)
    database = load_database(config.source, config.warehouse, config.conn_file)
    dialect = config.dialect or warehouse_dialect(database.warehouse)
    detector = get_detector(config.detector, dialect)

    written = write_reports(database, config, DependencyGraph(database, detector))
    for path in written:
        print(path)
    return 0


def run_snapshot(args) -> int:
    """Dump a live catalog to a JSON snapshot file."""
    database = load_database(args.source, args.warehouse, args.conn_file)
    dump_snapshot(database, args.output, overwrite=args.overwrite)
    print(args.output)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="SQL Explorer - schema and dependency reports",
        epilog="Examples:\n"
               "  Snapshot mode: sqlexplorer report --source books.json --output-dir reports\n"
               "  DB mode:       sqlexplorer report --source BOOKS.DBO --warehouse snowflake "
               "--output-dir reports\n"
               "  Snapshot:      sqlexplorer snapshot --source BOOKS --warehouse snowflake "
               "--output books.json",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command")

    report_parser = subparsers.add_parser(
        "report",
        help="Generate schema and dependency reports",
        description="Write dependency, table, view and routine reports for a schema"
    )
    report_parser.add_argument(
        "--source", required=True,
        help="Snapshot JSON file or database reference (DATABASE or DATABASE.SCHEMA)"
    )
    report_parser.add_argument(
        "--output-dir", "-d", required=True,
        help="Directory to write reports to (created if missing)"
    )
    report_parser.add_argument(
        "--overwrite", "-o", action="store_true",
        help="Overwrite report files if they exist"
    )
    report_parser.add_argument(
        "--format", dest="formats", action="append",
        choices=[f.value for f in ReportFormat],
        help="Dependency report format; repeatable (default: text)"
    )
    report_parser.add_argument(
        "--detector", choices=sorted(DETECTORS.keys()), default="regex",
        help="Reference detector for views and routines (default: regex)"
    )
    report_parser.add_argument(
        "--dialect",
        help="SQL dialect used by the sqlglot detector "
             "(default: the dialect of the source warehouse, tsql if unknown)"
    )
    _add_connection_args(report_parser)

    snapshot_parser = subparsers.add_parser(
        "snapshot",
        help="Save a live catalog as a JSON snapshot",
        description="Read a live catalog and write it to a JSON snapshot file"
    )
    snapshot_parser.add_argument(
        "--source", required=True,
        help="Database reference (DATABASE or DATABASE.SCHEMA)"
    )
    snapshot_parser.add_argument(
        "--output", required=True,
        help="Snapshot file to write"
    )
    snapshot_parser.add_argument(
        "--overwrite", "-o", action="store_true",
        help="Overwrite the snapshot file if it exists"
    )
    _add_connection_args(snapshot_parser)

    return parser


def _add_connection_args(parser):
    parser.add_argument(
        "--warehouse",
        choices=list(WAREHOUSES.keys()),
        help=f"Warehouse type (required for DB mode). "
             f"Currently supported: {', '.join(list_supported_warehouses())}; "
             f"planned: {', '.join(list_planned_warehouses())}"
    )
    parser.add_argument(
        "--conn-file",
        help="Path to connection config file (default: ~/.sqlexplorer/{warehouse}.yaml)"
    )


def main(argv=None):
    """Parse command line arguments and execute appropriate command."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if args.command not in ("report", "snapshot"):
        parser.print_help()
        sys.exit(1)

    try:
        if args.command == "report":
            config = ReportConfig(
                source=args.source,
                output_dir=args.output_dir,
                warehouse=args.warehouse,
                conn_file=args.conn_file,
                overwrite=args.overwrite,
                detector=args.detector,
                dialect=args.dialect,
                formats=args.formats or [ReportFormat.TEXT]
            )
            code = run_report(config)
        else:
            code = run_snapshot(args)
    except Exception as e:  # pylint: disable=broad-except
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(code)


if __name__ == "__main__":
    main()

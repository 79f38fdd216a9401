"""Command-line interface for DataShape.

This package provides the CLI entry point. It reads a file, runs it
through the ingestion orchestrator, optionally filters and sorts the
result, and prints (or writes) the normalized JSON.

    python -m cli ingest data.csv --sort '{"field": "name"}'
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from config import ConfigError, IngestSettings, load_settings
from core.orchestrator import IngestionOrchestrator
from ingestion.errors import IngestionError
from query.validator import QuerySpecError
from utils import (
    APP_NAME,
    APP_VERSION,
    EXIT_INVALID_INPUT,
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    FileHelperError,
    get_logger,
    read_input_bytes,
    resolve_log_level,
    safe_write_json,
    setup_logging,
)

logger = get_logger(__name__)

__all__ = [
    "EXIT_INVALID_INPUT",
    "EXIT_RUNTIME_ERROR",
    "EXIT_SUCCESS",
    "parse_args",
    "run_ingest",
    "main",
]


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="datashape",
        description=f"{APP_NAME} - normalize CSV, Excel, JSON, XML, HTML and text into typed JSON",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    ingest_parser = subparsers.add_parser("ingest", help="Normalize one input file")
    ingest_parser.add_argument("file", type=str, help="Input file to ingest")
    ingest_parser.add_argument(
        "--filter",
        type=str,
        default=None,
        help='Filter as JSON, e.g. \'{"field": "age", "operator": "greaterThan", "value": 10}\'',
    )
    ingest_parser.add_argument(
        "--sort",
        type=str,
        default=None,
        help='Sort as JSON, e.g. \'{"field": "name", "direction": "asc"}\'',
    )
    ingest_parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML/JSON settings file (optional)",
    )
    ingest_parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write JSON to this file instead of stdout",
    )
    ingest_parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Allow --output to replace an existing file",
    )
    ingest_parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers.add_parser("formats", help="List supported file extensions")

    return parser.parse_args(argv)


def run_ingest(args: argparse.Namespace, settings: IngestSettings) -> int:
    """Ingest one file and emit the normalized JSON.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    try:
        content = read_input_bytes(args.file)
        orchestrator = IngestionOrchestrator(settings=settings)
        file_name = Path(args.file).name
        endpoint = orchestrator.ingest_upload(file_name, content)
        data = orchestrator.fetch(endpoint.id, filter_spec=args.filter, sort_spec=args.sort)
    except IngestionError as e:
        print(json.dumps(e.to_dict(), indent=2), file=sys.stderr)
        return EXIT_INVALID_INPUT
    except QuerySpecError as e:
        print(f"✗ Invalid query:\n{e}", file=sys.stderr)
        return EXIT_INVALID_INPUT
    except FileHelperError as e:
        print(f"✗ {e}", file=sys.stderr)
        return EXIT_INVALID_INPUT

    if args.output:
        try:
            safe_write_json(data, Path(args.output), overwrite=args.overwrite)
        except FileHelperError as e:
            print(f"✗ {e}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR
        print(f"✓ Wrote normalized data to {args.output}", file=sys.stderr)
    else:
        print(json.dumps(data, indent=2, ensure_ascii=False))

    return EXIT_SUCCESS


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for `python -m cli` and the `datashape` script."""
    args = parse_args(argv)

    if args.command == "formats":
        from ingestion.dispatcher import build_default_decoders

        for extension in sorted(build_default_decoders()):
            print(f".{extension}")
        return EXIT_SUCCESS

    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        setup_logging(verbose=args.verbose)
        print(f"✗ Invalid settings:\n{e}", file=sys.stderr)
        return EXIT_INVALID_INPUT

    if args.verbose:
        setup_logging(verbose=True)
    else:
        setup_logging(level=resolve_log_level(settings.log_level))

    try:
        return run_ingest(args, settings)
    except KeyboardInterrupt:
        print("\n✗ Interrupted by user", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        print(f"✗ Runtime error: {type(e).__name__}: {e}", file=sys.stderr)
        logger.exception("Unexpected error during ingestion")
        return EXIT_RUNTIME_ERROR

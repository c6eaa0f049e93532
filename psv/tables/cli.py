#!/usr/bin/env python3
"""
CLI interface for table extraction.

Provides the `psv` command: reads Markdown-style pipe tables from files or
stdin and prints them as JSON.
"""

import argparse
import dataclasses
import logging
import sys
from typing import List, Optional

from .. import __version__
from ..utils.config import get_config
from .components.file_writer import FileWriter
from .data_models import TableIndexScope
from .table_extractor import TableExtractor

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def positive_int(value: str) -> int:
    """argparse type for 1-based positions."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="psv",
        description="Extract pipe-delimited tables from text and print them as JSON",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # All tables of a document as a JSON array
  psv notes.md

  # Second table only
  psv notes.md --table 2

  # Table with id 'people', rows as JSON Lines
  psv notes.md --id people --compact

  # Several files, positions restarting per file, written to a file
  psv a.md b.md --index-scope per-file -o tables.json --backup

Table positions count across all inputs by default (--index-scope global);
use --index-scope per-file to restart the count at 1 for every file.
Defaults can also be set with PSV_* variables in a .env.psv or .env file.
        """
    )

    parser.add_argument(
        "files",
        nargs="*",
        help="Input files, processed in order ('-' or none reads stdin)"
    )

    selection = parser.add_mutually_exclusive_group()
    selection.add_argument(
        "-t", "--table",
        type=positive_int,
        metavar="N",
        help="Only output the N-th table (1-based)"
    )
    selection.add_argument(
        "-i", "--id",
        metavar="ID",
        help="Only output the first table with this id"
    )

    parser.add_argument(
        "-c", "--compact",
        action="store_true",
        default=None,
        help="Output row objects only, one JSON object per line"
    )

    parser.add_argument(
        "--omit-null",
        action="store_true",
        default=None,
        help="Leave absent cells out of row objects instead of emitting null"
    )

    parser.add_argument(
        "--index-scope",
        choices=[scope.value for scope in TableIndexScope],
        help="Count table positions across all files or per file (default: global)"
    )

    parser.add_argument(
        "--delimiter",
        help="Cell delimiter character (default: |)"
    )

    parser.add_argument(
        "--legacy-line-consumption",
        action="store_true",
        default=None,
        help="Discard the line that ends a table instead of scanning it for the next table"
    )

    parser.add_argument(
        "-o", "--output",
        help="Write JSON to this file instead of stdout"
    )

    parser.add_argument(
        "--backup",
        action="store_true",
        help="Back up an existing output file before overwriting it"
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log debug details to stderr"
    )
    verbosity.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only log errors"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def configure_logging(level_name: str) -> None:
    """Send logs to stderr so stdout carries only JSON."""
    level = getattr(logging, level_name.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = get_config()
    if args.verbose:
        configure_logging("DEBUG")
    elif args.quiet:
        configure_logging("ERROR")
    else:
        configure_logging(config.get_log_level())

    # Command line options override environment defaults
    overrides = {
        "table_position": args.table,
        "table_id": args.id,
    }
    if args.compact is not None:
        overrides["compact"] = args.compact
    if args.omit_null is not None:
        overrides["omit_null"] = args.omit_null
    if args.index_scope is not None:
        overrides["index_scope"] = TableIndexScope.parse(args.index_scope)
    if args.delimiter is not None:
        overrides["delimiter"] = args.delimiter
    if args.legacy_line_consumption is not None:
        overrides["legacy_line_consumption"] = args.legacy_line_consumption

    try:
        settings = dataclasses.replace(config.get_extraction_settings(), **overrides)
    except ValueError as e:
        parser.error(str(e))

    output_stream = None
    try:
        extractor = TableExtractor(args.files, settings)

        if args.output:
            writer = FileWriter(args.output)
            output_stream = writer.open_stream(create_backup=args.backup)
            report = extractor.write(output_stream)
        else:
            report = extractor.write(sys.stdout)
            sys.stdout.flush()

        logger.info(str(report))

        if report.failed > 0:
            for failure in report.failures:
                print(f"⚠️  {failure.source}: {failure.error_message}", file=sys.stderr)
            sys.exit(1)

        sys.exit(0)

    except KeyboardInterrupt:
        print("\n\n⚠️  Extraction cancelled by user", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        print(f"\n❌ Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        if output_stream is not None:
            output_stream.close()


if __name__ == "__main__":
    main()

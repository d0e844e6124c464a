#!/usr/bin/env python3
"""Command line entry point: compare indexes between two MongoDB databases."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from dotenv import load_dotenv
from rich.console import Console

from mongo_compare_indexes import __version__
from mongo_compare_indexes.comparison.exceptions import ConnectivityError
from mongo_compare_indexes.comparison.service import compare_indexes
from mongo_compare_indexes.config.exceptions import ConfigurationError
from mongo_compare_indexes.config.settings import Settings, load_settings
from mongo_compare_indexes.core.exceptions import IndexCompareException
from mongo_compare_indexes.core.logging import configure_logging
from mongo_compare_indexes.interfaces.cli.report import RENDERERS

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_DIFFERENCES = 1
EXIT_CONFIGURATION = 2
EXIT_CONNECTIVITY = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mongo-compare-indexes",
        description="Compare indexes between two MongoDB databases",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)
    run = subparsers.add_parser(
        "run",
        help="Compare indexes between two databases and print missing indexes in each",
    )
    run.add_argument(
        "source_url",
        nargs="?",
        default=None,
        metavar="source-mongodb-url",
        help="Source server mongodb://src-host/db (default: $SOURCE_MONGO_URL)",
    )
    run.add_argument(
        "target_url",
        nargs="?",
        default=None,
        metavar="target-mongodb-url",
        help="Target server mongodb://target-host/db (default: $TARGET_MONGO_URL)",
    )
    run.add_argument(
        "--skip-missing-collections",
        action="store_true",
        help="Skip _id indexes that only indicate a missing collection",
    )
    run.add_argument(
        "--include-system-collections",
        action="store_true",
        default=None,
        help="Also compare indexes of system.* collections",
    )
    run.add_argument(
        "--no-divergent",
        action="store_true",
        help="Only check presence by name, do not compare key shapes",
    )
    run.add_argument(
        "--max-concurrency",
        type=int,
        default=None,
        help="Maximum concurrent index listings per database",
    )
    run.add_argument(
        "--timeout-ms",
        type=int,
        default=None,
        help="Timeout for each database operation in milliseconds",
    )
    run.add_argument(
        "--format",
        choices=sorted(RENDERERS),
        default="table",
        help="Output format (default: table)",
    )
    run.add_argument(
        "--fail-on-diff",
        action="store_true",
        help=f"Exit with status {EXIT_DIFFERENCES} when any difference is found",
    )
    run.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: $LOG_LEVEL or INFO)",
    )
    return parser


def resolve_settings(args: argparse.Namespace, base: Optional[Settings] = None) -> Settings:
    """Apply command line overrides on top of environment settings."""
    base = base or load_settings()
    return base.with_overrides(
        source_mongo_url=args.source_url,
        target_mongo_url=args.target_url,
        compare_include_system_collections=args.include_system_collections,
        compare_detect_divergent=False if args.no_divergent else None,
        compare_max_concurrency=args.max_concurrency,
        mongo_timeout_ms=args.timeout_ms,
        log_level=args.log_level,
    )


async def run_comparison(
    args: argparse.Namespace, settings: Settings, console: Console
) -> int:
    """Run one comparison and render it; returns the process exit code."""
    logger.info("Starting MongoDB index comparison...")
    report = await compare_indexes(
        settings.source_mongo_url,
        settings.target_mongo_url,
        settings,
        skip_missing=args.skip_missing_collections,
    )
    RENDERERS[args.format](console, report)
    logger.info("Index comparison completed in %.2f ms.", report.elapsed_ms)

    if args.fail_on_diff and report.diff.has_differences:
        return EXIT_DIFFERENCES
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None, console: Optional[Console] = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    console = console or Console()

    try:
        settings = resolve_settings(args)
    except ConfigurationError as e:
        configure_logging(args.log_level)
        logger.error("%s", e)
        return EXIT_CONFIGURATION

    configure_logging(settings.log_level)

    try:
        return asyncio.run(run_comparison(args, settings, console))
    except ConfigurationError as e:
        logger.error("%s", e)
        return EXIT_CONFIGURATION
    except ConnectivityError as e:
        logger.error("An error occurred: %s", e)
        logger.error(
            "Please check your MongoDB connection strings and ensure the databases are accessible."
        )
        return EXIT_CONNECTIVITY
    except IndexCompareException as e:
        logger.error("An error occurred: %s", e)
        return EXIT_CONNECTIVITY
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()

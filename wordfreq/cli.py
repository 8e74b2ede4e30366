import argparse
import dataclasses
import logging
import os
import sys
from typing import List, Optional

import structlog
from rich.console import Console

from wordfreq.core.app import initialize_app
from wordfreq.core.config import AppSettings, get_settings
from wordfreq.core.metrics import Metrics
from wordfreq.core.simple_error_handler import log_exception
from wordfreq.counting.aggregator import (
    AggregationResult,
    aggregate_sources,
    stalled_workers,
)
from wordfreq.extraction.sources import SourceDescriptor, build_sources
from wordfreq.report import display_failures, export_json, write_counts

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_PARTIAL = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wordfreq",
        description="Generate an aggregate word histogram for strings, URLs and files.",
    )
    parser.add_argument(
        "-s", dest="text", default="", help="Generate word histogram for given string."
    )
    parser.add_argument(
        "-u",
        dest="urls",
        default="",
        help="Generate word histogram for given URLs (whitespace-separated).",
    )
    parser.add_argument(
        "-f",
        dest="paths",
        default="",
        help="Generate word histogram for given file paths (whitespace-separated).",
    )
    parser.add_argument(
        "--max-workers", type=int, help="Maximum number of sources counted at once."
    )
    parser.add_argument(
        "--timeout", type=float, help="Per-request HTTP timeout in seconds."
    )
    parser.add_argument(
        "--deadline",
        type=float,
        help="Overall deadline in seconds; counts gathered so far are printed.",
    )
    parser.add_argument(
        "--json", dest="json_output", help="Also export the result to this JSON file."
    )
    return parser


def apply_overrides(settings: AppSettings, args: argparse.Namespace) -> AppSettings:
    """Returns a copy of settings with command-line overrides applied."""
    aggregation = settings.aggregation
    http = settings.http
    if args.max_workers is not None:
        if args.max_workers < 1:
            raise ValueError("--max-workers must be at least 1")
        aggregation = dataclasses.replace(aggregation, max_workers=args.max_workers)
    if args.deadline is not None:
        if args.deadline < 0:
            raise ValueError("--deadline must be >= 0")
        aggregation = dataclasses.replace(aggregation, deadline_seconds=args.deadline)
    if args.timeout is not None:
        if args.timeout <= 0:
            raise ValueError("--timeout must be > 0")
        http = dataclasses.replace(http, timeout_seconds=args.timeout)
    return dataclasses.replace(settings, aggregation=aggregation, http=http)


@log_exception
def run_aggregation(
    sources: List[SourceDescriptor], settings: AppSettings
) -> AggregationResult:
    metrics = Metrics()
    result = aggregate_sources(sources, settings, metrics=metrics)
    metrics.log_summary()
    return result


def run_cli(argv: List[str], console: Optional[Console] = None) -> int:
    """
    Parses command-line arguments, runs the aggregation and prints the result.
    This function is separate from main() to be easily testable.

    Returns:
        The process exit status.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    sources = build_sources(args.text, args.urls, args.paths)
    # Error out if nothing was specified.
    if not sources:
        parser.error("Please specify at least 1 string, URL or file path.")

    try:
        settings = apply_overrides(get_settings(), args)
    except (ValueError, RuntimeError) as e:
        parser.error(str(e))

    initialize_app(settings)
    logger.info(f"Counting words in {len(sources)} sources")

    result = run_aggregation(sources, settings)

    write_counts(result, sys.stdout)
    sys.stdout.flush()
    display_failures(result, console or Console(stderr=True))

    if args.json_output:
        export_json(result, args.json_output)
        logger.info(f"Result exported to {args.json_output}")

    return EXIT_OK if result.complete else EXIT_PARTIAL


def main():
    """
    Main entry point for the application's command-line interface.
    """
    status = run_cli(sys.argv[1:])

    abandoned = stalled_workers()
    if abandoned:
        # Pool threads are joined at interpreter exit, so a fetch stuck past
        # the deadline would hold the process open. Flush and leave now.
        logger.warning(
            f"Exiting with {len(abandoned)} worker threads still running after the deadline"
        )
        sys.stdout.flush()
        sys.stderr.flush()
        logging.shutdown()
        os._exit(status)

    sys.exit(status)


if __name__ == "__main__":
    main()

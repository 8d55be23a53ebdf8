"""
Command-line interface for the image verifier.
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from image_verifier.config import (
    DEFAULT_BASE_URL,
    DEFAULT_ENTRY_POINTS,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    VerifierConfig,
)
from image_verifier.fetcher import Fetcher
from image_verifier.report import CrawlReport, print_report, write_json
from image_verifier.scheduler import CrawlScheduler

logger = logging.getLogger("image_verifier.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="image-verifier",
        description="Crawl a site and verify that every referenced image loads (HTTP 200).",
    )
    parser.add_argument("--url", default=DEFAULT_BASE_URL, help=f"Base URL to crawl (default: {DEFAULT_BASE_URL})")
    parser.add_argument(
        "--entry-point",
        action="append",
        default=[],
        metavar="PATH",
        help="Extra path to seed the crawl with (repeatable)",
    )
    parser.add_argument(
        "--no-default-entry-points",
        action="store_true",
        help=f"Do not seed with {', '.join(DEFAULT_ENTRY_POINTS)}",
    )
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help=f"Per-request timeout in seconds (default: {DEFAULT_TIMEOUT:g})")
    parser.add_argument(
        "--max-redirects",
        type=int,
        default=DEFAULT_MAX_REDIRECTS,
        help=f"Redirect hops to follow per request (default: {DEFAULT_MAX_REDIRECTS})",
    )
    parser.add_argument("--workers", type=int, default=1, help="Concurrent image checks (default: 1)")
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument("--json", dest="json_output", metavar="PATH", help="Also write the report as JSON to PATH, or '-' for stdout")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def config_from_args(args: argparse.Namespace) -> VerifierConfig:
    entry_points = [] if args.no_default_entry_points else list(DEFAULT_ENTRY_POINTS)
    entry_points.extend(p for p in args.entry_point if p not in entry_points)
    return VerifierConfig(
        base_url=args.url,
        entry_points=entry_points,
        timeout=args.timeout,
        max_redirects=args.max_redirects,
        user_agent=args.user_agent,
        workers=args.workers,
        json_output=args.json_output,
        verbose=args.verbose,
    )


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        stream=sys.stdout,
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    # urllib3 is chatty at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def run(config: VerifierConfig) -> CrawlReport:
    """Run one verification pass with the given configuration."""
    with Fetcher(
        timeout=config.timeout,
        max_redirects=config.max_redirects,
        user_agent=config.user_agent,
    ) as fetcher:
        scheduler = CrawlScheduler(
            config.base_url,
            fetcher=fetcher,
            entry_points=config.entry_points,
            workers=config.workers,
        )
        return scheduler.run()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns 0 when every image works, 1 otherwise."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
    except ValueError as e:
        parser.print_usage(sys.stderr)
        sys.stderr.write(f"{parser.prog}: error: {e}\n")
        return 1

    configure_logging(config.verbose)
    sys.stdout.write("\nImage Verifier\n" + "=" * 50 + "\n")
    sys.stdout.write(f"Base URL: {config.base_url}\n\n")
    sys.stdout.flush()

    try:
        report = run(config)
    except Exception as e:
        logger.exception("Fatal error: %s", e)
        return 1

    print_report(report)
    if config.json_output:
        path = write_json(report, config.json_output)
        if path is not None:
            logger.info("Report written to: %s", path)

    return report.exit_code


if __name__ == "__main__":
    raise SystemExit(main())

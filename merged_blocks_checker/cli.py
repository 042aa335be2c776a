"""
Command line entry point.

Usage:
    merged-blocks-check STORE_URL RANGE [--bundle-size 100] [--print none|stats|full]

Exit codes:
    0 - the range is contiguous, linkable and complete
    1 - holes, fork issues, incomplete coverage or unreadable segments were reported
    2 - fatal error (bad range, bad configuration, unusable store)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .check.modes import PrintDetails
from .check.runner import run_check
from .config import CheckConfig
from .exceptions import CheckerError
from .logging_utils import configure_logging

EXIT_CLEAN = 0
EXIT_ISSUES = 1
EXIT_FATAL = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="merged-blocks-check",
        description="Check a merged blocks store for holes and fork breakage.",
        epilog=(
            "Examples:\n"
            "  merged-blocks-check file:///data/merged-blocks 0:1000000\n"
            "  merged-blocks-check ./merged-blocks 1000: --print stats\n"
            "  merged-blocks-check --config check.yaml"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "store_url",
        nargs="?",
        help="Store URL (file://..., memory://) or local directory; may contain {data-dir}",
    )
    parser.add_argument(
        "block_range",
        nargs="?",
        help='Block range "start:stop" (stop exclusive), "start:" or "start:+count"',
    )
    parser.add_argument("--bundle-size", type=int, help="Blocks per bundle (default: 100)")
    parser.add_argument(
        "--print",
        dest="print_details",
        choices=PrintDetails.names(),
        type=str.lower,
        help="none: list keys only; stats/full: decode and link every block",
    )
    parser.add_argument(
        "--first-streamable-block",
        type=int,
        help="Lowest block the archive is expected to start at (default: 0)",
    )
    parser.add_argument(
        "--progress-interval",
        type=int,
        help="Bundles between progress coverage lines (default: 10000)",
    )
    parser.add_argument("--data-dir", help="Directory substituted for {data-dir}")
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML settings file with a 'check' section (default: environment variables)",
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default="text",
        help="Diagnostic log format on stderr",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase diagnostic logging (-v info, -vv debug)",
    )
    return parser


def _load_config(args: argparse.Namespace) -> CheckConfig:
    overrides = {
        "store_url": args.store_url,
        "range": args.block_range,
        "bundle_size": args.bundle_size,
        "print": args.print_details,
        "first_streamable_block": args.first_streamable_block,
        "progress_interval": args.progress_interval,
        "data_dir": args.data_dir,
    }
    if args.config is not None:
        return CheckConfig.from_yaml(args.config, **overrides)
    return CheckConfig.from_environment(**overrides)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    configure_logging(level, json_format=args.log_format == "json")

    try:
        config = _load_config(args)
        summary = asyncio.run(run_check(config))
    except CheckerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FATAL
    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        return EXIT_FATAL

    return EXIT_CLEAN if summary.clean else EXIT_ISSUES


if __name__ == "__main__":
    sys.exit(main())

"""Command-line entry point: ``po-extract [DIRECTORY]``."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
import sys

from po_extractor.config import load_settings
from po_extractor.exceptions import ConfigurationError
from po_extractor.executor import extract_directory, render_output
from po_extractor.telemetry import SimpleReporter

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="po-extract",
        description="Extract seller and material data from purchase-order PDFs",
    )
    parser.add_argument(
        "directory",
        type=Path,
        nargs="?",
        default=None,
        help="Directory of documents (defaults to PURCHASE_ORDERS_FOLDER)",
    )
    parser.add_argument(
        "--env-file", type=Path, default=None, help="Optional .env file to load"
    )
    parser.add_argument(
        "--real-api",
        action="store_true",
        default=None,
        help="Call Gemini instead of the offline mock adapter",
    )
    parser.add_argument("--model", default=None, help="Override the model name")
    parser.add_argument(
        "--include-failures",
        action="store_true",
        help="Emit every file's outcome, including failures",
    )
    parser.add_argument(
        "--unbounded-retries",
        action="store_true",
        help="Retry throttled files forever instead of giving up",
    )
    parser.add_argument(
        "--telemetry",
        action="store_true",
        help="Print a timing report to stderr (needs PO_EXTRACT_TELEMETRY=1)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    overrides: dict[str, object] = {}
    if args.real_api:
        overrides["use_real_api"] = True
    if args.model:
        overrides["model"] = args.model
    if args.unbounded_retries:
        overrides["max_throttle_attempts"] = None

    reporter = SimpleReporter() if args.telemetry else None
    try:
        settings = load_settings(args.env_file, **overrides)
        output = asyncio.run(
            extract_directory(
                args.directory,
                settings,
                reporters=(reporter,) if reporter else (),
            )
        )
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)  # noqa: T201
        return 2

    print(render_output(output, include_failures=args.include_failures))  # noqa: T201
    if reporter is not None:
        print(reporter.get_report(), file=sys.stderr)  # noqa: T201
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""csv-translate - translate issue CSV rows into Japanese with an OpenAI model."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from .config import (
    DEFAULT_CONCURRENCY,
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    EXIT_FAILURE,
    EXIT_INPUT_NOT_FOUND,
    EXIT_INTERRUPTED,
    EXIT_MISSING_KEY,
    EXIT_OK,
    NEWLINES,
    TranslateConfig,
)
from .display import (
    ConsoleProgress,
    console,
    print_error,
    print_rows_found,
    print_translate_banner,
    print_translate_done,
    setup_logging,
)
from .errors import ConfigError, IssueExportError
from .translator import translate_csv

log = logging.getLogger(__name__)


class _Parser(argparse.ArgumentParser):
    # Exit code 2 is reserved for a missing API key.
    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(EXIT_FAILURE, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="csv-translate",
        description="Translate the title/body columns of a CSV file into Japanese.",
    )
    parser.add_argument("-i", "--in", dest="input", default=None, help="Input CSV path (required)")
    parser.add_argument("-o", "--out", dest="output", default=None, help="Output CSV path (required)")
    parser.add_argument(
        "-c", "--concurrency", type=int, default=DEFAULT_CONCURRENCY,
        help=f"Parallel translations (default {DEFAULT_CONCURRENCY})",
    )
    parser.add_argument(
        "-m", "--model", default=DEFAULT_MODEL,
        help=f"OpenAI model (default {DEFAULT_MODEL})",
    )
    parser.add_argument(
        "-t", "--temp", type=float, default=DEFAULT_TEMPERATURE,
        help=f"Temperature (default {DEFAULT_TEMPERATURE})",
    )
    parser.add_argument(
        "--newline", type=str.lower, choices=sorted(NEWLINES), default="crlf",
        help="lf | crlf (default crlf)",
    )
    parser.add_argument("--bom", action="store_true", default=False, help="Include UTF-8 BOM")
    parser.add_argument("-v", "--verbose", action="store_true", default=False, help="Debug logging")
    return parser


async def run_translate(config: TranslateConfig) -> int:
    in_abs = str(Path(config.input_path).resolve())
    out_abs = str(Path(config.output_path).resolve())
    print_translate_banner(config, in_abs, out_abs)

    in_path = Path(in_abs)
    if not in_path.is_file():
        print_error(f"input not found: {in_abs}")
        return EXIT_INPUT_NOT_FOUND
    console.print(f"input exists ({in_path.stat().st_size} bytes)")

    progress = ConsoleProgress()
    try:
        result = await translate_csv(
            config,
            progress=progress,
            on_rows=print_rows_found,
        )
    finally:
        progress.finish()
    print_translate_done(result)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    try:
        return _main_inner(argv)
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled.[/yellow]")
        return EXIT_INTERRUPTED


def _main_inner(argv: list[str] | None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if not args.input or not args.output:
        parser.print_help()
        return EXIT_FAILURE

    load_dotenv()
    try:
        config = TranslateConfig.from_env(
            input_path=args.input,
            output_path=args.output,
            concurrency=args.concurrency,
            model=args.model,
            temperature=args.temp,
            newline=NEWLINES[args.newline],
            include_bom=args.bom,
        )
    except ConfigError as error:
        print_error(str(error))
        return EXIT_MISSING_KEY

    try:
        return asyncio.run(run_translate(config))
    except (IssueExportError, OSError) as error:
        print_error(f"Failed: {error}")
        return EXIT_FAILURE
    except Exception:
        log.exception("Unexpected failure")
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())

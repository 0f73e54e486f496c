from __future__ import annotations

import argparse
import asyncio

from dotenv import load_dotenv

from .config import EXIT_FAILURE, EXIT_MISSING_KEY, EXIT_OK, NEWLINES, FetchConfig
from .display import print_error, print_fetch_summary, setup_logging
from .errors import ConfigError, IssueExportError
from .issues import write_issues_csv_file
from .types import CsvOptions, IssueRequest


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="issue-fetch",
        description="Export open GitHub issues of one repository to CSV.",
    )
    parser.add_argument("--owner", required=True, help="Repository owner.")
    parser.add_argument("--repo", required=True, help="Repository name.")
    parser.add_argument("--soup-id", required=True, help="Correlation id written to every row.")
    parser.add_argument("--project-id", required=True, help="Correlation id written to every row.")
    parser.add_argument(
        "-n", "--wanted", type=int, default=100,
        help="Number of issues to export (search API caps at 1000).",
    )
    parser.add_argument(
        "--label", action="append", default=[],
        help="Label filter; repeat for several labels.",
    )
    parser.add_argument(
        "--version-token", default="",
        help="Free-text token appended to the search query, e.g. v2.0.",
    )
    parser.add_argument("-o", "--out", default="issues.csv", help="Output CSV path.")
    parser.add_argument("--bom", action="store_true", help="Include UTF-8 BOM.")
    parser.add_argument("--newline", type=str.lower, choices=sorted(NEWLINES), default="crlf")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    load_dotenv()

    try:
        config = FetchConfig.from_env(include_bom=args.bom, newline=NEWLINES[args.newline])
    except ConfigError as error:
        print_error(str(error))
        return EXIT_MISSING_KEY

    request = IssueRequest(
        soup_id=args.soup_id,
        project_id=args.project_id,
        owner=args.owner,
        repo=args.repo,
        wanted_n=args.wanted,
        labels=tuple(args.label),
        version=args.version_token,
    )
    options = CsvOptions(include_bom=config.include_bom, newline=config.newline, headers=config.headers)

    try:
        path, response = asyncio.run(write_issues_csv_file(config.token, request, args.out, options))
    except (IssueExportError, OSError) as error:
        print_error(f"Error: {error}")
        return EXIT_FAILURE

    print_fetch_summary(str(path), response)
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())

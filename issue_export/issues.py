"""Fetch pipeline: search query -> paged fetch -> IssueRow projection -> CSV."""

from __future__ import annotations

import logging
from pathlib import Path

from .async_client import AsyncGitHubClient
from .output import issue_rows_to_csv, write_text
from .query import build_search_query
from .types import CsvOptions, IssueRequest, IssueResponse, IssueRow

log = logging.getLogger(__name__)


def _to_issue_row(request: IssueRequest, item: dict) -> IssueRow:
    return IssueRow(
        soup_id=request.soup_id,
        project_id=request.project_id,
        title=item.get("title") or "",
        body=item.get("body") or "",
    )


async def get_issues(
    token: str,
    request: IssueRequest,
    client: AsyncGitHubClient | None = None,
) -> IssueResponse:
    query = build_search_query(request.owner, request.repo, request.labels, request.version)

    if client is None:
        async with AsyncGitHubClient(token) as own_client:
            pages = await own_client.search_issues(query, request.wanted_n)
    else:
        pages = await client.search_issues(query, request.wanted_n)

    if not pages:
        return IssueResponse(count=0, query=query, items=())

    # total_count / incomplete_results are identical on every page of one query.
    first = pages[0]
    if first.incomplete_results:
        log.warning("GitHub Search API returned incomplete results for %r", query)

    raw_items = [item for page in pages for item in page.items][: request.wanted_n]
    items = tuple(_to_issue_row(request, item) for item in raw_items)
    log.info("Fetched %d of %d issues for %s", len(items), first.total_count, request.full_name)
    return IssueResponse(count=first.total_count, query=query, items=items)


async def get_issues_csv_string(
    token: str,
    request: IssueRequest,
    options: CsvOptions | None = None,
    client: AsyncGitHubClient | None = None,
) -> tuple[str, IssueResponse]:
    response = await get_issues(token, request, client=client)
    return issue_rows_to_csv(response.items, options), response


async def write_issues_csv_file(
    token: str,
    request: IssueRequest,
    path: str | Path,
    options: CsvOptions | None = None,
    client: AsyncGitHubClient | None = None,
) -> tuple[Path, IssueResponse]:
    csv_text, response = await get_issues_csv_string(token, request, options, client=client)
    out = Path(path)
    await write_text(out, csv_text)
    return out, response

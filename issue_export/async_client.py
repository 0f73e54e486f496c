"""Async GitHub issue-search client — fires every result page in parallel via aiohttp."""

from __future__ import annotations

import asyncio
import logging
import math

import aiohttp

from .config import GITHUB_API, GITHUB_API_VERSION, SEARCH_PAGE_SIZE, SEARCH_RESULT_CAP
from .errors import GitHubApiError
from .tasks import gather_or_cancel
from .types import SearchPage

log = logging.getLogger(__name__)


def page_count(wanted_n: int) -> int:
    """Number of search pages needed for ``wanted_n`` results (at most 10)."""
    if wanted_n <= 0:
        return 0
    return math.ceil(min(wanted_n, SEARCH_RESULT_CAP) / SEARCH_PAGE_SIZE)


class AsyncGitHubClient:
    """Search API client. Pass ``session`` to reuse (or fake) an aiohttp session."""

    def __init__(
        self,
        token: str,
        session: aiohttp.ClientSession | None = None,
        base_url: str = GITHUB_API,
    ):
        self.token = token
        self.base_url = base_url
        self._session = session
        self._owns_session = session is None

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "Authorization": f"Bearer {self.token}",
        }

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self):
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "AsyncGitHubClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def search_issues_page(self, query: str, page: int) -> SearchPage:
        session = await self._ensure_session()
        url = f"{self.base_url}/search/issues"
        params = {
            "q": query,
            "advanced_search": "true",
            "per_page": str(SEARCH_PAGE_SIZE),
            "page": str(page),
        }
        log.debug("GET %s page=%d q=%s", url, page, query)
        try:
            async with session.get(url, params=params, headers=self._headers()) as resp:
                if resp.status != 200:
                    body = await resp.text()
                    raise GitHubApiError(f"Search API {resp.status}: {body[:500]}", status=resp.status)
                payload = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise GitHubApiError(f"Search API request failed: {exc}") from exc
        return SearchPage.from_payload(payload)

    async def search_issues(self, query: str, wanted_n: int) -> list[SearchPage]:
        """Fetch pages 1..N concurrently; results come back in page order."""
        pages = page_count(wanted_n)
        if not pages:
            return []
        tasks = [self.search_issues_page(query, page) for page in range(1, pages + 1)]
        return await gather_or_cancel(tasks)

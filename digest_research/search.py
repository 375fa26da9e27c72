"""Search provider protocol, Tavily adapter and the per-query executor."""

import asyncio
from collections.abc import Awaitable, Callable
from functools import lru_cache
from typing import Any, Protocol
from urllib.parse import urlparse

from tavily import AsyncTavilyClient

from digest_research.config import ResearchSettings
from digest_research.exceptions import SearchExecutionError, SearchProviderError
from digest_research.logging import get_logger
from digest_research.models import Query, ResearchResult, SearchHit, SearchOptions
from digest_research.text import extract_keywords

log = get_logger("digest_research.search")

ProgressCallback = Callable[[int, int, Query], Awaitable[None]]


class SearchProvider(Protocol):
    """Anything that can run a web search."""

    async def search(self, query: str, options: SearchOptions) -> list[SearchHit]: ...


def source_from_url(url: str) -> str:
    host = urlparse(url).hostname or ""
    return host.removeprefix("www.")


class TavilySearchProvider:
    """Search provider backed by the Tavily search API."""

    name = "tavily"

    def __init__(self, api_key: str, search_depth: str = "basic", client: Any = None) -> None:
        if not api_key and client is None:
            raise ValueError("TAVILY_API_KEY is required for TavilySearchProvider")
        self.search_depth = search_depth
        self.client = client or AsyncTavilyClient(api_key=api_key)

    async def search(self, query: str, options: SearchOptions) -> list[SearchHit]:
        try:
            response = await self.client.search(
                query=query,
                search_depth=self.search_depth,
                max_results=options.max_results,
                topic="general",
                include_raw_content=False,
            )
        except Exception as e:
            raise SearchProviderError(provider=self.name, reason=str(e)) from e

        if not isinstance(response, dict) or not isinstance(response.get("results"), list):
            raise SearchProviderError(provider=self.name, reason="response has no results list")

        hits: list[SearchHit] = []
        for item in response["results"]:
            if not isinstance(item, dict) or not item.get("url"):
                continue
            url = str(item["url"])
            hits.append(
                SearchHit(
                    title=str(item.get("title") or ""),
                    url=url,
                    snippet=str(item.get("content") or ""),
                    source=source_from_url(url),
                )
            )
        return hits


def result_from_hit(hit: SearchHit) -> ResearchResult:
    """Create the ResearchResult for a hit with the neutral placeholder relevance."""
    return ResearchResult(
        title=hit.title,
        url=hit.url,
        snippet=hit.snippet,
        source=hit.source or source_from_url(hit.url),
        relevance=0.5,
        keywords=extract_keywords(hit.snippet),
    )


class SearchExecutor:
    """Runs queries one at a time and isolates per-query failures."""

    def __init__(self, provider: SearchProvider, settings: ResearchSettings) -> None:
        self.provider = provider
        self.options = SearchOptions(
            max_results=settings.max_results_per_query,
            language=settings.search_language,
        )
        self.timeout_s = settings.search_timeout_s

    async def execute(self, query: str) -> list[ResearchResult]:
        """Run one query.

        Raises:
            SearchExecutionError: on any provider, payload or timeout failure.
        """
        try:
            async with asyncio.timeout(self.timeout_s):
                hits = await self.provider.search(query, self.options)
            return [result_from_hit(hit) for hit in hits]
        except TimeoutError as e:
            raise SearchExecutionError(query=query, reason=f"timed out after {self.timeout_s}s") from e
        except Exception as e:
            raise SearchExecutionError(query=query, reason=str(e)) from e

    async def execute_all(
        self,
        queries: list[Query],
        progress: ProgressCallback | None = None,
    ) -> tuple[list[ResearchResult], int]:
        """Run every query in order, skipping failures.

        `progress` is awaited after each query with (completed, total, query).
        Returns the concatenated results and the number of failed queries.
        """
        results: list[ResearchResult] = []
        failed = 0
        for index, query in enumerate(queries, start=1):
            try:
                query_results = await self.execute(query.text)
            except SearchExecutionError as e:
                failed += 1
                log.warning("search.query_failed", search_query=query.text, intent=query.intent.value, error=e.reason)
            else:
                results.extend(query_results)
                log.debug("search.query_completed", search_query=query.text, hits=len(query_results))
            if progress is not None:
                await progress(index, len(queries), query)
        return results, failed


@lru_cache(maxsize=1)
def get_search_provider(api_key: str, search_depth: str = "basic") -> TavilySearchProvider:
    """Cached getter for production."""
    return TavilySearchProvider(api_key=api_key, search_depth=search_depth)

"""
SerpAPI web search client.

WHAT THIS DOES:
Fetches a handful of Google results for a query so the debaters (and the
judge) have fresh, linkable evidence to cite.

HOW IT WORKS:
SerpAPI exposes Google results as JSON at /search.json. We only keep
organic results that have both a title and a link.

DEGRADED MODES (search must never end a debate):
- No SERPAPI_KEY   → a single mock result describing the query
- Request fails    → a single placeholder result naming the failure
Neither raises; the agent simply gets weaker grounding context.

USAGE:
    client = SerpAPISearchClient(api_key="...")
    results = await client.search("nuclear power benefits advantages", limit=3)
    await client.close()
"""

import logging
import time
from typing import Optional
from urllib.parse import quote

import httpx

from dialectica.config import Settings, get_settings
from dialectica.services.debate.models import SearchResult
from dialectica.services.debate.protocols import BaseSearchClient

logger = logging.getLogger(__name__)

SERPAPI_URL = "https://serpapi.com/search.json"


class SerpAPISearchClient(BaseSearchClient):
    """
    Async client for SerpAPI's Google engine.

    The HTTP client is created lazily and reused across searches.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or None
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client (lazy initialization)."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def search(self, query: str, limit: int = 5) -> list[SearchResult]:
        """
        Search Google through SerpAPI.

        Args:
            query: Search query (e.g., "nuclear power problems risks concerns")
            limit: Maximum number of results to return

        Returns:
            Up to `limit` results, or a single mock/placeholder result
        """
        if not self.api_key:
            logger.warning("SERPAPI_KEY not found, using mock search results")
            return [_mock_result(query)]

        client = await self._get_client()

        params = {
            "engine": "google",
            "q": query,
            "api_key": self.api_key,
            "num": limit,
            "safe": "active",
        }

        try:
            response = await client.get(SERPAPI_URL, params=params)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Search error for '{query}': {e}")
            return [_error_result(query, e)]

        results = []
        for item in data.get("organic_results") or []:
            title = item.get("title")
            link = item.get("link")
            if title and link:
                results.append(SearchResult(title=title, url=link, snippet=item.get("snippet") or ""))

        logger.info(f"Search '{query}' returned {len(results)} results")
        return results[:limit]

    async def close(self):
        """Close the HTTP client (call when done)."""
        if self._client:
            await self._client.aclose()
            self._client = None


def _mock_result(query: str) -> SearchResult:
    return SearchResult(
        title=f"Research on: {query}",
        url=f"#mock-source-{int(time.time() * 1000)}",
        snippet=(
            f"This is a mock search result for the query: {query}. "
            "Configure SERPAPI_KEY to replace it with real search results."
        ),
    )


def _error_result(query: str, error: Exception) -> SearchResult:
    return SearchResult(
        title=f"Search error for: {query}",
        url=f"https://example.com/search?q={quote(query, safe='')}",
        snippet=f"Search failed for query: {query}. Error: {error}",
    )


# =============================================================================
# FACTORY
# =============================================================================

def get_search_client(settings: Optional[Settings] = None) -> Optional[SerpAPISearchClient]:
    """Search client from settings, or None when search is disabled."""
    settings = settings or get_settings()
    if not settings.search_enabled:
        return None
    return SerpAPISearchClient(api_key=settings.serpapi_key)

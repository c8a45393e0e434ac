"""
Tests for the SerpAPI search client.

Requests are answered by httpx.MockTransport, so these run offline.

Run with: pytest tests/test_search.py -v
"""

import httpx
import pytest

from dialectica.config import Settings
from dialectica.services.debate import SearchResult
from dialectica.services.search import SerpAPISearchClient, get_search_client

ORGANIC_RESULTS = {
    "organic_results": [
        {"title": "Solar outlook", "link": "https://example.org/solar", "snippet": "Cheap."},
        {"title": "No link here"},
        {"title": "Storage costs", "link": "https://example.org/storage"},
        {"title": "Third", "link": "https://example.org/third", "snippet": "More."},
    ]
}


@pytest.mark.asyncio
async def test_search_parses_organic_results():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=ORGANIC_RESULTS)

    client = SerpAPISearchClient(api_key="serp-key", transport=httpx.MockTransport(handler))
    try:
        results = await client.search("nuclear power benefits", limit=2)
    finally:
        await client.close()

    assert results == [
        SearchResult(title="Solar outlook", url="https://example.org/solar", snippet="Cheap."),
        SearchResult(title="Storage costs", url="https://example.org/storage", snippet=""),
    ]

    params = requests[0].url.params
    assert requests[0].url.host == "serpapi.com"
    assert params["engine"] == "google"
    assert params["q"] == "nuclear power benefits"
    assert params["api_key"] == "serp-key"
    assert params["num"] == "2"
    assert params["safe"] == "active"


@pytest.mark.asyncio
async def test_search_without_key_returns_mock_result():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("No request should be made without an API key")

    client = SerpAPISearchClient(api_key="", transport=httpx.MockTransport(handler))
    results = await client.search("remote work", limit=3)

    assert len(results) == 1
    assert results[0].title == "Research on: remote work"
    assert results[0].url.startswith("#mock-source-")


@pytest.mark.asyncio
async def test_http_error_returns_placeholder():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "internal"})

    client = SerpAPISearchClient(api_key="serp-key", transport=httpx.MockTransport(handler))
    try:
        results = await client.search("remote work risks", limit=3)
    finally:
        await client.close()

    assert len(results) == 1
    assert results[0].title == "Search error for: remote work risks"
    assert results[0].url == "https://example.com/search?q=remote%20work%20risks"


@pytest.mark.asyncio
async def test_invalid_json_returns_placeholder():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>not json</html>")

    client = SerpAPISearchClient(api_key="serp-key", transport=httpx.MockTransport(handler))
    try:
        results = await client.search("topic", limit=3)
    finally:
        await client.close()

    assert results[0].title == "Search error for: topic"


@pytest.mark.asyncio
async def test_missing_organic_results_is_empty():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"search_metadata": {"status": "Success"}})

    client = SerpAPISearchClient(api_key="serp-key", transport=httpx.MockTransport(handler))
    try:
        assert await client.search("topic", limit=3) == []
    finally:
        await client.close()


def test_factory_respects_search_enabled():
    assert get_search_client(Settings(search_enabled=False)) is None

    client = get_search_client(Settings(search_enabled=True, serpapi_key="serp-key"))
    assert isinstance(client, SerpAPISearchClient)
    assert client.api_key == "serp-key"

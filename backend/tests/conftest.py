"""
Shared fixtures for the debate tests.

None of these tests call OpenAI or SerpAPI: the completion and search
collaborators are replaced by scripted fakes that implement the same
abstract interfaces the real clients do.
"""

import asyncio
import json
import os

import pytest

# Avoid requiring real credentials during import-time initialization.
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("SERPAPI_KEY", "")

from dialectica.services.debate import (  # noqa: E402
    BaseCompletionClient,
    BaseSearchClient,
    SearchResult,
)


class ScriptedCompletion(BaseCompletionClient):
    """
    Completion fake that replays a list of responses in order.

    Each item is either response text or an Exception to raise.
    `before_call(n)` runs just before call number n (1-indexed), which
    lets tests simulate a client disconnect while a call is in flight.
    """

    def __init__(self, responses, before_call=None):
        self.responses = list(responses)
        self.before_call = before_call
        self.calls: list[tuple] = []

    async def complete(self, system_prompt, user_prompt) -> str:
        self.calls.append((system_prompt, user_prompt))
        if self.before_call:
            self.before_call(len(self.calls))

        # Yield to the event loop like a real network call would
        await asyncio.sleep(0)

        if not self.responses:
            raise AssertionError(f"Unexpected completion call #{len(self.calls)}")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class StaticSearch(BaseSearchClient):
    """Search fake returning the same results for every query."""

    def __init__(self, results=None, error=None):
        self.results = results or []
        self.error = error
        self.queries: list[tuple[str, int]] = []
        self.closed = False

    async def search(self, query, limit):
        self.queries.append((query, limit))
        if self.error:
            raise self.error
        return self.results[:limit]

    async def close(self):
        self.closed = True


def _agent_json(argument, *sources, wrap=False):
    """Agent response text; sources are (title, url) pairs."""
    text = json.dumps({
        "argument": argument,
        "sources": [{"title": title, "url": url} for title, url in sources],
    })
    if wrap:
        return f"Sure! Here is my argument:\n```json\n{text}\n```\nHope this helps."
    return text


def _judge_json(
    pro="Cheap solar [1].",
    con="Storage costs [2].",
    tradeoffs="Grid reliability versus cost.",
):
    return json.dumps({
        "strongestProArgument": pro,
        "strongestConArgument": con,
        "unresolvedTradeOffs": tradeoffs,
    })


@pytest.fixture
def agent_json():
    """Builder for agent responses: agent_json("Claim [S1].", ("A", "https://a"))"""
    return _agent_json


@pytest.fixture
def judge_json():
    """Builder for judge responses."""
    return _judge_json


@pytest.fixture
def scripted_completion():
    """Factory: scripted_completion([response, ...], before_call=None)"""
    return ScriptedCompletion


@pytest.fixture
def static_search():
    """Factory: static_search(results=[SearchResult(...)], error=None)"""
    return StaticSearch


@pytest.fixture
def search_results():
    return [
        SearchResult(
            title="Solar costs fall again",
            url="https://example.org/solar",
            snippet="Utility-scale solar prices fell 12% last year.",
        ),
        SearchResult(
            title="Storage bottlenecks",
            url="https://example.org/storage",
            snippet="Battery supply remains constrained.",
        ),
    ]

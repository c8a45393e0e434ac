"""
Tests for the OpenAI completion client.

The SDK client is replaced by a stub exposing chat.completions.create,
so no request ever leaves the process.

Run with: pytest tests/test_completion.py -v
"""

from types import SimpleNamespace

import httpx
import openai
import pytest

from dialectica.config import Settings
from dialectica.services.completion import OpenAICompletionClient, get_completion_client
from dialectica.services.debate import ConfigurationError, UpstreamError

CHAT_URL = "https://api.openai.com/v1/chat/completions"


class StubCompletions:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.requests: list[dict] = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error:
            raise self.error
        return self.result


def stub_client(result=None, error=None):
    completions = StubCompletions(result, error)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


def chat_response(content, finish_reason="stop"):
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message, finish_reason=finish_reason)])


# =============================================================================
# REQUESTS
# =============================================================================

@pytest.mark.asyncio
async def test_complete_sends_system_and_user_messages():
    client, completions = stub_client(chat_response('  {"argument": "x"}  '))
    completion = OpenAICompletionClient(api_key="test", model="gpt-4o", client=client)

    text = await completion.complete("You are a judge.", "Evaluate this.")

    assert text == '{"argument": "x"}'
    request = completions.requests[0]
    assert request["model"] == "gpt-4o"
    assert request["messages"] == [
        {"role": "system", "content": "You are a judge."},
        {"role": "user", "content": "Evaluate this."},
    ]
    assert request["max_completion_tokens"] == 2000
    assert request["temperature"] == 0.7


@pytest.mark.asyncio
async def test_complete_without_system_prompt():
    client, completions = stub_client(chat_response("ok"))
    completion = OpenAICompletionClient(api_key="test", client=client)

    await completion.complete(None, "Hello")

    assert completions.requests[0]["messages"] == [{"role": "user", "content": "Hello"}]


@pytest.mark.parametrize("model,has_max_tokens,has_temperature", [
    ("gpt-3.5-turbo", True, True),
    ("gpt-4o-mini", True, False),
    ("gpt-5-nano", False, False),
])
def test_request_options_per_model(model, has_max_tokens, has_temperature):
    client, _ = stub_client()
    options = OpenAICompletionClient(api_key="test", model=model, client=client)._request_options()

    assert ("max_completion_tokens" in options) == has_max_tokens
    assert ("temperature" in options) == has_temperature


# =============================================================================
# FAILURES
# =============================================================================

@pytest.mark.asyncio
async def test_http_error_becomes_upstream_error():
    response = httpx.Response(500, request=httpx.Request("POST", CHAT_URL))
    client, _ = stub_client(error=openai.InternalServerError("boom", response=response, body=None))
    completion = OpenAICompletionClient(api_key="test", client=client)

    with pytest.raises(UpstreamError) as exc_info:
        await completion.complete("system", "user")

    assert exc_info.value.status == 500
    assert exc_info.value.message == "OpenAI API request failed with status 500: boom"


@pytest.mark.asyncio
async def test_connection_error_becomes_upstream_error():
    error = openai.APIConnectionError(request=httpx.Request("POST", CHAT_URL))
    client, _ = stub_client(error=error)
    completion = OpenAICompletionClient(api_key="test", client=client)

    with pytest.raises(UpstreamError) as exc_info:
        await completion.complete("system", "user")

    assert exc_info.value.status is None


@pytest.mark.asyncio
@pytest.mark.parametrize("result", [
    SimpleNamespace(choices=[]),
    chat_response(None, finish_reason="length"),
    chat_response("   "),
])
async def test_missing_text_becomes_upstream_error(result):
    client, _ = stub_client(result)
    completion = OpenAICompletionClient(api_key="test", client=client)

    with pytest.raises(UpstreamError):
        await completion.complete("system", "user")


# =============================================================================
# FACTORY
# =============================================================================

def test_factory_requires_api_key():
    with pytest.raises(ConfigurationError) as exc_info:
        get_completion_client(Settings(openai_api_key=""))

    assert exc_info.value.message == "Missing OPENAI_API_KEY environment variable."


def test_factory_uses_settings():
    settings = Settings(openai_api_key="test", openai_model="gpt-4o-mini", openai_max_tokens=500)

    completion = get_completion_client(settings)

    assert isinstance(completion, OpenAICompletionClient)
    assert completion.model == "gpt-4o-mini"
    assert completion.max_tokens == 500

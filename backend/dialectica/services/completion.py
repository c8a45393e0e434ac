"""
OpenAI Completion Client.

WHAT THIS DOES:
Sends one system prompt + one user prompt to an OpenAI chat model and
returns the raw text. This is the only place the debate talks to a model.

WHAT THIS SERVICE DOESN'T DO (Parser's job):
- Extract JSON from the text ← parser.extract_json
- Validate or rewrite citations ← parser.rewrite_citations

MODEL QUIRKS:
Some small models reject sampling parameters:
- *nano* models: no max_completion_tokens, no temperature
- *mini* models: no temperature (only the default of 1 is accepted)

FAILURES:
Every failure becomes an UpstreamError (with the HTTP status when there
is one). The SDK's own retries are disabled: a failed call ends the debate.

USAGE:
    client = get_completion_client()
    text = await client.complete(system_prompt, user_prompt)
"""

import logging
from typing import Optional

import openai
from openai import AsyncOpenAI

from dialectica.config import Settings, get_settings
from dialectica.services.debate.errors import ConfigurationError, UpstreamError
from dialectica.services.debate.protocols import BaseCompletionClient

logger = logging.getLogger(__name__)


class OpenAICompletionClient(BaseCompletionClient):
    """
    Chat-completions backed implementation of BaseCompletionClient.

    One instance can serve many debates; it holds no debate state.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-3.5-turbo",
        max_tokens: int = 2000,
        temperature: float = 0.7,
        base_url: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            max_retries=0,
        )

    def _request_options(self) -> dict:
        """Sampling options the configured model accepts."""
        options = {}
        if "nano" not in self.model:
            options["max_completion_tokens"] = self.max_tokens
        if "mini" not in self.model and "nano" not in self.model:
            options["temperature"] = self.temperature
        return options

    async def complete(
        self,
        system_prompt: Optional[str],
        user_prompt: str,
    ) -> str:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_prompt})

        logger.info(f"Using OpenAI model: {self.model}")

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                **self._request_options(),
            )
        except openai.APIStatusError as e:
            message = f"OpenAI API request failed with status {e.status_code}"
            if e.message:
                message = f"{message}: {e.message}"
            logger.error(message)
            raise UpstreamError(message, status=e.status_code) from e
        except openai.APIConnectionError as e:
            logger.error(f"OpenAI API connection failed: {e}")
            raise UpstreamError(f"OpenAI API request failed: {e}") from e

        if not response.choices or response.choices[0].message is None:
            logger.error(f"OpenAI API response structure: {response!r}")
            raise UpstreamError("OpenAI API response did not contain expected structure.")

        content = response.choices[0].message.content
        if not content or not content.strip():
            logger.error(
                f"OpenAI API response had no text content "
                f"(finish_reason={response.choices[0].finish_reason})"
            )
            raise UpstreamError("OpenAI API response did not contain text content.")

        return content.strip()


# =============================================================================
# FACTORY
# =============================================================================

def get_completion_client(settings: Optional[Settings] = None) -> OpenAICompletionClient:
    """
    Build a completion client from settings.

    Raises:
        ConfigurationError: OPENAI_API_KEY is not set
    """
    settings = settings or get_settings()
    if not settings.openai_api_key:
        raise ConfigurationError("Missing OPENAI_API_KEY environment variable.")

    return OpenAICompletionClient(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        max_tokens=settings.openai_max_tokens,
        temperature=settings.openai_temperature,
        base_url=settings.openai_base_url,
    )

"""
Debate Protocols — Abstract interfaces for the debate's external collaborators.

WHAT THIS IS:
The orchestrator never talks to OpenAI or SerpAPI directly. It only knows
these two narrow interfaces, so the model provider or search provider can
be swapped (or faked in tests) without touching the turn loop.

IMPLEMENTATIONS:
- OpenAICompletionClient (services/completion.py) implements BaseCompletionClient
- SerpAPISearchClient (services/search.py) implements BaseSearchClient

USAGE:
    class EchoCompletion(BaseCompletionClient):
        async def complete(self, system_prompt, user_prompt) -> str:
            return '{"argument": "...", "sources": [...]}'

    orchestrator = DebateOrchestrator(completion=EchoCompletion())
"""

from abc import ABC, abstractmethod
from typing import Optional

from dialectica.services.debate.models import SearchResult


class BaseCompletionClient(ABC):
    """
    Abstract base class for language-model completion calls.

    Implementations raise UpstreamError on a failed call or on a
    response with no extractable text. The debate treats that as fatal.
    """

    @abstractmethod
    async def complete(
        self,
        system_prompt: Optional[str],
        user_prompt: str,
    ) -> str:
        """
        Run one completion.

        Args:
            system_prompt: Role instructions, or None to send only the user prompt
            user_prompt: The turn-specific prompt

        Returns:
            The raw response text
        """
        pass


class BaseSearchClient(ABC):
    """
    Abstract base class for web search.

    Search is best-effort grounding context. Implementations must not
    raise: on failure they return a placeholder result instead, so a
    search outage never ends a debate.
    """

    @abstractmethod
    async def search(self, query: str, limit: int) -> list[SearchResult]:
        """
        Search the web.

        Args:
            query: Search query
            limit: Maximum number of results

        Returns:
            Up to `limit` results (possibly empty or mock results)
        """
        pass

    async def close(self) -> None:
        """Release any held resources. Default: nothing to release."""
        return None

"""
Source Registry — Debate-wide citation numbering.

WHAT THIS DOES:
Agents cite sources with local markers ([S1], [S2], ...) that restart at 1
every turn. The registry turns each distinct URL into one global reference
number that stays the same for the rest of the debate.

EXAMPLE:
    Proponent turn 1 cites https://a, https://b  → [1], [2]
    Critic turn 1 cites https://c, https://a     → [3], [1]  (a is reused)

RULES:
- Numbers start at 1 and are handed out in first-seen order
- A URL never gets a second number; a number never points at a second URL
- The first title seen for a URL wins; later titles are ignored

One registry belongs to exactly one debate. Nothing here is shared
between concurrent debates.
"""

import logging
from typing import Optional

from dialectica.services.debate.models import Source

logger = logging.getLogger(__name__)

NO_SOURCES_SENTINEL = "No sources have been cited so far."


class SourceRegistry:
    """
    Bidirectional url ↔ number mapping for one debate.

    Only the citation rewriter should call resolve(); prompts and the
    final evaluation only read from it.
    """

    def __init__(self):
        self._number_for_url: dict[str, int] = {}
        self._sources_by_number: dict[int, Source] = {}
        self._next_number = 1

    @property
    def next_number(self) -> int:
        """The number the next new URL will receive."""
        return self._next_number

    def __len__(self) -> int:
        return len(self._sources_by_number)

    def __contains__(self, url: str) -> bool:
        return url.strip() in self._number_for_url

    def resolve(self, url: str, title: str) -> int:
        """
        Return the global number for a URL, assigning one if it is new.

        Args:
            url: Source URL (whitespace is trimmed)
            title: Source title, only recorded on first sighting

        Returns:
            The reference number for this URL
        """
        url = url.strip()
        existing = self._number_for_url.get(url)
        if existing is not None:
            return existing

        number = self._next_number
        self._number_for_url[url] = number
        self._sources_by_number[number] = Source(number=number, title=title.strip(), url=url)
        self._next_number += 1

        logger.debug(f"Registered source [{number}] {url}")
        return number

    def number_for(self, url: str) -> Optional[int]:
        """Number already assigned to a URL, or None."""
        return self._number_for_url.get(url.strip())

    def get(self, number: int) -> Optional[Source]:
        """Source registered under a number, or None."""
        return self._sources_by_number.get(number)

    def sources(self) -> list[Source]:
        """All registered sources sorted by reference number."""
        return [self._sources_by_number[n] for n in sorted(self._sources_by_number)]

    def format_reference_list(self) -> str:
        """
        Render the registry for a prompt.

        Example:
            [1] Solar outlook 2024 - https://example.org/solar
            [2] Grid storage costs - https://example.org/storage
        """
        if not self._sources_by_number:
            return NO_SOURCES_SENTINEL

        return "\n".join(
            f"[{source.number}] {source.title} - {source.url}"
            for source in self.sources()
        )

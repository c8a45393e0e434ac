"""
Debate Models — Data structures for the proponent/critic debate.

These dataclasses define the contract between debate components:
- TurnEntry: One argument in the transcript
- Source: A numbered citation shared across the whole debate
- SearchResult: Web search context offered to an agent
- AgentTurnResult: What the parser hands back for one agent turn
- Evaluation: The judge's final verdict
- DebateEvent: One message travelling from orchestrator to transport
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Role(str, Enum):
    """Who is speaking in a turn."""

    PROPONENT = "proponent"
    CRITIC = "critic"

    @property
    def label(self) -> str:
        """Display name used in prompts and status messages."""
        return self.value.capitalize()


@dataclass(frozen=True)
class TurnEntry:
    """
    A single entry in the debate transcript.

    Appended exactly once per successful agent call, never changed afterwards.
    The argument already carries global citation numbers like [3].
    """

    role: Role
    argument: str


@dataclass(frozen=True)
class Source:
    """A cited source with its debate-wide reference number."""

    number: int
    """Global reference number, assigned in first-citation order"""

    title: str
    url: str


@dataclass(frozen=True)
class SearchResult:
    """A web search hit offered to an agent as grounding context."""

    title: str
    url: str
    snippet: str = ""


@dataclass(frozen=True)
class CitationAnomaly:
    """
    A citation marker problem that was repaired instead of failing the turn.

    kind is "missing_marker" (a listed source whose [Sn] never appears)
    or "dangling_marker" (an [Sn] with no source entry, stripped out).
    """

    kind: str
    marker: str


@dataclass
class AgentTurnResult:
    """
    Parsed and citation-rewritten response from one agent turn.

    The argument has every local [Sn] marker replaced by its global
    number, and sources lists only what this turn actually cited.
    """

    argument: str
    """Argument text with global [n] citations"""

    sources: list[Source]
    """Sources cited in this turn, in local order, globally numbered"""

    next_source_number: int
    """Registry counter after this turn (next number to be assigned)"""

    anomalies: list[CitationAnomaly] = field(default_factory=list)
    """Marker problems repaired while rewriting (lenient mode only)"""


@dataclass(frozen=True)
class Evaluation:
    """The judge's structured summary, produced once per debate."""

    strongest_pro_argument: str
    strongest_con_argument: str
    unresolved_trade_offs: str


@dataclass(frozen=True)
class DebateEvent:
    """One named event on its way to the client stream."""

    type: str
    """Event name: status, turn, evaluation, complete or error"""

    data: dict[str, Any]
    """JSON-serializable payload"""

"""
Debate Module — Proponent vs. critic debate with a judge verdict.

A proponent and a critic take turns arguing a topic for N rounds, each
backed by a language-model call and grounded in cited web sources.
A judge then summarizes the strongest points on each side.

COMPONENTS:
- DebateOrchestrator: Main entry point, runs the turn loop and the judge
- SourceRegistry: Debate-wide citation numbering, deduplicated by URL
- prompts: Builds system/user prompts for each role
- parser: Extracts JSON from model output and rewrites [Sn] → [n]
- errors: The debate's failure taxonomy

USAGE:
    from dialectica.services.debate import run_debate
    from dialectica.services.streaming import EventChannel

    channel = EventChannel()
    session = await run_debate(
        "Cities should ban private cars",
        channel,
        completion=completion_client,
    )

    async for event in channel:
        print(event.type, event.data)

CITATION POLICY:
    Lenient by default (repair marker mismatches and keep going).
    Enable strict rejection via config: STRICT_CITATIONS=true
"""

# Main entry points
from dialectica.services.debate.orchestrator import (
    DebateOrchestrator,
    DebateSession,
    DebateState,
    run_debate,
    validate_topic,
)

# Data models
from dialectica.services.debate.models import (
    AgentTurnResult,
    CitationAnomaly,
    DebateEvent,
    Evaluation,
    Role,
    SearchResult,
    Source,
    TurnEntry,
)

# Components (for advanced usage)
from dialectica.services.debate.registry import SourceRegistry
from dialectica.services.debate.parser import (
    extract_json,
    parse_agent_response,
    parse_judge_response,
    rewrite_citations,
)

# Abstract bases
from dialectica.services.debate.protocols import (
    BaseCompletionClient,
    BaseSearchClient,
)

from dialectica.services.debate.errors import (
    ConfigurationError,
    DanglingMarker,
    DebateError,
    InvalidInput,
    InvalidShape,
    InvalidSource,
    MalformedResponse,
    MissingMarker,
    NoSources,
    UpstreamError,
)

__all__ = [
    # Main entry points
    "DebateOrchestrator",
    "DebateSession",
    "DebateState",
    "run_debate",
    "validate_topic",
    # Data models
    "AgentTurnResult",
    "CitationAnomaly",
    "DebateEvent",
    "Evaluation",
    "Role",
    "SearchResult",
    "Source",
    "TurnEntry",
    # Components
    "SourceRegistry",
    "extract_json",
    "parse_agent_response",
    "parse_judge_response",
    "rewrite_citations",
    # Abstract bases
    "BaseCompletionClient",
    "BaseSearchClient",
    # Errors
    "ConfigurationError",
    "DanglingMarker",
    "DebateError",
    "InvalidInput",
    "InvalidShape",
    "InvalidSource",
    "MalformedResponse",
    "MissingMarker",
    "NoSources",
    "UpstreamError",
]

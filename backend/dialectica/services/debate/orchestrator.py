"""
Debate Orchestrator — Runs the proponent/critic turn loop and the judge.

WHAT THIS DOES:
Main entry point for the debate system. Drives N rounds of
proponent → critic, then one judge pass, emitting every step as an event.

STATE MACHINE:
    idle → starting → proponent_turn(1) → critic_turn(1) → ...
         → proponent_turn(N) → critic_turn(N) → judging → complete

    any state → errored   (exception from search/prompt/model/parse)
    any state → aborted   (client disconnected; checked between steps)

HOW ONE TURN WORKS:
1. Emit a status event ("Proponent preparing turn 2...")
2. Search the web for grounding context (never fatal)
3. Build the prompts from the transcript and the source registry
4. Call the completion model
5. Parse the JSON and rewrite [Sn] markers to global [n] numbers
6. Append to the transcript and emit the turn event

Turns run strictly one after another. That is what keeps the registry's
numbering deterministic: nothing else touches it concurrently.

FAILURE MODEL:
- Any exception ends the debate with exactly one error event
- Turn events already emitted stay valid (the client keeps a partial debate)
- No retries

USAGE:
    channel = EventChannel()
    orchestrator = DebateOrchestrator(completion=client, search=search, total_turns=3)
    session = await orchestrator.run("Cities should ban cars", channel)
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional

from dialectica.config import Settings, get_settings
from dialectica.models.schemas import (
    ErrorPayload,
    EvaluationEventPayload,
    EvaluationPayload,
    SourcePayload,
    StatusPayload,
    TurnPayload,
)
from dialectica.services.debate.errors import DebateError, InvalidInput
from dialectica.services.debate.models import (
    CitationAnomaly,
    Evaluation,
    Role,
    SearchResult,
    TurnEntry,
)
from dialectica.services.debate.parser import parse_agent_response, parse_judge_response
from dialectica.services.debate.prompts import (
    build_agent_prompt,
    build_judge_prompt,
    search_query_for,
)
from dialectica.services.debate.protocols import BaseCompletionClient, BaseSearchClient
from dialectica.services.debate.registry import SourceRegistry

if TYPE_CHECKING:
    from dialectica.services.streaming import EventChannel

logger = logging.getLogger(__name__)

TOPIC_MAX_LENGTH = 280

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."


class DebateState(str, Enum):
    IDLE = "idle"
    STARTING = "starting"
    PROPONENT_TURN = "proponent_turn"
    CRITIC_TURN = "critic_turn"
    JUDGING = "judging"
    COMPLETE = "complete"
    ERRORED = "errored"
    ABORTED = "aborted"


TURN_STATES = {
    Role.PROPONENT: DebateState.PROPONENT_TURN,
    Role.CRITIC: DebateState.CRITIC_TURN,
}


@dataclass
class DebateSession:
    """
    Everything one debate owns.

    Created per request and passed through the turn loop. Nothing in here
    is shared with other debates.
    """

    topic: str
    total_turns: int
    transcript: list[TurnEntry] = field(default_factory=list)
    registry: SourceRegistry = field(default_factory=SourceRegistry)
    state: DebateState = DebateState.IDLE
    turn: int = 0
    evaluation: Optional[Evaluation] = None
    anomalies: list[CitationAnomaly] = field(default_factory=list)
    error: Optional[str] = None


class DebateAborted(Exception):
    """Raised at a checkpoint when the consumer has gone away."""


def validate_topic(topic: Optional[str]) -> str:
    """
    Trim and check a debate topic.

    Raises:
        InvalidInput: Empty topic, or longer than 280 characters
    """
    topic = (topic or "").strip()
    if not topic:
        raise InvalidInput("A topic is required to start a debate.")
    if len(topic) > TOPIC_MAX_LENGTH:
        raise InvalidInput(
            f"Topic is too long. Please keep it under {TOPIC_MAX_LENGTH} characters."
        )
    return topic


class DebateOrchestrator:
    """
    Orchestrates one proponent/critic debate followed by a judge pass.

    The orchestrator itself is stateless between debates; all per-debate
    state lives in the DebateSession created by run().
    """

    def __init__(
        self,
        completion: BaseCompletionClient,
        search: Optional[BaseSearchClient] = None,
        total_turns: int = 3,
        strict_citations: bool = False,
        search_results_per_turn: int = 3,
        judge_search_results: int = 2,
    ):
        """
        Initialize the orchestrator.

        Args:
            completion: Model used for every agent and judge call
            search: Optional web search for grounding context
            total_turns: Rounds of proponent + critic (at least 1)
            strict_citations: Reject marker mismatches instead of repairing them
            search_results_per_turn: Search results offered to each debater
            judge_search_results: Search results offered to the judge
        """
        self.completion = completion
        self.search = search
        self.total_turns = max(1, total_turns)  # At least 1
        self.strict_citations = strict_citations
        self.search_results_per_turn = search_results_per_turn
        self.judge_search_results = judge_search_results

    async def run(self, topic: str, channel: "EventChannel") -> DebateSession:
        """
        Run a full debate, emitting events into the channel.

        Never raises for debate failures: they become a single error event
        and an errored session. The channel is always closed on return.

        Returns:
            The finished (complete, errored or aborted) session
        """
        session = DebateSession(topic=(topic or "").strip(), total_turns=self.total_turns)
        start_time = time.time()

        try:
            session.topic = validate_topic(topic)

            self._set_state(session, DebateState.STARTING)
            channel.emit("status", _status(session, "Starting debate..."))
            logger.info(
                f"Starting debate on '{session.topic}': {self.total_turns} turns, "
                f"strict_citations={self.strict_citations}"
            )

            for turn in range(1, self.total_turns + 1):
                for role in (Role.PROPONENT, Role.CRITIC):
                    self._checkpoint(channel)
                    await self._run_agent_turn(session, channel, role, turn)

            self._checkpoint(channel)
            session.evaluation = await self._run_judge(session, channel)

            channel.emit(
                "evaluation",
                EvaluationEventPayload(
                    evaluation=EvaluationPayload(
                        strongest_pro_argument=session.evaluation.strongest_pro_argument,
                        strongest_con_argument=session.evaluation.strongest_con_argument,
                        unresolved_trade_offs=session.evaluation.unresolved_trade_offs,
                    ),
                    sources=[SourcePayload.model_validate(s) for s in session.registry.sources()],
                ).model_dump(by_alias=True),
            )
            self._set_state(session, DebateState.COMPLETE)
            channel.emit("status", _status(session, "Debate complete."))
            channel.emit("complete", {})

            logger.info(
                f"Debate complete: {len(session.transcript)} turns, "
                f"{len(session.registry)} unique sources, "
                f"{len(session.anomalies)} citation anomalies, "
                f"total time {time.time() - start_time:.2f}s"
            )

        except DebateAborted:
            self._set_state(session, DebateState.ABORTED)
            logger.info(
                f"Debate aborted by client after {len(session.transcript)} turns "
                f"({time.time() - start_time:.2f}s)"
            )

        except DebateError as e:
            self._fail(session, channel, e.message)

        except Exception as e:
            logger.exception("Debate orchestration failed")
            self._fail(session, channel, str(e) or UNEXPECTED_ERROR_MESSAGE)

        finally:
            channel.close()

        return session

    async def _run_agent_turn(
        self,
        session: DebateSession,
        channel: "EventChannel",
        role: Role,
        turn: int,
    ) -> None:
        """Run one proponent or critic turn and emit its turn event."""
        session.turn = turn
        self._set_state(session, TURN_STATES[role])
        channel.emit("status", _status(session, f"{role.label} preparing turn {turn}..."))

        search_results = await self._search(
            search_query_for(role, session.topic), self.search_results_per_turn
        )
        self._checkpoint(channel)

        system_prompt, user_prompt = build_agent_prompt(
            topic=session.topic,
            role=role,
            transcript=session.transcript,
            registry=session.registry,
            turn=turn,
            total_turns=session.total_turns,
            search_results=search_results,
        )

        call_start = time.time()
        raw_response = await self.completion.complete(system_prompt, user_prompt)
        result = parse_agent_response(
            raw_response, session.registry, strict=self.strict_citations
        )

        session.transcript.append(TurnEntry(role=role, argument=result.argument))
        session.anomalies.extend(result.anomalies)

        channel.emit(
            "turn",
            TurnPayload(
                role=role.value,
                turn=turn,
                argument=result.argument,
                sources=[SourcePayload.model_validate(s) for s in result.sources],
            ).model_dump(),
        )

        logger.info(
            f"{role.label} turn {turn} done in {time.time() - call_start:.2f}s: "
            f"{len(result.sources)} sources cited, next source number {result.next_source_number}"
        )

    async def _run_judge(self, session: DebateSession, channel: "EventChannel") -> Evaluation:
        """Ask the judge for the final three-part evaluation."""
        self._set_state(session, DebateState.JUDGING)
        channel.emit("status", _status(session, "Judge evaluating debate..."))

        search_results = await self._search(
            search_query_for(None, session.topic), self.judge_search_results
        )
        self._checkpoint(channel)

        system_prompt, user_prompt = build_judge_prompt(
            topic=session.topic,
            transcript=session.transcript,
            registry=session.registry,
            search_results=search_results,
        )
        raw_response = await self.completion.complete(system_prompt, user_prompt)
        return parse_judge_response(raw_response)

    async def _search(self, query: str, limit: int) -> list[SearchResult]:
        """Best-effort search: any failure just means no extra context."""
        if self.search is None or limit <= 0:
            return []
        try:
            return await self.search.search(query, limit)
        except Exception as e:
            logger.warning(f"Search for '{query}' failed, continuing without it: {e}")
            return []

    def _checkpoint(self, channel: "EventChannel") -> None:
        """Stop before the next external call if the client went away."""
        if channel.aborted:
            raise DebateAborted()

    def _set_state(self, session: DebateSession, state: DebateState) -> None:
        logger.debug(f"Debate state {session.state.value} → {state.value} (turn {session.turn})")
        session.state = state

    def _fail(self, session: DebateSession, channel: "EventChannel", message: str) -> None:
        logger.error(
            f"Debate failed in state {session.state.value} (turn {session.turn}): {message}"
        )
        session.error = message
        self._set_state(session, DebateState.ERRORED)
        channel.emit("error", ErrorPayload(error=message).model_dump())


def _status(session: DebateSession, message: str) -> dict:
    """Status event payload; turn is only included during agent turns."""
    turn = session.turn if session.state in TURN_STATES.values() else None
    return StatusPayload(
        state=session.state.value, message=message, turn=turn
    ).model_dump(exclude_none=True)


async def run_debate(
    topic: str,
    channel: "EventChannel",
    completion: BaseCompletionClient,
    search: Optional[BaseSearchClient] = None,
    settings: Optional[Settings] = None,
) -> DebateSession:
    """
    Convenience function to run a debate configured from settings.

    Takes ownership of the search client and closes it when the
    debate ends.

    Example:
        session = await run_debate(
            "Remote work is better than office work",
            channel,
            completion=get_completion_client(),
            search=get_search_client(),
        )
    """
    settings = settings or get_settings()
    orchestrator = DebateOrchestrator(
        completion=completion,
        search=search,
        total_turns=settings.dialectica_turns,
        strict_citations=settings.strict_citations,
        search_results_per_turn=settings.search_results_per_turn,
        judge_search_results=settings.judge_search_results,
    )
    try:
        return await orchestrator.run(topic, channel)
    finally:
        if search is not None:
            await search.close()

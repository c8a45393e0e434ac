"""
Debate Prompts — System and user prompts for the proponent, critic and judge.

WHAT THIS DOES:
Turns the current debate state (topic, transcript, cited sources, optional
search results) into the prompts sent to the completion model.

Everything here is a pure function: the same debate state always produces
the same prompts. Nothing is mutated.

OUTPUT CONTRACT (agents):
Agents must answer with JSON only:
    {
        "argument": "Solar is now the cheapest new power [S1], ...",
        "sources": [{"title": "...", "url": "..."}]
    }
where [S1] refers to sources[0], [S2] to sources[1], and so on.
The parser rewrites these local markers to global numbers afterwards.

OUTPUT CONTRACT (judge):
    {
        "strongestProArgument": "...",
        "strongestConArgument": "...",
        "unresolvedTradeOffs": "..."
    }
The judge cites the existing global numbers ([1], [2]) directly.
"""

from typing import Optional, Sequence

from dialectica.services.debate.models import Role, SearchResult, TurnEntry
from dialectica.services.debate.registry import SourceRegistry

EMPTY_TRANSCRIPT_SENTINEL = "No turns have been taken yet."

# Extra search keywords so each side gets evidence for its own position
SEARCH_KEYWORDS = {
    Role.PROPONENT: "benefits advantages",
    Role.CRITIC: "problems risks concerns",
}

ROLE_DESCRIPTIONS = {
    Role.PROPONENT: "supporting the idea",
    Role.CRITIC: "critiquing the idea",
}

PROPONENT_SYSTEM_PROMPT = (
    'You are a world-class expert on "{topic}". '
    "Your objective is to argue passionately in favor of the topic. "
    "Adopt an optimistic, constructive tone and build the strongest possible case "
    "grounded in verifiable evidence."
)

CRITIC_SYSTEM_PROMPT = (
    'You are a world-class critical thinker examining "{topic}". '
    "Your objective is to highlight flaws, risks, counterarguments, and trade-offs. "
    "Adopt a skeptical, analytical tone while grounding every point in verifiable evidence."
)

JUDGE_SYSTEM_PROMPT = (
    "You are an impartial judge summarizing debates. "
    "Highlight the most compelling point from each side and any unresolved tensions."
)

AGENT_REQUIREMENTS = """Requirements:
- Reference prior points as needed to maintain a coherent debate.
- Use the search results above and your knowledge to provide factual claims and evidence.
- Cite evidence inside your argument using markers like [S1], [S2], etc.
- Return ONLY valid JSON with exactly two properties: "argument" (string) and "sources" (array).
- The "sources" array must include one object per citation marker with "title" and "url" fields.
- If you reuse an existing source, include it again in the "sources" array with the same URL.
- Each citation marker in "argument" must correspond to an item in "sources" (1-indexed, e.g., [S1]).
- Keep the response under 250 words.
- Do not include any explanatory text outside of the JSON."""

JUDGE_REQUIREMENTS = """Provide a structured evaluation containing three sections exactly: "Strongest Pro Argument", "Strongest Con Argument", and "Unresolved Trade-offs".
Each section should be 1-3 sentences.
Cite supporting evidence using the existing citation numbers in square brackets.
Return ONLY valid JSON with properties "strongestProArgument", "strongestConArgument", and "unresolvedTradeOffs"."""


def proponent_system_prompt(topic: str) -> str:
    return PROPONENT_SYSTEM_PROMPT.format(topic=topic)


def critic_system_prompt(topic: str) -> str:
    return CRITIC_SYSTEM_PROMPT.format(topic=topic)


def system_prompt_for(role: Role, topic: str) -> str:
    """Fixed system prompt for a debater role."""
    if role is Role.PROPONENT:
        return proponent_system_prompt(topic)
    return critic_system_prompt(topic)


def search_query_for(role: Optional[Role], topic: str) -> str:
    """
    Web search query for a turn.

    Debaters search for evidence on their side of the argument;
    the judge (role=None) searches the bare topic.
    """
    if role is None:
        return topic
    return f"{topic} {SEARCH_KEYWORDS[role]}"


def format_transcript(transcript: Sequence[TurnEntry]) -> str:
    """
    Render prior turns as a numbered list.

    Example:
        1. Proponent: Solar is cheap [1].
        2. Critic: Storage is not [2].
    """
    if not transcript:
        return EMPTY_TRANSCRIPT_SENTINEL

    return "\n".join(
        f"{index}. {entry.role.label}: {entry.argument}"
        for index, entry in enumerate(transcript, 1)
    )


def format_search_context(
    search_results: Optional[Sequence[SearchResult]],
    heading: str,
) -> str:
    """Render search hits as [SRk] entries, or "" when there are none."""
    if not search_results:
        return ""

    entries = "\n\n".join(
        f"[SR{index}] {result.title} - {result.url}\n{result.snippet}"
        for index, result in enumerate(search_results, 1)
    )
    return f"\n{heading}\n{entries}\n\n"


def turn_descriptor(turn: int, total_turns: int) -> str:
    """Which kind of turn this is; the opening statement wins when N == 1."""
    if turn == 1:
        return "opening statement"
    if turn == total_turns:
        return "final turn"
    return "next turn"


def build_agent_prompt(
    topic: str,
    role: Role,
    transcript: Sequence[TurnEntry],
    registry: SourceRegistry,
    turn: int,
    total_turns: int,
    search_results: Optional[Sequence[SearchResult]] = None,
) -> tuple[str, str]:
    """
    Build the prompts for one proponent or critic turn.

    Args:
        topic: The debate topic
        role: Who is speaking
        transcript: All turns so far (already globally numbered)
        registry: Sources cited so far
        turn: Current round, 1-indexed
        total_turns: Total number of rounds
        search_results: Optional grounding context

    Returns:
        Tuple of (system_prompt, user_prompt)
    """
    search_context = format_search_context(
        search_results, f'Recent search results for "{topic}":'
    )

    user_prompt = (
        f'Debate topic: "{topic}"\n\n'
        f"Transcript so far (each entry already includes any citations):\n"
        f"{format_transcript(transcript)}\n\n"
        f"Available citation reference numbers and their sources:\n"
        f"{registry.format_reference_list()}\n\n"
        f"{search_context}"
        f"You are {ROLE_DESCRIPTIONS[role]}. "
        f"This is your {turn_descriptor(turn, total_turns)} (turn {turn} of {total_turns}).\n"
        f"{AGENT_REQUIREMENTS}"
    )

    return system_prompt_for(role, topic), user_prompt


def build_judge_prompt(
    topic: str,
    transcript: Sequence[TurnEntry],
    registry: SourceRegistry,
    search_results: Optional[Sequence[SearchResult]] = None,
) -> tuple[str, str]:
    """
    Build the prompts for the final judge pass.

    Returns:
        Tuple of (system_prompt, user_prompt)
    """
    search_context = format_search_context(
        search_results, "Additional context from recent search results:"
    )

    user_prompt = (
        f'You are an impartial and expert judge. The following is a debate transcript on "{topic}".\n\n'
        f"Debate transcript (with citations already embedded):\n"
        f"{format_transcript(transcript)}\n\n"
        f"Citation reference list:\n"
        f"{registry.format_reference_list()}\n\n"
        f"{search_context}"
        f"{JUDGE_REQUIREMENTS}"
    )

    return JUDGE_SYSTEM_PROMPT, user_prompt

"""
Agent Response Parser — JSON extraction and citation rewriting.

WHAT THIS DOES:
1. Pulls the JSON object out of a raw model response (models like to wrap
   JSON in prose or code fences)
2. Validates the agent's {argument, sources} contract
3. Rewrites local [S1], [S2] markers into global [n] numbers using the
   debate's SourceRegistry
4. Validates the judge's three-field evaluation

VALIDATION ORDER (agent turns):
1. argument is a string, sources is a list         → InvalidShape
2. sources is not empty                            → NoSources
3. every source has a non-empty title and url      → InvalidSource
4. every source's [Sk] marker appears in argument  → anomaly (MissingMarker if strict)
5. resolve URLs and substitute [Sk] → [n]
6. strip leftover [S<n>] markers                   → anomaly (DanglingMarker if strict)

Steps 1-4 (and the strict dangling check) all run before the registry
is touched, so a rejected response never consumes reference numbers.

EXAMPLE:
    raw = '{"argument": "Claim [S1].", "sources": [{"title": "A", "url": "https://x"}]}'
    result = parse_agent_response(raw, registry)
    # result.argument == "Claim [1]."
    # result.sources == [Source(number=1, title="A", url="https://x")]
"""

import json
import logging
import re
from typing import Any

from dialectica.services.debate.errors import (
    DanglingMarker,
    InvalidShape,
    InvalidSource,
    MalformedResponse,
    MissingMarker,
    NoSources,
)
from dialectica.services.debate.models import (
    AgentTurnResult,
    CitationAnomaly,
    Evaluation,
    Source,
)
from dialectica.services.debate.registry import SourceRegistry

logger = logging.getLogger(__name__)

# Greedy: from the first "{" to the last "}" in the response
JSON_SPAN_PATTERN = re.compile(r"\{[\s\S]*\}")

# Any local citation marker, e.g. [S1], [S12]
LOCAL_MARKER_PATTERN = re.compile(r"\[S\d+\]")

JUDGE_FIELDS = (
    "strongestProArgument",
    "strongestConArgument",
    "unresolvedTradeOffs",
)


def extract_json(raw_text: str) -> dict[str, Any]:
    """
    Extract the JSON object from a model response.

    Raises:
        MalformedResponse: No {...} span, or the span is not a valid JSON object
    """
    match = JSON_SPAN_PATTERN.search(raw_text or "")
    if not match:
        raise MalformedResponse("The model response did not include JSON output.")

    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.debug(f"JSON decode failed at position {e.pos}: {raw_text[:200]!r}")
        raise MalformedResponse("Failed to parse the model response JSON.") from e

    if not isinstance(parsed, dict):
        raise MalformedResponse("The model response JSON is not an object.")

    return parsed


def _validate_sources(raw_sources: list) -> list[tuple[str, str]]:
    """Check every source entry and return trimmed (title, url) pairs."""
    cleaned = []
    for source in raw_sources:
        if (
            not isinstance(source, dict)
            or not isinstance(source.get("title"), str)
            or not isinstance(source.get("url"), str)
        ):
            raise InvalidSource('Each source must include both "title" and "url" fields.')

        title = source["title"].strip()
        url = source["url"].strip()
        if not title or not url:
            raise InvalidSource("Source title and URL cannot be empty.")

        cleaned.append((title, url))
    return cleaned


def rewrite_citations(
    parsed: dict[str, Any],
    registry: SourceRegistry,
    strict: bool = False,
) -> AgentTurnResult:
    """
    Validate an agent's JSON and rewrite its citations to global numbers.

    Args:
        parsed: JSON object from extract_json()
        registry: The debate's source registry (updated in place)
        strict: Reject marker mismatches instead of repairing them

    Returns:
        AgentTurnResult with the rewritten argument and this turn's sources
    """
    argument = parsed.get("argument")
    raw_sources = parsed.get("sources")

    if not isinstance(argument, str) or not isinstance(raw_sources, list):
        raise InvalidShape("Agent response JSON is missing required fields.")

    if not raw_sources:
        raise NoSources("Agent response must include at least one source.")

    sources = _validate_sources(raw_sources)
    local_markers = [f"[S{index}]" for index in range(1, len(sources) + 1)]

    anomalies: list[CitationAnomaly] = []

    for marker in local_markers:
        if marker not in argument:
            if strict:
                raise MissingMarker(
                    f"The marker {marker} is missing from the argument.", marker
                )
            logger.warning(f"The marker {marker} is missing from the argument. Continuing anyway.")
            anomalies.append(CitationAnomaly(kind="missing_marker", marker=marker))

    known = set(local_markers)
    dangling = [m for m in LOCAL_MARKER_PATTERN.findall(argument) if m not in known]
    if dangling and strict:
        raise DanglingMarker(
            f"Unmatched citation markers found: {', '.join(dangling)}.", dangling
        )

    # Validation done; from here on the registry is updated
    rewritten = argument
    turn_sources: list[Source] = []
    seen_numbers: set[int] = set()

    for marker, (title, url) in zip(local_markers, sources):
        number = registry.resolve(url, title)
        rewritten = rewritten.replace(marker, f"[{number}]")

        if number not in seen_numbers:
            seen_numbers.add(number)
            turn_sources.append(registry.get(number))

    if dangling:
        logger.warning(
            f"Unmatched citation markers found: {', '.join(dangling)}. Continuing anyway."
        )
        anomalies.extend(CitationAnomaly(kind="dangling_marker", marker=m) for m in dangling)
        rewritten = LOCAL_MARKER_PATTERN.sub("", rewritten)

    return AgentTurnResult(
        argument=rewritten.strip(),
        sources=turn_sources,
        next_source_number=registry.next_number,
        anomalies=anomalies,
    )


def parse_agent_response(
    raw_text: str,
    registry: SourceRegistry,
    strict: bool = False,
) -> AgentTurnResult:
    """Extract, validate and rewrite one proponent/critic response."""
    return rewrite_citations(extract_json(raw_text), registry, strict=strict)


def parse_judge_response(raw_text: str) -> Evaluation:
    """
    Extract and validate the judge's evaluation.

    No citation rewriting happens here: the judge already cites the
    global numbers from the reference list it was shown.
    """
    parsed = extract_json(raw_text)

    values = {}
    for name in JUDGE_FIELDS:
        value = parsed.get(name)
        if not isinstance(value, str) or not value.strip():
            raise InvalidShape("Judge response JSON is missing required fields.")
        values[name] = value.strip()

    return Evaluation(
        strongest_pro_argument=values["strongestProArgument"],
        strongest_con_argument=values["strongestConArgument"],
        unresolved_trade_offs=values["unresolvedTradeOffs"],
    )

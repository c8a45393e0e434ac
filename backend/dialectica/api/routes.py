"""
API Routes — The debate endpoint.

ENDPOINTS:
- GET /api/debate?topic=... → Server-Sent Events stream of one debate

FLOW:
1. Validate the topic (400 if empty or over 280 characters)
2. Build the completion client (500 if OPENAI_API_KEY is missing)
3. Start the debate as a background task writing into an EventChannel
4. Stream the channel to the client as SSE until it closes

Both rejections happen before the stream opens, so a bad request never
gets a 200 text/event-stream response.

EVENTS:
    event: status      data: {"state": "starting", "message": "Starting debate..."}
    event: turn        data: {"role": "proponent", "turn": 1, "argument": "...", "sources": [...]}
    event: evaluation  data: {"evaluation": {...}, "sources": [...]}
    event: complete    data: {}
    event: error       data: {"error": "..."}
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from dialectica.config import Settings, get_settings
from dialectica.services.completion import get_completion_client
from dialectica.services.debate import (
    BaseCompletionClient,
    BaseSearchClient,
    ConfigurationError,
    InvalidInput,
    run_debate,
    validate_topic,
)
from dialectica.services.search import get_search_client
from dialectica.services.streaming import EventChannel, stream_events

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # Disable nginx buffering
}

# Strong references to running debates so they are not garbage collected
# while the client is still reading
_running_debates: set[asyncio.Task] = set()


# =============================================================================
# DEPENDENCIES
# =============================================================================
#
# Resolved in declaration order: topic first, then the completion client,
# so a bad topic is reported even when the server is misconfigured.
#

def debate_topic(topic: str = "") -> str:
    """Validated, trimmed topic from the query string."""
    try:
        return validate_topic(topic)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=e.message) from e


def completion_client(settings: Settings = Depends(get_settings)) -> BaseCompletionClient:
    """Completion client for this request."""
    try:
        return get_completion_client(settings)
    except ConfigurationError as e:
        logger.error(e.message)
        raise HTTPException(status_code=500, detail=e.message) from e


def search_client(settings: Settings = Depends(get_settings)) -> BaseSearchClient | None:
    """Search client for this request (closed by run_debate when the debate ends)."""
    return get_search_client(settings)


# =============================================================================
# DEBATE ENDPOINT
# =============================================================================

@router.get("/debate")
async def debate(
    request: Request,
    topic: str = Depends(debate_topic),
    completion: BaseCompletionClient = Depends(completion_client),
    search: BaseSearchClient | None = Depends(search_client),
    settings: Settings = Depends(get_settings),
) -> StreamingResponse:
    """
    Run a debate and stream it as Server-Sent Events.

    Example:
        GET /api/debate?topic=Nuclear%20power%20is%20essential%20for%20decarbonization
    """
    logger.info(f"Debate requested: '{topic}'")

    channel = EventChannel()
    task = asyncio.create_task(
        run_debate(topic, channel, completion=completion, search=search, settings=settings)
    )
    _running_debates.add(task)
    task.add_done_callback(_running_debates.discard)

    return StreamingResponse(
        stream_events(channel, request.is_disconnected, settings.stream_poll_interval),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


async def cancel_running_debates() -> None:
    """Cancel debates still in flight (called on server shutdown)."""
    if not _running_debates:
        return

    logger.info(f"Cancelling {len(_running_debates)} running debate(s)")
    for task in list(_running_debates):
        task.cancel()
    await asyncio.gather(*list(_running_debates), return_exceptions=True)

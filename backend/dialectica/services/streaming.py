"""
Debate Streaming — The channel between the orchestrator and the client.

WHAT THIS DOES:
The orchestrator never writes to the HTTP response. It emits events into an
EventChannel; the transport side drains the channel and turns each event
into a Server-Sent Events frame. Swapping SSE for a websocket only means
writing a different consumer.

    DebateOrchestrator --emit()--> EventChannel --stream_events()--> SSE frames

GUARANTEES:
- Events come out in the order they went in, each exactly once
- close() is idempotent; after it, emit() is a silent no-op
- When the client disconnects the consumer calls abort(); the orchestrator
  sees channel.aborted at its next checkpoint and stops starting new turns

WIRE FORMAT:
    event: turn
    data: {"role": "proponent", "turn": 1, ...}
    <blank line>
"""

import asyncio
import json
import logging
from typing import AsyncIterator, Awaitable, Callable, Optional

from dialectica.services.debate.models import DebateEvent

logger = logging.getLogger(__name__)

_END_OF_STREAM = object()


class EventChannel:
    """
    Ordered, single-consumer event queue for one debate.

    The orchestrator is the only producer, the transport the only consumer.
    """

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False
        self._aborted = False
        self._drained = False

    @property
    def closed(self) -> bool:
        """True once no more events will be accepted."""
        return self._closed

    @property
    def aborted(self) -> bool:
        """True if the consumer went away before the debate finished."""
        return self._aborted

    def emit(self, event_type: str, payload: Optional[dict] = None) -> bool:
        """
        Queue one event for the client.

        Returns:
            False if the channel is already closed (the event is dropped)
        """
        if self._closed:
            logger.debug(f"Dropping '{event_type}' event: channel closed")
            return False

        self._queue.put_nowait(DebateEvent(type=event_type, data=payload or {}))
        return True

    def close(self) -> None:
        """End the stream. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_END_OF_STREAM)

    def abort(self) -> None:
        """Consumer-side disconnect: stop accepting events and end the stream."""
        if not self._aborted:
            logger.info("Debate stream aborted by consumer")
        self._aborted = True
        self.close()

    async def get(self) -> Optional[DebateEvent]:
        """Next event, or None once the stream has ended."""
        if self._drained:
            return None

        item = await self._queue.get()
        if item is _END_OF_STREAM:
            self._drained = True
            return None
        return item

    def __aiter__(self):
        return self

    async def __anext__(self) -> DebateEvent:
        event = await self.get()
        if event is None:
            raise StopAsyncIteration
        return event


def format_sse(event: DebateEvent) -> str:
    """Serialize one event as an SSE frame."""
    return f"event: {event.type}\ndata: {json.dumps(event.data)}\n\n"


async def stream_events(
    channel: EventChannel,
    is_disconnected: Optional[Callable[[], Awaitable[bool]]] = None,
    poll_interval: float = 1.0,
) -> AsyncIterator[str]:
    """
    Drain a channel as SSE frames until it closes.

    While waiting for the next event, checks is_disconnected() every
    poll_interval seconds. If the client is gone, or this generator is
    closed or cancelled early, the channel is aborted so the orchestrator
    stops at its next checkpoint.

    Args:
        channel: The debate's event channel
        is_disconnected: Usually starlette's request.is_disconnected
        poll_interval: Seconds between disconnect checks
    """
    try:
        while True:
            try:
                event = await asyncio.wait_for(channel.get(), timeout=poll_interval)
            except asyncio.TimeoutError:
                if is_disconnected is not None and await is_disconnected():
                    logger.info("Client disconnected while waiting for the next event")
                    channel.abort()
                    return
                continue

            if event is None:
                return

            yield format_sse(event)
    finally:
        if not channel.closed:
            channel.abort()

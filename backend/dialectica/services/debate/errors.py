"""
Debate Errors — The failure taxonomy of a debate.

WHAT THIS IS:
Every way a debate can fail (or be repaired) has its own exception type,
so callers can tell a bad topic from a broken model response from an
upstream outage without parsing error strings.

HOW THEY ARE HANDLED:
- InvalidInput, ConfigurationError → rejected by the API before streaming
- UpstreamError → completion failures end the debate; search failures are
  absorbed by the search client and never reach here
- MalformedResponse, InvalidShape, NoSources, InvalidSource → the model
  broke its output contract; the debate ends with one error event
- MissingMarker, DanglingMarker → only raised in strict citation mode;
  in the default lenient mode they are recorded as anomalies instead

All turn events emitted before a failure stay valid for the client.
"""

from typing import Optional


class DebateError(Exception):
    """Base class for all debate failures. `message` is shown to the client."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(DebateError):
    """The topic is empty or too long."""


class ConfigurationError(DebateError):
    """A required credential or setting is missing."""


class UpstreamError(DebateError):
    """The completion service failed or returned no usable text."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class MalformedResponse(DebateError):
    """The model response did not contain a parseable JSON object."""


class InvalidShape(DebateError):
    """The JSON object is missing required fields or has the wrong types."""


class NoSources(DebateError):
    """An agent returned an argument without any sources."""


class InvalidSource(DebateError):
    """A source entry lacks a non-empty title or URL."""


class MissingMarker(DebateError):
    """A source was listed but its [Sn] marker never appears (strict mode)."""

    def __init__(self, message: str, marker: str):
        super().__init__(message)
        self.marker = marker


class DanglingMarker(DebateError):
    """An [Sn] marker has no matching source entry (strict mode)."""

    def __init__(self, message: str, markers: list[str]):
        super().__init__(message)
        self.markers = markers

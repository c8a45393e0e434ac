"""
Pydantic schemas for the debate event stream.

These define the shape of every `data:` payload the client receives on
GET /api/debate. The debate services work with plain dataclasses
(services/debate/models.py); these schemas are the wire contract.

STREAM OVERVIEW:
================
1. status      → zero or more, informational
2. turn        → exactly 2 × N times (proponent then critic, N rounds)
3. evaluation  → once, only on success
4. complete    → once, only on success, always last
   error       → at most once, replaces evaluation/complete, always last
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# SOURCE SCHEMAS
# =============================================================================
#
# WHEN USED:
# - Inside every turn event (sources cited in that turn)
# - Inside the evaluation event (all sources, sorted by number)
#

class SourcePayload(BaseModel):
    """
    A cited source with its debate-wide reference number.

    The number matches the [n] markers in argument text.
    """
    model_config = ConfigDict(from_attributes=True)  # Allows creating from a Source dataclass

    number: int = Field(ge=1, description="Global reference number")
    title: str
    url: str


# =============================================================================
# EVENT PAYLOADS
# =============================================================================

class StatusPayload(BaseModel):
    """
    Progress message for the client's status line.

    Example:
        {"state": "critic_turn", "message": "Critic preparing turn 2...", "turn": 2}
    """
    state: str = Field(description="Orchestrator state when the event was emitted")
    message: str
    turn: Optional[int] = Field(
        default=None,
        description="Current round, only present during agent turns"
    )


class TurnPayload(BaseModel):
    """
    One finished argument from the proponent or the critic.

    argument already uses global [n] citations; sources lists only the
    sources cited in this turn.
    """
    role: Literal["proponent", "critic"]
    turn: int = Field(ge=1, description="Round number, 1-indexed")
    argument: str
    sources: list[SourcePayload] = Field(default_factory=list)


class EvaluationPayload(BaseModel):
    """
    The judge's verdict.

    Serialized with camelCase keys (strongestProArgument, ...).
    """
    model_config = ConfigDict(populate_by_name=True)

    strongest_pro_argument: str = Field(alias="strongestProArgument")
    strongest_con_argument: str = Field(alias="strongestConArgument")
    unresolved_trade_offs: str = Field(alias="unresolvedTradeOffs")


class EvaluationEventPayload(BaseModel):
    """
    Final evaluation plus the complete reference list.

    sources is sorted by number, which is also first-citation order.
    """
    evaluation: EvaluationPayload
    sources: list[SourcePayload] = Field(default_factory=list)


class ErrorPayload(BaseModel):
    """Human-readable reason the debate ended early."""
    error: str

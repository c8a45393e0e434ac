# API event schemas
from dialectica.models.schemas import (
    ErrorPayload,
    EvaluationEventPayload,
    EvaluationPayload,
    SourcePayload,
    StatusPayload,
    TurnPayload,
)

__all__ = [
    "ErrorPayload",
    "EvaluationEventPayload",
    "EvaluationPayload",
    "SourcePayload",
    "StatusPayload",
    "TurnPayload",
]

"""Session feature: trainer host service, schemas, and API router."""

from .router import create_trainer_router
from .schemas import (
    ClaimResponse,
    ExercisePayload,
    FeedbackResponse,
    MapResponse,
    NodePayload,
    ScorePayload,
    SectionPayload,
    SelectResponse,
    SessionPayload,
    TickResponse,
    UnitPayload,
)
from .service import TrainerManager

__all__ = [
    "ClaimResponse",
    "ExercisePayload",
    "FeedbackResponse",
    "MapResponse",
    "NodePayload",
    "ScorePayload",
    "SectionPayload",
    "SelectResponse",
    "SessionPayload",
    "TickResponse",
    "TrainerManager",
    "UnitPayload",
    "create_trainer_router",
]

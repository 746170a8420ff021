from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

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
    "UnitPayload",
]


class _APIModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ExercisePayload(_APIModel):
    id: int
    title: str
    categories: list[str]


class NodePayload(_APIModel):
    id: int
    kind: str
    state: str
    stars: int
    exercise: ExercisePayload | None = None


class UnitPayload(_APIModel):
    id: int
    section_number: int
    unit_number: int
    label: str
    title: str
    nodes: list[NodePayload]


class SectionPayload(_APIModel):
    id: int
    units: list[UnitPayload]


class ScorePayload(_APIModel):
    xp: int
    streak: int
    gems: int
    lives: int


class MapResponse(_APIModel):
    score: ScorePayload
    sections: list[SectionPayload]


class SessionPayload(_APIModel):
    session: str
    node_id: int
    phase: str
    exercise: ExercisePayload
    duration: float
    earned_xp: int
    reward_granted: bool
    feedback: str | None = None


class SelectResponse(_APIModel):
    result: Literal["blocked", "no_exercise", "ready"]
    node: NodePayload
    session: SessionPayload | None = None


class TickResponse(_APIModel):
    session: SessionPayload
    progress: float
    remaining_seconds: int
    xp_delta: int | None = None
    score: ScorePayload


class FeedbackResponse(_APIModel):
    session: SessionPayload
    node: NodePayload
    unlocked: NodePayload | None = None
    score: ScorePayload


class ClaimResponse(_APIModel):
    node: NodePayload
    unlocked: NodePayload | None = None
    score: ScorePayload

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

__all__ = [
    "Exercise",
    "Node",
    "NodeKind",
    "NodeState",
    "Section",
    "Unit",
    "UnitInfo",
]


class NodeKind(str, Enum):
    LESSON = "lesson"
    BOSS = "boss"
    CHEST = "chest"
    PRACTICE = "practice"


class NodeState(str, Enum):
    LOCKED = "locked"
    AVAILABLE = "available"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Exercise:
    """Workout payload a node can launch."""

    id: int
    title: str
    categories: tuple[str, ...] = ()


@dataclass(frozen=True)
class Node:
    """Immutable snapshot of one entry on the progression map."""

    id: int
    kind: NodeKind
    exercise: Exercise | None = None
    state: NodeState = NodeState.LOCKED
    # Best rating achieved so far; 0 means none.
    stars: int = 0


@dataclass(frozen=True)
class UnitInfo:
    section_number: int
    unit_number: int
    title: str

    @property
    def label(self) -> str:
        return f"Section {self.section_number} · Unit {self.unit_number}"


@dataclass(frozen=True)
class Unit:
    """One linear progression lane.  Node order drives the unlock rule."""

    id: int
    info: UnitInfo
    nodes: tuple[Node, ...]


@dataclass(frozen=True)
class Section:
    id: int
    units: tuple[Unit, ...]

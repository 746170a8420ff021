from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure "src" is on sys.path for imports in tests
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from musclepath.core.models import Exercise, Node, NodeKind, Section, Unit, UnitInfo  # noqa: E402

PUSH_UP = Exercise(id=1, title="Push-up", categories=("chest", "arms"))
PLANK = Exercise(id=3, title="Plank", categories=("abs",))


def make_unit(unit_id: int, node_ids: list[int], *, exercise: Exercise | None = PUSH_UP) -> Unit:
    return Unit(
        id=unit_id,
        info=UnitInfo(section_number=1, unit_number=unit_id, title=f"Unit {unit_id}"),
        nodes=tuple(Node(id=node_id, kind=NodeKind.LESSON, exercise=exercise) for node_id in node_ids),
    )


@pytest.fixture
def three_node_sections() -> list[Section]:
    return [Section(id=1, units=(make_unit(1, [1, 2, 3]),))]


class FakeClock:
    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()

"""Skill-map progression: node states and the linear unlock rule.

Within each unit, node *i* becomes available once node *i - 1* of the same unit
is completed; the first node of the first unit of the first section is
available from the start.  Nothing else unlocks anything: there are no
cross-unit, cross-section or kind-specific pathways, so the first node of every
later unit stays locked.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, replace

from ..core.errors import ConfigError, InvalidStateError, NotFoundError
from ..core.models import Exercise, Node, NodeState, Section, Unit, UnitInfo

__all__ = [
    "Blocked",
    "NoExercise",
    "ProgressionGraph",
    "Ready",
    "SelectResult",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Blocked:
    """The node is still locked."""

    node_id: int


@dataclass(frozen=True)
class NoExercise:
    """The node is enterable but has nothing to launch (e.g. a chest)."""

    node_id: int


@dataclass(frozen=True)
class Ready:
    node_id: int
    exercise: Exercise


SelectResult = Blocked | NoExercise | Ready


@dataclass(frozen=True)
class _UnitLayout:
    id: int
    info: UnitInfo
    node_ids: tuple[int, ...]


@dataclass(frozen=True)
class _SectionLayout:
    id: int
    units: tuple[_UnitLayout, ...]


class ProgressionGraph:
    """Owns node states for one map.  Build instances with :meth:`build`."""

    def __init__(
        self,
        layout: tuple[_SectionLayout, ...],
        nodes: dict[int, Node],
        positions: dict[int, tuple[_UnitLayout, int]],
    ) -> None:
        self._layout = layout
        self._nodes = nodes
        self._positions = positions
        self._lock = threading.Lock()

    @classmethod
    def build(cls, sections: Sequence[Section]) -> ProgressionGraph:
        """Validate ``sections`` and derive the initial state of every node.

        Incoming ``state`` and ``stars`` values are ignored; a fresh graph has
        nothing completed.
        """

        if not sections:
            raise ConfigError("progression graph needs at least one section")

        nodes: dict[int, Node] = {}
        positions: dict[int, tuple[_UnitLayout, int]] = {}
        layout: list[_SectionLayout] = []
        first_unit = True
        for section in sections:
            if not section.units:
                raise ConfigError(f"section {section.id} has no units")
            unit_layouts: list[_UnitLayout] = []
            for unit in section.units:
                if not unit.nodes:
                    raise ConfigError(f"unit {unit.id} in section {section.id} has no nodes")
                unit_layout = _UnitLayout(
                    id=unit.id,
                    info=unit.info,
                    node_ids=tuple(node.id for node in unit.nodes),
                )
                for index, node in enumerate(unit.nodes):
                    if node.id in nodes:
                        raise ConfigError(f"duplicate node id {node.id}")
                    state = NodeState.AVAILABLE if first_unit and index == 0 else NodeState.LOCKED
                    nodes[node.id] = replace(node, state=state, stars=0)
                    positions[node.id] = (unit_layout, index)
                unit_layouts.append(unit_layout)
                first_unit = False
            layout.append(_SectionLayout(id=section.id, units=tuple(unit_layouts)))

        logger.debug(
            "progression graph built",
            extra={"sections": len(layout), "nodes": len(nodes)},
        )
        return cls(tuple(layout), nodes, positions)

    # ------------------------------------------------------------------ queries
    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def node_at(self, node_id: int) -> Node:
        node = self._nodes.get(node_id)
        if node is None:
            raise NotFoundError(f"node {node_id!r} not found")
        return node

    def nodes(self) -> Iterator[Node]:
        """Yield node snapshots in display order."""

        for section in self._layout:
            for unit in section.units:
                for node_id in unit.node_ids:
                    yield self._nodes[node_id]

    def sections(self) -> tuple[Section, ...]:
        """Return the map as immutable snapshots carrying current states."""

        return tuple(
            Section(
                id=section.id,
                units=tuple(
                    Unit(
                        id=unit.id,
                        info=unit.info,
                        nodes=tuple(self._nodes[node_id] for node_id in unit.node_ids),
                    )
                    for unit in section.units
                ),
            )
            for section in self._layout
        )

    def successor_of(self, node_id: int) -> Node | None:
        """Return the next node in the same unit, if any."""

        unit, index = self._position(node_id)
        if index + 1 >= len(unit.node_ids):
            return None
        return self._nodes[unit.node_ids[index + 1]]

    def select(self, node_id: int) -> SelectResult:
        """Answer whether ``node_id`` can launch a workout.  Never mutates."""

        node = self.node_at(node_id)
        if node.state is NodeState.LOCKED:
            return Blocked(node_id=node.id)
        if node.exercise is None:
            return NoExercise(node_id=node.id)
        return Ready(node_id=node.id, exercise=node.exercise)

    # ---------------------------------------------------------------- mutation
    def mark_completed(self, node_id: int, stars: int) -> Node:
        """Complete ``node_id``, keep the best star rating, unlock its successor."""

        if stars < 0:
            raise ConfigError(f"stars must be >= 0, got {stars!r}")
        with self._lock:
            node = self.node_at(node_id)
            if node.state is NodeState.LOCKED:
                logger.debug("rejected completion of locked node", extra={"node_id": node_id})
                raise InvalidStateError(f"node {node_id!r} is locked")

            completed = replace(node, state=NodeState.COMPLETED, stars=max(node.stars, stars))
            self._nodes[node_id] = completed

            unit, index = self._position(node_id)
            if index + 1 < len(unit.node_ids):
                successor = self._nodes[unit.node_ids[index + 1]]
                if successor.state is NodeState.LOCKED:
                    self._nodes[successor.id] = replace(successor, state=NodeState.AVAILABLE)
                    logger.debug(
                        "node unlocked",
                        extra={"node_id": successor.id, "unlocked_by": node_id},
                    )

            logger.debug(
                "node completed",
                extra={"node_id": node_id, "stars": completed.stars},
            )
            return completed

    def _position(self, node_id: int) -> tuple[_UnitLayout, int]:
        position = self._positions.get(node_id)
        if position is None:
            raise NotFoundError(f"node {node_id!r} not found")
        return position

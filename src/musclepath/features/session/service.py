from __future__ import annotations

import logging
import secrets
import string
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from starlette.concurrency import run_in_threadpool

from ...core.errors import ConfigError, InvalidStateError, NotFoundError
from ...core.models import Exercise, Node, NodeState, Section
from ...core.scoring import ScoreBoard
from ...core.settings import TrainerSettings, load_settings
from ...data.catalog import load_sections
from ...progression import Blocked, NoExercise, ProgressionGraph
from ...workout import FeedbackLevel, SessionController
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

__all__ = ["ActiveSession", "TrainerManager"]

logger = logging.getLogger(__name__)


@dataclass
class ActiveSession:
    node_id: int
    controller: SessionController


class TrainerManager:
    """Hosts the map, the score board and live workout sessions.

    This is the renderer side of the core contract: it applies XP deltas to
    the score board and reports completions back to the progression graph
    once feedback is recorded.
    """

    def __init__(
        self,
        graph: ProgressionGraph | None = None,
        *,
        scoreboard: ScoreBoard | None = None,
        settings: TrainerSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings if settings is not None else load_settings()
        if graph is None:
            graph = ProgressionGraph.build(load_sections(self.settings.catalog_path))
        self.graph = graph
        self.scoreboard = scoreboard if scoreboard is not None else ScoreBoard()
        self._clock = clock
        self._sessions: dict[str, ActiveSession] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------- map
    def map_view(self) -> MapResponse:
        with self._lock:
            return MapResponse(
                score=self._score_payload(),
                sections=[_section_payload(section) for section in self.graph.sections()],
            )

    async def map_view_async(self) -> MapResponse:
        return await run_in_threadpool(self.map_view)

    def node(self, node_id: int) -> NodePayload:
        with self._lock:
            return _node_payload(self.graph.node_at(node_id))

    async def node_async(self, node_id: int) -> NodePayload:
        return await run_in_threadpool(self.node, node_id)

    def select(self, node_id: int) -> SelectResponse:
        """Open a workout session for ``node_id`` when the node allows it."""

        with self._lock:
            node = self.graph.node_at(node_id)
            result = self.graph.select(node_id)
            if isinstance(result, Blocked):
                return SelectResponse(result="blocked", node=_node_payload(node))
            if isinstance(result, NoExercise):
                return SelectResponse(result="no_exercise", node=_node_payload(node))
            controller = SessionController(
                result.exercise,
                self.settings.session_seconds,
                self.settings.earned_xp,
                clock=self._clock,
            )
            session_id = _sid()
            self._sessions[session_id] = ActiveSession(node_id=node_id, controller=controller)
            logger.debug("session created", extra={"session_id": session_id, "node_id": node_id})
            return SelectResponse(
                result="ready",
                node=_node_payload(node),
                session=_session_payload(session_id, self._sessions[session_id]),
            )

    async def select_async(self, node_id: int) -> SelectResponse:
        return await run_in_threadpool(self.select, node_id)

    def claim(self, node_id: int) -> ClaimResponse:
        """Complete a node that has nothing to launch, such as a chest.

        Nodes with an exercise only complete through a workout session.
        """

        with self._lock:
            result = self.graph.select(node_id)
            if isinstance(result, Blocked):
                raise InvalidStateError(f"node {node_id!r} is locked")
            if not isinstance(result, NoExercise):
                raise InvalidStateError(f"node {node_id!r} has an exercise; complete it with a workout")
            successor = self.graph.successor_of(node_id)
            completed = self.graph.mark_completed(node_id, self.settings.completion_stars)
            unlocked: Node | None = None
            if successor is not None and successor.state is NodeState.LOCKED:
                unlocked = self.graph.node_at(successor.id)
            logger.debug("node claimed", extra={"node_id": node_id})
            return ClaimResponse(
                node=_node_payload(completed),
                unlocked=_node_payload(unlocked) if unlocked is not None else None,
                score=self._score_payload(),
            )

    async def claim_async(self, node_id: int) -> ClaimResponse:
        return await run_in_threadpool(self.claim, node_id)

    # --------------------------------------------------------------- session
    def session(self, session_id: str) -> SessionPayload:
        with self._lock:
            return _session_payload(session_id, self._require_session(session_id))

    async def session_async(self, session_id: str) -> SessionPayload:
        return await run_in_threadpool(self.session, session_id)

    def start(self, session_id: str) -> SessionPayload:
        with self._lock:
            active = self._require_session(session_id)
            active.controller.start(self._clock())
            return _session_payload(session_id, active)

    async def start_async(self, session_id: str) -> SessionPayload:
        return await run_in_threadpool(self.start, session_id)

    def tick(self, session_id: str) -> TickResponse:
        with self._lock:
            active = self._require_session(session_id)
            controller = active.controller
            now = self._clock()
            event = controller.tick(now)
            if event is not None:
                self.scoreboard.apply_xp(event.xp_delta)
                logger.debug(
                    "session reward applied",
                    extra={"session_id": session_id, "xp_delta": event.xp_delta},
                )
            return TickResponse(
                session=_session_payload(session_id, active),
                progress=controller.progress(now),
                remaining_seconds=controller.remaining_time(now),
                xp_delta=event.xp_delta if event is not None else None,
                score=self._score_payload(),
            )

    async def tick_async(self, session_id: str) -> TickResponse:
        return await run_in_threadpool(self.tick, session_id)

    def feedback(
        self,
        session_id: str,
        level: FeedbackLevel | str,
        stars: int | None = None,
    ) -> FeedbackResponse:
        """Record feedback, complete the node and close the session."""

        awarded = self.settings.completion_stars if stars is None else stars
        if awarded < 0:
            raise ConfigError(f"stars must be >= 0, got {awarded!r}")
        with self._lock:
            active = self._require_session(session_id)
            active.controller.record_feedback(level)
            successor = self.graph.successor_of(active.node_id)
            completed = self.graph.mark_completed(active.node_id, awarded)
            unlocked: Node | None = None
            if successor is not None and successor.state is NodeState.LOCKED:
                unlocked = self.graph.node_at(successor.id)
            self._sessions.pop(session_id, None)
            logger.debug(
                "session closed",
                extra={"session_id": session_id, "node_id": active.node_id, "stars": completed.stars},
            )
            return FeedbackResponse(
                session=_session_payload(session_id, active),
                node=_node_payload(completed),
                unlocked=_node_payload(unlocked) if unlocked is not None else None,
                score=self._score_payload(),
            )

    async def feedback_async(
        self,
        session_id: str,
        level: FeedbackLevel | str,
        stars: int | None = None,
    ) -> FeedbackResponse:
        return await run_in_threadpool(self.feedback, session_id, level, stars)

    def cancel(self, session_id: str) -> SessionPayload:
        with self._lock:
            active = self._require_session(session_id)
            active.controller.cancel()
            self._sessions.pop(session_id, None)
            logger.debug("session discarded", extra={"session_id": session_id})
            return _session_payload(session_id, active)

    async def cancel_async(self, session_id: str) -> SessionPayload:
        return await run_in_threadpool(self.cancel, session_id)

    # --------------------------------------------------------------- helpers
    def _require_session(self, session_id: str) -> ActiveSession:
        active = self._sessions.get(session_id)
        if active is None:
            raise NotFoundError(f"session '{session_id}' not found")
        return active

    def _score_payload(self) -> ScorePayload:
        score = self.scoreboard.snapshot()
        return ScorePayload(xp=score.xp, streak=score.streak, gems=score.gems, lives=score.lives)


def _sid(length: int = 10) -> str:
    alphabet = string.ascii_lowercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


def _exercise_payload(exercise: Exercise) -> ExercisePayload:
    return ExercisePayload(id=exercise.id, title=exercise.title, categories=list(exercise.categories))


def _node_payload(node: Node) -> NodePayload:
    return NodePayload(
        id=node.id,
        kind=node.kind.value,
        state=node.state.value,
        stars=node.stars,
        exercise=_exercise_payload(node.exercise) if node.exercise is not None else None,
    )


def _section_payload(section: Section) -> SectionPayload:
    return SectionPayload(
        id=section.id,
        units=[
            UnitPayload(
                id=unit.id,
                section_number=unit.info.section_number,
                unit_number=unit.info.unit_number,
                label=unit.info.label,
                title=unit.info.title,
                nodes=[_node_payload(node) for node in unit.nodes],
            )
            for unit in section.units
        ],
    )


def _session_payload(session_id: str, active: ActiveSession) -> SessionPayload:
    snapshot = active.controller.snapshot()
    return SessionPayload(
        session=session_id,
        node_id=active.node_id,
        phase=snapshot.phase.value,
        exercise=_exercise_payload(snapshot.exercise),
        duration=snapshot.duration,
        earned_xp=snapshot.earned_xp,
        reward_granted=snapshot.reward_granted,
        feedback=snapshot.feedback.value if snapshot.feedback is not None else None,
    )

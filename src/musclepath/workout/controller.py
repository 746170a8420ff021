"""Lifecycle of a single timed workout attempt.

``preparing -> running -> finished -> feedback_given`` with ``canceled`` as the
alternate terminal phase reachable from ``preparing`` and ``running``.

Expiry is detected by polling :meth:`SessionController.tick`; there is no
scheduled callback.  The XP reward is latched inside the controller, so however
many ticks observe an expired timer (including overlapping ones from a thread
pool host) only the first returns a :class:`CompletionEvent`.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from ..core.errors import ConfigError, InvalidTransitionError
from ..core.models import Exercise

__all__ = [
    "CompletionEvent",
    "FeedbackLevel",
    "SessionController",
    "SessionPhase",
    "SessionSnapshot",
]

logger = logging.getLogger(__name__)


class SessionPhase(str, Enum):
    PREPARING = "preparing"
    RUNNING = "running"
    FINISHED = "finished"
    FEEDBACK_GIVEN = "feedback_given"
    CANCELED = "canceled"


class FeedbackLevel(str, Enum):
    HARD = "hard"
    NORMAL = "normal"
    EASY = "easy"


@dataclass(frozen=True)
class CompletionEvent:
    """One-shot reward emitted when the timer first runs out."""

    xp_delta: int


@dataclass(frozen=True)
class SessionSnapshot:
    phase: SessionPhase
    exercise: Exercise
    duration: float
    earned_xp: int
    started_at: float | None
    feedback: FeedbackLevel | None
    reward_granted: bool


class SessionController:
    """Drives one workout attempt and guarantees the reward fires exactly once."""

    def __init__(
        self,
        exercise: Exercise,
        duration: float,
        earned_xp: int,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not math.isfinite(duration) or duration <= 0:
            raise ConfigError(f"duration must be positive, got {duration!r}")
        if earned_xp < 0:
            raise ConfigError(f"earned_xp must be >= 0, got {earned_xp!r}")
        self.exercise = exercise
        self.duration = float(duration)
        self.earned_xp = earned_xp
        self._clock = clock
        self._phase = SessionPhase.PREPARING
        self._started_at: float | None = None
        self._feedback: FeedbackLevel | None = None
        self._reward_granted = False
        self._lock = threading.Lock()

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def reward_granted(self) -> bool:
        return self._reward_granted

    # ------------------------------------------------------------ transitions
    def start(self, now: float | None = None) -> None:
        with self._lock:
            self._require(SessionPhase.PREPARING, action="start")
            self._started_at = self._now(now)
            self._phase = SessionPhase.RUNNING
        logger.debug(
            "session started",
            extra={"exercise_id": self.exercise.id, "started_at": self._started_at},
        )

    def tick(self, now: float | None = None) -> CompletionEvent | None:
        """Advance the timer; return the reward on the first expired tick only."""

        with self._lock:
            if self._phase is SessionPhase.FINISHED:
                return None
            self._require(SessionPhase.RUNNING, action="tick")
            if self._progress_at(self._now(now)) < 1.0 or self._reward_granted:
                return None
            self._reward_granted = True
            self._phase = SessionPhase.FINISHED
        logger.debug(
            "session finished",
            extra={"exercise_id": self.exercise.id, "xp_delta": self.earned_xp},
        )
        return CompletionEvent(xp_delta=self.earned_xp)

    def record_feedback(self, level: FeedbackLevel | str) -> None:
        try:
            chosen = FeedbackLevel(level)
        except ValueError as exc:
            raise ConfigError(f"unknown feedback level {level!r}") from exc
        with self._lock:
            self._require(SessionPhase.FINISHED, action="record_feedback")
            self._feedback = chosen
            self._phase = SessionPhase.FEEDBACK_GIVEN
        logger.debug(
            "session feedback recorded",
            extra={"exercise_id": self.exercise.id, "feedback": chosen.value},
        )

    def cancel(self) -> None:
        with self._lock:
            if self._phase is SessionPhase.CANCELED:
                return
            self._require(SessionPhase.PREPARING, SessionPhase.RUNNING, action="cancel")
            self._phase = SessionPhase.CANCELED
        logger.debug("session canceled", extra={"exercise_id": self.exercise.id})

    # ---------------------------------------------------------------- queries
    def progress(self, now: float | None = None) -> float:
        """Fraction of the duration elapsed, clamped to ``[0, 1]``."""

        with self._lock:
            self._require(SessionPhase.RUNNING, SessionPhase.FINISHED, action="progress")
            if self._phase is SessionPhase.FINISHED:
                return 1.0
            return self._progress_at(self._now(now))

    def remaining_time(self, now: float | None = None) -> int:
        """Whole seconds left for display, rounded up (4.2s left shows 5)."""

        with self._lock:
            self._require(SessionPhase.RUNNING, SessionPhase.FINISHED, action="remaining_time")
            assert self._started_at is not None
            remaining = max(self.duration - (self._now(now) - self._started_at), 0.0)
        return math.ceil(remaining)

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return SessionSnapshot(
                phase=self._phase,
                exercise=self.exercise,
                duration=self.duration,
                earned_xp=self.earned_xp,
                started_at=self._started_at,
                feedback=self._feedback,
                reward_granted=self._reward_granted,
            )

    # ---------------------------------------------------------------- helpers
    def _now(self, now: float | None) -> float:
        return self._clock() if now is None else float(now)

    def _progress_at(self, now: float) -> float:
        assert self._started_at is not None
        elapsed = now - self._started_at
        return min(max(elapsed / self.duration, 0.0), 1.0)

    def _require(self, *allowed: SessionPhase, action: str) -> None:
        if self._phase in allowed:
            return
        logger.debug(
            "rejected session transition",
            extra={"action": action, "phase": self._phase.value, "exercise_id": self.exercise.id},
        )
        expected = ", ".join(phase.value for phase in allowed)
        raise InvalidTransitionError(f"cannot {action} while {self._phase.value} (expected {expected})")

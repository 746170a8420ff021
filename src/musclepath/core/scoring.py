from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import ConfigError

__all__ = ["ScoreBoard", "ScoreSnapshot"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreSnapshot:
    xp: int
    streak: int
    gems: int
    lives: int


@dataclass
class ScoreBoard:
    """Global player score owned by the host, never by the core components.

    Workout sessions only emit XP deltas; whoever hosts them applies the delta
    here.
    """

    xp: int = 0
    streak: int = 0
    gems: int = 0
    lives: int = 25

    def apply_xp(self, delta: int) -> int:
        if delta < 0:
            raise ConfigError(f"xp delta must be >= 0, got {delta!r}")
        self.xp += delta
        logger.debug("xp applied", extra={"xp_delta": delta, "xp": self.xp})
        return self.xp

    def snapshot(self) -> ScoreSnapshot:
        return ScoreSnapshot(xp=self.xp, streak=self.streak, gems=self.gems, lives=self.lives)

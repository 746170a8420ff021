"""Error kinds raised by the trainer core.

All of them signal a caller-side defect rather than a transient condition, so
they propagate synchronously and carry no retry semantics.  Each one also
subclasses the closest builtin so callers that already catch ``ValueError`` or
``KeyError`` keep working.
"""

from __future__ import annotations

__all__ = [
    "ConfigError",
    "InvalidStateError",
    "InvalidTransitionError",
    "MusclePathError",
    "NotFoundError",
]


class MusclePathError(Exception):
    """Base class for every error raised by musclepath."""


class ConfigError(MusclePathError, ValueError):
    """Malformed construction data or settings (empty unit, duplicate id, ...)."""


class NotFoundError(MusclePathError, KeyError):
    """Unknown node or session id."""

    def __str__(self) -> str:
        # KeyError repr-quotes its message; keep it readable.
        return str(self.args[0]) if self.args else ""


class InvalidStateError(MusclePathError, RuntimeError):
    """Operation not permitted for the node's current state."""


class InvalidTransitionError(MusclePathError, RuntimeError):
    """Session method called from a phase that does not permit it."""

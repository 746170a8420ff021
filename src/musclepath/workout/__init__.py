"""Timed workout session state machine."""

from .controller import (
    CompletionEvent,
    FeedbackLevel,
    SessionController,
    SessionPhase,
    SessionSnapshot,
)

__all__ = [
    "CompletionEvent",
    "FeedbackLevel",
    "SessionController",
    "SessionPhase",
    "SessionSnapshot",
]

"""Environment driven trainer settings.

The trainer is tuned through a handful of environment variables so the web
app, the CLI and scripts share one source of truth.  Tests and scripts can
temporarily override individual values via a context manager.

Usage::

    from musclepath.core import settings

    current = settings.load_settings()
    with settings.override(session_seconds=5.0):
        ...

Recognised variables: ``MUSCLEPATH_SESSION_SECONDS``, ``MUSCLEPATH_EARNED_XP``,
``MUSCLEPATH_COMPLETION_STARS`` and ``MUSCLEPATH_CATALOG``.
"""

from __future__ import annotations

import logging
import math
import os
from contextlib import contextmanager
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Final

from .errors import ConfigError

__all__ = ["TrainerSettings", "load_settings", "override"]

logger = logging.getLogger(__name__)

_ENV_PREFIX: Final = "MUSCLEPATH_"

DEFAULT_SESSION_SECONDS: Final = 30.0
DEFAULT_EARNED_XP: Final = 50
DEFAULT_COMPLETION_STARS: Final = 1


@dataclass(frozen=True)
class TrainerSettings:
    """Tunables for one trainer process."""

    session_seconds: float = DEFAULT_SESSION_SECONDS
    earned_xp: int = DEFAULT_EARNED_XP
    completion_stars: int = DEFAULT_COMPLETION_STARS
    catalog_path: Path | None = None

    def __post_init__(self) -> None:
        if not math.isfinite(self.session_seconds) or self.session_seconds <= 0:
            raise ConfigError(f"session_seconds must be positive, got {self.session_seconds!r}")
        if self.earned_xp < 0:
            raise ConfigError(f"earned_xp must be >= 0, got {self.earned_xp!r}")
        if self.completion_stars < 0:
            raise ConfigError(f"completion_stars must be >= 0, got {self.completion_stars!r}")


_OVERRIDE_STACK: list[dict[str, Any]] = []


def _env(name: str) -> str | None:
    raw = os.getenv(_ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def _parse_number(name: str, raw: str, kind: type) -> Any:
    try:
        return kind(raw)
    except ValueError as exc:
        raise ConfigError(f"{_ENV_PREFIX}{name} must be {kind.__name__}, got {raw!r}") from exc


def _from_env() -> dict[str, Any]:
    values: dict[str, Any] = {}
    raw = _env("SESSION_SECONDS")
    if raw is not None:
        values["session_seconds"] = _parse_number("SESSION_SECONDS", raw, float)
    raw = _env("EARNED_XP")
    if raw is not None:
        values["earned_xp"] = _parse_number("EARNED_XP", raw, int)
    raw = _env("COMPLETION_STARS")
    if raw is not None:
        values["completion_stars"] = _parse_number("COMPLETION_STARS", raw, int)
    raw = _env("CATALOG")
    if raw is not None:
        values["catalog_path"] = Path(raw).expanduser()
    return values


def load_settings() -> TrainerSettings:
    """Return settings from the environment with active overrides applied."""

    values = _from_env()
    for layer in _OVERRIDE_STACK:
        values.update(layer)
    current = TrainerSettings(**values)
    logger.debug("settings loaded", extra={"settings": current})
    return current


@contextmanager
def override(**values: Any):
    """Temporarily override settings within the context.

    Overrides are stacked, so nested contexts behave predictably.  Unknown
    names raise ``ConfigError`` immediately.
    """

    known = {field.name for field in fields(TrainerSettings)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigError(f"unknown settings: {', '.join(unknown)}")
    # Validate eagerly so a bad override fails at the call site.
    replace(TrainerSettings(), **values)
    _OVERRIDE_STACK.append(dict(values))
    try:
        yield
    finally:
        _OVERRIDE_STACK.pop()

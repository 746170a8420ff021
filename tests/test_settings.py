from __future__ import annotations

from pathlib import Path

import pytest

from musclepath.core import settings
from musclepath.core.errors import ConfigError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("SESSION_SECONDS", "EARNED_XP", "COMPLETION_STARS", "CATALOG"):
        monkeypatch.delenv(f"MUSCLEPATH_{name}", raising=False)


def test_defaults_without_env():
    current = settings.load_settings()
    assert current.session_seconds == 30.0
    assert current.earned_xp == 50
    assert current.completion_stars == 1
    assert current.catalog_path is None


def test_env_values_are_parsed(monkeypatch, tmp_path):
    monkeypatch.setenv("MUSCLEPATH_SESSION_SECONDS", "12.5")
    monkeypatch.setenv("MUSCLEPATH_EARNED_XP", " 75 ")
    monkeypatch.setenv("MUSCLEPATH_COMPLETION_STARS", "3")
    monkeypatch.setenv("MUSCLEPATH_CATALOG", str(tmp_path / "map.json"))

    current = settings.load_settings()
    assert current.session_seconds == 12.5
    assert current.earned_xp == 75
    assert current.completion_stars == 3
    assert current.catalog_path == Path(tmp_path / "map.json")


@pytest.mark.parametrize(
    "name, raw",
    [
        ("SESSION_SECONDS", "soon"),
        ("SESSION_SECONDS", "0"),
        ("EARNED_XP", "1.5"),
        ("EARNED_XP", "-3"),
        ("COMPLETION_STARS", "-1"),
    ],
)
def test_invalid_env_values_raise(monkeypatch, name, raw):
    monkeypatch.setenv(f"MUSCLEPATH_{name}", raw)
    with pytest.raises(ConfigError):
        settings.load_settings()


def test_override_stack(monkeypatch):
    monkeypatch.setenv("MUSCLEPATH_EARNED_XP", "20")

    with settings.override(session_seconds=5.0):
        assert settings.load_settings().session_seconds == 5.0
        assert settings.load_settings().earned_xp == 20
        with settings.override(earned_xp=0):
            assert settings.load_settings().earned_xp == 0
        assert settings.load_settings().earned_xp == 20

    assert settings.load_settings().session_seconds == 30.0


def test_override_rejects_unknown_or_invalid_values():
    with pytest.raises(ConfigError):
        with settings.override(speed=2):
            pass
    with pytest.raises(ConfigError):
        with settings.override(session_seconds=-1.0):
            pass
    assert settings.load_settings().session_seconds == 30.0

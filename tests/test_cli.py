from __future__ import annotations

import importlib
import json
from pathlib import Path

import pytest

import musclepath.data as data_module
from musclepath import cli
from musclepath.core.errors import ConfigError


def test_map_command_prints_units(capsys, monkeypatch):
    monkeypatch.setenv("COLUMNS", "120")
    monkeypatch.delenv("MUSCLEPATH_CATALOG", raising=False)
    cli.main(["map", "--no-color"])
    out = capsys.readouterr().out
    assert "Basic form" in out
    assert "Push-up" in out
    assert "available" in out
    assert "locked" in out


def test_map_command_reads_custom_catalog(capsys, monkeypatch, tmp_path):
    monkeypatch.setenv("COLUMNS", "120")
    path = tmp_path / "map.json"
    path.write_text(
        json.dumps(
            {
                "exercises": [{"id": 9, "title": "Burpee"}],
                "sections": [
                    {
                        "id": 1,
                        "units": [
                            {
                                "id": 1,
                                "section_number": 2,
                                "unit_number": 3,
                                "title": "Conditioning",
                                "nodes": [{"id": 1, "kind": "lesson", "exercise": 9}],
                            }
                        ],
                    }
                ],
            }
        ),
        encoding="utf-8",
    )
    cli.main(["map", "--no-color", "--catalog", str(path)])
    out = capsys.readouterr().out
    assert "Conditioning" in out
    assert "Burpee" in out


def test_bad_catalog_exits_with_message(capsys, tmp_path):
    path = tmp_path / "empty.json"
    path.write_text(json.dumps({"sections": [{"id": 1, "units": []}]}), encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["map", "--no-color", "--catalog", str(path)])
    assert excinfo.value.code == 2
    assert "has no units" in capsys.readouterr().err


def test_serve_builds_a_single_trainer(monkeypatch, tmp_path):
    import musclepath.features.session as session_pkg
    import musclepath.web.app as web_app

    monkeypatch.setenv("MUSCLEPATH_CATALOG", str(tmp_path / "missing.json"))
    built = []

    class CountingManager(session_pkg.TrainerManager):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            built.append(self)

    served = {}

    def fake_main(host=None, port=None, application=None):
        served.update(host=host, port=port, application=application)

    monkeypatch.setattr(session_pkg, "TrainerManager", CountingManager)
    monkeypatch.setattr(web_app, "main", fake_main)

    bundled = Path(data_module.__file__).parent / "bundled" / "default_map.json"
    cli.main(["serve", "--port", "9001", "--catalog", str(bundled)])

    assert len(built) == 1
    assert served["port"] == 9001
    assert served["application"].state.manager is built[0]


def test_web_module_imports_without_building_a_trainer(monkeypatch, tmp_path):
    import musclepath.web.app as web_app

    monkeypatch.setenv("MUSCLEPATH_CATALOG", str(tmp_path / "missing.json"))
    reloaded = importlib.reload(web_app)
    assert not hasattr(reloaded, "app")
    with pytest.raises(ConfigError):
        reloaded.create_app()

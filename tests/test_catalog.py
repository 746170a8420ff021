from __future__ import annotations

import json

import pytest

from musclepath.core.errors import ConfigError
from musclepath.core.models import NodeKind, NodeState
from musclepath.data.catalog import default_catalog_path, load_sections, parse_sections
from musclepath.progression import NoExercise, ProgressionGraph, Ready


def _document(**overrides):
    payload = {
        "exercises": [{"id": 1, "title": "Squat", "categories": ["legs"]}],
        "sections": [
            {
                "id": 1,
                "units": [
                    {
                        "id": 10,
                        "section_number": 1,
                        "unit_number": 1,
                        "title": "Legs",
                        "nodes": [
                            {"id": 1, "kind": "lesson", "exercise": 1},
                            {"id": 2, "kind": "chest", "exercise": None},
                        ],
                    }
                ],
            }
        ],
    }
    payload.update(overrides)
    return payload


def test_bundled_catalog_builds_a_graph():
    sections = load_sections()
    graph = ProgressionGraph.build(sections)

    nodes = list(graph.nodes())
    assert [node.id for node in nodes] == [101, 102, 103, 104, 105, 106]
    assert nodes[0].state is NodeState.AVAILABLE
    assert all(node.state is NodeState.LOCKED for node in nodes[1:])
    assert nodes[1].kind is NodeKind.CHEST
    assert nodes[1].exercise is None
    assert nodes[4].kind is NodeKind.BOSS
    assert nodes[0].exercise is not None
    assert nodes[0].exercise.title == "Push-up"
    assert nodes[0].exercise.categories == ("chest", "shoulders", "arms")
    assert sections[0].units[0].info.label == "Section 1 · Unit 1"


def test_parse_sections_resolves_exercise_references():
    sections = parse_sections(_document())
    graph = ProgressionGraph.build(sections)

    ready = graph.select(1)
    assert isinstance(ready, Ready)
    assert ready.exercise.title == "Squat"
    graph.mark_completed(1, 1)
    assert graph.select(2) == NoExercise(node_id=2)


def test_load_sections_from_file(tmp_path):
    path = tmp_path / "map.json"
    path.write_text(json.dumps(_document()), encoding="utf-8")
    sections = load_sections(path)
    assert sections[0].units[0].info.title == "Legs"


@pytest.mark.parametrize(
    "payload, message",
    [
        (["not", "an", "object"], "JSON object"),
        ({"exercises": []}, "invalid catalog"),
        (_document(exercises=[{"id": 1, "title": "A"}, {"id": 1, "title": "B"}]), "duplicate exercise"),
        (_document(exercises=[]), "unknown exercise"),
        (
            _document(
                sections=[
                    {
                        "id": 1,
                        "units": [
                            {
                                "id": 1,
                                "section_number": 1,
                                "unit_number": 1,
                                "title": "x",
                                "nodes": [{"id": 1, "kind": "dragon"}],
                            }
                        ],
                    }
                ]
            ),
            "invalid catalog",
        ),
    ],
)
def test_parse_sections_rejects_bad_documents(payload, message):
    with pytest.raises(ConfigError, match=message):
        parse_sections(payload)


def test_load_sections_reports_unreadable_files(tmp_path):
    with pytest.raises(ConfigError, match="cannot read"):
        load_sections(tmp_path / "missing.json")
    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    with pytest.raises(ConfigError, match="not valid JSON"):
        load_sections(broken)


def test_default_catalog_path_points_at_packaged_file():
    assert default_catalog_path().name == "default_map.json"
    assert default_catalog_path().is_file()

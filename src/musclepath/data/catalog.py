from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..core.errors import ConfigError
from ..core.models import Exercise, Node, NodeKind, Section, Unit, UnitInfo

__all__ = ["default_catalog_path", "load_sections", "parse_sections"]

logger = logging.getLogger(__name__)


class _CatalogModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class _ExerciseEntry(_CatalogModel):
    id: int
    title: str = Field(min_length=1)
    categories: list[str] = Field(default_factory=list)


class _NodeEntry(_CatalogModel):
    id: int
    kind: NodeKind
    exercise: int | None = None


class _UnitEntry(_CatalogModel):
    id: int
    section_number: int
    unit_number: int
    title: str
    nodes: list[_NodeEntry]


class _SectionEntry(_CatalogModel):
    id: int
    units: list[_UnitEntry]


class _CatalogDocument(_CatalogModel):
    exercises: list[_ExerciseEntry] = Field(default_factory=list)
    sections: list[_SectionEntry]


def default_catalog_path() -> Path:
    return Path(__file__).with_name("bundled") / "default_map.json"


def load_sections(path: Path | str | None = None) -> list[Section]:
    """Read a catalog JSON document and return the sections it describes."""

    resource = Path(path) if path is not None else default_catalog_path()
    try:
        with resource.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except OSError as exc:
        raise ConfigError(f"cannot read catalog {resource}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"catalog {resource} is not valid JSON: {exc}") from exc
    sections = parse_sections(data)
    logger.debug("catalog loaded", extra={"catalog": str(resource), "sections": len(sections)})
    return sections


def parse_sections(payload: Mapping[str, Any]) -> list[Section]:
    """Convert an already-decoded catalog document into domain sections.

    Structural checks that need the whole graph (empty units, duplicate node
    ids) are left to ``ProgressionGraph.build``.
    """

    if not isinstance(payload, Mapping):
        raise ConfigError("catalog root must be a JSON object")
    try:
        document = _CatalogDocument.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"invalid catalog: {exc}") from exc

    exercises: dict[int, Exercise] = {}
    for entry in document.exercises:
        if entry.id in exercises:
            raise ConfigError(f"duplicate exercise id {entry.id}")
        exercises[entry.id] = Exercise(id=entry.id, title=entry.title, categories=tuple(entry.categories))

    def _exercise(ref: int | None, node_id: int) -> Exercise | None:
        if ref is None:
            return None
        exercise = exercises.get(ref)
        if exercise is None:
            raise ConfigError(f"node {node_id} references unknown exercise {ref}")
        return exercise

    return [
        Section(
            id=section.id,
            units=tuple(
                Unit(
                    id=unit.id,
                    info=UnitInfo(
                        section_number=unit.section_number,
                        unit_number=unit.unit_number,
                        title=unit.title,
                    ),
                    nodes=tuple(
                        Node(id=node.id, kind=node.kind, exercise=_exercise(node.exercise, node.id))
                        for node in unit.nodes
                    ),
                )
                for unit in section.units
            ),
        )
        for section in document.sections
    ]

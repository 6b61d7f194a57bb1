"""
JSON skill catalog loader.

Catalog format::

    [
        {"id": "add-2digit", "name": "2-Digit Addition", "prerequisites": ["add-1digit"]},
        ...
    ]
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from loguru import logger

from skillkeep.errors import SkillGraphError

from .graph import Skill, SkillGraph


def skills_from_records(records: list[dict[str, Any]]) -> list[Skill]:
    """Convert raw catalog records to Skill objects."""
    skills = []
    for i, record in enumerate(records):
        if not isinstance(record, dict) or not record.get("id"):
            raise SkillGraphError(f"catalog entry {i} has no id")
        skills.append(
            Skill(
                id=str(record["id"]),
                name=str(record.get("name") or record["id"]),
                prerequisites=tuple(str(p) for p in record.get("prerequisites") or ()),
            )
        )
    return skills


def load_skill_graph(path: str | Path) -> SkillGraph:
    """
    Load and validate a skill graph from a JSON catalog file.

    Raises:
        SkillGraphError: If the file is missing, not valid JSON, or describes an invalid graph
    """
    path = Path(path)
    try:
        records = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise SkillGraphError(f"skill catalog not found: {path}") from e
    except json.JSONDecodeError as e:
        raise SkillGraphError(f"skill catalog is not valid JSON: {path}: {e}") from e

    if not isinstance(records, list):
        raise SkillGraphError(f"skill catalog must be a JSON list: {path}")

    graph = SkillGraph(skills_from_records(records))
    logger.debug(f"Loaded {len(graph)} skills from {path}")
    return graph

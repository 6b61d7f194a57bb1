"""
Skill prerequisite graph.

An explicitly constructed, read-only lookup object: build it once from the
skill catalog and pass it to whatever needs it (depth index, gem service,
CLI). Indices are computed at construction and never mutated afterwards.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from skillkeep.errors import SkillGraphError


@dataclass(frozen=True)
class Skill:
    """A node in the skill DAG."""

    id: str
    name: str
    prerequisites: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_root(self) -> bool:
        return not self.prerequisites


class SkillGraph:
    """
    Immutable skill DAG with precomputed indices.

    Raises:
        SkillGraphError: On duplicate ids, unknown prerequisites or cycles
    """

    def __init__(self, skills: Iterable[Skill]):
        self._skills: tuple[Skill, ...] = tuple(skills)
        self._by_id: dict[str, Skill] = {}
        for skill in self._skills:
            if skill.id in self._by_id:
                raise SkillGraphError(f"duplicate skill id: {skill.id}")
            self._by_id[skill.id] = skill

        dependents: dict[str, list[str]] = {s.id: [] for s in self._skills}
        for skill in self._skills:
            for prereq in set(skill.prerequisites):
                if prereq not in self._by_id:
                    raise SkillGraphError(f"skill {skill.id} has unknown prerequisite {prereq}")
                dependents[prereq].append(skill.id)
        self._dependents = {k: tuple(sorted(v)) for k, v in dependents.items()}

        self._topo_order = self._topological_sort()
        self._roots = tuple(s for s in self._skills if s.is_root)

    def _topological_sort(self) -> tuple[Skill, ...]:
        """Kahn's algorithm; ties broken by skill id for deterministic order."""
        in_degree = {s.id: len(set(s.prerequisites)) for s in self._skills}
        queue = deque(sorted(sid for sid, deg in in_degree.items() if deg == 0))

        order: list[Skill] = []
        while queue:
            sid = queue.popleft()
            order.append(self._by_id[sid])
            for dep in self._dependents[sid]:
                in_degree[dep] -= 1
                if in_degree[dep] == 0:
                    queue.append(dep)

        if len(order) != len(self._skills):
            stuck = sorted(sid for sid, deg in in_degree.items() if deg > 0)
            raise SkillGraphError(f"prerequisite cycle among: {', '.join(stuck)}")
        return tuple(order)

    def topological_order(self) -> list[Skill]:
        """All skills, every prerequisite before its dependents."""
        return list(self._topo_order)

    def roots(self) -> list[Skill]:
        """Skills with no prerequisites."""
        return list(self._roots)

    def get_skill(self, skill_id: str) -> Skill | None:
        return self._by_id.get(skill_id)

    def skill_name(self, skill_id: str) -> str:
        """Display name for a skill, falling back to its id."""
        skill = self._by_id.get(skill_id)
        return skill.name if skill else skill_id

    def prerequisites(self, skill_id: str) -> tuple[str, ...]:
        skill = self._by_id.get(skill_id)
        return skill.prerequisites if skill else ()

    def dependents(self, skill_id: str) -> tuple[str, ...]:
        return self._dependents.get(skill_id, ())

    def __len__(self) -> int:
        return len(self._skills)

    def __contains__(self, skill_id: object) -> bool:
        return skill_id in self._by_id

    def __iter__(self) -> Iterator[Skill]:
        return iter(self._skills)

"""
Skill depth index.

A skill's depth is the longest prerequisite path leading to it (roots are 0).
Depths are bucketed into quartiles so that skills deep in the curriculum
yield rarer gems than foundational ones.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Protocol

from .rarity import Rarity


class GraphSkill(Protocol):
    id: str
    prerequisites: Sequence[str]


class SkillGraph(Protocol):
    def topological_order(self) -> list[GraphSkill]: ...


@dataclass(frozen=True)
class DepthMap:
    """Skill depths plus the (Q1/Q2, Q2/Q3, Q3/Q4) quartile boundaries."""

    depths: Mapping[str, int] = field(default_factory=dict)
    boundaries: tuple[int, int, int] = (0, 0, 0)

    def depth(self, skill_id: str) -> int:
        """Depth of a skill; unknown skills count as depth 0."""
        return self.depths.get(skill_id, 0)

    def rarity_for_skill(self, skill_id: str) -> Rarity:
        q1, q2, q3 = self.boundaries
        depth = self.depth(skill_id)
        if depth > q3:
            return Rarity.LEGENDARY
        if depth > q2:
            return Rarity.EPIC
        if depth > q1:
            return Rarity.RARE
        return Rarity.COMMON


def compute_depth_map(graph: SkillGraph) -> DepthMap:
    """
    Compute longest-path depths over the graph's topological order.

    Prerequisites missing from the order contribute nothing. An empty graph
    yields boundaries (0, 0, 0).

    Args:
        graph: Any object exposing ``topological_order()``

    Returns:
        An immutable DepthMap
    """
    depths: dict[str, int] = {}
    for skill in graph.topological_order():
        depth = 0
        for prereq_id in skill.prerequisites:
            if prereq_id in depths:
                depth = max(depth, depths[prereq_id] + 1)
        depths[skill.id] = depth

    values = sorted(depths.values())
    n = len(values)
    boundaries = (values[n // 4], values[n // 2], values[3 * n // 4]) if n else (0, 0, 0)
    return DepthMap(depths=MappingProxyType(depths), boundaries=boundaries)

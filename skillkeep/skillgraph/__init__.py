"""Skill prerequisite graph: catalog loading and topological ordering."""

from .graph import Skill, SkillGraph
from .loader import load_skill_graph, skills_from_records

__all__ = ["Skill", "SkillGraph", "load_skill_graph", "skills_from_records"]

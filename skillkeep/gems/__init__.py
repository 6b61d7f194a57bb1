"""
Gems awarded for learning milestones.

Components:
- rarity: Rarity tiers, streak/session classifiers, streak thresholds
- depth: Skill depth index and depth-based rarity
- types: GemType and GemAward
- service: GemService (awards, session tally, event log writes)
"""

from .depth import DepthMap, compute_depth_map
from .rarity import (
    BASE_STREAK_THRESHOLD,
    Rarity,
    next_streak_threshold,
    session_rarity,
    streak_rarity,
)
from .service import GemService
from .types import GemAward, GemType

__all__ = [
    "BASE_STREAK_THRESHOLD",
    "DepthMap",
    "GemAward",
    "GemService",
    "GemType",
    "Rarity",
    "compute_depth_map",
    "next_streak_threshold",
    "session_rarity",
    "streak_rarity",
]

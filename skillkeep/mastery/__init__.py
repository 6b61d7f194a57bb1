"""
Mastery lifecycle: New -> Learning -> Mastered <-> Rusty.

Components:
- MasteryState / StateTransition: lifecycle states and change records
- FluencyMetrics: accuracy/speed/consistency inputs for the fluency score
- MasteryService: per-skill mastery records restored from snapshots
"""

from .fluency import FluencyMetrics, consistency_score, fluency_score
from .service import MasteryService, SkillMastery, migrate_snapshot
from .state import MasteryState, StateTransition

__all__ = [
    "MasteryState",
    "StateTransition",
    "FluencyMetrics",
    "consistency_score",
    "fluency_score",
    "MasteryService",
    "SkillMastery",
    "migrate_snapshot",
]

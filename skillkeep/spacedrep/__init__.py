"""
Spaced repetition for mastered skills.

Components:
- schedule: Interval table and graduation constants
- review: ReviewState and its pure queries (due, grace period, status)
- scheduler: Per-skill review lifecycle and the session-start decay sweep
- bootstrap: Review states derived from mastery-only snapshots
"""

from .bootstrap import bootstrap_from_mastery
from .review import ReviewState, ReviewStatus
from .schedule import (
    BASE_INTERVALS,
    GRADUATED_INTERVAL_DAYS,
    GRADUATION_THRESHOLD,
    MAX_STAGE,
    interval_for_stage,
)
from .scheduler import MasteryEventAppender, MasteryProvider, Scheduler

__all__ = [
    "BASE_INTERVALS",
    "GRADUATED_INTERVAL_DAYS",
    "GRADUATION_THRESHOLD",
    "MAX_STAGE",
    "interval_for_stage",
    "ReviewState",
    "ReviewStatus",
    "Scheduler",
    "MasteryProvider",
    "MasteryEventAppender",
    "bootstrap_from_mastery",
]

"""
Per-skill review state.

All queries are pure functions of ``(state, now)``; only the Scheduler
mutates a ReviewState.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from .schedule import GRACE_FRACTION, GRADUATED_INTERVAL_DAYS, interval_for_stage

SECONDS_PER_DAY = 86400.0


class ReviewStatus(str, Enum):
    """Review status for display."""

    NOT_DUE = "not_due"
    DUE = "due"
    OVERDUE = "overdue"
    GRADUATED = "graduated"


@dataclass
class ReviewState:
    """Spaced repetition state for a single skill."""

    skill_id: str
    stage: int
    next_review_date: datetime
    consecutive_hits: int
    graduated: bool
    last_review_date: datetime

    @property
    def current_interval_days(self) -> int:
        """Interval for the current stage, or the graduated interval."""
        if self.graduated:
            return GRADUATED_INTERVAL_DAYS
        return interval_for_stage(self.stage)

    def schedule_from(self, when: datetime) -> None:
        """Set last review to ``when`` and derive the next review from the current interval."""
        self.last_review_date = when
        self.next_review_date = when + timedelta(days=self.current_interval_days)

    def is_due(self, now: datetime) -> bool:
        """At or past the review date."""
        return now >= self.next_review_date

    def overdue_days(self, now: datetime) -> float:
        """Fractional days past due; 0 if not yet due."""
        if now < self.next_review_date:
            return 0.0
        return (now - self.next_review_date).total_seconds() / SECONDS_PER_DAY

    def is_rusty_threshold(self, now: datetime) -> bool:
        """
        True once the skill is overdue by more than half its current interval.

        A few hours late is tolerated; a stage-2 skill (7 days) decays only
        after 3.5 days past its review date.
        """
        if not self.is_due(now):
            return False
        grace = timedelta(days=self.current_interval_days * GRACE_FRACTION)
        return now > self.next_review_date + grace

    def status(self, now: datetime) -> ReviewStatus:
        """
        Graduated skills that come due still report ``due`` so they surface
        for a light check-in; past the grace period everything is ``overdue``.
        """
        if self.graduated and not self.is_due(now):
            return ReviewStatus.GRADUATED
        if self.is_rusty_threshold(now):
            return ReviewStatus.OVERDUE
        if self.is_due(now):
            return ReviewStatus.DUE
        return ReviewStatus.NOT_DUE

    def days_until_review(self, now: datetime) -> int:
        """Whole days until the next review, rounded up; 0 if already due."""
        if self.is_due(now):
            return 0
        remaining = (self.next_review_date - now).total_seconds() / SECONDS_PER_DAY
        return math.floor(remaining) + 1

"""Expanding review interval schedule."""

# Days until the next review, indexed by stage. Stage 0 is the first review
# after mastery.
BASE_INTERVALS: tuple[int, ...] = (1, 3, 7, 14, 30, 60)

MAX_STAGE = len(BASE_INTERVALS) - 1

# Consecutive correct reviews needed to leave active review.
GRADUATION_THRESHOLD = 6

# Check-in interval once graduated; longer than any staged interval.
GRADUATED_INTERVAL_DAYS = 90

# Fraction of the current interval a skill may be overdue before it decays.
GRACE_FRACTION = 0.5


def interval_for_stage(stage: int) -> int:
    """Interval in days for a stage, clamped to the last table entry."""
    if stage < 0:
        stage = 0
    return BASE_INTERVALS[min(stage, MAX_STAGE)]

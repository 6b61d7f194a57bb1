"""
Unit tests for ReviewState.

Tests:
- Interval lookup and clamping
- Due / overdue / grace period
- Status precedence
- Days until next review
"""

from datetime import UTC, datetime, timedelta

import pytest

from skillkeep.spacedrep import (
    BASE_INTERVALS,
    GRADUATED_INTERVAL_DAYS,
    ReviewState,
    ReviewStatus,
    interval_for_stage,
)

NEXT = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)


def make_state(stage=2, graduated=False, next_review=NEXT, hits=0):
    interval = GRADUATED_INTERVAL_DAYS if graduated else interval_for_stage(stage)
    return ReviewState(
        skill_id="add-2",
        stage=stage,
        next_review_date=next_review,
        consecutive_hits=hits,
        graduated=graduated,
        last_review_date=next_review - timedelta(days=interval),
    )


class TestIntervals:
    """Tests for the interval table."""

    def test_base_intervals(self):
        """Stages map to 1, 3, 7, 14, 30, 60 days."""
        assert BASE_INTERVALS == (1, 3, 7, 14, 30, 60)
        assert [interval_for_stage(s) for s in range(6)] == [1, 3, 7, 14, 30, 60]

    def test_stage_beyond_table_clamps(self):
        """Stages past the table use the last interval."""
        assert make_state(stage=10).current_interval_days == 60

    def test_graduated_interval(self):
        """Graduated skills use the 90-day interval regardless of stage."""
        assert make_state(stage=3, graduated=True).current_interval_days == 90


class TestDueness:
    """Tests for is_due, overdue_days and the grace period."""

    def test_not_due_before_review_date(self):
        rs = make_state()
        assert not rs.is_due(NEXT - timedelta(seconds=1))
        assert rs.overdue_days(NEXT - timedelta(days=1)) == 0.0

    def test_due_at_review_date(self):
        """Due exactly at the review instant."""
        assert make_state().is_due(NEXT)

    def test_overdue_days_fractional(self):
        assert make_state().overdue_days(NEXT + timedelta(hours=36)) == pytest.approx(1.5)

    def test_grace_period_stage_two(self):
        """A 7-day interval tolerates 3.5 days past due before decaying."""
        rs = make_state(stage=2)
        assert not rs.is_rusty_threshold(NEXT + timedelta(days=2))
        assert not rs.is_rusty_threshold(NEXT + timedelta(days=3, hours=12))
        assert rs.is_rusty_threshold(NEXT + timedelta(days=4))

    def test_grace_period_stage_zero(self):
        """A 1-day interval tolerates 12 hours."""
        rs = make_state(stage=0)
        assert not rs.is_rusty_threshold(NEXT + timedelta(hours=11))
        assert rs.is_rusty_threshold(NEXT + timedelta(hours=13))

    def test_not_rusty_before_due(self):
        assert not make_state().is_rusty_threshold(NEXT - timedelta(days=30))


class TestStatus:
    """Tests for status precedence."""

    def test_not_due(self):
        assert make_state().status(NEXT - timedelta(days=1)) == ReviewStatus.NOT_DUE

    def test_due(self):
        assert make_state().status(NEXT + timedelta(days=1)) == ReviewStatus.DUE

    def test_overdue_past_grace(self):
        assert make_state().status(NEXT + timedelta(days=4)) == ReviewStatus.OVERDUE

    def test_graduated_not_due(self):
        rs = make_state(graduated=True)
        assert rs.status(NEXT - timedelta(days=10)) == ReviewStatus.GRADUATED

    def test_graduated_and_due_reports_due(self):
        """A graduated skill that comes due surfaces for a check-in."""
        rs = make_state(graduated=True)
        assert rs.status(NEXT + timedelta(days=1)) == ReviewStatus.DUE

    def test_graduated_past_grace_reports_overdue(self):
        """Graduated grace is 45 days."""
        rs = make_state(graduated=True)
        assert rs.status(NEXT + timedelta(days=44)) == ReviewStatus.DUE
        assert rs.status(NEXT + timedelta(days=46)) == ReviewStatus.OVERDUE

    def test_status_values(self):
        assert ReviewStatus.NOT_DUE.value == "not_due"
        assert ReviewStatus.OVERDUE.value == "overdue"


class TestDaysUntilReview:
    """Tests for days_until_review rounding."""

    def test_zero_when_due(self):
        assert make_state().days_until_review(NEXT) == 0
        assert make_state().days_until_review(NEXT + timedelta(days=3)) == 0

    def test_rounds_up_partial_day(self):
        assert make_state().days_until_review(NEXT - timedelta(hours=36)) == 2
        assert make_state().days_until_review(NEXT - timedelta(hours=1)) == 1

    def test_whole_days(self):
        assert make_state().days_until_review(NEXT - timedelta(days=3)) == 4

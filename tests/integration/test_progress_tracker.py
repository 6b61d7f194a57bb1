"""
Integration tests for ProgressTracker.

Runs whole sessions against a SQLite file database: restore, decay, answers,
transitions, snapshot and pruning.
"""

from datetime import UTC, datetime, timedelta

import pytest

from skillkeep.gems import GemType
from skillkeep.mastery import MasteryState
from skillkeep.session import ProgressTracker
from skillkeep.store import EventRepo, QueryOpts, SequenceCounter, SnapshotStore

DAY1 = datetime(2025, 4, 1, 18, 0, tzinfo=UTC)


@pytest.fixture
def parts(engine):
    sequencer = SequenceCounter(engine)
    return SnapshotStore(engine), EventRepo(engine, sequencer), sequencer


@pytest.fixture
def make_tracker(parts, skill_graph):
    def factory(keep=5):
        store, repo, sequencer = parts
        return ProgressTracker(store, repo, sequencer, skill_graph, keep=keep)

    return factory


def master_skill(tracker, skill_id, now):
    tracker.record_answer(skill_id, True, now, review=False)
    transition = tracker.mastery.mark_mastered(skill_id, now)
    return tracker.apply_transition(transition, now)


class TestSessionLifecycle:
    """Tests for start/finish and snapshot persistence."""

    def test_first_session_starts_empty(self, make_tracker, parts):
        tracker = make_tracker()
        assert tracker.start(DAY1, session_id="s-1") == []
        snapshot = tracker.finish(DAY1 + timedelta(minutes=10))

        store, repo, sequencer = parts
        assert store.latest().sequence == snapshot.sequence
        assert snapshot.sequence == sequencer.current()
        assert snapshot.data.version == 3

    def test_record_before_start_raises(self, make_tracker):
        with pytest.raises(RuntimeError):
            make_tracker().record_answer("add-1", True, DAY1)

    def test_snapshot_sequence_follows_session_events(self, make_tracker, parts):
        tracker = make_tracker()
        tracker.start(DAY1, session_id="s-1")
        tracker.record_answer("count", True, DAY1)
        snapshot = tracker.finish(DAY1 + timedelta(minutes=5))

        store, repo, _ = parts
        assert repo.events_after(snapshot.sequence) == []
        assert all(e.sequence < snapshot.sequence for e in repo.events_after(0))

    def test_mastery_is_restored_next_session(self, make_tracker):
        tracker = make_tracker()
        tracker.start(DAY1, session_id="s-1")
        award = master_skill(tracker, "add-2", DAY1)
        tracker.finish(DAY1)

        assert award.gem_type == GemType.MASTERY

        tracker = make_tracker()
        tracker.start(DAY1 + timedelta(hours=12), session_id="s-2")
        assert tracker.mastery.get_mastery("add-2").state == MasteryState.MASTERED
        rs = tracker.scheduler.get_review_state("add-2")
        assert rs.next_review_date == DAY1 + timedelta(days=1)

    def test_finish_prunes_to_keep(self, make_tracker, parts):
        for day in range(4):
            tracker = make_tracker(keep=2)
            now = DAY1 + timedelta(days=day)
            tracker.start(now)
            tracker.finish(now)

        store, _, _ = parts
        assert store.count() == 2


class TestDecayAcrossSessions:
    def test_missed_review_decays_and_recovers(self, make_tracker, parts):
        tracker = make_tracker()
        tracker.start(DAY1, session_id="s-1")
        master_skill(tracker, "add-1", DAY1)
        tracker.finish(DAY1)

        # Due after 1 day, grace 12 hours
        later = DAY1 + timedelta(days=3)
        tracker = make_tracker()
        transitions = tracker.start(later, session_id="s-2")

        assert [t.skill_id for t in transitions] == ["add-1"]
        assert tracker.mastery.get_mastery("add-1").state == MasteryState.RUSTY

        _, repo, _ = parts
        decay_events = [e for e in repo.query_mastery_events("add-1") if e.payload.trigger == "time-decay"]
        assert len(decay_events) == 1
        assert decay_events[0].payload.session_id == "s-2"

        transition = tracker.mastery.mark_mastered("add-1", later)
        award = tracker.apply_transition(transition, later)
        assert award.gem_type == GemType.RECOVERY
        rs = tracker.scheduler.get_review_state("add-1")
        assert (rs.stage, rs.consecutive_hits) == (0, 0)
        assert rs.next_review_date == later + timedelta(days=1)


class TestAnswers:
    """Tests for record_answer."""

    def test_streak_gems_at_milestones(self, make_tracker):
        tracker = make_tracker()
        tracker.start(DAY1, session_id="s-1")

        awards = [tracker.record_answer("count", True, DAY1) for _ in range(10)]

        streaks = [(i + 1, a.rarity.value) for i, a in enumerate(awards) if a is not None]
        assert streaks == [(5, "common"), (10, "rare")]

    def test_miss_resets_streak(self, make_tracker):
        tracker = make_tracker()
        tracker.start(DAY1, session_id="s-1")
        for _ in range(4):
            tracker.record_answer("count", True, DAY1)
        tracker.record_answer("count", False, DAY1)
        awards = [tracker.record_answer("count", True, DAY1) for _ in range(4)]
        assert awards == [None] * 4

    def test_review_answers_feed_scheduler(self, make_tracker, parts):
        tracker = make_tracker()
        tracker.start(DAY1, session_id="s-1")
        master_skill(tracker, "add-3", DAY1)

        when = DAY1
        award = None
        for _ in range(6):
            when = tracker.scheduler.get_review_state("add-3").next_review_date
            award = tracker.record_answer("add-3", True, when)

        rs = tracker.scheduler.get_review_state("add-3")
        assert rs.graduated
        assert award.gem_type == GemType.RETENTION
        assert award.skill_name == "3-Digit Addition"

        _, repo, _ = parts
        categories = [e.payload.category for e in repo.events_after(0) if type(e.payload).__name__ == "AnswerEventData"]
        assert categories == ["new"] + ["review"] * 6

    def test_session_gem_and_counts_in_snapshot(self, make_tracker, parts):
        tracker = make_tracker()
        tracker.start(DAY1, session_id="s-1")
        for correct in (True, True, False, True):
            tracker.record_answer("count", correct, DAY1)
        snapshot = tracker.finish(DAY1 + timedelta(minutes=3))

        session_gems = [g for g in tracker.gems.session_gems if g.gem_type == GemType.SESSION]
        assert len(session_gems) == 1
        assert session_gems[0].rarity.value == "epic"  # 75%
        assert snapshot.data.gems.count_by_type == {"session": 1}

        _, repo, _ = parts
        (summary,) = repo.query_session_summaries(QueryOpts(limit=1))
        assert (summary.questions_served, summary.correct_answers, summary.duration_secs) == (4, 3, 180)
        assert summary.gem_count == 1

"""
Spaced-repetition scheduler.

Owns one ReviewState per mastered skill. Per-skill state machine:

    untracked --init_skill--> active(stage, hits)
    active --correct x GRADUATION_THRESHOLD--> graduated
    any --reinit_skill (recovered from rusty)--> active(stage 0)

A correct review advances the stage and reschedules from ``now``; an
incorrect review resets the hit streak but leaves the schedule alone, so the
skill stays due until it is answered correctly.

Not thread-safe: confine a Scheduler to the session that created it.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Protocol

from loguru import logger

from skillkeep.core.timestamps import ensure_utc, format_timestamp, parse_timestamp
from skillkeep.mastery.state import MasteryState, StateTransition
from skillkeep.store.schemas import (
    MasteryEventData,
    ReviewStateData,
    SnapshotData,
    SpacedRepSnapshotData,
)

from .bootstrap import bootstrap_from_mastery
from .review import ReviewState
from .schedule import BASE_INTERVALS, GRADUATION_THRESHOLD

DECAY_TRIGGER = "time-decay"


class MasteryRecord(Protocol):
    state: MasteryState

    def fluency_score(self) -> float: ...


class MasteryProvider(Protocol):
    """The mastery collaborator the scheduler consults and signals."""

    def get_mastery(self, skill_id: str) -> MasteryRecord: ...

    def mark_rusty(self, skill_id: str, now: datetime | None = None) -> StateTransition | None: ...


class MasteryEventAppender(Protocol):
    def append_mastery_event(self, data: MasteryEventData) -> int: ...


class Scheduler:
    """Review scheduling for all tracked skills."""

    def __init__(
        self,
        snapshot: SnapshotData | None,
        mastery: MasteryProvider,
        event_repo: MasteryEventAppender | None = None,
    ):
        """
        Restore review state from a snapshot.

        A snapshot carrying mastery data but no spaced-repetition section is
        bootstrapped from the mastery records (migration path).

        Args:
            snapshot: Latest snapshot document, or None on first run
            mastery: Mastery collaborator
            event_repo: Receives time-decay audit events (optional)
        """
        self._reviews: dict[str, ReviewState] = {}
        self._mastery = mastery
        self._event_repo = event_repo

        if snapshot is None:
            return
        if snapshot.spaced_rep is not None:
            self._load(snapshot.spaced_rep)
        elif snapshot.mastery is not None:
            logger.info("No spaced repetition data in snapshot; bootstrapping from mastery")
            self._load(bootstrap_from_mastery(snapshot.mastery))

    def _load(self, data: SpacedRepSnapshotData) -> None:
        for skill_id, rd in data.reviews.items():
            try:
                next_review = parse_timestamp(rd.next_review_date)
                last_review = parse_timestamp(rd.last_review_date)
            except ValueError:
                logger.debug(f"Dropping review state for {skill_id}: malformed timestamp")
                continue
            self._reviews[skill_id] = ReviewState(
                skill_id=rd.skill_id or skill_id,
                stage=rd.stage,
                next_review_date=next_review,
                consecutive_hits=rd.consecutive_hits,
                graduated=rd.graduated,
                last_review_date=last_review,
            )
        logger.debug(f"Restored {len(self._reviews)} review state(s)")

    # =========================================================================
    # Session start
    # =========================================================================

    def run_decay_check(self, now: datetime, session_id: str | None = None) -> list[StateTransition]:
        """
        Mark mastered skills that slipped past their grace period as rusty.

        Skills not currently Mastered are skipped. Each applied transition is
        audited as a "time-decay" mastery event; an audit failure is logged
        and does not stop the sweep. The event carries the fluency score
        taken before ``mark_rusty`` resets the skill's counters.

        Returns:
            Transitions actually applied (empty list when nothing decayed)
        """
        now = ensure_utc(now)
        transitions: list[StateTransition] = []

        for skill_id in sorted(self._reviews):
            rs = self._reviews[skill_id]
            sm = self._mastery.get_mastery(skill_id)
            if sm.state != MasteryState.MASTERED or not rs.is_rusty_threshold(now):
                continue

            fluency = sm.fluency_score()
            transition = self._mastery.mark_rusty(skill_id, now)
            if transition is None:
                continue
            transitions.append(transition)
            logger.info(f"Skill {skill_id} decayed to rusty ({rs.overdue_days(now):.1f} days overdue)")

            if self._event_repo is None:
                continue
            try:
                self._event_repo.append_mastery_event(
                    MasteryEventData(
                        skill_id=skill_id,
                        from_state=transition.from_state.value,
                        to_state=transition.to_state.value,
                        trigger=DECAY_TRIGGER,
                        fluency_score=fluency,
                        session_id=session_id,
                    )
                )
            except Exception as e:  # Intentionally broad - audit is best-effort
                logger.warning(f"Failed to record decay event for {skill_id}: {e}")

        return transitions

    def due_skills(self, now: datetime) -> list[str]:
        """Mastered skills due for review, most overdue first (ties by id)."""
        now = ensure_utc(now)
        due = [
            (rs.overdue_days(now), skill_id)
            for skill_id, rs in self._reviews.items()
            if self._mastery.get_mastery(skill_id).state == MasteryState.MASTERED and rs.is_due(now)
        ]
        due.sort(key=lambda item: (-item[0], item[1]))
        return [skill_id for _, skill_id in due]

    # =========================================================================
    # Transitions
    # =========================================================================

    def record_review(self, skill_id: str, correct: bool, now: datetime) -> None:
        """Update the schedule after a review answer. Untracked skills are ignored."""
        rs = self._reviews.get(skill_id)
        if rs is None:
            return
        now = ensure_utc(now)

        if correct:
            rs.consecutive_hits += 1
            if not rs.graduated:
                rs.stage += 1
                if rs.consecutive_hits >= GRADUATION_THRESHOLD:
                    rs.graduated = True
                    logger.info(f"Skill {skill_id} graduated from active review")
            rs.schedule_from(now)
        else:
            rs.consecutive_hits = 0
            rs.last_review_date = now

    def init_skill(self, skill_id: str, mastered_at: datetime) -> None:
        """Start tracking a newly mastered skill."""
        self._reviews[skill_id] = self._fresh_state(skill_id, ensure_utc(mastered_at))

    def reinit_skill(self, skill_id: str, now: datetime) -> None:
        """
        Restart tracking after recovery (Rusty -> Mastered).

        All previous progress is discarded so retention is verified from stage 0.
        """
        self._reviews[skill_id] = self._fresh_state(skill_id, ensure_utc(now))

    @staticmethod
    def _fresh_state(skill_id: str, when: datetime) -> ReviewState:
        return ReviewState(
            skill_id=skill_id,
            stage=0,
            next_review_date=when + timedelta(days=BASE_INTERVALS[0]),
            consecutive_hits=0,
            graduated=False,
            last_review_date=when,
        )

    # =========================================================================
    # Accessors
    # =========================================================================

    def get_review_state(self, skill_id: str) -> ReviewState | None:
        return self._reviews.get(skill_id)

    def all_review_states(self) -> dict[str, ReviewState]:
        """All review states (for stats/UI)."""
        return dict(self._reviews)

    def snapshot_data(self) -> SpacedRepSnapshotData:
        """Export the current review state for persistence."""
        data = SpacedRepSnapshotData()
        for skill_id, rs in self._reviews.items():
            data.reviews[skill_id] = ReviewStateData(
                skill_id=rs.skill_id,
                stage=rs.stage,
                next_review_date=format_timestamp(rs.next_review_date),
                consecutive_hits=rs.consecutive_hits,
                graduated=rs.graduated,
                last_review_date=format_timestamp(rs.last_review_date),
            )
        return data

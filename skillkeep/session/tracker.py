"""
Session progress tracking.

Wires the persistence layer to the learning-state services for the length of
one practice session:

    start()            latest snapshot -> MasteryService + Scheduler,
                       decay sweep, "start" session event
    record_answer()    answer event, streak gems, spaced-rep review
    apply_transition() review (re)initialisation, mastery/recovery gems
    finish()           "end" session event, session gem, new snapshot, prune

Only ``finish`` writes a snapshot; everything in between is captured by the
event log and can be replayed from the previous snapshot's sequence.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime

from loguru import logger

from skillkeep.core.timestamps import ensure_utc
from skillkeep.gems import BASE_STREAK_THRESHOLD, GemAward, GemService, next_streak_threshold
from skillkeep.mastery import MasteryService, MasteryState, StateTransition
from skillkeep.skillgraph import SkillGraph
from skillkeep.spacedrep import Scheduler
from skillkeep.store import (
    AnswerEventData,
    EventRepo,
    MasteryEventData,
    SequenceCounter,
    SessionEventData,
    Snapshot,
    SnapshotData,
    SnapshotStore,
)

DEFAULT_SNAPSHOT_VERSION = 3


@dataclass
class SessionCounters:
    questions_served: int = 0
    correct_answers: int = 0
    consecutive_correct: int = 0
    next_streak_threshold: int = BASE_STREAK_THRESHOLD

    @property
    def accuracy(self) -> float:
        if self.questions_served == 0:
            return 0.0
        return self.correct_answers / self.questions_served


class ProgressTracker:
    """Persists learner progress across one session."""

    def __init__(
        self,
        snapshot_store: SnapshotStore,
        event_repo: EventRepo,
        sequencer: SequenceCounter,
        graph: SkillGraph,
        keep: int = 5,
        snapshot_version: int = DEFAULT_SNAPSHOT_VERSION,
    ):
        self._snapshots = snapshot_store
        self._events = event_repo
        self._sequencer = sequencer
        self._graph = graph
        self._keep = keep
        self._version = snapshot_version

        self.mastery: MasteryService | None = None
        self.scheduler: Scheduler | None = None
        self.gems = GemService(graph, event_repo)
        self.session_id: str | None = None
        self.counters = SessionCounters()
        self._started_at: datetime | None = None
        self._previous: SnapshotData | None = None

    @property
    def active(self) -> bool:
        return self._started_at is not None

    def _require_active(self) -> None:
        if not self.active:
            raise RuntimeError("no active session; call start() first")

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self, now: datetime, session_id: str | None = None) -> list[StateTransition]:
        """
        Restore state from the latest snapshot and open a session.

        Args:
            now: Session start time
            session_id: Identifier for the session (generated if omitted)

        Returns:
            Skills that decayed to rusty since the last session
        """
        now = ensure_utc(now)
        latest = self._snapshots.latest()
        self._previous = latest.data if latest else None
        if latest is None:
            logger.info("No snapshot found; starting with empty progress")
        else:
            logger.info(f"Restoring from snapshot id={latest.id} sequence={latest.sequence}")

        self.session_id = session_id or uuid.uuid4().hex
        self.mastery = MasteryService(self._previous, skill_name=self._graph.skill_name)
        self.scheduler = Scheduler(self._previous, self.mastery, self._events)
        self.gems.reset_session()
        self.counters = SessionCounters()
        self._started_at = now

        transitions = self.scheduler.run_decay_check(now, self.session_id)
        self._events.append_session_event(SessionEventData(session_id=self.session_id, action="start"))
        return transitions

    def record_answer(
        self,
        skill_id: str,
        correct: bool,
        now: datetime,
        review: bool = True,
        time_ms: int = 0,
    ) -> GemAward | None:
        """
        Record one answered question.

        Args:
            skill_id: Skill the question exercised
            correct: Whether the answer was correct
            now: Answer time
            review: Feed the answer to the spaced-repetition scheduler
            time_ms: Time taken to answer

        Returns:
            The gem earned by this answer (retention beats streak), or None
        """
        self._require_active()
        now = ensure_utc(now)
        sm = self.mastery.get_mastery(skill_id)

        if sm.state == MasteryState.RUSTY:
            category = "recovery"
        elif review and self.scheduler.get_review_state(skill_id) is not None:
            category = "review"
        else:
            category = "new"
        if sm.state == MasteryState.NEW:
            self.mastery.mark_learning(skill_id)
        self.mastery.record_attempt(skill_id, correct)

        self._events.append_answer_event(
            AnswerEventData(
                session_id=self.session_id,
                skill_id=skill_id,
                correct=correct,
                tier=sm.current_tier,
                category=category,
                time_ms=time_ms,
            )
        )

        award: GemAward | None = None
        counters = self.counters
        counters.questions_served += 1
        if correct:
            counters.correct_answers += 1
            counters.consecutive_correct += 1
            if counters.consecutive_correct >= counters.next_streak_threshold:
                award = self.gems.award_streak(counters.consecutive_correct, self.session_id)
                counters.next_streak_threshold = next_streak_threshold(counters.consecutive_correct)
        else:
            counters.consecutive_correct = 0
            counters.next_streak_threshold = BASE_STREAK_THRESHOLD

        if review and category == "review":
            rs = self.scheduler.get_review_state(skill_id)
            was_graduated = rs.graduated
            self.scheduler.record_review(skill_id, correct, now)
            if correct and rs.graduated and not was_graduated:
                award = self.gems.award_retention(skill_id, self.session_id)

        return award

    def apply_transition(self, transition: StateTransition, now: datetime) -> GemAward | None:
        """
        React to a mastery transition produced during the session.

        Learning -> Mastered starts review tracking and awards a mastery gem;
        Rusty -> Mastered restarts tracking from stage 0 and awards a recovery
        gem. Every transition is written to the event log.
        """
        self._require_active()
        now = ensure_utc(now)
        sm = self.mastery.get_mastery(transition.skill_id)
        self._events.append_mastery_event(
            MasteryEventData(
                skill_id=transition.skill_id,
                from_state=transition.from_state.value,
                to_state=transition.to_state.value,
                trigger=transition.trigger,
                fluency_score=sm.fluency_score(),
                session_id=self.session_id,
            )
        )

        if transition.to_state != MasteryState.MASTERED:
            return None
        if transition.from_state == MasteryState.LEARNING:
            self.scheduler.init_skill(transition.skill_id, now)
            return self.gems.award_mastery(transition.skill_id, self.session_id)
        if transition.from_state == MasteryState.RUSTY:
            self.scheduler.reinit_skill(transition.skill_id, now)
            return self.gems.award_recovery(transition.skill_id, self.session_id)
        return None

    def finish(self, now: datetime) -> Snapshot:
        """
        Close the session and persist a new snapshot.

        The snapshot is stamped with a fresh sequence number, so every event
        appended during the session sorts before it. Older snapshots beyond
        ``keep`` are pruned afterwards.

        Returns:
            The saved snapshot
        """
        self._require_active()
        now = ensure_utc(now)
        counters = self.counters
        duration = int((now - self._started_at).total_seconds())

        self._events.append_session_event(
            SessionEventData(
                session_id=self.session_id,
                action="end",
                questions_served=counters.questions_served,
                correct_answers=counters.correct_answers,
                duration_secs=max(0, duration),
            )
        )
        if counters.questions_served > 0:
            self.gems.award_session(counters.accuracy, self.session_id)

        data = SnapshotData(
            version=self._version,
            mastery=self.mastery.snapshot_data(),
            spaced_rep=self.scheduler.snapshot_data(),
            gems=self.gems.snapshot_data(),
            learner_profile=self._previous.learner_profile if self._previous else None,
        )
        snapshot = Snapshot(sequence=self._sequencer.next(), timestamp=now, data=data)
        self._snapshots.save(snapshot)
        self._snapshots.prune(self._keep)
        logger.info(
            f"Session {self.session_id} finished: {counters.correct_answers}/"
            f"{counters.questions_served} correct, snapshot sequence={snapshot.sequence}"
        )

        self._started_at = None
        return snapshot

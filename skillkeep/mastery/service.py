"""
Mastery state registry.

Holds one ``SkillMastery`` per encountered skill and applies the lifecycle
transitions other components signal (decay to rusty, mastery, recovery).
Deciding *when* an answer history amounts to mastery is the job of the
answer classifier upstream; this service only records the outcome.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger

from skillkeep.core.timestamps import format_timestamp, parse_timestamp, utcnow
from skillkeep.store.schemas import MasterySnapshotData, SkillMasteryData, SnapshotData

from .fluency import DEFAULT_SPEED_WINDOW, DEFAULT_STREAK_CAP, FluencyMetrics, fluency_score
from .state import MasteryState, StateTransition

TIER_LEARN = "learn"
TIER_PROVE = "prove"


@dataclass
class SkillMastery:
    """Mastery-related data for a single skill."""

    skill_id: str
    state: MasteryState = MasteryState.NEW
    current_tier: str = TIER_LEARN
    total_attempts: int = 0
    correct_count: int = 0
    fluency: FluencyMetrics = field(default_factory=FluencyMetrics)
    mastered_at: datetime | None = None
    rusty_at: datetime | None = None

    @property
    def accuracy(self) -> float:
        if self.total_attempts == 0:
            return 0.0
        return self.correct_count / self.total_attempts

    def fluency_score(self) -> float:
        return fluency_score(self.fluency, self.accuracy)


def _parse_optional(raw: str | None, skill_id: str, label: str) -> datetime | None:
    if raw is None:
        return None
    try:
        return parse_timestamp(raw)
    except ValueError:
        logger.debug(f"Ignoring malformed {label} for {skill_id}: {raw!r}")
        return None


def migrate_snapshot(old: SnapshotData | None) -> MasterySnapshotData:
    """Convert the legacy tier_progress/mastered_set format to mastery records."""
    result = MasterySnapshotData()
    if old is None:
        return result

    mastered = set(old.mastered_set or [])
    for skill_id, tp in (old.tier_progress or {}).items():
        state = MasteryState.MASTERED if skill_id in mastered else MasteryState.LEARNING
        result.skills[skill_id] = SkillMasteryData(
            skill_id=tp.skill_id or skill_id,
            state=state.value,
            current_tier=tp.current_tier,
            total_attempts=tp.total_attempts,
            correct_count=tp.correct_count,
            speed_window=DEFAULT_SPEED_WINDOW,
            streak_cap=DEFAULT_STREAK_CAP,
        )

    for skill_id in mastered:
        if skill_id not in result.skills:
            result.skills[skill_id] = SkillMasteryData(
                skill_id=skill_id,
                state=MasteryState.MASTERED.value,
                current_tier=TIER_PROVE,
                speed_window=DEFAULT_SPEED_WINDOW,
                streak_cap=DEFAULT_STREAK_CAP,
            )
    return result


class MasteryService:
    """
    Mastery state for all skills, restored from a snapshot.

    Not thread-safe; one instance belongs to one session.
    """

    def __init__(
        self,
        snapshot: SnapshotData | None = None,
        skill_name: Callable[[str], str] | None = None,
    ):
        """
        Args:
            snapshot: Latest snapshot document, or None on first run
            skill_name: Resolves display names for transitions (defaults to the id)
        """
        self._skills: dict[str, SkillMastery] = {}
        self._skill_name = skill_name or (lambda skill_id: skill_id)

        if snapshot is None:
            return
        if snapshot.mastery is not None:
            self._load(snapshot.mastery)
        elif snapshot.tier_progress or snapshot.mastered_set:
            logger.info("Migrating legacy tier progress snapshot to mastery records")
            self._load(migrate_snapshot(snapshot))

    def _load(self, data: MasterySnapshotData) -> None:
        for skill_id, sd in data.skills.items():
            try:
                state = MasteryState(sd.state)
            except ValueError:
                logger.debug(f"Skipping {skill_id}: unknown mastery state {sd.state!r}")
                continue
            self._skills[skill_id] = SkillMastery(
                skill_id=skill_id,
                state=state,
                current_tier=TIER_PROVE if sd.current_tier == TIER_PROVE else TIER_LEARN,
                total_attempts=sd.total_attempts,
                correct_count=sd.correct_count,
                fluency=FluencyMetrics(
                    speed_scores=list(sd.speed_scores),
                    speed_window=sd.speed_window or DEFAULT_SPEED_WINDOW,
                    streak=sd.streak,
                    streak_cap=sd.streak_cap or DEFAULT_STREAK_CAP,
                ),
                mastered_at=_parse_optional(sd.mastered_at, skill_id, "mastered_at"),
                rusty_at=_parse_optional(sd.rusty_at, skill_id, "rusty_at"),
            )

    def get_mastery(self, skill_id: str) -> SkillMastery:
        """Mastery record for a skill; a fresh New record if never encountered."""
        sm = self._skills.get(skill_id)
        if sm is None:
            sm = SkillMastery(skill_id=skill_id)
            self._skills[skill_id] = sm
        return sm

    def mark_rusty(self, skill_id: str, now: datetime | None = None) -> StateTransition | None:
        """
        Transition a Mastered skill to Rusty.

        Returns:
            The transition, or None if the skill is not currently Mastered
        """
        sm = self.get_mastery(skill_id)
        if sm.state != MasteryState.MASTERED:
            return None

        sm.state = MasteryState.RUSTY
        sm.rusty_at = now or utcnow()
        # Recovery starts over from the learn tier
        sm.total_attempts = 0
        sm.correct_count = 0
        sm.current_tier = TIER_LEARN

        return StateTransition(
            skill_id=skill_id,
            skill_name=self._skill_name(skill_id),
            from_state=MasteryState.MASTERED,
            to_state=MasteryState.RUSTY,
            trigger="time-decay",
        )

    def mark_mastered(self, skill_id: str, now: datetime | None = None) -> StateTransition | None:
        """
        Record that the classifier promoted a skill to Mastered.

        Learning -> Mastered is a first mastery ("prove-complete");
        Rusty -> Mastered is a recovery ("recovery-complete").

        Returns:
            The transition, or None if the skill was neither Learning nor Rusty
        """
        sm = self.get_mastery(skill_id)
        now = now or utcnow()

        if sm.state == MasteryState.LEARNING:
            sm.state = MasteryState.MASTERED
            sm.mastered_at = now
            trigger = "prove-complete"
            from_state = MasteryState.LEARNING
        elif sm.state == MasteryState.RUSTY:
            sm.state = MasteryState.MASTERED
            sm.rusty_at = None
            trigger = "recovery-complete"
            from_state = MasteryState.RUSTY
        else:
            return None

        return StateTransition(
            skill_id=skill_id,
            skill_name=self._skill_name(skill_id),
            from_state=from_state,
            to_state=MasteryState.MASTERED,
            trigger=trigger,
        )

    def mark_learning(self, skill_id: str) -> StateTransition | None:
        """First attempt on a New skill moves it to Learning."""
        sm = self.get_mastery(skill_id)
        if sm.state != MasteryState.NEW:
            return None
        sm.state = MasteryState.LEARNING
        return StateTransition(
            skill_id=skill_id,
            skill_name=self._skill_name(skill_id),
            from_state=MasteryState.NEW,
            to_state=MasteryState.LEARNING,
            trigger="first-attempt",
        )

    def record_attempt(self, skill_id: str, correct: bool, speed_score: float | None = None) -> SkillMastery:
        """Update counters and fluency inputs for one answer."""
        sm = self.get_mastery(skill_id)
        sm.total_attempts += 1
        if correct:
            sm.correct_count += 1
            sm.fluency.streak += 1
        else:
            sm.fluency.streak = 0
        if speed_score is not None:
            sm.fluency.record_speed(speed_score)
        return sm

    def mastered_skills(self) -> set[str]:
        return {sid for sid, sm in self._skills.items() if sm.state == MasteryState.MASTERED}

    def all_skill_masteries(self) -> dict[str, SkillMastery]:
        return dict(self._skills)

    def snapshot_data(self) -> MasterySnapshotData:
        """Export the current mastery state for persistence."""
        data = MasterySnapshotData()
        for skill_id, sm in self._skills.items():
            data.skills[skill_id] = SkillMasteryData(
                skill_id=skill_id,
                state=sm.state.value,
                current_tier=sm.current_tier,
                total_attempts=sm.total_attempts,
                correct_count=sm.correct_count,
                speed_scores=list(sm.fluency.speed_scores),
                speed_window=sm.fluency.speed_window,
                streak=sm.fluency.streak,
                streak_cap=sm.fluency.streak_cap,
                mastered_at=format_timestamp(sm.mastered_at) if sm.mastered_at else None,
                rusty_at=format_timestamp(sm.rusty_at) if sm.rusty_at else None,
            )
        return data

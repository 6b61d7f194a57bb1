"""
Gem awards.

Builds ``GemAward`` records with the right rarity, keeps the ones earned in
the current session, and writes each to the event log. Writing is
best-effort: a failed append is logged and the award still counts for the
session.
"""

from __future__ import annotations

from collections import Counter
from typing import Protocol

from loguru import logger

from skillkeep.errors import StorageError
from skillkeep.store.schemas import GemEventData, GemsSnapshotData

from .depth import SkillGraph, compute_depth_map
from .rarity import session_rarity, streak_rarity
from .types import GemAward, GemType


class NamedSkillGraph(SkillGraph, Protocol):
    def skill_name(self, skill_id: str) -> str: ...


class GemEventLog(Protocol):
    def append_gem_event(self, data: GemEventData) -> int: ...

    def gem_counts(self) -> tuple[dict[str, int], int]: ...


class GemService:
    """Awards gems for one session."""

    def __init__(self, graph: NamedSkillGraph, event_repo: GemEventLog | None = None):
        self._graph = graph
        self._depth_map = compute_depth_map(graph)
        self._event_repo = event_repo
        self._session_gems: list[GemAward] = []

    @property
    def depth_map(self):
        return self._depth_map

    @property
    def session_gems(self) -> list[GemAward]:
        """Gems awarded since the last ``reset_session``."""
        return list(self._session_gems)

    # =========================================================================
    # Skill gems (rarity from depth)
    # =========================================================================

    def award_mastery(self, skill_id: str, session_id: str) -> GemAward:
        return self._award(GemType.MASTERY, skill_id, session_id, "Mastered")

    def award_recovery(self, skill_id: str, session_id: str) -> GemAward:
        return self._award(GemType.RECOVERY, skill_id, session_id, "Recovered")

    def award_retention(self, skill_id: str, session_id: str) -> GemAward:
        """Awarded when a skill graduates from active review."""
        return self._award(GemType.RETENTION, skill_id, session_id, "Retained")

    def _award(self, gem_type: GemType, skill_id: str, session_id: str, verb: str) -> GemAward:
        name = self._graph.skill_name(skill_id)
        award = GemAward(
            gem_type=gem_type,
            rarity=self._depth_map.rarity_for_skill(skill_id),
            session_id=session_id,
            reason=f"{verb} {name}",
            skill_id=skill_id,
            skill_name=name,
        )
        return self._keep(award)

    # =========================================================================
    # Session gems
    # =========================================================================

    def award_streak(self, streak_length: int, session_id: str) -> GemAward:
        return self._keep(
            GemAward(
                gem_type=GemType.STREAK,
                rarity=streak_rarity(streak_length),
                session_id=session_id,
                reason=f"{streak_length} correct in a row!",
            )
        )

    def award_session(self, accuracy: float, session_id: str) -> GemAward:
        return self._keep(
            GemAward(
                gem_type=GemType.SESSION,
                rarity=session_rarity(accuracy),
                session_id=session_id,
                reason=f"Session complete ({accuracy * 100:.0f}% accuracy)",
            )
        )

    def reset_session(self) -> None:
        self._session_gems.clear()

    def snapshot_data(self) -> GemsSnapshotData | None:
        """
        Lifetime gem totals for the snapshot.

        Read from the event log when one is attached, otherwise counted from
        this session's awards. Returns None if the log cannot be read.
        """
        if self._event_repo is None:
            counts = Counter(award.gem_type.value for award in self._session_gems)
            return GemsSnapshotData(total_count=sum(counts.values()), count_by_type=dict(counts))
        try:
            by_type, total = self._event_repo.gem_counts()
        except StorageError as e:
            logger.warning(f"Could not read gem counts: {e}")
            return None
        return GemsSnapshotData(total_count=total, count_by_type=by_type)

    def _keep(self, award: GemAward) -> GemAward:
        self._persist(award)
        self._session_gems.append(award)
        logger.info(f"{award.gem_type.icon} {award.rarity.display_name} {award.gem_type.display_name} gem: {award.reason}")
        return award

    def _persist(self, award: GemAward) -> None:
        if self._event_repo is None:
            return
        try:
            self._event_repo.append_gem_event(
                GemEventData(
                    gem_type=award.gem_type.value,
                    rarity=award.rarity.value,
                    session_id=award.session_id,
                    reason=award.reason,
                    skill_id=award.skill_id,
                    skill_name=award.skill_name,
                )
            )
        except StorageError as e:
            logger.warning(f"Failed to record {award.gem_type.value} gem: {e}")

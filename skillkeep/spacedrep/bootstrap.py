from __future__ import annotations

from datetime import timedelta

from skillkeep.core.timestamps import format_timestamp, parse_timestamp
from skillkeep.store.schemas import MasterySnapshotData, ReviewStateData, SpacedRepSnapshotData

from .schedule import BASE_INTERVALS


def bootstrap_from_mastery(mastery: MasterySnapshotData | None) -> SpacedRepSnapshotData:
    """
    Build initial review states from a mastery-only snapshot.

    Upgrades learners whose mastery history predates spaced-repetition
    tracking. Every skill in the ``mastered`` state with a parseable
    ``mastered_at`` starts at stage 0; anything else is skipped.
    """
    data = SpacedRepSnapshotData()
    if mastery is None:
        return data

    for skill_id, skill in mastery.skills.items():
        if skill.state != "mastered" or skill.mastered_at is None:
            continue
        try:
            mastered_at = parse_timestamp(skill.mastered_at)
        except ValueError:
            continue
        data.reviews[skill_id] = ReviewStateData(
            skill_id=skill_id,
            stage=0,
            next_review_date=format_timestamp(mastered_at + timedelta(days=BASE_INTERVALS[0])),
            consecutive_hits=0,
            graduated=False,
            last_review_date=format_timestamp(mastered_at),
        )
    return data

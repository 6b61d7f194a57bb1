"""
Progress persistence: global sequencer, event log and snapshots.

Components:
- SequenceCounter: one monotonic number per event, shared by all event tables
- EventRepo: append-only event streams with cross-type replay
- SnapshotStore: point-in-time learner state with retention pruning
"""

from .event_repo import EventRepo
from .schemas import (
    AnswerEventData,
    Envelope,
    GemEventData,
    GemsSnapshotData,
    LearnerProfileData,
    MasteryEventData,
    MasterySnapshotData,
    PlanSlotSummary,
    QueryOpts,
    ReviewStateData,
    SessionEventData,
    SessionSummaryRecord,
    SkillMasteryData,
    Snapshot,
    SnapshotData,
    SpacedRepSnapshotData,
    TierProgressData,
)
from .sequencer import SequenceCounter
from .snapshot_store import SnapshotStore

__all__ = [
    # Ordering
    "SequenceCounter",
    # Event log
    "EventRepo",
    "Envelope",
    "QueryOpts",
    "MasteryEventData",
    "AnswerEventData",
    "GemEventData",
    "SessionEventData",
    "PlanSlotSummary",
    "SessionSummaryRecord",
    # Snapshots
    "SnapshotStore",
    "Snapshot",
    "SnapshotData",
    "SpacedRepSnapshotData",
    "ReviewStateData",
    "MasterySnapshotData",
    "SkillMasteryData",
    "TierProgressData",
    "GemsSnapshotData",
    "LearnerProfileData",
]

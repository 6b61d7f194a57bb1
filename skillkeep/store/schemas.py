"""
Persisted shapes for snapshots and events.

Snapshot documents are pydantic models so that stored JSON is validated on
load and dumped with stable field names. Event payloads are plain dataclasses
wrapped in an ``Envelope`` that carries the sequence number and timestamp
every event shares.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

# =============================================================================
# Snapshot documents
# =============================================================================


class ReviewStateData(BaseModel):
    """Serialized form of a spaced-repetition ReviewState."""

    model_config = ConfigDict(extra="ignore")

    # Every field is optional: an unusable entry is dropped at restore time
    # rather than failing the whole snapshot document
    skill_id: str = ""
    stage: int = 0
    next_review_date: str | None = None
    consecutive_hits: int = 0
    graduated: bool = False
    last_review_date: str | None = None

    @field_validator("stage", "consecutive_hits", "graduated", mode="before")
    @classmethod
    def _null_as_default(cls, value, info):
        if value is None:
            return cls.model_fields[info.field_name].default
        return value


class SpacedRepSnapshotData(BaseModel):
    """All spaced-repetition state, keyed by skill id."""

    model_config = ConfigDict(extra="ignore")

    reviews: dict[str, ReviewStateData] = Field(default_factory=dict)


class SkillMasteryData(BaseModel):
    """Serialized form of a skill's mastery record."""

    model_config = ConfigDict(extra="ignore")

    skill_id: str
    state: str = "new"
    current_tier: str = "learn"
    total_attempts: int = 0
    correct_count: int = 0
    speed_scores: list[float] = Field(default_factory=list)
    speed_window: int = 0
    streak: int = 0
    streak_cap: int = 0
    mastered_at: str | None = None
    rusty_at: str | None = None


class MasterySnapshotData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    skills: dict[str, SkillMasteryData] = Field(default_factory=dict)


class TierProgressData(BaseModel):
    """Pre-mastery-service progress format, read only for migration."""

    model_config = ConfigDict(extra="ignore")

    skill_id: str
    current_tier: str = "learn"
    total_attempts: int = 0
    correct_count: int = 0


class GemsSnapshotData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    total_count: int = 0
    count_by_type: dict[str, int] = Field(default_factory=dict)


class LearnerProfileData(BaseModel):
    """Opaque learner profile produced by the (external) profile generator."""

    model_config = ConfigDict(extra="allow")

    summary: str = ""
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    patterns: list[str] = Field(default_factory=list)
    generated_at: str = ""


class SnapshotData(BaseModel):
    """Full learner state captured in a snapshot."""

    model_config = ConfigDict(extra="ignore")

    version: int = 0
    mastery: MasterySnapshotData | None = None
    spaced_rep: SpacedRepSnapshotData | None = None
    learner_profile: LearnerProfileData | None = None
    gems: GemsSnapshotData | None = None

    # Legacy fields, read for migration only. New snapshots use ``mastery``.
    tier_progress: dict[str, TierProgressData] | None = None
    mastered_set: list[str] | None = None

    def to_document(self) -> dict[str, Any]:
        """Dump to a JSON-compatible dict, dropping absent sections."""
        return self.model_dump(mode="json", exclude_none=True)

    @classmethod
    def from_document(cls, document: dict[str, Any] | None) -> SnapshotData:
        return cls.model_validate(document or {})


@dataclass
class Snapshot:
    """A point-in-time capture of learner state."""

    sequence: int
    timestamp: datetime
    data: SnapshotData
    id: int | None = None


# =============================================================================
# Event payloads
# =============================================================================

T = TypeVar("T")


@dataclass(frozen=True)
class Envelope(Generic[T]):
    """An event as stored: global sequence, timestamp and typed payload."""

    sequence: int
    timestamp: datetime
    payload: T


@dataclass
class MasteryEventData:
    skill_id: str
    from_state: str
    to_state: str
    trigger: str
    fluency_score: float = 0.0
    session_id: str | None = None


@dataclass
class AnswerEventData:
    session_id: str
    skill_id: str
    correct: bool
    tier: str = "learn"
    category: str = "new"  # "new", "review" or "recovery"
    time_ms: int = 0


@dataclass
class GemEventData:
    gem_type: str
    rarity: str
    session_id: str
    reason: str
    skill_id: str | None = None  # None for session/streak gems
    skill_name: str | None = None


@dataclass
class PlanSlotSummary:
    skill_id: str
    tier: str
    category: str


@dataclass
class SessionEventData:
    session_id: str
    action: str  # "start" or "end"
    questions_served: int = 0
    correct_answers: int = 0
    duration_secs: int = 0
    plan_summary: list[PlanSlotSummary] = field(default_factory=list)


@dataclass
class SessionSummaryRecord:
    """A finished session, as listed on the history screen."""

    session_id: str
    timestamp: datetime
    questions_served: int
    correct_answers: int
    duration_secs: int
    gem_count: int


@dataclass
class QueryOpts:
    """Filtering and pagination for event queries."""

    limit: int = 0  # 0 = unlimited
    after: int = 0  # sequence > after
    before: int = 0  # sequence < before
    start: datetime | None = None  # timestamp >= start
    end: datetime | None = None  # timestamp <= end

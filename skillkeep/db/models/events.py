"""
Event log tables.

One append-only table per domain fact. Every row carries a number drawn from
the global sequence so that "everything after snapshot S" is a single
``sequence > S`` filter across all tables.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import BigInteger, Boolean, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from skillkeep.core.timestamps import utcnow

from .base import Base, JSONDocument, UTCDateTime


class EventColumns:
    """Columns shared by every event table (sequence + timestamp)."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sequence: Mapped[int] = mapped_column(BigInteger, nullable=False, unique=True, index=True)
    timestamp: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow, index=True
    )


class MasteryEvent(EventColumns, Base):
    """Mastery state transition, kept for audit and analytics."""

    __tablename__ = "mastery_events"

    skill_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    from_state: Mapped[str] = mapped_column(String(32), nullable=False)
    to_state: Mapped[str] = mapped_column(String(32), nullable=False)
    trigger: Mapped[str] = mapped_column(String(64), nullable=False)
    fluency_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    session_id: Mapped[str | None] = mapped_column(String(64))

    def __repr__(self) -> str:
        return f"<MasteryEvent seq={self.sequence} skill={self.skill_id} {self.from_state}->{self.to_state}>"


class AnswerEvent(EventColumns, Base):
    """A single answered question."""

    __tablename__ = "answer_events"

    session_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    skill_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    tier: Mapped[str] = mapped_column(String(16), nullable=False, default="learn")
    category: Mapped[str] = mapped_column(String(16), nullable=False, default="new")
    correct: Mapped[bool] = mapped_column(Boolean, nullable=False)
    time_ms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<AnswerEvent seq={self.sequence} skill={self.skill_id} correct={self.correct}>"


class GemEvent(EventColumns, Base):
    """A gem award."""

    __tablename__ = "gem_events"

    gem_type: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    rarity: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    skill_id: Mapped[str | None] = mapped_column(String(128))
    skill_name: Mapped[str | None] = mapped_column(Text)
    session_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    reason: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<GemEvent seq={self.sequence} {self.rarity} {self.gem_type}>"


class SessionEvent(EventColumns, Base):
    """Session lifecycle marker ("start" or "end")."""

    __tablename__ = "session_events"

    session_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(8), nullable=False)
    questions_served: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    correct_answers: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    duration_secs: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    plan_summary: Mapped[list[dict[str, Any]] | None] = mapped_column(JSONDocument)

    def __repr__(self) -> str:
        return f"<SessionEvent seq={self.sequence} session={self.session_id} action={self.action}>"

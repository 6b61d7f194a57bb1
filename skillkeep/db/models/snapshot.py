from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import BigInteger, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from skillkeep.core.timestamps import utcnow

from .base import Base, JSONDocument, UTCDateTime


class Snapshot(Base):
    """
    Full learner state at a point in time.

    Rows are insert-only; retention pruning is the only delete path.
    """

    __tablename__ = "snapshots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sequence: Mapped[int] = mapped_column(BigInteger, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    data: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False)

    __table_args__ = (
        Index("idx_snapshots_timestamp", "timestamp"),
        Index("idx_snapshots_sequence", "sequence"),
    )

    def __repr__(self) -> str:
        return f"<Snapshot id={self.id} sequence={self.sequence} timestamp={self.timestamp}>"

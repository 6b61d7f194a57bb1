from __future__ import annotations

from sqlalchemy import BigInteger, CheckConstraint, Integer
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class GlobalSequence(Base):
    """
    Single-row counter shared by every event table.

    Each event type lives in its own table, so per-table autoincrement ids
    cannot order a hint relative to an answer. This row hands out one
    increasing number to every appended event regardless of type.
    """

    __tablename__ = "global_sequence"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    next_val: Mapped[int] = mapped_column(BigInteger, nullable=False, default=1)

    __table_args__ = (CheckConstraint("id = 1", name="ck_global_sequence_single_row"),)

    def __repr__(self) -> str:
        return f"<GlobalSequence next_val={self.next_val}>"

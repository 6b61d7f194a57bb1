"""
Global sequence counter.

Hands out one strictly increasing integer per appended event, shared by all
event tables, so that events of different types have a total order and
"all events after snapshot S" is a plain ``sequence > S.sequence`` query.
"""

from __future__ import annotations

import threading

from loguru import logger
from sqlalchemy import Engine, insert, select, text
from sqlalchemy.exc import SQLAlchemyError

from skillkeep.db.models import GlobalSequence
from skillkeep.errors import SequenceError


class SequenceCounter:
    """
    Durable, process-wide monotonic counter.

    The lock serializes callers inside the process; the UPDATE and the read of
    the pre-increment value share one transaction, which holds the row's write
    lock, so concurrent processes cannot observe the same value either.
    A failure anywhere raises ``SequenceError``: gaps are acceptable, a reused
    value is not.
    """

    def __init__(self, engine: Engine):
        self._engine = engine
        self._lock = threading.Lock()
        self._ensure_row()

    def _ensure_row(self) -> None:
        try:
            GlobalSequence.__table__.create(bind=self._engine, checkfirst=True)
            with self._engine.begin() as conn:
                row = conn.execute(
                    select(GlobalSequence.next_val).where(GlobalSequence.id == 1)
                ).first()
                if row is None:
                    conn.execute(insert(GlobalSequence).values(id=1, next_val=1))
                    logger.debug("Seeded global sequence at 1")
        except SQLAlchemyError as e:
            raise SequenceError(f"seed sequence: {e}") from e

    def next(self) -> int:
        """Atomically return the next sequence number and advance the counter."""
        with self._lock:
            try:
                with self._engine.begin() as conn:
                    updated = conn.execute(
                        text("UPDATE global_sequence SET next_val = next_val + 1 WHERE id = 1")
                    )
                    if updated.rowcount != 1:
                        raise SequenceError("global sequence row is missing")
                    value = conn.execute(
                        text("SELECT next_val - 1 FROM global_sequence WHERE id = 1")
                    ).scalar_one()
            except SQLAlchemyError as e:
                raise SequenceError(f"next sequence: {e}") from e
        return int(value)

    def current(self) -> int:
        """Last value handed out (0 before the first call to ``next``)."""
        try:
            with self._engine.connect() as conn:
                value = conn.execute(
                    select(GlobalSequence.next_val).where(GlobalSequence.id == 1)
                ).scalar_one()
        except SQLAlchemyError as e:
            raise SequenceError(f"read sequence: {e}") from e
        return int(value) - 1

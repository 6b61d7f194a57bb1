"""
Snapshot persistence.

Stores immutable point-in-time captures of learner state so a session can
restore quickly without replaying the event log. An empty store is a normal
first-run condition (``latest()`` returns ``None``); any storage failure
raises ``SnapshotStoreError`` instead.
"""

from __future__ import annotations

from loguru import logger
from pydantic import ValidationError
from sqlalchemy import Engine, delete, desc, func, select
from sqlalchemy.exc import SQLAlchemyError

from skillkeep.core.timestamps import ensure_utc
from skillkeep.db.database import session_scope
from skillkeep.db.models import Snapshot as SnapshotRow
from skillkeep.errors import SnapshotStoreError

from .schemas import Snapshot, SnapshotData


class SnapshotStore:
    """SQL-backed snapshot repository."""

    def __init__(self, engine: Engine):
        self._engine = engine

    def save(self, snapshot: Snapshot) -> int:
        """
        Insert a new snapshot row. Existing rows are never updated.

        Returns:
            The row id of the stored snapshot
        """
        row = SnapshotRow(
            sequence=snapshot.sequence,
            timestamp=ensure_utc(snapshot.timestamp),
            data=snapshot.data.to_document(),
        )
        try:
            with session_scope(self._engine) as session:
                session.add(row)
                session.flush()
                row_id = row.id
        except SQLAlchemyError as e:
            raise SnapshotStoreError(f"save snapshot: {e}") from e

        snapshot.id = row_id
        logger.debug(f"Saved snapshot id={row_id} sequence={snapshot.sequence}")
        return row_id

    def latest(self) -> Snapshot | None:
        """Return the most recently timestamped snapshot, or None if the store is empty."""
        recent = self.list_recent(limit=1)
        return recent[0] if recent else None

    def list_recent(self, limit: int = 10) -> list[Snapshot]:
        """Return up to ``limit`` snapshots, newest first."""
        try:
            with session_scope(self._engine) as session:
                rows = session.scalars(
                    select(SnapshotRow)
                    .order_by(desc(SnapshotRow.timestamp), desc(SnapshotRow.id))
                    .limit(limit)
                ).all()
                return [self._to_snapshot(row) for row in rows]
        except SQLAlchemyError as e:
            raise SnapshotStoreError(f"query snapshots: {e}") from e

    def prune(self, keep: int) -> int:
        """
        Delete every snapshot at or before the (keep+1)-th most recent one.

        ``keep`` is floored at 1, and the newest row is excluded explicitly,
        so the latest snapshot survives even when timestamps collide.

        Returns:
            Number of snapshots deleted
        """
        keep = max(1, keep)
        try:
            with session_scope(self._engine) as session:
                ordered = select(SnapshotRow.id, SnapshotRow.timestamp).order_by(
                    desc(SnapshotRow.timestamp), desc(SnapshotRow.id)
                )
                newest = session.execute(ordered.limit(1)).first()
                threshold = session.execute(ordered.offset(keep).limit(1)).first()
                if newest is None or threshold is None:
                    return 0

                result = session.execute(
                    delete(SnapshotRow).where(
                        SnapshotRow.timestamp <= threshold.timestamp,
                        SnapshotRow.id != newest.id,
                    )
                )
                deleted = result.rowcount or 0
        except SQLAlchemyError as e:
            raise SnapshotStoreError(f"prune snapshots: {e}") from e

        if deleted:
            logger.info(f"Pruned {deleted} snapshot(s), keeping {keep}")
        return deleted

    def count(self) -> int:
        try:
            with session_scope(self._engine) as session:
                return session.scalar(select(func.count()).select_from(SnapshotRow)) or 0
        except SQLAlchemyError as e:
            raise SnapshotStoreError(f"count snapshots: {e}") from e

    @staticmethod
    def _to_snapshot(row: SnapshotRow) -> Snapshot:
        try:
            data = SnapshotData.from_document(row.data)
        except ValidationError as e:
            raise SnapshotStoreError(f"decode snapshot {row.id}: {e}") from e
        return Snapshot(
            id=row.id,
            sequence=row.sequence,
            timestamp=row.timestamp,
            data=data,
        )

"""
Append-only event log.

Every append draws its number from the shared ``SequenceCounter`` before the
row is written, so a failed sequencer call never produces an unnumbered row.
Reads hand events back as ``Envelope[payload]``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from loguru import logger
from sqlalchemy import Engine, case, desc, func, select
from sqlalchemy.exc import SQLAlchemyError

from skillkeep.db.database import session_scope
from skillkeep.db.models import AnswerEvent, GemEvent, MasteryEvent, SessionEvent
from skillkeep.errors import EventLogError

from .schemas import (
    AnswerEventData,
    Envelope,
    GemEventData,
    MasteryEventData,
    PlanSlotSummary,
    QueryOpts,
    SessionEventData,
    SessionSummaryRecord,
)
from .sequencer import SequenceCounter


def _mastery_payload(row: MasteryEvent) -> MasteryEventData:
    return MasteryEventData(
        skill_id=row.skill_id,
        from_state=row.from_state,
        to_state=row.to_state,
        trigger=row.trigger,
        fluency_score=row.fluency_score,
        session_id=row.session_id,
    )


def _answer_payload(row: AnswerEvent) -> AnswerEventData:
    return AnswerEventData(
        session_id=row.session_id,
        skill_id=row.skill_id,
        correct=row.correct,
        tier=row.tier,
        category=row.category,
        time_ms=row.time_ms,
    )


def _gem_payload(row: GemEvent) -> GemEventData:
    return GemEventData(
        gem_type=row.gem_type,
        rarity=row.rarity,
        session_id=row.session_id,
        reason=row.reason,
        skill_id=row.skill_id,
        skill_name=row.skill_name,
    )


def _session_payload(row: SessionEvent) -> SessionEventData:
    return SessionEventData(
        session_id=row.session_id,
        action=row.action,
        questions_served=row.questions_served,
        correct_answers=row.correct_answers,
        duration_secs=row.duration_secs,
        plan_summary=[PlanSlotSummary(**slot) for slot in row.plan_summary or []],
    )


# Table -> payload converter, used by the cross-type replay query
_PAYLOADS: dict[type, Any] = {
    MasteryEvent: _mastery_payload,
    AnswerEvent: _answer_payload,
    GemEvent: _gem_payload,
    SessionEvent: _session_payload,
}


def _envelope(row: Any) -> Envelope:
    return Envelope(sequence=row.sequence, timestamp=row.timestamp, payload=_PAYLOADS[type(row)](row))


def _apply_opts(query, model, opts: QueryOpts):
    if opts.after > 0:
        query = query.where(model.sequence > opts.after)
    if opts.before > 0:
        query = query.where(model.sequence < opts.before)
    if opts.start is not None:
        query = query.where(model.timestamp >= opts.start)
    if opts.end is not None:
        query = query.where(model.timestamp <= opts.end)
    if opts.limit > 0:
        query = query.limit(opts.limit)
    return query


class EventRepo:
    """Append and query access across all event tables."""

    def __init__(self, engine: Engine, sequencer: SequenceCounter):
        self._engine = engine
        self._seq = sequencer

    # =========================================================================
    # Appends
    # =========================================================================

    def _append(self, row: Any, label: str) -> int:
        seq = self._seq.next()
        row.sequence = seq
        try:
            with session_scope(self._engine) as session:
                session.add(row)
        except SQLAlchemyError as e:
            raise EventLogError(f"save {label} event: {e}") from e
        logger.debug(f"Appended {label} event seq={seq}")
        return seq

    def append_mastery_event(self, data: MasteryEventData) -> int:
        """Record a mastery state transition. Returns its sequence number."""
        return self._append(
            MasteryEvent(
                skill_id=data.skill_id,
                from_state=data.from_state,
                to_state=data.to_state,
                trigger=data.trigger,
                fluency_score=data.fluency_score,
                session_id=data.session_id or None,
            ),
            "mastery",
        )

    def append_answer_event(self, data: AnswerEventData) -> int:
        return self._append(
            AnswerEvent(
                session_id=data.session_id,
                skill_id=data.skill_id,
                tier=data.tier,
                category=data.category,
                correct=data.correct,
                time_ms=data.time_ms,
            ),
            "answer",
        )

    def append_gem_event(self, data: GemEventData) -> int:
        return self._append(
            GemEvent(
                gem_type=data.gem_type,
                rarity=data.rarity,
                skill_id=data.skill_id,
                skill_name=data.skill_name,
                session_id=data.session_id,
                reason=data.reason,
            ),
            "gem",
        )

    def append_session_event(self, data: SessionEventData) -> int:
        plan = [
            {"skill_id": s.skill_id, "tier": s.tier, "category": s.category}
            for s in data.plan_summary
        ]
        return self._append(
            SessionEvent(
                session_id=data.session_id,
                action=data.action,
                questions_served=data.questions_served,
                correct_answers=data.correct_answers,
                duration_secs=data.duration_secs,
                plan_summary=plan or None,
            ),
            "session",
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def query_mastery_events(
        self, skill_id: str | None = None, opts: QueryOpts | None = None
    ) -> list[Envelope[MasteryEventData]]:
        """Mastery transitions, newest first."""
        query = select(MasteryEvent).order_by(desc(MasteryEvent.sequence))
        if skill_id is not None:
            query = query.where(MasteryEvent.skill_id == skill_id)
        return self._fetch(_apply_opts(query, MasteryEvent, opts or QueryOpts()), "mastery")

    def query_gem_events(self, opts: QueryOpts | None = None) -> list[Envelope[GemEventData]]:
        """Gem awards, newest first."""
        query = select(GemEvent).order_by(desc(GemEvent.sequence))
        return self._fetch(_apply_opts(query, GemEvent, opts or QueryOpts()), "gem")

    def gem_counts(self) -> tuple[dict[str, int], int]:
        """Gem counts grouped by type, and the overall total."""
        try:
            with session_scope(self._engine) as session:
                rows = session.execute(
                    select(GemEvent.gem_type, func.count()).group_by(GemEvent.gem_type)
                ).all()
        except SQLAlchemyError as e:
            raise EventLogError(f"query gem counts: {e}") from e
        by_type = {gem_type: count for gem_type, count in rows}
        return by_type, sum(by_type.values())

    def latest_answer_time(self, skill_id: str) -> datetime | None:
        """Timestamp of the most recent answer for a skill, or None."""
        try:
            with session_scope(self._engine) as session:
                return session.scalar(
                    select(AnswerEvent.timestamp)
                    .where(AnswerEvent.skill_id == skill_id)
                    .order_by(desc(AnswerEvent.sequence))
                    .limit(1)
                )
        except SQLAlchemyError as e:
            raise EventLogError(f"query latest answer: {e}") from e

    def skill_accuracy(self, skill_id: str) -> float:
        """Historical accuracy (correct / total) for a skill; 0.0 with no answers."""
        try:
            with session_scope(self._engine) as session:
                total, correct = session.execute(
                    select(
                        func.count(),
                        func.coalesce(func.sum(case((AnswerEvent.correct, 1), else_=0)), 0),
                    ).where(AnswerEvent.skill_id == skill_id)
                ).one()
        except SQLAlchemyError as e:
            raise EventLogError(f"query skill accuracy: {e}") from e
        return correct / total if total else 0.0

    def recent_review_accuracy(self, skill_id: str, last_n: int) -> tuple[float, int]:
        """Accuracy and count of the last ``last_n`` review answers for a skill."""
        try:
            with session_scope(self._engine) as session:
                outcomes = session.scalars(
                    select(AnswerEvent.correct)
                    .where(AnswerEvent.skill_id == skill_id, AnswerEvent.category == "review")
                    .order_by(desc(AnswerEvent.sequence))
                    .limit(last_n)
                ).all()
        except SQLAlchemyError as e:
            raise EventLogError(f"query review answers: {e}") from e
        if not outcomes:
            return 0.0, 0
        return sum(1 for c in outcomes if c) / len(outcomes), len(outcomes)

    def query_session_summaries(self, opts: QueryOpts | None = None) -> list[SessionSummaryRecord]:
        """Finished sessions, newest first, with the number of gems awarded in each."""
        query = (
            select(SessionEvent)
            .where(SessionEvent.action == "end")
            .order_by(desc(SessionEvent.sequence))
        )
        query = _apply_opts(query, SessionEvent, opts or QueryOpts())
        try:
            with session_scope(self._engine) as session:
                rows = session.scalars(query).all()
                gem_totals = dict(
                    session.execute(
                        select(GemEvent.session_id, func.count())
                        .where(GemEvent.session_id.in_([r.session_id for r in rows]))
                        .group_by(GemEvent.session_id)
                    ).all()
                )
                return [
                    SessionSummaryRecord(
                        session_id=r.session_id,
                        timestamp=r.timestamp,
                        questions_served=r.questions_served,
                        correct_answers=r.correct_answers,
                        duration_secs=r.duration_secs,
                        gem_count=gem_totals.get(r.session_id, 0),
                    )
                    for r in rows
                ]
        except SQLAlchemyError as e:
            raise EventLogError(f"query session summaries: {e}") from e

    def events_after(self, sequence: int) -> list[Envelope]:
        """
        Every event of every type with a sequence greater than ``sequence``,
        in sequence order. This is the replay query for a snapshot taken at
        ``sequence``.
        """
        try:
            with session_scope(self._engine) as session:
                rows: list[Any] = []
                for model in _PAYLOADS:
                    rows.extend(session.scalars(select(model).where(model.sequence > sequence)).all())
                envelopes = [_envelope(row) for row in rows]
        except SQLAlchemyError as e:
            raise EventLogError(f"query events after {sequence}: {e}") from e
        envelopes.sort(key=lambda env: env.sequence)
        return envelopes

    def _fetch(self, query, label: str) -> list[Envelope]:
        try:
            with session_scope(self._engine) as session:
                return [_envelope(row) for row in session.scalars(query).all()]
        except SQLAlchemyError as e:
            raise EventLogError(f"query {label} events: {e}") from e

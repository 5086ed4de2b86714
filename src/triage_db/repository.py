"""Async CRUD repository for interview sessions, responses and reports.

All public methods accept an ``AsyncSession`` so the caller controls
transaction boundaries; writes only ``flush()``.

The repository avoids business-logic validation; that belongs in the SDK
layer.  Structural invariants (status values, phase range, one report
per session) are enforced by DB constraints.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from triage_db.models.enums import RecordStatus
from triage_db.models.session import InterviewRecord, ReportRecord, ResponseRecord
from triage_interview.models.session import ResponseEntry


def _as_uuid(value: uuid.UUID | str) -> uuid.UUID:
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


class SessionRepository:
    """Async read/write operations on the interview tables."""

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def create_session(
        self,
        db: AsyncSession,
        *,
        session_id: uuid.UUID | str,
        patient_id: str,
        demographics: dict[str, Any],
        specialist_type: str = "cardiology",
    ) -> InterviewRecord:
        """Insert a new session row and return it.

        The caller must ``await db.commit()`` to persist.
        """
        record = InterviewRecord(
            id=_as_uuid(session_id),
            patient_id=patient_id,
            demographics=demographics,
            specialist_type=specialist_type,
            status=RecordStatus.IN_PROGRESS.value,
        )
        db.add(record)
        await db.flush()
        return record

    async def get_session(
        self, db: AsyncSession, session_id: uuid.UUID | str
    ) -> InterviewRecord | None:
        """Fetch a session by id."""
        return await db.get(InterviewRecord, _as_uuid(session_id))

    async def update_status(
        self,
        db: AsyncSession,
        record: InterviewRecord,
        status: RecordStatus,
    ) -> InterviewRecord:
        """Set the session status; ``completed`` also stamps ``completed_at``."""
        record.status = status.value
        if status == RecordStatus.COMPLETED:
            record.completed_at = datetime.now(timezone.utc)
        await db.flush()
        return record

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------

    async def save_responses(
        self,
        db: AsyncSession,
        session_id: uuid.UUID | str,
        phase: int,
        entries: Sequence[ResponseEntry],
    ) -> list[ResponseRecord]:
        """Replace the stored responses of one phase with *entries*."""
        sid = _as_uuid(session_id)
        await db.execute(
            delete(ResponseRecord).where(
                ResponseRecord.session_id == sid,
                ResponseRecord.phase == phase,
            )
        )
        rows = [
            ResponseRecord(
                id=_as_uuid(e.id),
                session_id=sid,
                phase=phase,
                question_id=e.question_id,
                question_text=e.question_text,
                answer=e.answer,
                created_at=e.created_at,
            )
            for e in entries
        ]
        db.add_all(rows)
        await db.flush()
        return rows

    async def list_responses(
        self,
        db: AsyncSession,
        session_id: uuid.UUID | str,
        *,
        phase: int | None = None,
    ) -> list[ResponseRecord]:
        """List a session's responses, optionally for one phase."""
        stmt = select(ResponseRecord).where(ResponseRecord.session_id == _as_uuid(session_id))
        if phase is not None:
            stmt = stmt.where(ResponseRecord.phase == phase)
        stmt = stmt.order_by(ResponseRecord.phase, ResponseRecord.created_at)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    async def save_report(
        self,
        db: AsyncSession,
        session_id: uuid.UUID | str,
        content: dict[str, Any],
        *,
        pdf_url: str | None = None,
    ) -> ReportRecord:
        """Insert or replace the session's report."""
        sid = _as_uuid(session_id)
        existing = await self.get_report(db, sid)
        if existing is not None:
            existing.content = content
            existing.pdf_url = pdf_url
            await db.flush()
            return existing

        report = ReportRecord(session_id=sid, content=content, pdf_url=pdf_url)
        db.add(report)
        await db.flush()
        return report

    async def get_report(
        self, db: AsyncSession, session_id: uuid.UUID | str
    ) -> ReportRecord | None:
        """Fetch the session's report, if one was stored."""
        stmt = select(ReportRecord).where(ReportRecord.session_id == _as_uuid(session_id))
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

"""DatabaseRecorder — persists interview snapshots at phase boundaries.

Implements ``triage_interview.interfaces.SessionRecorder`` on top of
``SessionRepository``.  Each snapshot runs in its own transaction: the
recorder opens a session from the factory, writes, and commits.

Status mapping (in-memory -> persisted):

    start                 -> in_progress
    phase 1 recorded      -> phase_1_complete
    phase 2 recorded      -> phase_2_complete
    report recorded       -> completed
"""

from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from triage_db.engine import get_session_factory
from triage_db.models.enums import RecordStatus
from triage_db.repository import SessionRepository
from triage_interview.interfaces import SessionRecorder
from triage_interview.models.report import ReportContent
from triage_interview.models.session import ResponseEntry, SessionState

logger = logging.getLogger(__name__)

_PHASE_STATUS = {
    1: RecordStatus.PHASE_1_COMPLETE,
    2: RecordStatus.PHASE_2_COMPLETE,
}


class DatabaseRecorder(SessionRecorder):
    """Writes session snapshots through a ``SessionRepository``.

    Args:
        session_factory: callable returning an ``AsyncSession`` context
            manager; defaults to the process-wide factory
        repository: defaults to a new ``SessionRepository``
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession] | None = None,
        repository: SessionRepository | None = None,
    ) -> None:
        self._factory = session_factory
        self._repo = repository or SessionRepository()

    def _open(self) -> AsyncSession:
        factory = self._factory or get_session_factory()
        return factory()

    async def _load(self, db: AsyncSession, state: SessionState):
        record = await self._repo.get_session(db, state.session_id)
        if record is None:
            raise ValueError(f"Session {state.session_id} not found")
        return record

    async def record_start(self, state: SessionState) -> None:
        async with self._open() as db:
            await self._repo.create_session(
                db,
                session_id=state.session_id,
                patient_id=state.patient_id,
                demographics=state.demographics.model_dump() if state.demographics else {},
            )
            await db.commit()
        logger.debug("Recorded start of session %s", state.session_id)

    async def record_phase(self, state: SessionState, phase: int, entries: list[ResponseEntry]) -> None:
        async with self._open() as db:
            record = await self._load(db, state)
            await self._repo.save_responses(db, state.session_id, phase, entries)
            await self._repo.update_status(db, record, _PHASE_STATUS[phase])
            await db.commit()
        logger.debug(
            "Recorded phase %d of session %s (%d responses)",
            phase, state.session_id, len(entries),
        )

    async def record_report(self, state: SessionState, report: ReportContent) -> None:
        async with self._open() as db:
            record = await self._load(db, state)
            await self._repo.save_report(db, state.session_id, report.model_dump(mode="json"))
            await self._repo.update_status(db, record, RecordStatus.COMPLETED)
            await db.commit()
        logger.debug("Recorded report of session %s", state.session_id)

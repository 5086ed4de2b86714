"""triage_db — PostgreSQL persistence layer for interview sessions.

This package provides the ORM models, async engine factory, repository
and the ``DatabaseRecorder`` snapshot collaborator.  It is optional: the
interview SDK and the server run without it unless snapshot persistence
is enabled.
"""

from triage_db.engine import dispose_engine, get_engine, get_session_factory
from triage_db.models.enums import RecordStatus
from triage_db.models.session import InterviewRecord, ReportRecord, ResponseRecord
from triage_db.recorder import DatabaseRecorder
from triage_db.repository import SessionRepository

__all__ = [
    "InterviewRecord",
    "ReportRecord",
    "ResponseRecord",
    "RecordStatus",
    "dispose_engine",
    "get_engine",
    "get_session_factory",
    "DatabaseRecorder",
    "SessionRepository",
]

"""ORM models for triage_db."""

from triage_db.models.base import Base
from triage_db.models.enums import RecordStatus
from triage_db.models.session import InterviewRecord, ReportRecord, ResponseRecord

__all__ = ["Base", "RecordStatus", "InterviewRecord", "ReportRecord", "ResponseRecord"]

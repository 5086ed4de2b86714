"""ORM models for interview sessions, their responses and the final report.

Three tables:

    interview_sessions   — one row per interview
    interview_responses  — one row per answered question (phase 1 or 2)
    interview_reports    — at most one report per session

Demographics and report content are JSONB documents; responses are kept
as rows so transcripts can be queried per phase.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    SmallInteger,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from triage_db.models.base import Base
from triage_db.models.enums import RecordStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InterviewRecord(Base):
    """One row per interview session.

    ``id`` is the session identifier generated by ``start``.
    """

    __tablename__ = "interview_sessions"

    # --- Primary key ---
    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)

    # --- Identity ---
    patient_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    specialist_type: Mapped[str] = mapped_column(
        String(40),
        nullable=False,
        default="cardiology",
        server_default=text("'cardiology'"),
    )

    # --- Lifecycle ---
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=RecordStatus.IN_PROGRESS,
        index=True,
    )

    # {"sex": "male" | "female", "age": int}
    demographics: Mapped[dict] = mapped_column(
        JSONB,
        nullable=False,
        server_default=text("'{}'::jsonb"),
    )

    # --- Timestamps ---
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=_utcnow
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True
    )

    responses: Mapped[list["ResponseRecord"]] = relationship(
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="ResponseRecord.created_at",
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('in_progress', 'phase_1_complete', 'phase_2_complete', 'completed')",
            name="ck_session_status",
        ),
        CheckConstraint(
            "status != 'completed' OR completed_at IS NOT NULL",
            name="ck_completed_has_timestamp",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<InterviewRecord(id={self.id!s}, patient={self.patient_id!r}, "
            f"status={self.status!r})>"
        )


class ResponseRecord(Base):
    """One answered question of a session."""

    __tablename__ = "interview_responses"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    session_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("interview_sessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    phase: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    question_id: Mapped[str] = mapped_column(Text, nullable=False)
    # Denormalised at projection time
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    answer: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=_utcnow
    )

    session: Mapped[InterviewRecord] = relationship(back_populates="responses")

    __table_args__ = (
        CheckConstraint("phase IN (1, 2)", name="ck_response_phase"),
        Index("ix_responses_session_phase", "session_id", "phase"),
    )


class ReportRecord(Base):
    """The final report of a session (at most one)."""

    __tablename__ = "interview_reports"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    session_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("interview_sessions.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    # ReportContent.model_dump(mode="json")
    content: Mapped[dict] = mapped_column(JSONB, nullable=False)
    pdf_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=_utcnow
    )

"""Create interview_sessions, interview_responses and interview_reports.

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID

# revision identifiers, used by Alembic.
revision = "20261019_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # --- Sessions ---
    op.create_table(
        "interview_sessions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("patient_id", sa.Text, nullable=False),
        sa.Column(
            "specialist_type",
            sa.String(40),
            nullable=False,
            server_default=sa.text("'cardiology'"),
        ),
        sa.Column(
            "status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'in_progress'"),
        ),
        sa.Column(
            "demographics",
            JSONB,
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            "created_at",
            TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column("completed_at", TIMESTAMP(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('in_progress', 'phase_1_complete', 'phase_2_complete', 'completed')",
            name="ck_session_status",
        ),
        sa.CheckConstraint(
            "status != 'completed' OR completed_at IS NOT NULL",
            name="ck_completed_has_timestamp",
        ),
    )
    op.create_index("ix_interview_sessions_patient_id", "interview_sessions", ["patient_id"])
    op.create_index("ix_interview_sessions_status", "interview_sessions", ["status"])

    # --- Responses ---
    op.create_table(
        "interview_responses",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "session_id",
            UUID(as_uuid=True),
            sa.ForeignKey("interview_sessions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("phase", sa.SmallInteger, nullable=False),
        sa.Column("question_id", sa.Text, nullable=False),
        sa.Column("question_text", sa.Text, nullable=False),
        sa.Column("answer", sa.Text, nullable=False),
        sa.Column(
            "created_at",
            TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.CheckConstraint("phase IN (1, 2)", name="ck_response_phase"),
    )
    op.create_index(
        "ix_responses_session_phase", "interview_responses", ["session_id", "phase"]
    )

    # --- Reports ---
    op.create_table(
        "interview_reports",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "session_id",
            UUID(as_uuid=True),
            sa.ForeignKey("interview_sessions.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("content", JSONB, nullable=False),
        sa.Column("pdf_url", sa.Text, nullable=True),
        sa.Column(
            "created_at",
            TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )


def downgrade() -> None:
    op.drop_table("interview_reports")
    op.drop_index("ix_responses_session_phase", table_name="interview_responses")
    op.drop_table("interview_responses")
    op.drop_index("ix_interview_sessions_status", table_name="interview_sessions")
    op.drop_index("ix_interview_sessions_patient_id", table_name="interview_sessions")
    op.drop_table("interview_sessions")

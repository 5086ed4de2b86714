"""Response models shared by the session routes."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel

from triage_interview.controller import InterviewSession
from triage_interview.models import (
    AnswerValue,
    Demographics,
    PreliminaryAssessment,
    Question,
    SessionStatus,
)


class SessionView(BaseModel):
    """Public view of a live session, as rendered by the UI."""

    session_id: str
    patient_id: Optional[str] = None
    demographics: Optional[Demographics] = None
    status: SessionStatus
    # 1 or 2 while a question list is active, None once completed
    phase: Optional[Literal[1, 2]] = None
    current_index: int
    total_questions: int
    current_question: Optional[Question] = None
    is_current_answered: bool
    answers: dict[str, AnswerValue]
    error: Optional[str] = None
    is_loading: bool = False
    preliminary_assessment: Optional[PreliminaryAssessment] = None

    @classmethod
    def from_session(cls, session: InterviewSession) -> "SessionView":
        state = session.state
        _, total = session.progress()
        if state.status in (SessionStatus.PHASE1, SessionStatus.ANALYZING):
            phase = 1
        elif state.status in (SessionStatus.PHASE2, SessionStatus.GENERATING_REPORT):
            phase = 2
        else:
            phase = None
        return cls(
            session_id=state.session_id or "",
            patient_id=state.patient_id,
            demographics=state.demographics,
            status=state.status,
            phase=phase,
            current_index=state.current_index,
            total_questions=total,
            current_question=session.current_question(),
            is_current_answered=session.is_current_answered(),
            answers=dict(state.answers),
            error=state.error,
            is_loading=state.is_loading,
            preliminary_assessment=(
                state.analysis.preliminary_assessment if state.analysis else None
            ),
        )

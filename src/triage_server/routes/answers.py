"""Answer entry and navigation endpoints.

``advance`` is gated on the current question being answered; ``retreat``
never is, so review and back-navigation always work.
"""

from typing import Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from triage_interview.controller import InterviewSession

from triage_server.dependencies import get_session
from triage_server.views import SessionView

router = APIRouter(tags=["answers"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class AnswerRequest(BaseModel):
    """Body for PUT /sessions/{id}/answers/{question_id}.

    Multiselect answers are lists; a free-text "other" entry is encoded
    as ``"other:<text>"``.
    """
    value: Union[str, list[str]]


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.put("/sessions/{session_id}/answers/{question_id}")
def set_answer(
    question_id: str,
    body: AnswerRequest,
    session: InterviewSession = Depends(get_session),
) -> SessionView:
    """Insert or overwrite the answer for *question_id*."""
    session.set_answer(question_id, body.value)
    return SessionView.from_session(session)


@router.post("/sessions/{session_id}/advance")
def advance(
    session: InterviewSession = Depends(get_session),
) -> SessionView:
    """Move to the next question of the current phase.

    Returns 400 if the current question is required and unanswered.  At
    the last question this is a no-op; complete the phase instead.
    """
    if not session.is_current_answered():
        raise ValueError("Current question requires an answer before advancing")
    session.advance()
    return SessionView.from_session(session)


@router.post("/sessions/{session_id}/retreat")
def retreat(
    session: InterviewSession = Depends(get_session),
) -> SessionView:
    """Move back one question (no-op at the first question)."""
    session.retreat()
    return SessionView.from_session(session)

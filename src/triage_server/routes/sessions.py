"""Session management endpoints — start, view and discard interviews.

Sessions live in the in-memory registry.  Starting a session validates the
patient id and age before anything is created.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from triage_interview.catalog import CatalogStore
from triage_interview.controller import InterviewSession
from triage_interview.models import Demographics
from triage_interview.pipeline import InterviewPipeline

from triage_server.dependencies import get_pipeline, get_registry, get_session, get_store
from triage_server.registry import SessionRegistry
from triage_server.views import SessionView

router = APIRouter(tags=["sessions"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class StartSessionRequest(BaseModel):
    """Body for POST /sessions."""
    patient_id: str
    demographics: Demographics


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/sessions", status_code=201)
async def start_session(
    body: StartSessionRequest,
    pipeline: InterviewPipeline = Depends(get_pipeline),
    registry: SessionRegistry = Depends(get_registry),
    store: CatalogStore = Depends(get_store),
) -> SessionView:
    """Start a new interview over the loaded catalog.

    Returns 201 with the session positioned on the first phase-1 question.
    Raises 400 for an empty patient id or an age outside [1, 150).
    """
    session = await pipeline.start(body.patient_id, body.demographics, store)
    registry.add(session)
    return SessionView.from_session(session)


@router.get("/sessions/{session_id}")
def get_session_view(
    session: InterviewSession = Depends(get_session),
) -> SessionView:
    """Return the session's status, position and current question."""
    return SessionView.from_session(session)


@router.delete("/sessions/{session_id}", status_code=204)
def discard_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> None:
    """Reset and discard a session.  Returns 404 for unknown ids."""
    registry.discard(session_id)

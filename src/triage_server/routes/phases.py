"""Phase completion, transcript and report endpoints.

The two completion endpoints run the language-model calls.  On an
upstream failure the session is already back on an answerable phase
with its ``error`` set when the error response is returned.
"""

from fastapi import APIRouter, Depends, Query

from triage_interview.controller import InterviewSession
from triage_interview.models import ReportContent, ResponseEntry
from triage_interview.pipeline import InterviewPipeline

from triage_server.dependencies import get_pipeline, get_session
from triage_server.views import SessionView

router = APIRouter(tags=["phases"])


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/sessions/{session_id}/phase1/complete")
async def complete_phase1(
    session: InterviewSession = Depends(get_session),
    pipeline: InterviewPipeline = Depends(get_pipeline),
) -> SessionView:
    """Submit phase 1: runs the analysis and opens the follow-up phase.

    Only valid during ``phase1``.  Upstream failures map to 401/429/502.
    """
    await pipeline.complete_phase1(session)
    return SessionView.from_session(session)


@router.post("/sessions/{session_id}/phase2/complete")
async def complete_phase2(
    session: InterviewSession = Depends(get_session),
    pipeline: InterviewPipeline = Depends(get_pipeline),
) -> ReportContent:
    """Submit phase 2: generates and returns the final report.

    Only valid during ``phase2``.
    """
    return await pipeline.complete_phase2(session)


@router.get("/sessions/{session_id}/responses")
def list_responses(
    phase: int = Query(1, ge=1, le=2),
    session: InterviewSession = Depends(get_session),
) -> list[ResponseEntry]:
    """Return the projected transcript of one phase."""
    if phase == 1:
        return session.phase1_responses()
    return session.phase2_responses()


@router.get("/sessions/{session_id}/report")
def get_report(
    session: InterviewSession = Depends(get_session),
) -> ReportContent:
    """Return the final report.  404 until the session is completed."""
    report = session.state.report
    if report is None:
        raise ValueError(f"Report not found for session {session.session_id}")
    return report

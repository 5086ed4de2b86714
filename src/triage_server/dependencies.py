"""FastAPI dependency injection — provides the pipeline, catalog, backend
and session registry stashed on ``app.state`` during lifespan.
"""

from fastapi import Request

from triage_interview.catalog import CatalogStore
from triage_interview.controller import InterviewSession
from triage_interview.interfaces import LLMBackend
from triage_interview.pipeline import InterviewPipeline

from triage_server.registry import SessionRegistry


def get_pipeline(request: Request) -> InterviewPipeline:
    """Return the pipeline singleton from ``app.state``."""
    return request.app.state.pipeline


def get_store(request: Request) -> CatalogStore:
    """Return the CatalogStore singleton from ``app.state``."""
    return request.app.state.store


def get_backend(request: Request) -> LLMBackend:
    """Return the LLM backend singleton from ``app.state``."""
    return request.app.state.backend


def get_registry(request: Request) -> SessionRegistry:
    """Return the live-session registry from ``app.state``."""
    return request.app.state.registry


def get_session(session_id: str, request: Request) -> InterviewSession:
    """Resolve the ``{session_id}`` path parameter to a live session.

    Raises ``ValueError`` (404) for unknown ids.
    """
    return get_registry(request).get(session_id)

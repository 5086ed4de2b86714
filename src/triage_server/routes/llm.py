"""LLM connection probe endpoint."""

from fastapi import APIRouter, Depends

from triage_interview.interfaces import LLMBackend
from triage_interview.llm import check_connection

from triage_server.dependencies import get_backend

router = APIRouter(prefix="/llm", tags=["llm"])


@router.post("/test")
async def test_connection(
    backend: LLMBackend = Depends(get_backend),
) -> dict:
    """Send a one-word probe to the configured backend.

    Returns ``{success, provider, model, reply}``; auth and rate-limit
    failures map to 401 / 429.
    """
    reply = await check_connection(backend)
    return {
        "success": True,
        "provider": getattr(backend, "provider", type(backend).__name__),
        "model": getattr(backend, "model", None),
        "reply": reply,
    }

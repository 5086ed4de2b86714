"""Route registration — mounts all routers under ``/api/v1``."""

from fastapi import FastAPI

from triage_server.routes.answers import router as answers_router
from triage_server.routes.llm import router as llm_router
from triage_server.routes.phases import router as phases_router
from triage_server.routes.reference import router as reference_router
from triage_server.routes.sessions import router as sessions_router

API_PREFIX = "/api/v1"


def register_routes(app: FastAPI) -> None:
    """Include all sub-routers under the versioned API prefix."""
    app.include_router(sessions_router, prefix=API_PREFIX)
    app.include_router(answers_router, prefix=API_PREFIX)
    app.include_router(phases_router, prefix=API_PREFIX)
    app.include_router(reference_router, prefix=API_PREFIX)
    app.include_router(llm_router, prefix=API_PREFIX)

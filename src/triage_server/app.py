"""Application factory and CLI entry point.

``create_app()`` builds the FastAPI application with:
  - Lifespan handler that loads the catalog and initialises the backend,
    pipeline and session registry once
  - CORS middleware
  - Global exception handlers (ValueError -> 404/400, upstream -> 401/429/502)
  - All API routes mounted under ``/api/v1``
  - A ``/health`` endpoint for readiness probes

The ``cli()`` function is the ``triage-server`` console-script entry point.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from triage_db.engine import dispose_engine, get_engine
from triage_db.recorder import DatabaseRecorder
from triage_interview.catalog import CatalogStore
from triage_interview.errors import UpstreamError, ValidationError
from triage_interview.interfaces import LLMBackend
from triage_interview.llm import create_backend, load_llm_settings
from triage_interview.pipeline import InterviewPipeline

from triage_server.config import ServerSettings, load_settings
from triage_server.errors import (
    generic_error_handler,
    key_error_handler,
    upstream_error_handler,
    validation_error_handler,
    value_error_handler,
)
from triage_server.registry import SessionRegistry
from triage_server.routes import register_routes

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Lifespan: runs once at startup/shutdown
# ------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialise shared resources at startup, tear down on shutdown.

    Startup:
      1. Load the question catalog into a ``CatalogStore``
      2. Build the LLM backend (unless one was injected) and the pipeline
      3. Stash them and an empty ``SessionRegistry`` on ``app.state``

    Shutdown:
      1. Close the backend's HTTP client
      2. Dispose the database engine if snapshots were enabled
    """
    settings: ServerSettings = app.state.settings

    # --- Load catalog ---
    store = CatalogStore(settings.catalog_path)
    store.load()

    # --- Build backend & pipeline ---
    backend: LLMBackend | None = app.state.backend
    if backend is None:
        backend = create_backend(load_llm_settings())
    recorder = DatabaseRecorder() if settings.persist_snapshots else None
    pipeline = InterviewPipeline(backend, recorder=recorder, timeout=settings.call_timeout)

    app.state.store = store
    app.state.backend = backend
    app.state.pipeline = pipeline
    app.state.registry = SessionRegistry(ttl=settings.session_ttl)

    yield

    # --- Shutdown ---
    aclose = getattr(backend, "aclose", None)
    if aclose is not None:
        await aclose()
    if settings.persist_snapshots:
        await dispose_engine()
        logger.info("Database engine disposed")


# ------------------------------------------------------------------
# Factory
# ------------------------------------------------------------------

def create_app(
    settings: ServerSettings | None = None,
    backend: LLMBackend | None = None,
) -> FastAPI:
    """Build and return the configured FastAPI application.

    Args:
        settings: server settings; read from the environment if omitted
        backend: LLM backend override (tests inject a mock); built from
            ``LLM_*`` environment variables if omitted
    """
    if settings is None:
        settings = load_settings()

    # --- Configure logging ---
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="Triage Interview API Server",
        description="REST API for the two-phase cardiology interview",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Read by the lifespan handler
    app.state.settings = settings
    app.state.backend = backend

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Exception handlers ---
    # ValidationError subclasses ValueError; the more specific handler wins
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(UpstreamError, upstream_error_handler)
    app.add_exception_handler(KeyError, key_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # --- Health check (outside /api/v1 prefix) ---
    @app.get("/health")
    async def health() -> dict:
        """Readiness probe — reports live sessions and, if enabled, DB connectivity."""
        body: dict = {"status": "ok", "sessions": len(app.state.registry)}
        if not settings.persist_snapshots:
            return body
        try:
            async with get_engine().connect() as conn:
                await conn.execute(text("SELECT 1"))
            body["database"] = "ok"
        except Exception as exc:
            logger.error("Health check failed: %s", exc)
            body.update(status="error", database=str(exc))
        return body

    # --- Mount all API routes ---
    register_routes(app)

    return app


# ------------------------------------------------------------------
# Module-level ASGI export (for uvicorn triage_server.app:app)
# ------------------------------------------------------------------
app = create_app()


# ------------------------------------------------------------------
# CLI entry point
# ------------------------------------------------------------------

def cli() -> None:
    """Console-script entry point: ``triage-server``."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "triage_server.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )

"""Server configuration — reads settings from environment variables.

All settings have sensible defaults for local development.  LLM backend
settings are read separately by ``triage_interview.llm.load_llm_settings``.
"""

import os
from dataclasses import dataclass, field

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ServerSettings:
    """Immutable server configuration read from environment at startup."""

    # Network
    host: str = "0.0.0.0"
    port: int = 8080

    # CORS: comma-separated origins, or "*" for wide-open dev mode
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    # Catalog YAML (None -> bundled cardiology catalog)
    catalog_path: str | None = None

    # Logging
    log_level: str = "INFO"

    # Write session snapshots to PostgreSQL at phase boundaries
    persist_snapshots: bool = False

    # Deadline for each analysis/report call in seconds (None = no deadline)
    call_timeout: float | None = None

    # Idle seconds before a live session is evicted (None = keep forever;
    # SERVER_SESSION_TTL=0 disables eviction)
    session_ttl: float | None = 3600.0


def load_settings() -> ServerSettings:
    """Build settings from ``SERVER_*`` environment variables."""
    raw_origins = os.getenv("SERVER_CORS_ORIGINS", "*")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
    raw_timeout = os.getenv("SERVER_CALL_TIMEOUT")
    raw_ttl = os.getenv("SERVER_SESSION_TTL", "3600")

    return ServerSettings(
        host=os.getenv("SERVER_HOST", "0.0.0.0"),
        port=int(os.getenv("SERVER_PORT", "8080")),
        cors_origins=origins,
        catalog_path=os.getenv("SERVER_CATALOG_PATH") or None,
        log_level=os.getenv("SERVER_LOG_LEVEL", "INFO").upper(),
        persist_snapshots=os.getenv("SERVER_PERSIST_SNAPSHOTS", "false").lower() in _TRUE_VALUES,
        call_timeout=float(raw_timeout) if raw_timeout else None,
        session_ttl=float(raw_ttl) if raw_ttl and float(raw_ttl) > 0 else None,
    )

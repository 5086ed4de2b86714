"""Connection settings for the interview snapshot store.

``DATABASE_URL`` wins when set; otherwise the URL is assembled from the
``PG_*`` variables used by the docker-compose setup.  The same location is
handed out with two drivers: psycopg2 for Alembic and asyncpg for the
runtime engine.
"""

import os

_PLAIN = "postgresql://"
_ASYNC = "postgresql+asyncpg://"


def _configured_url() -> str:
    explicit = os.getenv("DATABASE_URL")
    if explicit:
        return explicit
    return "{scheme}{user}:{password}@{host}:{port}/{name}".format(
        scheme=_PLAIN,
        user=os.getenv("PG_USER", "triage"),
        password=os.getenv("PG_PASSWORD", "triage"),
        host=os.getenv("PG_HOST", "localhost"),
        port=os.getenv("PG_PORT", "5432"),
        name=os.getenv("PG_DATABASE", "triage"),
    )


def get_sync_url() -> str:
    """URL for the synchronous migration runner."""
    url = _configured_url()
    if url.startswith(_ASYNC):
        return _PLAIN + url[len(_ASYNC):]
    return url


def get_async_url() -> str:
    """URL for ``create_async_engine``; plain postgres URLs get the asyncpg driver."""
    url = _configured_url()
    if url.startswith(_PLAIN):
        return _ASYNC + url[len(_PLAIN):]
    return url


def echo_sql() -> bool:
    return os.getenv("PG_ECHO", "").lower() in ("1", "true", "yes")

"""In-memory session registry.

The interview is a single-user workflow, so live sessions are kept in
process memory keyed by session id.  Persistence, when enabled, is the
recorder's concern and does not back this registry.

Abandoned and completed sessions are evicted once they have not been
touched for ``ttl`` seconds.  Eviction runs lazily on ``add`` and ``get``;
a session with a model call in flight is never evicted.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from triage_interview.controller import InterviewSession

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Maps session ids to live ``InterviewSession`` controllers.

    Args:
        ttl: idle seconds after which a session is evicted (None = never)
        clock: monotonic time source, replaceable in tests
    """

    def __init__(
        self,
        ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl
        self._clock = clock
        self._sessions: dict[str, InterviewSession] = {}
        self._touched: dict[str, float] = {}

    @property
    def ttl(self) -> float | None:
        return self._ttl

    def __len__(self) -> int:
        return len(self._sessions)

    def add(self, session: InterviewSession) -> None:
        if session.session_id is None:
            raise ValueError("Cannot register a session that has not been started")
        self.evict_expired()
        self._sessions[session.session_id] = session
        self._touched[session.session_id] = self._clock()

    def get(self, session_id: str) -> InterviewSession:
        """Return the live session and mark it as used.

        Raises:
            ValueError: no such session, or it expired (mapped to 404).
        """
        self.evict_expired()
        session = self._sessions.get(session_id)
        if session is None:
            raise ValueError(f"Session not found: session_id={session_id}")
        self._touched[session_id] = self._clock()
        return session

    def discard(self, session_id: str) -> None:
        """Reset and forget a session.

        Raises:
            ValueError: no such session (mapped to 404).
        """
        session = self.get(session_id)
        self._forget(session_id)
        session.reset()
        logger.info("Session %s discarded", session_id)

    def evict_expired(self) -> int:
        """Drop sessions idle for longer than the TTL; return how many went."""
        if self._ttl is None:
            return 0
        now = self._clock()
        expired = [
            sid for sid, touched in self._touched.items()
            if now - touched >= self._ttl and not self._sessions[sid].is_loading
        ]
        for sid in expired:
            self._forget(sid)
        if expired:
            logger.info("Evicted %d idle session(s)", len(expired))
        return len(expired)

    def _forget(self, session_id: str) -> None:
        del self._sessions[session_id]
        del self._touched[session_id]

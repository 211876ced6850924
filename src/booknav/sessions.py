"""Per-visitor session storage for the HTTP service.

Each browser session is identified by a cookie and owns one MemoryStorage,
mirroring the tab-scoped storage the sidebar uses in the browser. Sessions
only exist while they hold something: they are created when a value is
stored and dropped once the stored value has been consumed.
"""

import logging
import secrets

from booknav.core.storage import MemoryStorage

logger = logging.getLogger(__name__)

SESSION_COOKIE = "booknav-session"
DEFAULT_MAX_SESSIONS = 10_000


class SessionRegistry:
    """Maps session ids to their storage.

    At most max_sessions are kept; creating one more evicts the oldest.
    """

    def __init__(self, max_sessions: int = DEFAULT_MAX_SESSIONS) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self._max_sessions = max_sessions
        self._sessions: dict[str, MemoryStorage] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def new_session(self) -> str:
        """Create an empty session and return its id."""
        while len(self._sessions) >= self._max_sessions:
            oldest = next(iter(self._sessions))
            del self._sessions[oldest]
            logger.debug("Evicted oldest session, registry is full")
        session_id = secrets.token_urlsafe(16)
        self._sessions[session_id] = MemoryStorage()
        return session_id

    def get(self, session_id: str | None) -> MemoryStorage | None:
        """Return storage for a known session id."""
        if session_id is None:
            return None
        return self._sessions.get(session_id)

    def get_or_create(self, session_id: str | None) -> tuple[str, MemoryStorage]:
        """Return the session for an id, creating a fresh one for unknown ids."""
        storage = self.get(session_id)
        if session_id is not None and storage is not None:
            return session_id, storage
        new_id = self.new_session()
        return new_id, self._sessions[new_id]

    def discard(self, session_id: str) -> None:
        """Forget a session. Unknown ids are ignored."""
        self._sessions.pop(session_id, None)

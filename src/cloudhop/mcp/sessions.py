"""Server-issued MCP session ids for the HTTP transport."""

from __future__ import annotations

import threading
import uuid
from collections import OrderedDict

from cloudhop.core.rate_limiter import DEFAULT_CLIENT_ID

SESSION_HEADER = "Mcp-Session-Id"
DEFAULT_MAX_SESSIONS = 1024


class SessionRegistry:
    """Ids handed out on `initialize`; only these count as separate clients.

    The oldest session is forgotten once `max_sessions` are live, and its
    caller falls back to the shared default identity.
    """

    def __init__(self, *, max_sessions: int = DEFAULT_MAX_SESSIONS) -> None:
        if max_sessions < 1:
            msg = "max_sessions must be at least 1"
            raise ValueError(msg)
        self._max_sessions = max_sessions
        self._sessions: OrderedDict[str, None] = OrderedDict()
        self._lock = threading.Lock()

    def issue(self) -> str:
        session_id = uuid.uuid4().hex
        with self._lock:
            self._sessions[session_id] = None
            while len(self._sessions) > self._max_sessions:
                self._sessions.popitem(last=False)
        return session_id

    def is_known(self, session_id: str | None) -> bool:
        if not session_id:
            return False
        with self._lock:
            return session_id in self._sessions

    def client_id(self, session_id: str | None) -> str:
        """Rate-limit identity for a request carrying `session_id`."""
        return session_id if session_id and self.is_known(session_id) else DEFAULT_CLIENT_ID

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

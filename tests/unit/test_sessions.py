from __future__ import annotations

import pytest

from cloudhop.core.rate_limiter import DEFAULT_CLIENT_ID
from cloudhop.mcp.sessions import SessionRegistry


def test_issued_sessions_are_their_own_clients() -> None:
    sessions = SessionRegistry()
    issued = sessions.issue()

    assert sessions.is_known(issued)
    assert sessions.client_id(issued) == issued


def test_unknown_or_missing_sessions_use_default_client() -> None:
    sessions = SessionRegistry()

    assert sessions.client_id("made-up") == DEFAULT_CLIENT_ID
    assert sessions.client_id(None) == DEFAULT_CLIENT_ID
    assert sessions.client_id("") == DEFAULT_CLIENT_ID


def test_oldest_session_is_forgotten_at_capacity() -> None:
    sessions = SessionRegistry(max_sessions=2)
    first = sessions.issue()
    second = sessions.issue()
    third = sessions.issue()

    assert len(sessions) == 2
    assert not sessions.is_known(first)
    assert sessions.is_known(second)
    assert sessions.is_known(third)


def test_invalid_capacity_is_rejected() -> None:
    with pytest.raises(ValueError, match="max_sessions"):
        SessionRegistry(max_sessions=0)

"""Session state, persistence, and feature gating."""

from writeoutloud.session.gating import Feature, GatingPolicy
from writeoutloud.session.manager import SessionManager, SessionState
from writeoutloud.session.store import (
    InMemorySessionStore,
    JsonFileSessionStore,
    SessionStore,
    SqlSessionStore,
    create_session_store,
)

__all__ = [
    "Feature",
    "GatingPolicy",
    "InMemorySessionStore",
    "JsonFileSessionStore",
    "SessionManager",
    "SessionState",
    "SessionStore",
    "SqlSessionStore",
    "create_session_store",
]

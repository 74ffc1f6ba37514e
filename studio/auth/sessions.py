# studio/auth/sessions.py
"""
In-memory session map for the demo login flow.

Sessions live only as long as the process. Each entry maps a session id to
the serialised user it was issued for.
"""

import secrets
import threading
import time
from typing import Dict, Optional

DEMO_USERNAME = "demo-user"
DEMO_PASSWORD = "demo"

_sessions: Dict[str, dict] = {}
_lock = threading.Lock()


def _generate_session_id() -> str:
    return f"session_{int(time.time() * 1000)}_{secrets.token_hex(16)}"


def create_session(user: dict) -> str:
    """Register a new session for `user` and return its id."""
    session_id = _generate_session_id()
    with _lock:
        _sessions[session_id] = dict(user)
    return session_id


def get_session_user(session_id: Optional[str]) -> Optional[dict]:
    if not session_id:
        return None
    with _lock:
        user = _sessions.get(session_id)
    return dict(user) if user else None


def end_session(session_id: str) -> bool:
    with _lock:
        return _sessions.pop(session_id, None) is not None


def clear_sessions() -> None:
    with _lock:
        _sessions.clear()


def session_count() -> int:
    with _lock:
        return len(_sessions)

# studio/auth/__init__.py
"""
Authentication module for the studio.
Demo login backed by an in-memory session map.
"""

from .middleware import require_auth, optional_auth, AuthResult
from .router import router as auth_router
from .sessions import (
    DEMO_USERNAME,
    create_session,
    get_session_user,
    end_session,
    clear_sessions,
)

__all__ = [
    # Middleware
    "require_auth",
    "optional_auth",
    "AuthResult",
    # Router
    "auth_router",
    # Sessions
    "DEMO_USERNAME",
    "create_session",
    "get_session_user",
    "end_session",
    "clear_sessions",
]

# studio/auth/middleware.py
"""
FastAPI authentication dependencies using demo session ids.

Clients send the id returned by /api/auth/demo-login in the X-Session-Id
header.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException, status

from . import sessions


@dataclass
class AuthResult:
    """Result of authentication check."""
    authenticated: bool
    user: Optional[dict] = None
    session_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def user_id(self) -> str:
        """Id of the signed-in user, or the demo user name when anonymous."""
        if self.user and self.user.get("id"):
            return self.user["id"]
        return sessions.DEMO_USERNAME


async def require_auth(
    x_session_id: Optional[str] = Header(None, alias="X-Session-Id"),
) -> AuthResult:
    """
    Dependency that requires a valid session.

    Raises:
        HTTPException 401: If the header is missing or the session is unknown
    """
    user = sessions.get_session_user(x_session_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return AuthResult(authenticated=True, user=user, session_id=x_session_id)


async def optional_auth(
    x_session_id: Optional[str] = Header(None, alias="X-Session-Id"),
) -> AuthResult:
    """
    Dependency that checks the session without requiring it.
    Returns AuthResult with authenticated=True/False.
    """
    if not x_session_id:
        return AuthResult(authenticated=False, error="No credentials provided")

    user = sessions.get_session_user(x_session_id)
    if not user:
        return AuthResult(authenticated=False, error="Invalid session")
    return AuthResult(authenticated=True, user=user, session_id=x_session_id)

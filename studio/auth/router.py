# studio/auth/router.py
"""
Authentication API endpoints for the demo login flow.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from studio.db import get_db
from studio.storage import schemas, service
from . import sessions
from .middleware import AuthResult, require_auth

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginResponse(schemas.CamelModel):
    user: schemas.UserOut
    session_id: str


class MeResponse(BaseModel):
    user: schemas.UserOut


@router.post("/demo-login", response_model=LoginResponse)
def demo_login(db: Session = Depends(get_db)):
    """
    Log in as the shared demo user, creating it on first use.
    Returns the user and a session id for the X-Session-Id header.
    """
    try:
        user = service.get_user_by_username(db, sessions.DEMO_USERNAME)
        if not user:
            user = service.create_user(
                db,
                schemas.UserCreate(username=sessions.DEMO_USERNAME, password=sessions.DEMO_PASSWORD),
            )
            logger.info("[auth] Created demo user %s", user.id)
    except Exception as e:
        logger.exception("[auth] Demo login failed: %s", e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Login failed")

    user_out = schemas.UserOut.model_validate(user)
    session_id = sessions.create_session(user_out.model_dump(mode="json"))
    return LoginResponse(user=user_out, session_id=session_id)


@router.get("/me", response_model=MeResponse)
async def me(auth: AuthResult = Depends(require_auth)):
    return MeResponse(user=schemas.UserOut.model_validate(auth.user))


@router.post("/logout")
async def logout(auth: AuthResult = Depends(require_auth)):
    """Log out (invalidate current session)."""
    sessions.end_session(auth.session_id)
    return {"message": "Logged out successfully"}

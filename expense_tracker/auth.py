# expense_tracker/auth.py
"""
Session cookie gate.

Sign-in happens at an external identity provider, which hands the browser
an HS256 id token signed with the shared SESSION_SECRET. The token is kept
in the session cookie and checked on every protected request.
"""
import logging
from typing import Optional

import jwt
from fastapi import HTTPException, Request, status

from .config import settings

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """The session token is missing, expired or not ours."""


def verify_session_token(token: Optional[str], secret: Optional[str] = None) -> str:
    """Returns the user id ('sub' claim) carried by a valid token."""
    if not token:
        raise AuthError("User not authenticated")
    try:
        claims = jwt.decode(
            token,
            secret or settings.SESSION_SECRET,
            algorithms=[settings.SESSION_ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise AuthError("Session expired") from e
    except jwt.InvalidTokenError as e:
        raise AuthError(f"Invalid session token: {e}") from e
    return claims["sub"]


def get_current_user(request: Request) -> str:
    """Dependency that resolves the signed-in user from the session cookie."""
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    try:
        return verify_session_token(token)
    except AuthError as e:
        logger.info("Rejected request to %s: %s", request.url.path, e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        )


def ensure_same_user(session_user: str, claimed_user: Optional[str]) -> None:
    if claimed_user is not None and claimed_user != session_user:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User ID mismatch")

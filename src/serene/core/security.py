"""
Password hashing and session token handling.

The session is a signed JWT carried in an HttpOnly cookie. It embeds a
snapshot of the principal so clients can render it without a round trip;
authorization never trusts the snapshot and re-reads the user from storage.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Response
from jose import JWTError, jwt
from passlib.context import CryptContext

from serene.core.config import settings
from serene.models import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Check a password against a stored hash. Unknown hash formats never match."""
    try:
        return pwd_context.verify(plain_password, password_hash)
    except ValueError:
        logger.warning("Stored password hash could not be identified")
        return False


def create_session_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign a session token for a user.

    Args:
        user: The principal to embed
        expires_delta: Lifetime of the token (default: SESSION_TTL_MINUTES)

    Returns:
        Encoded JWT
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.SESSION_TTL_MINUTES))
    claims = {
        "sub": str(user.id),
        "username": user.username,
        "email": user.email,
        "is_premium": bool(user.is_premium),
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(claims, settings.SESSION_SECRET_KEY, algorithm=settings.SESSION_ALGORITHM)


def decode_session_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Verify and decode a session token.

    Returns:
        The claims, or None if the token is invalid, expired or malformed
    """
    try:
        claims = jwt.decode(token, settings.SESSION_SECRET_KEY, algorithms=[settings.SESSION_ALGORITHM])
    except JWTError as e:
        logger.info(f"Rejected session token: {e}")
        return None
    if not str(claims.get("sub", "")).isdigit():
        return None
    return claims


def issue_session(response: Response, user: User) -> str:
    """Set (or re-set) the session cookie for ``user`` on ``response``."""
    token = create_session_token(user)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_TTL_MINUTES * 60,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return token


def clear_session(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )

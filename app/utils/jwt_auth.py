"""
JWT Token-based authentication utilities for admin access.
Provides token generation, verification and the require_admin dependency.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import Header, Request
import logging

from app.config import settings
from app.exceptions import AuthorizationError
from app.utils.auth import verify_admin_password

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
TOKEN_COOKIE_NAME = "admin_token"


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Dictionary of claims to include in token
        expires_delta: Optional custom expiration time

    Returns:
        str: Encoded JWT token
    """
    to_encode = data.copy()

    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    now = datetime.now(timezone.utc)

    to_encode.update({
        "exp": now + expires_delta,
        "iat": now,
        "type": "access"
    })

    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> dict:
    """
    Verify and decode a JWT token.

    Raises:
        AuthorizationError: If token is invalid, expired, malformed or not an admin token
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        raise AuthorizationError(f"invalid token ({str(e)})") from e

    if payload.get("type") != "access":
        raise AuthorizationError("token is not an access token")
    if payload.get("role") != "admin":
        raise AuthorizationError("admin role required")

    return payload


def require_admin(
    request: Request,
    authorization: Optional[str] = Header(None, description="Bearer token (fallback to admin_token cookie)")
) -> dict:
    """
    FastAPI dependency guarding admin routes.
    Reads the token from the httpOnly cookie (preferred) or the Authorization header.

    Raises:
        AuthorizationError: 401 if token is missing, invalid, or expired
    """
    token = request.cookies.get(TOKEN_COOKIE_NAME)

    if not token and authorization:
        parts = authorization.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            token = parts[1]

    if not token:
        logger.info(f"Rejected admin request without token: {request.method} {request.url.path}")
        raise AuthorizationError("authentication required")

    return verify_token(token)


def authenticate_admin(password: str) -> dict:
    """
    Check the admin password and return the claims for a new token.

    Raises:
        AuthorizationError: If password is invalid
        ValueError: If ADMIN_PASSWORD_HASH is not configured
    """
    if not verify_admin_password(password):
        raise AuthorizationError("incorrect password")

    return {
        "role": "admin",
        "sub": "hotel_admin"
    }

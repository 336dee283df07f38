"""
Admin session routes.
Exchanges the admin password for a JWT stored in an httpOnly cookie.
"""
from fastapi import APIRouter, HTTPException, Request, Response, status
import logging

from app.config import settings
from app.schemas import LoginRequest, LoginResponse
from app.utils.jwt_auth import TOKEN_COOKIE_NAME, authenticate_admin, create_access_token
from app.utils.rate_limit import RATE_LIMITS, limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/login", response_model=LoginResponse)
@limiter.limit(RATE_LIMITS["login"])
async def login(request: Request, response: Response, credentials: LoginRequest):
    """
    Log in with the admin password.

    Raises:
        AuthorizationError: 401 if the password is wrong
        HTTPException: 500 if ADMIN_PASSWORD_HASH is not configured
    """
    try:
        claims = authenticate_admin(credentials.password)
    except ValueError as e:
        logger.error(f"Admin login attempted without configuration: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Authentication not configured", "detail": str(e)}
        )

    token = create_access_token(claims)
    expires_in = settings.JWT_EXPIRE_MINUTES * 60
    response.set_cookie(
        key=TOKEN_COOKIE_NAME,
        value=token,
        max_age=expires_in,
        httponly=True,
        samesite="lax",
        secure=request.url.scheme == "https",
    )

    logger.info("Admin logged in")
    return LoginResponse(access_token=token, expires_in=expires_in)


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(TOKEN_COOKIE_NAME)
    return {"success": True}

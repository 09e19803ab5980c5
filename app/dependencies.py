"""Authentication dependencies for FastAPI routes."""

from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.errors import ForbiddenError
from app.models.user import User
from app.services.auth import get_auth_service
from app.services.authorization import is_super_admin
from app.services.jwt import TokenPair

ACCESS_COOKIE_NAME = "accessToken"
REFRESH_COOKIE_NAME = "refreshToken"


def get_access_token(request: Request) -> str | None:
    """Extract the access token from a Bearer header, falling back to the cookie."""
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return request.cookies.get(ACCESS_COOKIE_NAME)


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> User:
    """Resolve the acting user. Raises UnauthenticatedError if the token is missing or invalid."""
    return get_auth_service().authenticate(db, get_access_token(request))


def require_super_admin(user: User = Depends(get_current_user)) -> User:
    """Require an authenticated superadmin."""
    if not is_super_admin(user):
        raise ForbiddenError("Superadmin access required")
    return user


def set_auth_cookies(response: Response, tokens: TokenPair) -> None:
    """Set access and refresh token cookies."""
    settings = get_settings()
    response.set_cookie(
        key=ACCESS_COOKIE_NAME,
        value=tokens.access_token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=tokens.refresh_token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.REFRESH_TOKEN_EXPIRE_MINUTES * 60,
    )


def clear_auth_cookies(response: Response) -> None:
    """Clear both authentication cookies."""
    settings = get_settings()
    response.delete_cookie(key=ACCESS_COOKIE_NAME, httponly=True, secure=settings.COOKIE_SECURE, samesite="lax")
    response.delete_cookie(key=REFRESH_COOKIE_NAME, httponly=True, secure=settings.COOKIE_SECURE, samesite="lax")

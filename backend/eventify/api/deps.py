"""
Request dependencies: storage injection and session authentication.

The session token is read from the session cookie, or from an
``Authorization: Bearer`` header when a client prefers headers.
"""

from typing import Optional

import structlog
from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from eventify.core.config import get_settings
from eventify.core.errors import UnauthorizedError
from eventify.core.security import decode_access_token
from eventify.domain import User
from eventify.stores.factory import get_storage
from eventify.stores.interfaces import Storage

bearer_scheme = HTTPBearer(auto_error=False)


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    storage: Storage = Depends(get_storage),
) -> Optional[User]:
    """Resolve the session user, or None for anonymous callers."""
    token = credentials.credentials if credentials else request.cookies.get(get_settings().SESSION_COOKIE_NAME)
    if not token:
        return None

    user_id = decode_access_token(token)
    if user_id is None:
        return None

    user = await storage.get_user(user_id)
    if user is not None:
        structlog.contextvars.bind_contextvars(user_id=user.id)
    return user


async def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    """Require an authenticated session (401 otherwise)."""
    if user is None:
        raise UnauthorizedError()
    return user


def set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=get_settings().SESSION_COOKIE_NAME)

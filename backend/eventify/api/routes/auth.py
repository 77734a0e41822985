"""
Authentication endpoints: register, login, logout and session status.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Response, status

from eventify.api.deps import clear_session_cookie, get_optional_user, set_session_cookie
from eventify.domain import User
from eventify.schemas.user import AuthStatus, SessionResponse, UserCreate, UserLogin, UserResponse
from eventify.services.auth_service import authenticate_user, issue_session_token, register_user
from eventify.stores.factory import get_storage
from eventify.stores.interfaces import Storage

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _start_session(response: Response, user: User) -> SessionResponse:
    token = issue_session_token(user)
    set_session_cookie(response, token)
    return SessionResponse(user=UserResponse.model_validate(user), access_token=token)


@router.post("/register", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, response: Response, storage: Storage = Depends(get_storage)):
    """Register a new account and start a session for it."""
    user = await register_user(storage, user_data)
    return _start_session(response, user)


@router.post("/login", response_model=SessionResponse)
async def login(login_data: UserLogin, response: Response, storage: Storage = Depends(get_storage)):
    """Check credentials and set the session cookie."""
    user = await authenticate_user(storage, login_data)
    return _start_session(response, user)


@router.post("/logout")
async def logout(response: Response):
    clear_session_cookie(response)
    return {"success": True}


@router.get("/status", response_model=AuthStatus)
async def session_status(user: Optional[User] = Depends(get_optional_user)):
    if user is None:
        return AuthStatus(authenticated=False)
    return AuthStatus(authenticated=True, user=UserResponse.model_validate(user))

"""
Authentication service handling user registration and login.
"""

from eventify.core.errors import (
    EmailTakenError,
    ErrorCode,
    UnauthorizedError,
    UsernameTakenError,
)
from eventify.core.logging import get_logger
from eventify.core.security import create_access_token, hash_password, verify_password
from eventify.domain import NewUser, User
from eventify.schemas.user import UserCreate, UserLogin
from eventify.stores.interfaces import Storage

logger = get_logger(__name__)


async def register_user(storage: Storage, user_data: UserCreate) -> User:
    """
    Register a new user with a hashed password.
    Raises Conflict if the username or email already exists (case-insensitive).
    """
    if await storage.get_user_by_username(user_data.username):
        logger.warning("registration_failed", reason="username_exists", username=user_data.username)
        raise UsernameTakenError()

    if await storage.get_user_by_email(user_data.email):
        logger.warning("registration_failed", reason="email_exists", email=user_data.email)
        raise EmailTakenError()

    user = await storage.create_user(
        NewUser(
            username=user_data.username,
            email=user_data.email,
            hashed_password=hash_password(user_data.password),
            full_name=user_data.full_name,
            is_organizer=user_data.is_organizer,
            avatar_url=user_data.avatar_url,
        )
    )

    logger.info("user_registered", user_id=user.id, username=user.username, organizer=user.is_organizer)
    return user


async def authenticate_user(storage: Storage, login_data: UserLogin) -> User:
    """
    Check credentials and return the user.
    Raises Unauthorized if they are invalid.
    """
    user = await storage.get_user_by_username(login_data.username)

    if not user or not verify_password(login_data.password, user.hashed_password):
        logger.warning("login_failed", username=login_data.username)
        raise UnauthorizedError("Invalid username or password", code=ErrorCode.INVALID_CREDENTIALS)

    logger.info("user_logged_in", user_id=user.id)
    return user


def issue_session_token(user: User) -> str:
    return create_access_token(data={"sub": str(user.id)})

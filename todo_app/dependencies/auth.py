"""
Bearer token gate for FastAPI routes.

Rejections raise ``TokenValidationError``; ``main.create_app`` renders them
as 401 responses with an ``{error, message, timestamp}`` body.
"""

from dataclasses import dataclass

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from todo_app.db_handlers.user import UserDBHandler
from todo_app.exceptions import TokenValidationError
from todo_app.models import User
from todo_app.utils.auth import (
    AUTH_FAILED,
    INVALID_TOKEN,
    extract_user_id,
    validate_access_token,
)
from todo_app.utils.logger import setup_logger

logger = setup_logger("dependencies.auth")

# Missing credentials are reported through our own 401 body
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class SessionContext:
    """The authenticated caller, passed explicitly into every service call."""

    user_id: int
    username: str
    access_token: str


async def get_current_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    user_db_handler: UserDBHandler = Depends(),
) -> SessionContext:
    if credentials is None:
        raise TokenValidationError(AUTH_FAILED, "Authentication is required.")

    claims = validate_access_token(credentials.credentials)

    user_id = extract_user_id(claims)
    if user_id is None:
        raise TokenValidationError(INVALID_TOKEN, "The token does not identify a user.")

    user = await user_db_handler.get(user_id)
    if user is None:
        logger.warning(f"Valid token presented for unknown user {user_id}")
        raise TokenValidationError(AUTH_FAILED, "Authentication failed.")

    return SessionContext(
        user_id=user.id, username=user.username, access_token=credentials.credentials
    )


async def get_current_user(
    session: SessionContext = Depends(get_current_session),
    user_db_handler: UserDBHandler = Depends(),
) -> User:
    """Dependency to get the current authenticated user record."""
    user = await user_db_handler.get(session.user_id)
    if user is None:
        raise TokenValidationError(AUTH_FAILED, "Authentication failed.")
    return user

"""
Access/refresh token issuance, rotation and logout.

Every expected credential failure (unknown user, wrong password, missing,
mismatched or expired refresh token) is logged at WARNING and reported as
``None``/``False``; none of them raise. Only a missing request object is
treated as a programming error.

Token slots (provider ``JwtBearer``):
    JwtToken         current access token string
    JwtRefreshToken  JSON ``{"token": ..., "expiry": ...}``

The two slots are written by independent calls, so an interrupted login or
refresh can leave the access slot updated and the refresh slot stale.
Concurrent refreshes with the same refresh token are not serialized: the
first one to store its rotated token wins and the others fail.
"""

import secrets
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from pydantic import ValidationError

from todo_app.config import Settings, settings
from todo_app.db_handlers.user import UserDBHandler
from todo_app.models.user import User
from todo_app.models.user_token import (
    ACCESS_TOKEN_NAME,
    API_LOGIN_PROVIDER,
    REFRESH_TOKEN_NAME,
)
from todo_app.schemas import (
    LogoutRequest,
    RefreshTokenPayload,
    RefreshTokenRequest,
    TokenResponse,
    UserLogin,
)
from todo_app.utils.auth import create_access_token, generate_refresh_token
from todo_app.utils.logger import setup_logger

logger = setup_logger("token_service")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _parse_user_id(raw_user_id: str | int | None) -> int | None:
    try:
        return int(raw_user_id)
    except (TypeError, ValueError):
        return None


class TokenService:
    def __init__(
        self,
        user_handler: UserDBHandler | None = None,
        app_settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.user_handler = user_handler or UserDBHandler()
        self.settings = app_settings or settings
        self.clock = clock or _utcnow

    async def login(self, request: UserLogin) -> TokenResponse | None:
        if request is None:
            raise ValueError("login request must not be None")

        user = await self.user_handler.get_user_by_username(request.username)
        if user is None or not self.user_handler.check_password(user, request.password):
            # Same message for both cases
            logger.warning(f"Login failed for username '{request.username}'")
            return None

        tokens = await self._issue_tokens(user)
        if tokens is not None:
            logger.info(f"User {user.id} logged in")
        return tokens

    async def refresh_tokens(self, request: RefreshTokenRequest) -> TokenResponse | None:
        if request is None:
            raise ValueError("refresh request must not be None")

        user_id = _parse_user_id(request.user_id)
        if user_id is None:
            logger.warning(f"Token refresh rejected: malformed user id '{request.user_id}'")
            return None

        user = await self.user_handler.get(user_id)
        if user is None:
            logger.warning(f"Token refresh rejected: user {user_id} not found")
            return None

        stored = await self.user_handler.get_token(
            user.id, API_LOGIN_PROVIDER, REFRESH_TOKEN_NAME
        )
        payload = self._parse_refresh_payload(stored)
        if payload is None:
            logger.warning(f"Token refresh rejected: no usable refresh token stored for user {user.id}")
            return None

        if not secrets.compare_digest(
            payload.token.encode("utf-8"), request.refresh_token.encode("utf-8")
        ):
            logger.warning(f"Token refresh rejected: refresh token mismatch for user {user.id}")
            return None

        expiry = payload.expiry
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=UTC)
        if expiry <= self.clock():
            logger.warning(f"Token refresh rejected: refresh token expired for user {user.id}")
            return None

        tokens = await self._issue_tokens(user)
        if tokens is not None:
            logger.info(f"Tokens refreshed for user {user.id}")
        return tokens

    async def logout(self, request: LogoutRequest) -> bool:
        """
        Clear the stored access token.

        The refresh token slot is left untouched, so a refresh token issued
        before logout stays usable until it expires or is rotated.
        """
        if request is None:
            raise ValueError("logout request must not be None")

        user_id = _parse_user_id(request.user_id)
        if user_id is None:
            logger.warning(f"Logout rejected: malformed user id '{request.user_id}'")
            return False

        user = await self.user_handler.get(user_id)
        if user is None:
            logger.warning(f"Logout rejected: user {user_id} not found")
            return False

        removed = await self.user_handler.remove_token(
            user.id, API_LOGIN_PROVIDER, ACCESS_TOKEN_NAME
        )
        if not removed:
            logger.warning(f"Logout failed: could not clear access token for user {user.id}")
            return False

        logger.info(f"User {user.id} logged out")
        return True

    async def _issue_tokens(self, user: User) -> TokenResponse | None:
        now = self.clock()
        access_token = create_access_token(
            user.id,
            user.username,
            now=now,
            expires_delta=timedelta(minutes=self.settings.access_token_expire_minutes),
            secret_key=self.settings.jwt_secret_key,
            issuer=self.settings.jwt_issuer,
            audience=self.settings.jwt_audience,
        )
        if not await self.user_handler.set_token(
            user.id, API_LOGIN_PROVIDER, ACCESS_TOKEN_NAME, access_token
        ):
            logger.error(f"Could not store access token for user {user.id}")
            return None

        payload = RefreshTokenPayload(
            token=generate_refresh_token(),
            expiry=now + timedelta(days=self.settings.refresh_token_expire_days),
        )
        if not await self.user_handler.set_token(
            user.id, API_LOGIN_PROVIDER, REFRESH_TOKEN_NAME, payload.model_dump_json()
        ):
            logger.error(f"Could not store refresh token for user {user.id}")
            return None

        return TokenResponse(access_token=access_token, refresh_token=payload.token)

    @staticmethod
    def _parse_refresh_payload(stored: str | None) -> RefreshTokenPayload | None:
        if not stored:
            return None
        try:
            payload = RefreshTokenPayload.model_validate_json(stored)
        except ValidationError:
            return None
        return payload if payload.token else None

"""
Bearer token attachment with opportunistic refresh for outgoing API calls.

For each request made on behalf of a signed-in user:

1. no signed-in user: send the request unchanged
2. load the stored access token
3. read its ``exp`` claim without verifying the signature
4. if it expired more than the threshold ago, and a refresh token is
   stored, call ``POST /api/auth/refresh-token``
5. on success store the new tokens and use them, otherwise keep the stale
   token and let the API answer 401
6. attach ``Authorization: Bearer <token>`` and send

Refreshes are not de-duplicated. Two concurrent requests can both refresh
with the same refresh token; the API rotates it on first use, so the
second refresh fails and that request goes out with the stale token.
"""

from collections.abc import AsyncGenerator, Callable, Generator
from datetime import UTC, datetime, timedelta

import httpx
from pydantic import ValidationError

from todo_app.config import settings
from todo_app.schemas import TokenResponse
from todo_app.utils.auth import read_token_expiry
from todo_app.utils.logger import setup_logger
from todo_app.web.token_storage import TokenStorageService

logger = setup_logger("web.token_handler")

REFRESH_TOKEN_PATH = "/api/auth/refresh-token"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class JwtTokenAuth(httpx.Auth):
    def __init__(
        self,
        storage: TokenStorageService,
        refresh_client: httpx.AsyncClient,
        user_id: int | None = None,
        threshold_seconds: int | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.storage = storage
        # Must not use this auth itself, or the refresh call would recurse
        self.refresh_client = refresh_client
        self.user_id = user_id
        self.threshold = timedelta(
            seconds=settings.token_refresh_threshold_seconds
            if threshold_seconds is None
            else threshold_seconds
        )
        self.clock = clock or _utcnow

    def sync_auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        raise RuntimeError("JwtTokenAuth needs an httpx.AsyncClient")

    async def async_auth_flow(
        self, request: httpx.Request
    ) -> AsyncGenerator[httpx.Request, httpx.Response]:
        if self.user_id is not None:
            token = await self.resolve_token(self.user_id)
            if token:
                request.headers["Authorization"] = f"Bearer {token}"
        yield request

    def needs_refresh(self, token: str) -> bool:
        expiry = read_token_expiry(token)
        if expiry is None:
            return False
        return expiry < self.clock() - self.threshold

    async def resolve_token(self, user_id: int) -> str | None:
        """The token to attach for ``user_id``: refreshed when stale, else as stored."""
        token = await self.storage.get_token(user_id)
        if not token or not self.needs_refresh(token):
            return token

        refresh_token = await self.storage.get_refresh_token(user_id)
        if not refresh_token:
            logger.warning(f"Access token for user {user_id} expired and no refresh token is stored")
            return token

        tokens = await self.refresh(user_id, refresh_token)
        if tokens is None:
            return token

        await self.storage.save_token(user_id, tokens.access_token)
        await self.storage.save_refresh_token(user_id, tokens.refresh_token)
        logger.info(f"Access token refreshed for user {user_id}")
        return tokens.access_token

    async def refresh(self, user_id: int, refresh_token: str) -> TokenResponse | None:
        try:
            response = await self.refresh_client.post(
                REFRESH_TOKEN_PATH,
                json={"user_id": str(user_id), "refresh_token": refresh_token},
            )
        except httpx.HTTPError as e:
            logger.warning(f"Token refresh request for user {user_id} failed: {e}")
            return None

        if response.status_code != httpx.codes.OK:
            logger.warning(
                f"Token refresh for user {user_id} rejected with status {response.status_code}"
            )
            return None

        try:
            return TokenResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.warning(f"Token refresh for user {user_id} returned an unreadable body: {e}")
            return None

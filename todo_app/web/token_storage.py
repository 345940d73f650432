from todo_app.db_handlers.user import UserDBHandler
from todo_app.models.user_token import (
    ACCESS_TOKEN_NAME,
    REFRESH_TOKEN_NAME,
    WEB_LOGIN_PROVIDER,
)


class TokenStorageService:
    """
    The web front end's copy of a user's tokens.

    Kept in the ``WebApp`` provider slots, separate from the API's own
    ``JwtBearer`` slots. The refresh slot holds the raw refresh token.
    """

    def __init__(
        self,
        user_handler: UserDBHandler | None = None,
        login_provider: str = WEB_LOGIN_PROVIDER,
    ):
        self.user_handler = user_handler or UserDBHandler()
        self.login_provider = login_provider

    async def get_token(self, user_id: int) -> str | None:
        return await self.user_handler.get_token(
            user_id, self.login_provider, ACCESS_TOKEN_NAME
        )

    async def save_token(self, user_id: int, token: str) -> bool:
        return await self.user_handler.set_token(
            user_id, self.login_provider, ACCESS_TOKEN_NAME, token
        )

    async def remove_token(self, user_id: int) -> bool:
        return await self.user_handler.remove_token(
            user_id, self.login_provider, ACCESS_TOKEN_NAME
        )

    async def get_refresh_token(self, user_id: int) -> str | None:
        return await self.user_handler.get_token(
            user_id, self.login_provider, REFRESH_TOKEN_NAME
        )

    async def save_refresh_token(self, user_id: int, token: str) -> bool:
        return await self.user_handler.set_token(
            user_id, self.login_provider, REFRESH_TOKEN_NAME, token
        )

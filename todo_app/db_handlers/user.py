from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from todo_app.db_handlers.base import BaseDBHandler, check_local_db
from todo_app.models.user import User
from todo_app.models.user_token import UserToken
from todo_app.utils.auth import get_password_hash, verify_password
from todo_app.utils.logger import setup_logger

logger = setup_logger("db_handlers.user")


class UserDBHandler(BaseDBHandler[User]):
    """
    Users, password checks and named per-user token slots.

    Token writes report expected persistence failures as ``False``; anything
    else propagates to the caller.
    """

    def __init__(self):
        super().__init__(User)

    @check_local_db
    async def get_user_by_username(
        self, username: str, *, db: AsyncSession = None
    ) -> User | None:
        """Get a user by username."""
        try:
            stmt = select(User).filter(User.username == username)
            result = await db.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving user by username '{username}': {e}")
            raise

    def check_password(self, user: User, password: str) -> bool:
        return verify_password(password, user.hashed_password)

    @check_local_db
    async def create_user(
        self,
        username: str,
        password: str,
        first_name: str = "",
        last_name: str = "",
        email: str | None = None,
        *,
        db: AsyncSession = None,
    ) -> User:
        return await self.create(
            {
                "username": username,
                "hashed_password": get_password_hash(password),
                "first_name": first_name,
                "last_name": last_name,
                "email": email,
            },
            db=db,
        )

    async def _get_slot(
        self, user_id: int, login_provider: str, name: str, db: AsyncSession
    ) -> UserToken | None:
        stmt = select(UserToken).where(
            UserToken.user_id == user_id,
            UserToken.login_provider == login_provider,
            UserToken.name == name,
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @check_local_db
    async def get_token(
        self, user_id: int, login_provider: str, name: str, *, db: AsyncSession = None
    ) -> str | None:
        slot = await self._get_slot(user_id, login_provider, name, db)
        return slot.value if slot else None

    @check_local_db
    async def set_token(
        self,
        user_id: int,
        login_provider: str,
        name: str,
        value: str,
        *,
        db: AsyncSession = None,
    ) -> bool:
        """Create or overwrite a token slot."""
        try:
            slot = await self._get_slot(user_id, login_provider, name, db)
            if slot is None:
                db.add(
                    UserToken(
                        user_id=user_id,
                        login_provider=login_provider,
                        name=name,
                        value=value,
                    )
                )
            else:
                slot.value = value
            await db.flush()
            return True
        except SQLAlchemyError as e:
            await db.rollback()
            logger.warning(
                f"Could not store token slot {login_provider}/{name} for user {user_id}: {e}"
            )
            return False

    @check_local_db
    async def remove_token(
        self, user_id: int, login_provider: str, name: str, *, db: AsyncSession = None
    ) -> bool:
        """Delete a token slot. Removing an empty slot still succeeds."""
        try:
            await db.execute(
                delete(UserToken).where(
                    UserToken.user_id == user_id,
                    UserToken.login_provider == login_provider,
                    UserToken.name == name,
                )
            )
            await db.flush()
            return True
        except SQLAlchemyError as e:
            await db.rollback()
            logger.warning(
                f"Could not remove token slot {login_provider}/{name} for user {user_id}: {e}"
            )
            return False

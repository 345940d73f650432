from __future__ import annotations

import asyncio
from functools import wraps
from typing import Any, Generic, TypeVar

from asyncpg.exceptions import ConnectionDoesNotExistError
from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from todo_app.db import AppAsyncSessionLocal
from todo_app.models.base import Base
from todo_app.utils.logger import setup_logger

logger = setup_logger("db_handlers")

ModelType = TypeVar("ModelType", bound=Base)

MAX_ATTEMPTS = 3


def check_local_db(func):
    """
    Run a handler method in its own session and transaction.

    A method called with ``db=`` joins the caller's session instead. When
    the pooled connection turns out to be dead the call is retried on a
    fresh session; every other error is rolled back and re-raised.
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        if kwargs.get("db"):
            return await func(*args, **kwargs)

        dropped = None
        for attempt in range(1, MAX_ATTEMPTS + 1):
            async with AppAsyncSessionLocal() as db:
                kwargs["db"] = db
                try:
                    result = await func(*args, **kwargs)
                    await db.commit()
                    return result
                except DBAPIError as e:
                    await db.rollback()
                    if not isinstance(e.orig, ConnectionDoesNotExistError):
                        logger.error(
                            f"{func.__qualname__} failed on attempt {attempt}: {e}",
                            exc_info=True,
                        )
                        raise
                    dropped = e
                    logger.warning(
                        f"{func.__qualname__} lost its connection "
                        f"(attempt {attempt}/{MAX_ATTEMPTS}), retrying"
                    )
                    await asyncio.sleep(attempt)
                except Exception:
                    await db.rollback()
                    raise

        logger.error(f"{func.__qualname__} gave up after {MAX_ATTEMPTS} attempts: {dropped}")
        raise dropped

    return wrapper


class BaseDBHandler(Generic[ModelType]):
    """CRUD for one model. Subclasses add the queries their service needs."""

    def __init__(self, model: type[ModelType]):
        self.model = model

    async def _save(self, db_obj: ModelType, action: str, db: AsyncSession) -> ModelType:
        try:
            db.add(db_obj)
            await db.commit()
            await db.refresh(db_obj)
            return db_obj
        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"Integrity error on {action} {self.model.__name__}: {e.orig}")
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Could not {action} {self.model.__name__}: {e}", exc_info=True)
            raise

    @check_local_db
    async def create(
        self, obj_dict: dict[str, Any], *, db: AsyncSession = None
    ) -> ModelType:
        return await self._save(self.model(**obj_dict), "create", db)

    @check_local_db
    async def get(self, id: Any, *, db: AsyncSession = None) -> ModelType | None:
        result = await db.execute(select(self.model).where(self.model.id == id))
        return result.scalars().first()

    @check_local_db
    async def get_multi_by_attributes(
        self,
        *,
        db: AsyncSession = None,
        skip: int = 0,
        limit: int | None = None,
        order_by: Any = None,
        options: list | None = None,
        **filters,
    ) -> list[ModelType]:
        """Rows matching ``filters`` (equality), optionally ordered and sliced."""
        stmt = select(self.model).filter_by(**filters)
        if options:
            stmt = stmt.options(*options)
        if order_by is not None:
            clauses = order_by if isinstance(order_by, list | tuple) else [order_by]
            stmt = stmt.order_by(*clauses)
        if skip:
            stmt = stmt.offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @check_local_db
    async def update(
        self,
        db_obj: ModelType,
        update_data: dict[str, Any],
        *,
        db: AsyncSession = None,
    ) -> ModelType:
        """Apply ``update_data`` to the known columns of ``db_obj`` and save it."""
        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)
        return await self._save(db_obj, "update", db)

    @check_local_db
    async def remove(self, id: Any, *, db: AsyncSession = None) -> ModelType | None:
        """Delete by primary key; None when there was nothing to delete."""
        obj = await self.get(id, db=db)
        if obj is None:
            return None
        try:
            await db.delete(obj)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Could not remove {self.model.__name__} {id}: {e}", exc_info=True)
            raise
        return obj

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from todo_app.db_handlers.base import BaseDBHandler, check_local_db
from todo_app.models.comment import Comment


class CommentDBHandler(BaseDBHandler[Comment]):
    def __init__(self):
        super().__init__(Comment)

    @check_local_db
    async def get_comments_for_task(
        self, task_id: int, *, db: AsyncSession = None
    ) -> list[Comment]:
        return await self.get_multi_by_attributes(
            db=db,
            task_id=task_id,
            options=[selectinload(Comment.author)],
            order_by=Comment.id,
        )

from __future__ import annotations

from sqlalchemy import Select, and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from todo_app.db_handlers.base import BaseDBHandler, check_local_db
from todo_app.models.todo_list import TodoList
from todo_app.models.todo_list_role import TodoListUserRole
from todo_app.models.todo_task import TodoTask
from todo_app.utils.logger import setup_logger

logger = setup_logger("db_handlers.todo_task")


def _readable_by(user_id: int) -> Select:
    """Tasks in every list the user owns or holds a role on."""
    return (
        select(TodoTask)
        .join(TodoList, TodoList.id == TodoTask.list_id)
        .outerjoin(
            TodoListUserRole,
            and_(
                TodoListUserRole.list_id == TodoList.id,
                TodoListUserRole.user_id == user_id,
            ),
        )
        .where(or_(TodoList.owner_id == user_id, TodoListUserRole.id.is_not(None)))
        .order_by(TodoTask.id)
    )


class TodoTaskDBHandler(BaseDBHandler[TodoTask]):
    def __init__(self):
        super().__init__(TodoTask)

    @check_local_db
    async def get_tasks_by_list(
        self, list_id: int, *, db: AsyncSession = None
    ) -> list[TodoTask]:
        return await self.get_multi_by_attributes(
            db=db, list_id=list_id, order_by=TodoTask.id
        )

    @check_local_db
    async def get_assigned_tasks(
        self, user_id: int, *, db: AsyncSession = None
    ) -> list[TodoTask]:
        """Tasks assigned to ``user_id`` in lists the user can still read."""
        stmt = _readable_by(user_id).where(TodoTask.owner_user_id == user_id)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @check_local_db
    async def get_readable_tasks(
        self, user_id: int, *, db: AsyncSession = None
    ) -> list[TodoTask]:
        result = await db.execute(_readable_by(user_id))
        return list(result.scalars().all())

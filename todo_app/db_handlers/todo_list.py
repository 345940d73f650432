from __future__ import annotations

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from todo_app.db_handlers.base import BaseDBHandler, check_local_db
from todo_app.models.status import COMPLETED_STATUS_ID
from todo_app.models.todo_list import TodoList
from todo_app.models.todo_list_role import TodoListRole, TodoListUserRole
from todo_app.models.todo_task import TodoTask
from todo_app.utils.logger import setup_logger

logger = setup_logger("db_handlers.todo_list")


class TodoListDBHandler(BaseDBHandler[TodoList]):
    def __init__(self):
        super().__init__(TodoList)

    @check_local_db
    async def get_lists_for_user(
        self, user_id: int, *, db: AsyncSession = None
    ) -> list[tuple[TodoList, str | None]]:
        """
        Lists the user owns or holds a role on.

        Each list comes with the name of the user's explicit role row, which
        is None for lists the user owns.
        """
        stmt = (
            select(TodoList, TodoListRole.role_name)
            .outerjoin(
                TodoListUserRole,
                and_(
                    TodoListUserRole.list_id == TodoList.id,
                    TodoListUserRole.user_id == user_id,
                ),
            )
            .outerjoin(TodoListRole, TodoListRole.id == TodoListUserRole.role_id)
            .where(
                or_(TodoList.owner_id == user_id, TodoListUserRole.id.is_not(None))
            )
            .order_by(TodoList.id)
        )
        result = await db.execute(stmt)
        return [(todo_list, role_name) for todo_list, role_name in result.all()]

    @check_local_db
    async def count_active_tasks(
        self, list_ids: list[int], *, db: AsyncSession = None
    ) -> dict[int, int]:
        """Number of tasks that are not completed, per list."""
        if not list_ids:
            return {}
        stmt = (
            select(TodoTask.list_id, func.count(TodoTask.id))
            .where(
                TodoTask.list_id.in_(list_ids),
                TodoTask.status_id != COMPLETED_STATUS_ID,
            )
            .group_by(TodoTask.list_id)
        )
        result = await db.execute(stmt)
        counts = dict.fromkeys(list_ids, 0)
        counts.update({list_id: count for list_id, count in result.all()})
        return counts

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from todo_app.db_handlers.base import BaseDBHandler, check_local_db
from todo_app.models.todo_list_role import TodoListRole, TodoListUserRole
from todo_app.utils.logger import setup_logger

logger = setup_logger("db_handlers.todo_list_role")


class TodoListUserRoleDBHandler(BaseDBHandler[TodoListUserRole]):
    """Explicit Editor/Viewer assignments; the owner never has a row."""

    def __init__(self):
        super().__init__(TodoListUserRole)

    @check_local_db
    async def get_role_name(
        self, list_id: int, user_id: int, *, db: AsyncSession = None
    ) -> str | None:
        stmt = (
            select(TodoListRole.role_name)
            .join(TodoListUserRole, TodoListUserRole.role_id == TodoListRole.id)
            .where(
                TodoListUserRole.list_id == list_id,
                TodoListUserRole.user_id == user_id,
            )
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @check_local_db
    async def get_roles_for_list(
        self, list_id: int, *, db: AsyncSession = None
    ) -> list[TodoListUserRole]:
        return await self.get_multi_by_attributes(
            db=db,
            list_id=list_id,
            options=[
                selectinload(TodoListUserRole.user),
                selectinload(TodoListUserRole.role),
            ],
            order_by=TodoListUserRole.id,
        )

    @check_local_db
    async def set_role(
        self, list_id: int, user_id: int, role_id: int, *, db: AsyncSession = None
    ) -> TodoListUserRole:
        """Assign a role, replacing any existing assignment for the pair."""
        stmt = (
            insert(TodoListUserRole)
            .values(list_id=list_id, user_id=user_id, role_id=role_id)
            .on_conflict_do_update(
                constraint="uq_todo_list_user_role", set_={"role_id": role_id}
            )
            .returning(TodoListUserRole)
            .execution_options(populate_existing=True)
        )
        assignment = (await db.scalars(stmt)).one()
        await db.refresh(assignment, attribute_names=["role"])
        logger.info(f"User {user_id} assigned role {role_id} on list {list_id}")
        return assignment

    @check_local_db
    async def remove_role(
        self, list_id: int, user_id: int, *, db: AsyncSession = None
    ) -> bool:
        result = await db.execute(
            delete(TodoListUserRole).where(
                TodoListUserRole.list_id == list_id,
                TodoListUserRole.user_id == user_id,
            )
        )
        return result.rowcount > 0

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from todo_app.db_handlers.base import BaseDBHandler, check_local_db
from todo_app.models.tag import Tag, TaskTag
from todo_app.models.todo_task import TodoTask
from todo_app.utils.logger import setup_logger

logger = setup_logger("db_handlers.tag")


class TagDBHandler(BaseDBHandler[Tag]):
    def __init__(self):
        super().__init__(Tag)

    @check_local_db
    async def get_tags_for_task(
        self, task_id: int, *, db: AsyncSession = None
    ) -> list[Tag]:
        stmt = (
            select(Tag)
            .join(TaskTag, TaskTag.tag_id == Tag.id)
            .where(TaskTag.task_id == task_id)
            .order_by(Tag.id)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @check_local_db
    async def get_tags_for_tasks(
        self, task_ids: list[int], *, db: AsyncSession = None
    ) -> list[Tag]:
        """Distinct tags attached to any of the given tasks."""
        if not task_ids:
            return []
        stmt = (
            select(Tag)
            .join(TaskTag, TaskTag.tag_id == Tag.id)
            .where(TaskTag.task_id.in_(task_ids))
            .distinct()
            .order_by(Tag.id)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @check_local_db
    async def get_tasks_for_tag(
        self, tag_id: int, *, db: AsyncSession = None
    ) -> list[TodoTask]:
        stmt = (
            select(TodoTask)
            .join(TaskTag, TaskTag.task_id == TodoTask.id)
            .where(TaskTag.tag_id == tag_id)
            .order_by(TodoTask.id)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @check_local_db
    async def add_tag_to_task(
        self, task_id: int, tag_id: int, *, db: AsyncSession = None
    ) -> bool:
        """Link a tag to a task. Returns False if the link already exists."""
        existing = await db.execute(
            select(TaskTag.id).where(TaskTag.task_id == task_id, TaskTag.tag_id == tag_id)
        )
        if existing.scalar_one_or_none() is not None:
            return False
        try:
            db.add(TaskTag(task_id=task_id, tag_id=tag_id))
            await db.flush()
            return True
        except IntegrityError as e:
            # Lost a race against a concurrent insert of the same pair
            await db.rollback()
            logger.warning(f"Tag {tag_id} already linked to task {task_id}: {e}")
            return False

    @check_local_db
    async def remove_tag_from_task(
        self, task_id: int, tag_id: int, *, db: AsyncSession = None
    ) -> bool:
        result = await db.execute(
            delete(TaskTag).where(TaskTag.task_id == task_id, TaskTag.tag_id == tag_id)
        )
        return result.rowcount > 0

from sqlalchemy.exc import SQLAlchemyError

from todo_app.db_handlers.tag import TagDBHandler
from todo_app.db_handlers.todo_task import TodoTaskDBHandler
from todo_app.exceptions import (
    EntityNotFoundError,
    InvalidRequestError,
    PermissionDeniedError,
    UnableToCreateError,
    UnableToDeleteError,
)
from todo_app.schemas import TagCreate, TagResponse, TodoTaskResponse
from todo_app.services.authorization import Capability, ListAuthorizationService
from todo_app.utils.logger import setup_logger
from todo_app.utils.paging import paginate

logger = setup_logger("tag_service")


class TagService:
    """Tags and their links to tasks. Linking needs write access to the task's list."""

    def __init__(
        self,
        tag_handler: TagDBHandler | None = None,
        task_handler: TodoTaskDBHandler | None = None,
        authorization: ListAuthorizationService | None = None,
    ):
        self.tag_handler = tag_handler or TagDBHandler()
        self.task_handler = task_handler or TodoTaskDBHandler()
        self.authorization = authorization or ListAuthorizationService(
            task_handler=self.task_handler
        )

    async def get_tags(
        self,
        user_id: int,
        page_number: int | None = None,
        row_count: int | None = None,
    ) -> list[TagResponse]:
        """The caller's own tags plus every tag on a task the caller can read."""
        readable_tasks = await self.task_handler.get_readable_tasks(user_id)
        tags = {
            tag.id: tag
            for tag in await self.tag_handler.get_tags_for_tasks(
                [task.id for task in readable_tasks]
            )
        }
        for tag in await self.tag_handler.get_multi_by_attributes(user_id=user_id):
            tags.setdefault(tag.id, tag)
        ordered = [tags[tag_id] for tag_id in sorted(tags)]
        return [
            TagResponse.model_validate(tag)
            for tag in paginate(ordered, page_number, row_count)
        ]

    async def create_tag(self, user_id: int, data: TagCreate) -> TagResponse:
        try:
            tag = await self.tag_handler.create({"label": data.label, "user_id": user_id})
        except SQLAlchemyError as e:
            raise UnableToCreateError("Tag", e) from e
        logger.info(f"User {user_id} created tag {tag.id}")
        return TagResponse.model_validate(tag)

    async def delete_tag(self, user_id: int, tag_id: int) -> None:
        tag = await self.tag_handler.get(tag_id)
        if tag is None:
            raise EntityNotFoundError("Tag", tag_id)
        if tag.user_id != user_id:
            logger.warning(f"User {user_id} tried to delete tag {tag_id} owned by user {tag.user_id}")
            raise PermissionDeniedError(f"Only the author can delete tag {tag_id}")
        try:
            await self.tag_handler.remove(tag_id)
        except SQLAlchemyError as e:
            raise UnableToDeleteError("Tag", tag_id, e) from e
        logger.info(f"User {user_id} deleted tag {tag_id}")

    async def get_tasks_for_tag(
        self,
        user_id: int,
        tag_id: int,
        page_number: int | None = None,
        row_count: int | None = None,
    ) -> list[TodoTaskResponse]:
        """Tasks carrying the tag, limited to the lists the caller can read."""
        if await self.tag_handler.get(tag_id) is None:
            raise EntityNotFoundError("Tag", tag_id)
        readable_ids = {
            task.id for task in await self.task_handler.get_readable_tasks(user_id)
        }
        tasks = [
            task
            for task in await self.tag_handler.get_tasks_for_tag(tag_id)
            if task.id in readable_ids
        ]
        return [
            TodoTaskResponse.model_validate(task)
            for task in paginate(tasks, page_number, row_count)
        ]

    async def get_tags_for_task(self, user_id: int, task_id: int) -> list[TagResponse]:
        await self.authorization.require_task(user_id, task_id, Capability.READ)
        return [
            TagResponse.model_validate(tag)
            for tag in await self.tag_handler.get_tags_for_task(task_id)
        ]

    async def add_tag_to_task(self, user_id: int, task_id: int, tag_id: int) -> None:
        await self.authorization.require_task(user_id, task_id, Capability.WRITE)
        if await self.tag_handler.get(tag_id) is None:
            raise EntityNotFoundError("Tag", tag_id)
        if not await self.tag_handler.add_tag_to_task(task_id, tag_id):
            raise InvalidRequestError(f"Task {task_id} already has tag {tag_id}")
        logger.info(f"User {user_id} tagged task {task_id} with tag {tag_id}")

    async def remove_tag_from_task(self, user_id: int, task_id: int, tag_id: int) -> None:
        await self.authorization.require_task(user_id, task_id, Capability.WRITE)
        if not await self.tag_handler.remove_tag_from_task(task_id, tag_id):
            raise EntityNotFoundError("TaskTag", tag_id)
        logger.info(f"User {user_id} removed tag {tag_id} from task {task_id}")

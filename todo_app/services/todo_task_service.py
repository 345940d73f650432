"""
Task CRUD, status changes, assigned-task views and search.

Listing endpoints share one pipeline: status filter, then sort, then page.
"""

from datetime import date, datetime
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError

from todo_app.db_handlers.todo_task import TodoTaskDBHandler
from todo_app.exceptions import (
    EntityNotFoundError,
    InvalidRequestError,
    PermissionDeniedError,
    UnableToCreateError,
    UnableToDeleteError,
    UnableToUpdateError,
)
from todo_app.models.status import (
    COMPLETED_STATUS_ID,
    IN_PROGRESS_STATUS_ID,
    NOT_STARTED_STATUS_ID,
)
from todo_app.models.todo_task import TodoTask
from todo_app.schemas import TodoTaskCreate, TodoTaskResponse, TodoTaskUpdate
from todo_app.services.authorization import (
    Capability,
    ListAuthorizationService,
    ListRole,
    role_allows,
)
from todo_app.utils.logger import setup_logger
from todo_app.utils.paging import paginate

logger = setup_logger("todo_task_service")

# Fields an update may set to null
CLEARABLE_TASK_FIELDS = frozenset({"description"})


class TaskFilter(Enum):
    ACTIVE = "Active"
    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    ALL = "All"

    @classmethod
    def parse(cls, value: str | None) -> "TaskFilter":
        """Case-insensitive; unknown or empty values mean ACTIVE."""
        if value:
            normalized = value.strip().lower()
            for task_filter in cls:
                if task_filter.value.lower() == normalized:
                    return task_filter
        return cls.ACTIVE

    def matches(self, task: TodoTask) -> bool:
        if self is TaskFilter.ACTIVE:
            return task.status_id != COMPLETED_STATUS_ID
        if self is TaskFilter.NOT_STARTED:
            return task.status_id == NOT_STARTED_STATUS_ID
        if self is TaskFilter.IN_PROGRESS:
            return task.status_id == IN_PROGRESS_STATUS_ID
        if self is TaskFilter.COMPLETED:
            return task.status_id == COMPLETED_STATUS_ID
        return True


def sort_tasks(
    tasks: list[TodoTask], sort_by: str | None = "DueDate", sort_order: str | None = "asc"
) -> list[TodoTask]:
    """Sort by Title or DueDate (case-insensitive); anything else sorts by id."""
    descending = (sort_order or "asc").lower() != "asc"
    key = (sort_by or "").upper()
    if key == "TITLE":
        return sorted(tasks, key=lambda t: t.title, reverse=descending)
    if key == "DUEDATE":
        return sorted(tasks, key=lambda t: t.due_date, reverse=descending)
    return sorted(tasks, key=lambda t: t.id, reverse=descending)


def _same_day(value: datetime | None, day: date) -> bool:
    return value is not None and value.date() == day


def _to_response(task: TodoTask) -> TodoTaskResponse:
    return TodoTaskResponse.model_validate(task)


class TodoTaskService:
    def __init__(
        self,
        task_handler: TodoTaskDBHandler | None = None,
        authorization: ListAuthorizationService | None = None,
    ):
        self.task_handler = task_handler or TodoTaskDBHandler()
        self.authorization = authorization or ListAuthorizationService(
            task_handler=self.task_handler
        )

    @staticmethod
    def _select(
        tasks: list[TodoTask],
        task_filter: TaskFilter,
        sort_by: str | None,
        sort_order: str | None,
        page_number: int | None,
        row_count: int | None,
    ) -> list[TodoTaskResponse]:
        filtered = [task for task in tasks if task_filter.matches(task)]
        ordered = sort_tasks(filtered, sort_by, sort_order)
        return [_to_response(task) for task in paginate(ordered, page_number, row_count)]

    async def _check_assignee(self, list_id: int, assignee_id: int) -> None:
        """A task can only be assigned to someone with a role on its list."""
        _, role = await self.authorization.get_role(assignee_id, list_id)
        if role is ListRole.NONE:
            logger.warning(f"User {assignee_id} has no role on list {list_id}, cannot be assigned")
            raise InvalidRequestError(
                f"User {assignee_id} cannot be assigned tasks on list {list_id}"
            )

    async def get_tasks_by_list(
        self,
        user_id: int,
        list_id: int,
        task_filter: TaskFilter = TaskFilter.ACTIVE,
        sort_by: str | None = "DueDate",
        sort_order: str | None = "asc",
        page_number: int | None = None,
        row_count: int | None = None,
    ) -> list[TodoTaskResponse]:
        await self.authorization.require_list(user_id, list_id, Capability.READ)
        tasks = await self.task_handler.get_tasks_by_list(list_id)
        return self._select(tasks, task_filter, sort_by, sort_order, page_number, row_count)

    async def get_assigned_tasks(
        self,
        user_id: int,
        task_filter: TaskFilter = TaskFilter.ACTIVE,
        sort_by: str | None = "DueDate",
        sort_order: str | None = "asc",
        page_number: int | None = None,
        row_count: int | None = None,
    ) -> list[TodoTaskResponse]:
        tasks = await self.task_handler.get_assigned_tasks(user_id)
        return self._select(tasks, task_filter, sort_by, sort_order, page_number, row_count)

    async def search_tasks(
        self,
        user_id: int,
        title: str | None = None,
        creation_date: date | None = None,
        due_date: date | None = None,
        page_number: int | None = None,
        row_count: int | None = None,
    ) -> list[TodoTaskResponse]:
        """
        Search tasks in every list the user can read.

        Title is a case-insensitive substring match; dates match by day.
        """
        tasks = await self.task_handler.get_readable_tasks(user_id)
        if title:
            needle = title.lower()
            tasks = [task for task in tasks if needle in task.title.lower()]
        if creation_date is not None:
            tasks = [task for task in tasks if _same_day(task.creation_date, creation_date)]
        if due_date is not None:
            tasks = [task for task in tasks if _same_day(task.due_date, due_date)]
        return [_to_response(task) for task in paginate(tasks, page_number, row_count)]

    async def get_task(self, user_id: int, task_id: int) -> TodoTaskResponse:
        task, _ = await self.authorization.require_task(user_id, task_id, Capability.READ)
        return _to_response(task)

    async def create_task(
        self, user_id: int, list_id: int, data: TodoTaskCreate
    ) -> TodoTaskResponse:
        await self.authorization.require_list(user_id, list_id, Capability.WRITE)
        values = data.model_dump()
        values["list_id"] = list_id
        if values.get("owner_user_id") is None:
            values["owner_user_id"] = user_id
        elif values["owner_user_id"] != user_id:
            await self._check_assignee(list_id, values["owner_user_id"])
        try:
            task = await self.task_handler.create(values)
        except SQLAlchemyError as e:
            raise UnableToCreateError("TodoTask", e) from e
        logger.info(f"User {user_id} created task {task.id} in list {list_id}")
        return _to_response(task)

    async def update_task(
        self, user_id: int, task_id: int, data: TodoTaskUpdate
    ) -> TodoTaskResponse:
        task, _ = await self.authorization.require_task(user_id, task_id, Capability.WRITE)
        values = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field in CLEARABLE_TASK_FIELDS
        }
        assignee = values.get("owner_user_id")
        if assignee is not None and assignee != task.owner_user_id:
            await self._check_assignee(task.list_id, assignee)
        try:
            task = await self.task_handler.update(task, values)
        except SQLAlchemyError as e:
            raise UnableToUpdateError("TodoTask", task_id, e) from e
        logger.info(f"User {user_id} updated task {task_id}")
        return _to_response(task)

    async def update_status(
        self, user_id: int, task_id: int, status_id: int
    ) -> TodoTaskResponse:
        """
        Change a task's status.

        Editors and the owner can change any task; a viewer can change the
        status of a task assigned to them.
        """
        task, role = await self.authorization.require_task(
            user_id, task_id, Capability.READ
        )
        if not role_allows(role, Capability.WRITE) and task.owner_user_id != user_id:
            logger.warning(f"User {user_id} with role {role} cannot change status of task {task_id}")
            raise PermissionDeniedError(
                f"Role {role} does not allow changing the status of task {task_id}"
            )
        try:
            task = await self.task_handler.update(task, {"status_id": status_id})
        except SQLAlchemyError as e:
            raise UnableToUpdateError("TodoTask", task_id, e) from e
        logger.info(f"User {user_id} set task {task_id} to status {status_id}")
        return _to_response(task)

    async def delete_task(self, user_id: int, task_id: int) -> None:
        await self.authorization.require_task(user_id, task_id, Capability.WRITE)
        try:
            removed = await self.task_handler.remove(task_id)
        except SQLAlchemyError as e:
            raise UnableToDeleteError("TodoTask", task_id, e) from e
        if removed is None:
            raise EntityNotFoundError("TodoTask", task_id)
        logger.info(f"User {user_id} deleted task {task_id}")

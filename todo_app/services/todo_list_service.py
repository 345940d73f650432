"""List CRUD and list sharing on top of the authorization resolver."""

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from todo_app.db_handlers.todo_list import TodoListDBHandler
from todo_app.db_handlers.todo_list_role import TodoListUserRoleDBHandler
from todo_app.db_handlers.user import UserDBHandler
from todo_app.exceptions import (
    EntityNotFoundError,
    InvalidRequestError,
    UnableToCreateError,
    UnableToDeleteError,
    UnableToUpdateError,
)
from todo_app.models.todo_list import TodoList
from todo_app.schemas import (
    ListRoleResponse,
    TodoListCreate,
    TodoListResponse,
    TodoListUpdate,
)
from todo_app.services.authorization import (
    Capability,
    ListAuthorizationService,
    ListRole,
    resolve_role,
)
from todo_app.utils.logger import setup_logger
from todo_app.utils.paging import paginate

logger = setup_logger("todo_list_service")


def _to_response(
    todo_list: TodoList, role: ListRole, active_task_count: int | None = None
) -> TodoListResponse:
    return TodoListResponse(
        id=todo_list.id,
        title=todo_list.title,
        description=todo_list.description or "",
        owner_id=todo_list.owner_id,
        role=str(role),
        active_task_count=active_task_count,
    )


class TodoListService:
    def __init__(
        self,
        list_handler: TodoListDBHandler | None = None,
        role_handler: TodoListUserRoleDBHandler | None = None,
        user_handler: UserDBHandler | None = None,
        authorization: ListAuthorizationService | None = None,
    ):
        self.list_handler = list_handler or TodoListDBHandler()
        self.role_handler = role_handler or TodoListUserRoleDBHandler()
        self.user_handler = user_handler or UserDBHandler()
        self.authorization = authorization or ListAuthorizationService(
            list_handler=self.list_handler, role_handler=self.role_handler
        )

    async def get_lists(
        self,
        user_id: int,
        page_number: int | None = None,
        row_count: int | None = None,
    ) -> list[TodoListResponse]:
        """Lists the user owns or shares, with the caller's role and open task count."""
        rows = paginate(
            await self.list_handler.get_lists_for_user(user_id), page_number, row_count
        )
        counts = await self.list_handler.count_active_tasks(
            [todo_list.id for todo_list, _ in rows]
        )
        return [
            _to_response(
                todo_list,
                resolve_role(todo_list.owner_id, user_id, role_name),
                counts.get(todo_list.id, 0),
            )
            for todo_list, role_name in rows
        ]

    async def get_list(self, user_id: int, list_id: int) -> TodoListResponse:
        todo_list, role = await self.authorization.require_list(
            user_id, list_id, Capability.READ
        )
        counts = await self.list_handler.count_active_tasks([todo_list.id])
        return _to_response(todo_list, role, counts.get(todo_list.id, 0))

    async def create_list(self, user_id: int, data: TodoListCreate) -> TodoListResponse:
        try:
            todo_list = await self.list_handler.create(
                {
                    "title": data.title,
                    "description": data.description,
                    "owner_id": user_id,
                }
            )
        except SQLAlchemyError as e:
            raise UnableToCreateError("TodoList", e) from e
        logger.info(f"User {user_id} created list {todo_list.id}")
        return _to_response(todo_list, ListRole.OWNER, 0)

    async def update_list(
        self, user_id: int, list_id: int, data: TodoListUpdate
    ) -> TodoListResponse:
        todo_list, role = await self.authorization.require_list(
            user_id, list_id, Capability.WRITE
        )
        values = data.model_dump(exclude_unset=True)
        if values.get("title") is None:
            values.pop("title", None)
        if "description" in values and values["description"] is None:
            values["description"] = ""
        try:
            todo_list = await self.list_handler.update(todo_list, values)
        except SQLAlchemyError as e:
            raise UnableToUpdateError("TodoList", list_id, e) from e
        logger.info(f"User {user_id} updated list {list_id}")
        return _to_response(todo_list, role)

    async def delete_list(self, user_id: int, list_id: int) -> None:
        """Delete the list; its tasks and role rows go with it."""
        await self.authorization.require_list(user_id, list_id, Capability.DELETE)
        try:
            removed = await self.list_handler.remove(list_id)
        except SQLAlchemyError as e:
            raise UnableToDeleteError("TodoList", list_id, e) from e
        if removed is None:
            raise EntityNotFoundError("TodoList", list_id)
        logger.info(f"User {user_id} deleted list {list_id}")

    async def get_roles(self, user_id: int, list_id: int) -> list[ListRoleResponse]:
        await self.authorization.require_list(user_id, list_id, Capability.MANAGE_ROLES)
        assignments = await self.role_handler.get_roles_for_list(list_id)
        return [
            ListRoleResponse(
                user_id=assignment.user_id,
                username=assignment.user.username if assignment.user else None,
                role=assignment.role_name,
            )
            for assignment in assignments
        ]

    async def set_role(
        self, user_id: int, list_id: int, target_user_id: int, role_name: str
    ) -> ListRoleResponse:
        todo_list, _ = await self.authorization.require_list(
            user_id, list_id, Capability.MANAGE_ROLES
        )

        role = ListRole.parse(role_name)
        if role not in (ListRole.EDITOR, ListRole.VIEWER):
            raise InvalidRequestError(
                f"Role must be Editor or Viewer, got '{role_name}'"
            )
        if target_user_id == todo_list.owner_id:
            raise InvalidRequestError("The list owner cannot be assigned a role")

        target = await self.user_handler.get(target_user_id)
        if target is None:
            raise EntityNotFoundError("User", target_user_id)

        try:
            await self.role_handler.set_role(list_id, target_user_id, role.role_id)
        except IntegrityError as e:
            logger.warning(
                f"Role assignment for user {target_user_id} on list {list_id} conflicted: {e.orig}"
            )
            raise InvalidRequestError(
                f"The role of user {target_user_id} on list {list_id} could not be assigned"
            ) from e
        except SQLAlchemyError as e:
            raise UnableToUpdateError("TodoListUserRole", target_user_id, e) from e
        logger.info(
            f"User {user_id} gave user {target_user_id} role {role} on list {list_id}"
        )
        return ListRoleResponse(
            user_id=target_user_id, username=target.username, role=str(role)
        )

    async def remove_role(self, user_id: int, list_id: int, target_user_id: int) -> None:
        await self.authorization.require_list(user_id, list_id, Capability.MANAGE_ROLES)
        if not await self.role_handler.remove_role(list_id, target_user_id):
            raise EntityNotFoundError("TodoListUserRole", target_user_id)
        logger.info(
            f"User {user_id} removed user {target_user_id}'s role on list {list_id}"
        )

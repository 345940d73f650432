"""
Role resolution and capability checks for lists and the tasks inside them.

A user's role on a list is resolved in a fixed order:

1. ``list.owner_id == user_id``            → Owner
2. an explicit TodoListUserRole row        → Editor or Viewer
3. otherwise                               → None

Tasks have no roles of their own; they inherit the role on their list.
Role None is reported exactly like a missing list, so callers cannot tell
"not shared with you" from "does not exist".
"""

from enum import Enum

from todo_app.db_handlers.todo_list import TodoListDBHandler
from todo_app.db_handlers.todo_list_role import TodoListUserRoleDBHandler
from todo_app.db_handlers.todo_task import TodoTaskDBHandler
from todo_app.exceptions import EntityNotFoundError, PermissionDeniedError
from todo_app.models.todo_list import TodoList
from todo_app.models.todo_list_role import EDITOR_ROLE_ID, VIEWER_ROLE_ID
from todo_app.models.todo_task import TodoTask
from todo_app.utils.logger import setup_logger

logger = setup_logger("authorization")


class ListRole(Enum):
    NONE = "None"
    OWNER = "Owner"
    EDITOR = "Editor"
    VIEWER = "Viewer"

    @classmethod
    def parse(cls, value: str | None) -> "ListRole":
        """Case-insensitive parse; anything unrecognised is NONE."""
        if not value:
            return cls.NONE
        normalized = value.strip().lower()
        for role in (cls.OWNER, cls.EDITOR, cls.VIEWER):
            if role.value.lower() == normalized:
                return role
        return cls.NONE

    @property
    def role_id(self) -> int | None:
        """Id of the stored role row; Owner and None have no row."""
        return _ROLE_IDS.get(self)

    def __str__(self) -> str:
        return self.value


class Capability(Enum):
    READ = "read"
    WRITE = "write"
    DELETE = "delete"
    MANAGE_ROLES = "manage_roles"


_ROLE_IDS = {
    ListRole.VIEWER: VIEWER_ROLE_ID,
    ListRole.EDITOR: EDITOR_ROLE_ID,
}

_CAPABILITIES = {
    ListRole.OWNER: frozenset(Capability),
    ListRole.EDITOR: frozenset({Capability.READ, Capability.WRITE}),
    ListRole.VIEWER: frozenset({Capability.READ}),
    ListRole.NONE: frozenset(),
}


def resolve_role(owner_id: int, user_id: int, role_name: str | None) -> ListRole:
    if owner_id == user_id:
        return ListRole.OWNER
    role = ListRole.parse(role_name)
    # Owner comes from owner_id only, never from a stored row
    if role is ListRole.OWNER:
        return ListRole.NONE
    return role


def role_allows(role: ListRole, capability: Capability) -> bool:
    return capability in _CAPABILITIES[role]


class ListAuthorizationService:
    def __init__(
        self,
        list_handler: TodoListDBHandler | None = None,
        role_handler: TodoListUserRoleDBHandler | None = None,
        task_handler: TodoTaskDBHandler | None = None,
    ):
        self.list_handler = list_handler or TodoListDBHandler()
        self.role_handler = role_handler or TodoListUserRoleDBHandler()
        self.task_handler = task_handler or TodoTaskDBHandler()

    async def get_role(self, user_id: int, list_id: int) -> tuple[TodoList | None, ListRole]:
        todo_list = await self.list_handler.get(list_id)
        if todo_list is None:
            return None, ListRole.NONE
        if todo_list.owner_id == user_id:
            return todo_list, ListRole.OWNER
        role_name = await self.role_handler.get_role_name(list_id, user_id)
        return todo_list, resolve_role(todo_list.owner_id, user_id, role_name)

    async def authorize(self, user_id: int, list_id: int, capability: Capability) -> bool:
        _, role = await self.get_role(user_id, list_id)
        return role_allows(role, capability)

    async def authorize_task(
        self, user_id: int, task_id: int, capability: Capability
    ) -> bool:
        task = await self.task_handler.get(task_id)
        if task is None:
            return False
        return await self.authorize(user_id, task.list_id, capability)

    async def require_list(
        self, user_id: int, list_id: int, capability: Capability
    ) -> tuple[TodoList, ListRole]:
        """
        Return the list and the caller's role, or raise.

        EntityNotFoundError when the list is missing or the caller has no
        role; PermissionDeniedError when the role lacks ``capability``.
        """
        todo_list, role = await self.get_role(user_id, list_id)
        if todo_list is None or role is ListRole.NONE:
            logger.warning(f"User {user_id} has no access to list {list_id}")
            raise EntityNotFoundError("TodoList", list_id)
        if not role_allows(role, capability):
            logger.warning(
                f"User {user_id} with role {role} denied {capability.value} on list {list_id}"
            )
            raise PermissionDeniedError(
                f"Role {role} does not allow {capability.value} on list {list_id}"
            )
        return todo_list, role

    async def require_task(
        self, user_id: int, task_id: int, capability: Capability
    ) -> tuple[TodoTask, ListRole]:
        task = await self.task_handler.get(task_id)
        if task is None:
            raise EntityNotFoundError("TodoTask", task_id)
        try:
            _, role = await self.require_list(user_id, task.list_id, capability)
        except EntityNotFoundError as e:
            raise EntityNotFoundError("TodoTask", task_id) from e
        return task, role

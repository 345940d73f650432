"""
In-memory stand-ins for the DB handlers.

They expose the same async methods the services and routes call, and
return real (transient) ORM instances so response models validate exactly
as they would against the database.
"""

from datetime import UTC, datetime
from itertools import count
from typing import Any

import bcrypt

from todo_app.models import (
    Comment,
    Tag,
    TodoList,
    TodoListRole,
    TodoListUserRole,
    TodoTask,
    User,
)
from todo_app.models.status import COMPLETED_STATUS_ID
from todo_app.models.todo_list_role import SEED_LIST_ROLES
from todo_app.utils.auth import verify_password


def _hash(password: str) -> str:
    # Minimum cost keeps the suite fast
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8")


class InMemoryStore:
    def __init__(self):
        self.users: dict[int, User] = {}
        self.tokens: dict[tuple[int, str, str], str] = {}
        self.lists: dict[int, TodoList] = {}
        self.roles: dict[tuple[int, int], int] = {}
        self.tasks: dict[int, TodoTask] = {}
        self.tags: dict[int, Tag] = {}
        self.task_tags: set[tuple[int, int]] = set()
        self.comments: dict[int, Comment] = {}
        self._ids = count(1000)

    def next_id(self) -> int:
        return next(self._ids)

    def add_user(self, username: str, password: str = "password", user_id: int | None = None) -> User:
        user = User(
            id=user_id or self.next_id(),
            username=username,
            hashed_password=_hash(password),
            first_name=username.capitalize(),
            last_name="",
            email=None,
        )
        self.users[user.id] = user
        return user

    def add_list(self, owner: User, title: str = "List", list_id: int | None = None) -> TodoList:
        todo_list = TodoList(
            id=list_id or self.next_id(), title=title, description="", owner_id=owner.id
        )
        self.lists[todo_list.id] = todo_list
        return todo_list

    def share(self, todo_list: TodoList, user: User, role_id: int) -> None:
        self.roles[(todo_list.id, user.id)] = role_id

    def add_task(
        self,
        todo_list: TodoList,
        title: str = "Task",
        due_date: datetime | None = None,
        status_id: int = 1,
        owner: User | None = None,
        creation_date: datetime | None = None,
    ) -> TodoTask:
        task = TodoTask(
            id=self.next_id(),
            title=title,
            description=None,
            creation_date=creation_date or datetime.now(UTC),
            due_date=due_date or datetime(2030, 1, 1, tzinfo=UTC),
            status_id=status_id,
            owner_user_id=owner.id if owner else todo_list.owner_id,
            list_id=todo_list.id,
        )
        self.tasks[task.id] = task
        return task

    def add_tag(self, author: User, label: str) -> Tag:
        tag = Tag(id=self.next_id(), label=label, user_id=author.id)
        self.tags[tag.id] = tag
        return tag

    def add_comment(self, task: TodoTask, author: User, text: str) -> Comment:
        comment = Comment(id=self.next_id(), text=text, task_id=task.id, user_id=author.id)
        self.comments[comment.id] = comment
        return comment

    def readable_list_ids(self, user_id: int) -> set[int]:
        return {
            list_id
            for list_id, todo_list in self.lists.items()
            if todo_list.owner_id == user_id or (list_id, user_id) in self.roles
        }


class _FakeCrud:
    """get/create/update/remove over one of the store's dicts."""

    model: type

    def __init__(self, store: InMemoryStore):
        self.store = store

    def _table(self) -> dict[int, Any]:
        raise NotImplementedError

    async def get(self, id: int):
        return self._table().get(id)

    async def create(self, obj_dict: dict[str, Any]):
        obj = self.model(id=self.store.next_id(), **obj_dict)
        self._table()[obj.id] = obj
        return obj

    async def update(self, db_obj, update_data: dict[str, Any]):
        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)
        return db_obj

    async def remove(self, id: int):
        return self._table().pop(id, None)


class FakeUserDBHandler(_FakeCrud):
    model = User

    def __init__(self, store: InMemoryStore):
        super().__init__(store)
        self.fail_writes = False

    def _table(self):
        return self.store.users

    async def get_user_by_username(self, username: str) -> User | None:
        return next(
            (user for user in self.store.users.values() if user.username == username),
            None,
        )

    def check_password(self, user: User, password: str) -> bool:
        return verify_password(password, user.hashed_password)

    async def create_user(self, username, password, first_name="", last_name="", email=None) -> User:
        return await self.create(
            {
                "username": username,
                "hashed_password": _hash(password),
                "first_name": first_name,
                "last_name": last_name,
                "email": email,
            }
        )

    async def get_token(self, user_id: int, login_provider: str, name: str) -> str | None:
        return self.store.tokens.get((user_id, login_provider, name))

    async def set_token(self, user_id: int, login_provider: str, name: str, value: str) -> bool:
        if self.fail_writes:
            return False
        self.store.tokens[(user_id, login_provider, name)] = value
        return True

    async def remove_token(self, user_id: int, login_provider: str, name: str) -> bool:
        if self.fail_writes:
            return False
        self.store.tokens.pop((user_id, login_provider, name), None)
        return True


class FakeTodoListDBHandler(_FakeCrud):
    model = TodoList

    def _table(self):
        return self.store.lists

    async def get_lists_for_user(self, user_id: int) -> list[tuple[TodoList, str | None]]:
        rows = []
        for list_id in sorted(self.store.readable_list_ids(user_id)):
            todo_list = self.store.lists[list_id]
            role_id = self.store.roles.get((list_id, user_id))
            rows.append((todo_list, SEED_LIST_ROLES.get(role_id)))
        return rows

    async def count_active_tasks(self, list_ids: list[int]) -> dict[int, int]:
        counts = dict.fromkeys(list_ids, 0)
        for task in self.store.tasks.values():
            if task.list_id in counts and task.status_id != COMPLETED_STATUS_ID:
                counts[task.list_id] += 1
        return counts

    async def remove(self, id: int):
        removed = self.store.lists.pop(id, None)
        if removed is not None:
            for task_id in [t.id for t in self.store.tasks.values() if t.list_id == id]:
                del self.store.tasks[task_id]
            for key in [key for key in self.store.roles if key[0] == id]:
                del self.store.roles[key]
        return removed


class FakeTodoListUserRoleDBHandler:
    def __init__(self, store: InMemoryStore):
        self.store = store

    async def get_role_name(self, list_id: int, user_id: int) -> str | None:
        return SEED_LIST_ROLES.get(self.store.roles.get((list_id, user_id)))

    async def get_roles_for_list(self, list_id: int) -> list[TodoListUserRole]:
        assignments = []
        for (role_list_id, user_id), role_id in sorted(self.store.roles.items()):
            if role_list_id != list_id:
                continue
            assignment = TodoListUserRole(list_id=list_id, user_id=user_id, role_id=role_id)
            assignment.role = TodoListRole(id=role_id, role_name=SEED_LIST_ROLES[role_id])
            assignment.user = self.store.users.get(user_id)
            assignments.append(assignment)
        return assignments

    async def set_role(self, list_id: int, user_id: int, role_id: int) -> TodoListUserRole:
        self.store.roles[(list_id, user_id)] = role_id
        return TodoListUserRole(list_id=list_id, user_id=user_id, role_id=role_id)

    async def remove_role(self, list_id: int, user_id: int) -> bool:
        return self.store.roles.pop((list_id, user_id), None) is not None


class FakeTodoTaskDBHandler(_FakeCrud):
    model = TodoTask

    def _table(self):
        return self.store.tasks

    async def create(self, obj_dict: dict[str, Any]):
        obj_dict = {"creation_date": datetime.now(UTC), **obj_dict}
        return await super().create(obj_dict)

    async def get_tasks_by_list(self, list_id: int) -> list[TodoTask]:
        return [t for t in self.store.tasks.values() if t.list_id == list_id]

    async def get_assigned_tasks(self, user_id: int) -> list[TodoTask]:
        readable = self.store.readable_list_ids(user_id)
        return [
            t
            for t in self.store.tasks.values()
            if t.owner_user_id == user_id and t.list_id in readable
        ]

    async def get_readable_tasks(self, user_id: int) -> list[TodoTask]:
        readable = self.store.readable_list_ids(user_id)
        return [t for t in self.store.tasks.values() if t.list_id in readable]

    async def remove(self, id: int):
        self.store.task_tags = {pair for pair in self.store.task_tags if pair[0] != id}
        return await super().remove(id)


class FakeTagDBHandler(_FakeCrud):
    model = Tag

    def _table(self):
        return self.store.tags

    async def get_multi_by_attributes(self, **kwargs) -> list[Tag]:
        return [
            tag
            for tag in self.store.tags.values()
            if all(getattr(tag, key) == value for key, value in kwargs.items())
        ]

    async def get_tags_for_task(self, task_id: int) -> list[Tag]:
        return [
            self.store.tags[tag_id]
            for task, tag_id in sorted(self.store.task_tags)
            if task == task_id
        ]

    async def get_tags_for_tasks(self, task_ids: list[int]) -> list[Tag]:
        tag_ids = {tag_id for task_id, tag_id in self.store.task_tags if task_id in task_ids}
        return [self.store.tags[tag_id] for tag_id in sorted(tag_ids)]

    async def get_tasks_for_tag(self, tag_id: int) -> list[TodoTask]:
        return [
            self.store.tasks[task_id]
            for task_id, linked_tag in sorted(self.store.task_tags)
            if linked_tag == tag_id
        ]

    async def add_tag_to_task(self, task_id: int, tag_id: int) -> bool:
        if (task_id, tag_id) in self.store.task_tags:
            return False
        self.store.task_tags.add((task_id, tag_id))
        return True

    async def remove_tag_from_task(self, task_id: int, tag_id: int) -> bool:
        if (task_id, tag_id) not in self.store.task_tags:
            return False
        self.store.task_tags.discard((task_id, tag_id))
        return True


class FakeCommentDBHandler(_FakeCrud):
    model = Comment

    def _table(self):
        return self.store.comments

    async def get_comments_for_task(self, task_id: int) -> list[Comment]:
        return [c for c in sorted(self.store.comments.values(), key=lambda c: c.id) if c.task_id == task_id]

"""
To-do list services.

Core Services:
- token_service: login, refresh token rotation and logout
- authorization: Owner/Editor/Viewer role resolution and capability checks
- todo_list_service: list CRUD and sharing
- todo_task_service: task CRUD, filters, sorting, assigned tasks and search
- tag_service & comment_service: tags, task tags and comments
"""

from todo_app.services.authorization import (
    Capability,
    ListAuthorizationService,
    ListRole,
    resolve_role,
    role_allows,
)
from todo_app.services.comment_service import CommentService
from todo_app.services.tag_service import TagService
from todo_app.services.todo_list_service import TodoListService
from todo_app.services.todo_task_service import TaskFilter, TodoTaskService
from todo_app.services.token_service import TokenService

__all__ = [
    "Capability",
    "CommentService",
    "ListAuthorizationService",
    "ListRole",
    "TagService",
    "TaskFilter",
    "TodoListService",
    "TodoTaskService",
    "TokenService",
    "resolve_role",
    "role_allows",
]

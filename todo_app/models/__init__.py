"""
Database models for the to-do list application.

Architecture: User → TodoList → TodoTask → Comment, with TodoListUserRole
sharing lists and TaskTag linking tasks to tags.
"""

from todo_app.models.comment import Comment
from todo_app.models.status import Status
from todo_app.models.tag import Tag, TaskTag
from todo_app.models.todo_list import TodoList
from todo_app.models.todo_list_role import TodoListRole, TodoListUserRole
from todo_app.models.todo_task import TodoTask
from todo_app.models.user import User
from todo_app.models.user_token import UserToken

__all__ = [
    # Accounts
    "User",
    "UserToken",
    # Lists and sharing
    "TodoList",
    "TodoListRole",
    "TodoListUserRole",
    # Tasks
    "Status",
    "TodoTask",
    "Comment",
    "Tag",
    "TaskTag",
]

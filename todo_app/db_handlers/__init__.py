from todo_app.db_handlers.base import BaseDBHandler, check_local_db
from todo_app.db_handlers.comment import CommentDBHandler
from todo_app.db_handlers.tag import TagDBHandler
from todo_app.db_handlers.todo_list import TodoListDBHandler
from todo_app.db_handlers.todo_list_role import TodoListUserRoleDBHandler
from todo_app.db_handlers.todo_task import TodoTaskDBHandler
from todo_app.db_handlers.user import UserDBHandler

__all__ = [
    "BaseDBHandler",
    "check_local_db",
    "UserDBHandler",
    "TodoListDBHandler",
    "TodoListUserRoleDBHandler",
    "TodoTaskDBHandler",
    "TagDBHandler",
    "CommentDBHandler",
]

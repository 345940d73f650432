from todo_app.dependencies.auth import (
    SessionContext,
    get_current_session,
    get_current_user,
)
from todo_app.dependencies.services import (
    get_authorization_service,
    get_comment_service,
    get_tag_service,
    get_todo_list_service,
    get_todo_task_service,
    get_token_service,
)

__all__ = [
    "SessionContext",
    "get_current_session",
    "get_current_user",
    "get_authorization_service",
    "get_comment_service",
    "get_tag_service",
    "get_todo_list_service",
    "get_todo_task_service",
    "get_token_service",
]

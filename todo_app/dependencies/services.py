"""Service factories wired from per-request DB handler dependencies."""

from fastapi import Depends

from todo_app.db_handlers import (
    CommentDBHandler,
    TagDBHandler,
    TodoListDBHandler,
    TodoListUserRoleDBHandler,
    TodoTaskDBHandler,
    UserDBHandler,
)
from todo_app.services.authorization import ListAuthorizationService
from todo_app.services.comment_service import CommentService
from todo_app.services.tag_service import TagService
from todo_app.services.todo_list_service import TodoListService
from todo_app.services.todo_task_service import TodoTaskService
from todo_app.services.token_service import TokenService


def get_token_service(user_db_handler: UserDBHandler = Depends()) -> TokenService:
    return TokenService(user_handler=user_db_handler)


def get_authorization_service(
    list_handler: TodoListDBHandler = Depends(),
    role_handler: TodoListUserRoleDBHandler = Depends(),
    task_handler: TodoTaskDBHandler = Depends(),
) -> ListAuthorizationService:
    return ListAuthorizationService(
        list_handler=list_handler, role_handler=role_handler, task_handler=task_handler
    )


def get_todo_list_service(
    list_handler: TodoListDBHandler = Depends(),
    role_handler: TodoListUserRoleDBHandler = Depends(),
    user_handler: UserDBHandler = Depends(),
    authorization: ListAuthorizationService = Depends(get_authorization_service),
) -> TodoListService:
    return TodoListService(
        list_handler=list_handler,
        role_handler=role_handler,
        user_handler=user_handler,
        authorization=authorization,
    )


def get_todo_task_service(
    task_handler: TodoTaskDBHandler = Depends(),
    authorization: ListAuthorizationService = Depends(get_authorization_service),
) -> TodoTaskService:
    return TodoTaskService(task_handler=task_handler, authorization=authorization)


def get_tag_service(
    tag_handler: TagDBHandler = Depends(),
    task_handler: TodoTaskDBHandler = Depends(),
    authorization: ListAuthorizationService = Depends(get_authorization_service),
) -> TagService:
    return TagService(
        tag_handler=tag_handler, task_handler=task_handler, authorization=authorization
    )


def get_comment_service(
    comment_handler: CommentDBHandler = Depends(),
    authorization: ListAuthorizationService = Depends(get_authorization_service),
) -> CommentService:
    return CommentService(comment_handler=comment_handler, authorization=authorization)

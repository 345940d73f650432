from sqlalchemy.exc import SQLAlchemyError

from todo_app.db_handlers.comment import CommentDBHandler
from todo_app.exceptions import (
    EntityNotFoundError,
    PermissionDeniedError,
    UnableToCreateError,
    UnableToDeleteError,
    UnableToUpdateError,
)
from todo_app.models.comment import Comment
from todo_app.schemas import CommentCreate, CommentResponse, CommentUpdate
from todo_app.services.authorization import (
    Capability,
    ListAuthorizationService,
    ListRole,
    role_allows,
)
from todo_app.utils.logger import setup_logger
from todo_app.utils.paging import paginate

logger = setup_logger("comment_service")


def _to_response(comment: Comment, author_username: str | None = None) -> CommentResponse:
    if author_username is None and "author" in comment.__dict__ and comment.author:
        author_username = comment.author.username
    return CommentResponse(
        id=comment.id,
        text=comment.text,
        task_id=comment.task_id,
        user_id=comment.user_id,
        author_username=author_username,
    )


class CommentService:
    """
    Comments on tasks.

    Anyone with a role on the list can read; Owner and Editor can post.
    Authors edit their own comments while they still have write access, and
    the list owner may delete any comment.
    """

    def __init__(
        self,
        comment_handler: CommentDBHandler | None = None,
        authorization: ListAuthorizationService | None = None,
    ):
        self.comment_handler = comment_handler or CommentDBHandler()
        self.authorization = authorization or ListAuthorizationService()

    async def get_comments(
        self,
        user_id: int,
        task_id: int,
        page_number: int | None = None,
        row_count: int | None = None,
    ) -> list[CommentResponse]:
        await self.authorization.require_task(user_id, task_id, Capability.READ)
        comments = await self.comment_handler.get_comments_for_task(task_id)
        return [_to_response(c) for c in paginate(comments, page_number, row_count)]

    async def add_comment(
        self, user_id: int, username: str, task_id: int, data: CommentCreate
    ) -> CommentResponse:
        await self.authorization.require_task(user_id, task_id, Capability.WRITE)
        try:
            comment = await self.comment_handler.create(
                {"text": data.text, "task_id": task_id, "user_id": user_id}
            )
        except SQLAlchemyError as e:
            raise UnableToCreateError("Comment", e) from e
        logger.info(f"User {user_id} commented on task {task_id}")
        return _to_response(comment, username)

    async def _load(self, user_id: int, comment_id: int) -> tuple[Comment, ListRole]:
        comment = await self.comment_handler.get(comment_id)
        if comment is None:
            raise EntityNotFoundError("Comment", comment_id)
        try:
            _, role = await self.authorization.require_task(
                user_id, comment.task_id, Capability.READ
            )
        except EntityNotFoundError as e:
            raise EntityNotFoundError("Comment", comment_id) from e
        return comment, role

    async def update_comment(
        self, user_id: int, comment_id: int, data: CommentUpdate
    ) -> CommentResponse:
        comment, role = await self._load(user_id, comment_id)
        if comment.user_id != user_id or not role_allows(role, Capability.WRITE):
            logger.warning(f"User {user_id} may not edit comment {comment_id}")
            raise PermissionDeniedError(f"Not allowed to edit comment {comment_id}")
        try:
            comment = await self.comment_handler.update(comment, {"text": data.text})
        except SQLAlchemyError as e:
            raise UnableToUpdateError("Comment", comment_id, e) from e
        logger.info(f"User {user_id} edited comment {comment_id}")
        return _to_response(comment)

    async def delete_comment(self, user_id: int, comment_id: int) -> None:
        comment, role = await self._load(user_id, comment_id)
        is_author = comment.user_id == user_id and role_allows(role, Capability.WRITE)
        if not is_author and role is not ListRole.OWNER:
            logger.warning(f"User {user_id} may not delete comment {comment_id}")
            raise PermissionDeniedError(f"Not allowed to delete comment {comment_id}")
        try:
            await self.comment_handler.remove(comment_id)
        except SQLAlchemyError as e:
            raise UnableToDeleteError("Comment", comment_id, e) from e
        logger.info(f"User {user_id} deleted comment {comment_id}")

from fastapi import APIRouter, Depends, Query, Response, status

from todo_app.dependencies.auth import SessionContext, get_current_session
from todo_app.dependencies.services import get_comment_service
from todo_app.schemas import CommentCreate, CommentResponse, CommentUpdate
from todo_app.services.comment_service import CommentService

router = APIRouter(tags=["Comments"])


@router.get("/api/tasks/{task_id}/comments", response_model=list[CommentResponse])
async def get_task_comments(
    task_id: int,
    page_number: int | None = Query(None),
    row_count: int | None = Query(None),
    session: SessionContext = Depends(get_current_session),
    comment_service: CommentService = Depends(get_comment_service),
):
    return await comment_service.get_comments(
        session.user_id, task_id, page_number, row_count
    )


@router.post(
    "/api/tasks/{task_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_task_comment(
    task_id: int,
    data: CommentCreate,
    session: SessionContext = Depends(get_current_session),
    comment_service: CommentService = Depends(get_comment_service),
):
    return await comment_service.add_comment(
        session.user_id, session.username, task_id, data
    )


@router.put("/api/comments/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: int,
    data: CommentUpdate,
    session: SessionContext = Depends(get_current_session),
    comment_service: CommentService = Depends(get_comment_service),
):
    return await comment_service.update_comment(session.user_id, comment_id, data)


@router.delete("/api/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    comment_id: int,
    session: SessionContext = Depends(get_current_session),
    comment_service: CommentService = Depends(get_comment_service),
):
    await comment_service.delete_comment(session.user_id, comment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

from fastapi import APIRouter, Depends, Query, Response, status

from todo_app.dependencies.auth import SessionContext, get_current_session
from todo_app.dependencies.services import get_tag_service
from todo_app.schemas import MessageResponse, TagCreate, TagResponse, TodoTaskResponse
from todo_app.services.tag_service import TagService

router = APIRouter(tags=["Tags"])


@router.get("/api/tags", response_model=list[TagResponse])
async def get_tags(
    page_number: int | None = Query(None),
    row_count: int | None = Query(None),
    session: SessionContext = Depends(get_current_session),
    tag_service: TagService = Depends(get_tag_service),
):
    return await tag_service.get_tags(session.user_id, page_number, row_count)


@router.post("/api/tags", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
async def create_tag(
    data: TagCreate,
    session: SessionContext = Depends(get_current_session),
    tag_service: TagService = Depends(get_tag_service),
):
    return await tag_service.create_tag(session.user_id, data)


@router.delete("/api/tags/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tag(
    tag_id: int,
    session: SessionContext = Depends(get_current_session),
    tag_service: TagService = Depends(get_tag_service),
):
    await tag_service.delete_tag(session.user_id, tag_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/api/tags/{tag_id}/tasks", response_model=list[TodoTaskResponse])
async def get_tasks_for_tag(
    tag_id: int,
    page_number: int | None = Query(None),
    row_count: int | None = Query(None),
    session: SessionContext = Depends(get_current_session),
    tag_service: TagService = Depends(get_tag_service),
):
    return await tag_service.get_tasks_for_tag(
        session.user_id, tag_id, page_number, row_count
    )


@router.get("/api/tasks/{task_id}/tags", response_model=list[TagResponse])
async def get_task_tags(
    task_id: int,
    session: SessionContext = Depends(get_current_session),
    tag_service: TagService = Depends(get_tag_service),
):
    return await tag_service.get_tags_for_task(session.user_id, task_id)


@router.post("/api/tasks/{task_id}/tags/{tag_id}", response_model=MessageResponse)
async def add_task_tag(
    task_id: int,
    tag_id: int,
    session: SessionContext = Depends(get_current_session),
    tag_service: TagService = Depends(get_tag_service),
):
    await tag_service.add_tag_to_task(session.user_id, task_id, tag_id)
    return MessageResponse(message="Tag added to task")


@router.delete(
    "/api/tasks/{task_id}/tags/{tag_id}", status_code=status.HTTP_204_NO_CONTENT
)
async def remove_task_tag(
    task_id: int,
    tag_id: int,
    session: SessionContext = Depends(get_current_session),
    tag_service: TagService = Depends(get_tag_service),
):
    await tag_service.remove_tag_from_task(session.user_id, task_id, tag_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

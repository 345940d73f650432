"""
Task API routes.

Listing routes accept ``filter`` (Active, NotStarted, InProgress,
Completed, All), ``sort_by`` (Title, DueDate), ``sort_order`` (asc, desc)
and ``page_number``/``row_count``.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, Response, status

from todo_app.dependencies.auth import SessionContext, get_current_session
from todo_app.dependencies.services import get_todo_task_service
from todo_app.schemas import (
    TaskStatusUpdate,
    TodoTaskCreate,
    TodoTaskResponse,
    TodoTaskUpdate,
)
from todo_app.services.todo_task_service import TaskFilter, TodoTaskService

router = APIRouter(tags=["Todo Tasks"])


@router.get("/api/todolists/{list_id}/tasks", response_model=list[TodoTaskResponse])
async def get_list_tasks(
    list_id: int,
    filter: str | None = Query("Active", description="Status filter"),
    sort_by: str | None = Query("DueDate", description="Title or DueDate"),
    sort_order: str | None = Query("asc", description="asc or desc"),
    page_number: int | None = Query(None),
    row_count: int | None = Query(None),
    session: SessionContext = Depends(get_current_session),
    task_service: TodoTaskService = Depends(get_todo_task_service),
):
    return await task_service.get_tasks_by_list(
        session.user_id,
        list_id,
        TaskFilter.parse(filter),
        sort_by,
        sort_order,
        page_number,
        row_count,
    )


@router.post(
    "/api/todolists/{list_id}/tasks",
    response_model=TodoTaskResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_task(
    list_id: int,
    data: TodoTaskCreate,
    session: SessionContext = Depends(get_current_session),
    task_service: TodoTaskService = Depends(get_todo_task_service),
):
    return await task_service.create_task(session.user_id, list_id, data)


# Static paths are registered before /api/tasks/{task_id}
@router.get("/api/tasks/assigned", response_model=list[TodoTaskResponse])
async def get_assigned_tasks(
    filter: str | None = Query("Active", description="Status filter"),
    sort_by: str | None = Query("DueDate", description="Title or DueDate"),
    sort_order: str | None = Query("asc", description="asc or desc"),
    page_number: int | None = Query(None),
    row_count: int | None = Query(None),
    session: SessionContext = Depends(get_current_session),
    task_service: TodoTaskService = Depends(get_todo_task_service),
):
    """Tasks assigned to the caller across all lists."""
    return await task_service.get_assigned_tasks(
        session.user_id,
        TaskFilter.parse(filter),
        sort_by,
        sort_order,
        page_number,
        row_count,
    )


@router.get("/api/tasks/search", response_model=list[TodoTaskResponse])
async def search_tasks(
    title: str | None = Query(None, description="Case-insensitive title substring"),
    creation_date: date | None = Query(None, description="Creation day (YYYY-MM-DD)"),
    due_date: date | None = Query(None, description="Due day (YYYY-MM-DD)"),
    page_number: int | None = Query(None),
    row_count: int | None = Query(None),
    session: SessionContext = Depends(get_current_session),
    task_service: TodoTaskService = Depends(get_todo_task_service),
):
    return await task_service.search_tasks(
        session.user_id, title, creation_date, due_date, page_number, row_count
    )


@router.get("/api/tasks/{task_id}", response_model=TodoTaskResponse)
async def get_task(
    task_id: int,
    session: SessionContext = Depends(get_current_session),
    task_service: TodoTaskService = Depends(get_todo_task_service),
):
    return await task_service.get_task(session.user_id, task_id)


@router.put("/api/tasks/{task_id}", response_model=TodoTaskResponse)
async def update_task(
    task_id: int,
    data: TodoTaskUpdate,
    session: SessionContext = Depends(get_current_session),
    task_service: TodoTaskService = Depends(get_todo_task_service),
):
    return await task_service.update_task(session.user_id, task_id, data)


@router.patch("/api/tasks/{task_id}/status", response_model=TodoTaskResponse)
async def update_task_status(
    task_id: int,
    data: TaskStatusUpdate,
    session: SessionContext = Depends(get_current_session),
    task_service: TodoTaskService = Depends(get_todo_task_service),
):
    return await task_service.update_status(session.user_id, task_id, data.status_id)


@router.delete("/api/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: int,
    session: SessionContext = Depends(get_current_session),
    task_service: TodoTaskService = Depends(get_todo_task_service),
):
    await task_service.delete_task(session.user_id, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

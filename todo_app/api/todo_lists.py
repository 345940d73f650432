"""
To-do list API routes.

Lists are visible to their owner and to users holding an Editor or Viewer
role. Only the owner can delete a list or manage its roles.
"""

from fastapi import APIRouter, Depends, Query, Response, status

from todo_app.dependencies.auth import SessionContext, get_current_session
from todo_app.dependencies.services import get_todo_list_service
from todo_app.schemas import (
    ListRoleAssignment,
    ListRoleResponse,
    TodoListCreate,
    TodoListResponse,
    TodoListUpdate,
)
from todo_app.services.todo_list_service import TodoListService

router = APIRouter(prefix="/api/todolists", tags=["Todo Lists"])


@router.get("", response_model=list[TodoListResponse])
async def get_lists(
    page_number: int | None = Query(None, description="1-based page number"),
    row_count: int | None = Query(None, description="Lists per page"),
    session: SessionContext = Depends(get_current_session),
    list_service: TodoListService = Depends(get_todo_list_service),
):
    """Lists the caller owns or shares, with the caller's role and open task count."""
    return await list_service.get_lists(session.user_id, page_number, row_count)


@router.post("", response_model=TodoListResponse, status_code=status.HTTP_201_CREATED)
async def create_list(
    data: TodoListCreate,
    session: SessionContext = Depends(get_current_session),
    list_service: TodoListService = Depends(get_todo_list_service),
):
    return await list_service.create_list(session.user_id, data)


@router.get("/{list_id}", response_model=TodoListResponse)
async def get_list(
    list_id: int,
    session: SessionContext = Depends(get_current_session),
    list_service: TodoListService = Depends(get_todo_list_service),
):
    return await list_service.get_list(session.user_id, list_id)


@router.put("/{list_id}", response_model=TodoListResponse)
async def update_list(
    list_id: int,
    data: TodoListUpdate,
    session: SessionContext = Depends(get_current_session),
    list_service: TodoListService = Depends(get_todo_list_service),
):
    return await list_service.update_list(session.user_id, list_id, data)


@router.delete("/{list_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_list(
    list_id: int,
    session: SessionContext = Depends(get_current_session),
    list_service: TodoListService = Depends(get_todo_list_service),
):
    await list_service.delete_list(session.user_id, list_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{list_id}/roles", response_model=list[ListRoleResponse])
async def get_list_roles(
    list_id: int,
    session: SessionContext = Depends(get_current_session),
    list_service: TodoListService = Depends(get_todo_list_service),
):
    return await list_service.get_roles(session.user_id, list_id)


@router.put("/{list_id}/roles/{user_id}", response_model=ListRoleResponse)
async def set_list_role(
    list_id: int,
    user_id: int,
    assignment: ListRoleAssignment,
    session: SessionContext = Depends(get_current_session),
    list_service: TodoListService = Depends(get_todo_list_service),
):
    """Give a user the Editor or Viewer role, replacing any role they had."""
    return await list_service.set_role(
        session.user_id, list_id, user_id, assignment.role
    )


@router.delete("/{list_id}/roles/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_list_role(
    list_id: int,
    user_id: int,
    session: SessionContext = Depends(get_current_session),
    list_service: TodoListService = Depends(get_todo_list_service),
):
    await list_service.remove_role(session.user_id, list_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

from datetime import date
from typing import Any

import httpx

from todo_app.config import settings
from todo_app.schemas import (
    TodoListResponse,
    TodoTaskResponse,
    TokenResponse,
)
from todo_app.utils.auth import read_token_user_id
from todo_app.utils.logger import setup_logger
from todo_app.web.token_handler import JwtTokenAuth
from todo_app.web.token_storage import TokenStorageService

logger = setup_logger("web.api_client")


def _drop_none(params: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in params.items() if value is not None}


class TodoApiClient:
    """
    Async client the web front end uses to call the REST API.

    Authenticated calls go through ``JwtTokenAuth``; login and the token
    refresh itself use a plain client.
    """

    def __init__(
        self,
        storage: TokenStorageService | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        user_id: int | None = None,
    ):
        self.storage = storage or TokenStorageService()
        base_url = base_url or settings.api_base_url
        timeout = settings.api_timeout_seconds if timeout is None else timeout

        self._anonymous = httpx.AsyncClient(
            base_url=base_url, timeout=timeout, transport=transport
        )
        self.auth = JwtTokenAuth(self.storage, self._anonymous, user_id=user_id)
        self._client = httpx.AsyncClient(
            base_url=base_url, timeout=timeout, transport=transport, auth=self.auth
        )

    @property
    def user_id(self) -> int | None:
        return self.auth.user_id

    async def __aenter__(self) -> "TodoApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()
        await self._anonymous.aclose()

    async def login(self, username: str, password: str) -> TokenResponse | None:
        """Log in and keep the tokens for later calls. None if credentials are rejected."""
        response = await self._anonymous.post(
            "/api/auth/login", json={"username": username, "password": password}
        )
        if response.status_code in (httpx.codes.BAD_REQUEST, httpx.codes.UNAUTHORIZED):
            logger.warning(f"Login rejected for username '{username}'")
            return None
        response.raise_for_status()

        tokens = TokenResponse.model_validate(response.json())
        user_id = read_token_user_id(tokens.access_token)
        if user_id is None:
            logger.error("Login response carried an access token without a user id")
            return None

        await self.storage.save_token(user_id, tokens.access_token)
        await self.storage.save_refresh_token(user_id, tokens.refresh_token)
        self.auth.user_id = user_id
        return tokens

    async def logout(self) -> bool:
        if self.user_id is None:
            return False
        user_id = self.user_id
        access_token = await self.storage.get_token(user_id) or ""
        response = await self._client.post(
            "/api/auth/logout",
            json={"user_id": str(user_id), "access_token": access_token},
        )
        await self.storage.remove_token(user_id)
        self.auth.user_id = None
        return response.status_code == httpx.codes.OK

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        response = await self._client.get(path, params=_drop_none(params or {}))
        response.raise_for_status()
        return response.json()

    async def _send(self, method: str, path: str, payload: dict[str, Any]) -> Any:
        response = await self._client.request(method, path, json=payload)
        response.raise_for_status()
        return response.json()

    async def get_lists(
        self, page_number: int | None = None, row_count: int | None = None
    ) -> list[TodoListResponse]:
        data = await self._get(
            "/api/todolists", {"page_number": page_number, "row_count": row_count}
        )
        return [TodoListResponse.model_validate(item) for item in data]

    async def create_list(self, title: str, description: str = "") -> TodoListResponse:
        data = await self._send(
            "POST", "/api/todolists", {"title": title, "description": description}
        )
        return TodoListResponse.model_validate(data)

    async def get_tasks(
        self,
        list_id: int,
        task_filter: str = "Active",
        sort_by: str = "DueDate",
        sort_order: str = "asc",
        page_number: int | None = None,
        row_count: int | None = None,
    ) -> list[TodoTaskResponse]:
        data = await self._get(
            f"/api/todolists/{list_id}/tasks",
            {
                "filter": task_filter,
                "sort_by": sort_by,
                "sort_order": sort_order,
                "page_number": page_number,
                "row_count": row_count,
            },
        )
        return [TodoTaskResponse.model_validate(item) for item in data]

    async def get_assigned_tasks(
        self,
        task_filter: str = "Active",
        sort_by: str = "DueDate",
        sort_order: str = "asc",
        page_number: int | None = None,
        row_count: int | None = None,
    ) -> list[TodoTaskResponse]:
        data = await self._get(
            "/api/tasks/assigned",
            {
                "filter": task_filter,
                "sort_by": sort_by,
                "sort_order": sort_order,
                "page_number": page_number,
                "row_count": row_count,
            },
        )
        return [TodoTaskResponse.model_validate(item) for item in data]

    async def search_tasks(
        self,
        title: str | None = None,
        creation_date: date | None = None,
        due_date: date | None = None,
    ) -> list[TodoTaskResponse]:
        data = await self._get(
            "/api/tasks/search",
            {
                "title": title,
                "creation_date": creation_date.isoformat() if creation_date else None,
                "due_date": due_date.isoformat() if due_date else None,
            },
        )
        return [TodoTaskResponse.model_validate(item) for item in data]

    async def update_task_status(self, task_id: int, status_id: int) -> TodoTaskResponse:
        data = await self._send(
            "PATCH", f"/api/tasks/{task_id}/status", {"status_id": status_id}
        )
        return TodoTaskResponse.model_validate(data)

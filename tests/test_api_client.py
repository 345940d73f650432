import json
from datetime import UTC, date, datetime

import httpx
import pytest

from todo_app.utils.auth import create_access_token
from todo_app.web.api_client import TodoApiClient
from todo_app.web.token_storage import TokenStorageService

TASK = {
    "id": 7,
    "title": "Write report",
    "description": None,
    "creation_date": "2030-05-01T09:00:00Z",
    "due_date": "2030-05-03T09:00:00Z",
    "status_id": 2,
    "status_title": "In Progress",
    "owner_user_id": 42,
    "list_id": 3,
}


class RecordingApi:
    def __init__(self):
        self.access_token = create_access_token(42, "alice")
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/api/auth/login":
            credentials = json.loads(request.content)
            if credentials["password"] != "correct-password":
                return httpx.Response(400, json={"detail": "Invalid username or password."})
            return httpx.Response(
                200,
                json={
                    "access_token": self.access_token,
                    "refresh_token": "R" * 44,
                    "token_type": "bearer",
                },
            )
        if path == "/api/auth/logout":
            return httpx.Response(200, json={"message": "Logged out successfully"})
        if path == "/api/todolists" and request.method == "GET":
            return httpx.Response(
                200,
                json=[
                    {
                        "id": 3,
                        "title": "Work",
                        "description": "",
                        "owner_id": 42,
                        "role": "Owner",
                        "active_task_count": 1,
                    }
                ],
            )
        if path in ("/api/tasks/search", "/api/todolists/3/tasks"):
            return httpx.Response(200, json=[TASK])
        if path == "/api/tasks/7/status":
            return httpx.Response(200, json={**TASK, "status_id": 3, "status_title": "Completed"})
        return httpx.Response(404, json={"detail": "Not Found"})


@pytest.fixture
def api() -> RecordingApi:
    return RecordingApi()


@pytest.fixture
def storage(user_handler) -> TokenStorageService:
    return TokenStorageService(user_handler=user_handler)


@pytest.fixture
def api_client(api, storage) -> TodoApiClient:
    return TodoApiClient(
        storage=storage, base_url="http://api.test", transport=httpx.MockTransport(api)
    )


@pytest.mark.asyncio
async def test_login_stores_tokens_and_signs_later_calls(api, api_client, storage):
    async with api_client:
        tokens = await api_client.login("alice", "correct-password")
        lists = await api_client.get_lists(page_number=1, row_count=10)

    assert tokens is not None
    assert api_client.user_id == 42
    assert await storage.get_token(42) == api.access_token
    assert await storage.get_refresh_token(42) == "R" * 44
    assert [item.title for item in lists] == ["Work"]

    list_request = api.requests[-1]
    assert list_request.headers["Authorization"] == f"Bearer {api.access_token}"
    assert list_request.url.params["page_number"] == "1"
    assert list_request.url.params["row_count"] == "10"


@pytest.mark.asyncio
async def test_rejected_login_returns_none(api, api_client, storage):
    async with api_client:
        assert await api_client.login("alice", "wrong") is None

    assert api_client.user_id is None
    assert await storage.get_token(42) is None


@pytest.mark.asyncio
async def test_task_queries_and_status_update(api, api_client):
    async with api_client:
        await api_client.login("alice", "correct-password")
        tasks = await api_client.get_tasks(3, task_filter="All", sort_by="Title", sort_order="desc")
        found = await api_client.search_tasks(title="report", due_date=date(2030, 5, 3))
        updated = await api_client.update_task_status(7, 3)

    list_params = api.requests[1].url.params
    assert list_params["filter"] == "All"
    assert list_params["sort_by"] == "Title"
    assert "page_number" not in list_params

    search_params = api.requests[2].url.params
    assert search_params["due_date"] == "2030-05-03"
    assert "creation_date" not in search_params

    assert tasks[0].due_date == datetime(2030, 5, 3, 9, 0, tzinfo=UTC)
    assert found[0].id == 7
    assert updated.status_title == "Completed"


@pytest.mark.asyncio
async def test_logout_clears_local_access_token(api, api_client, storage):
    async with api_client:
        await api_client.login("alice", "correct-password")
        assert await api_client.logout()

    logout_request = api.requests[-1]
    assert json.loads(logout_request.content) == {
        "user_id": "42",
        "access_token": api.access_token,
    }
    assert await storage.get_token(42) is None
    assert await storage.get_refresh_token(42) == "R" * 44
    assert api_client.user_id is None


@pytest.mark.asyncio
async def test_logout_without_login(api_client, api):
    async with api_client:
        assert not await api_client.logout()

    assert api.requests == []


@pytest.mark.asyncio
async def test_http_errors_surface(api_client):
    async with api_client:
        await api_client.login("alice", "correct-password")
        with pytest.raises(httpx.HTTPStatusError):
            await api_client.get_assigned_tasks()

import pytest

from todo_app.exceptions import EntityNotFoundError, PermissionDeniedError
from todo_app.models.todo_list_role import EDITOR_ROLE_ID, VIEWER_ROLE_ID
from todo_app.services.authorization import (
    Capability,
    ListRole,
    resolve_role,
    role_allows,
)


@pytest.fixture
def users(store):
    return {
        name: store.add_user(name)
        for name in ("owner", "editor", "viewer", "stranger")
    }


@pytest.fixture
def shared_list(store, users):
    todo_list = store.add_list(users["owner"], "Groceries")
    store.share(todo_list, users["editor"], EDITOR_ROLE_ID)
    store.share(todo_list, users["viewer"], VIEWER_ROLE_ID)
    return todo_list


@pytest.mark.parametrize(
    "role,allowed",
    [
        (ListRole.OWNER, set(Capability)),
        (ListRole.EDITOR, {Capability.READ, Capability.WRITE}),
        (ListRole.VIEWER, {Capability.READ}),
        (ListRole.NONE, set()),
    ],
)
def test_capability_matrix(role, allowed):
    assert {c for c in Capability if role_allows(role, c)} == allowed


@pytest.mark.parametrize(
    "value,expected",
    [
        ("Editor", ListRole.EDITOR),
        ("viewer", ListRole.VIEWER),
        (" OWNER ", ListRole.OWNER),
        ("admin", ListRole.NONE),
        ("", ListRole.NONE),
        (None, ListRole.NONE),
    ],
)
def test_role_parsing_is_case_insensitive(value, expected):
    assert ListRole.parse(value) is expected


def test_owner_id_wins_over_a_stored_row():
    assert resolve_role(1, 1, "Viewer") is ListRole.OWNER


def test_stored_owner_row_does_not_grant_ownership():
    assert resolve_role(1, 2, "Owner") is ListRole.NONE


def test_role_ids_match_the_seeded_rows():
    assert ListRole.VIEWER.role_id == VIEWER_ROLE_ID
    assert ListRole.EDITOR.role_id == EDITOR_ROLE_ID
    assert ListRole.OWNER.role_id is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "name,expected",
    [
        ("owner", ListRole.OWNER),
        ("editor", ListRole.EDITOR),
        ("viewer", ListRole.VIEWER),
        ("stranger", ListRole.NONE),
    ],
)
async def test_get_role(authorization, users, shared_list, name, expected):
    todo_list, role = await authorization.get_role(users[name].id, shared_list.id)

    assert todo_list is shared_list
    assert role is expected


@pytest.mark.asyncio
async def test_get_role_for_missing_list(authorization, users):
    todo_list, role = await authorization.get_role(users["owner"].id, 999999)

    assert todo_list is None
    assert role is ListRole.NONE


@pytest.mark.asyncio
async def test_authorize(authorization, users, shared_list):
    assert await authorization.authorize(users["viewer"].id, shared_list.id, Capability.READ)
    assert not await authorization.authorize(
        users["viewer"].id, shared_list.id, Capability.WRITE
    )
    assert await authorization.authorize(users["editor"].id, shared_list.id, Capability.WRITE)
    assert not await authorization.authorize(
        users["editor"].id, shared_list.id, Capability.DELETE
    )
    assert not await authorization.authorize(
        users["stranger"].id, shared_list.id, Capability.READ
    )


@pytest.mark.asyncio
async def test_authorize_task_inherits_list_role(authorization, store, users, shared_list):
    task = store.add_task(shared_list, "Milk")

    assert await authorization.authorize_task(users["viewer"].id, task.id, Capability.READ)
    assert not await authorization.authorize_task(
        users["viewer"].id, task.id, Capability.WRITE
    )
    assert not await authorization.authorize_task(users["owner"].id, 999999, Capability.READ)


@pytest.mark.asyncio
async def test_require_list_hides_lists_without_a_role(authorization, users, shared_list):
    with pytest.raises(EntityNotFoundError):
        await authorization.require_list(users["stranger"].id, shared_list.id, Capability.READ)

    with pytest.raises(EntityNotFoundError):
        await authorization.require_list(users["owner"].id, 999999, Capability.READ)


@pytest.mark.asyncio
async def test_require_list_denies_missing_capability(authorization, users, shared_list):
    with pytest.raises(PermissionDeniedError):
        await authorization.require_list(users["viewer"].id, shared_list.id, Capability.WRITE)

    todo_list, role = await authorization.require_list(
        users["editor"].id, shared_list.id, Capability.WRITE
    )
    assert todo_list is shared_list
    assert role is ListRole.EDITOR


@pytest.mark.asyncio
async def test_require_task(authorization, store, users, shared_list):
    task = store.add_task(shared_list, "Milk")

    found, role = await authorization.require_task(users["owner"].id, task.id, Capability.DELETE)
    assert found is task
    assert role is ListRole.OWNER

    with pytest.raises(EntityNotFoundError) as exc_info:
        await authorization.require_task(users["stranger"].id, task.id, Capability.READ)
    assert exc_info.value.entity_name == "TodoTask"

    with pytest.raises(PermissionDeniedError):
        await authorization.require_task(users["viewer"].id, task.id, Capability.WRITE)

import pytest

from todo_app.exceptions import (
    EntityNotFoundError,
    InvalidRequestError,
    PermissionDeniedError,
)
from todo_app.models.todo_list_role import EDITOR_ROLE_ID, VIEWER_ROLE_ID
from todo_app.schemas import CommentCreate, CommentUpdate, TagCreate
from todo_app.services.comment_service import CommentService
from todo_app.services.tag_service import TagService


@pytest.fixture
def tag_service(tag_handler, task_handler, authorization) -> TagService:
    return TagService(
        tag_handler=tag_handler, task_handler=task_handler, authorization=authorization
    )


@pytest.fixture
def comment_service(comment_handler, authorization) -> CommentService:
    return CommentService(comment_handler=comment_handler, authorization=authorization)


@pytest.fixture
def people(store):
    return {name: store.add_user(name) for name in ("owner", "editor", "viewer", "stranger")}


@pytest.fixture
def task(store, people):
    todo_list = store.add_list(people["owner"], "Shared")
    store.share(todo_list, people["editor"], EDITOR_ROLE_ID)
    store.share(todo_list, people["viewer"], VIEWER_ROLE_ID)
    return store.add_task(todo_list, "Plan trip")


class TestTags:
    @pytest.mark.asyncio
    async def test_tag_and_untag_task(self, tag_service, store, people, task):
        tag = await tag_service.create_tag(people["editor"].id, TagCreate(label="urgent"))

        await tag_service.add_tag_to_task(people["editor"].id, task.id, tag.id)
        tags = await tag_service.get_tags_for_task(people["viewer"].id, task.id)
        assert [t.label for t in tags] == ["urgent"]

        await tag_service.remove_tag_from_task(people["editor"].id, task.id, tag.id)
        assert await tag_service.get_tags_for_task(people["viewer"].id, task.id) == []

    @pytest.mark.asyncio
    async def test_tagging_twice_is_rejected(self, tag_service, store, people, task):
        tag = store.add_tag(people["owner"], "home")
        await tag_service.add_tag_to_task(people["owner"].id, task.id, tag.id)

        with pytest.raises(InvalidRequestError):
            await tag_service.add_tag_to_task(people["owner"].id, task.id, tag.id)

    @pytest.mark.asyncio
    async def test_viewer_cannot_tag_and_stranger_cannot_see(self, tag_service, store, people, task):
        tag = store.add_tag(people["viewer"], "mine")

        with pytest.raises(PermissionDeniedError):
            await tag_service.add_tag_to_task(people["viewer"].id, task.id, tag.id)
        with pytest.raises(EntityNotFoundError):
            await tag_service.get_tags_for_task(people["stranger"].id, task.id)

    @pytest.mark.asyncio
    async def test_unknown_tag_or_missing_link(self, tag_service, store, people, task):
        with pytest.raises(EntityNotFoundError):
            await tag_service.add_tag_to_task(people["owner"].id, task.id, 999999)

        tag = store.add_tag(people["owner"], "unused")
        with pytest.raises(EntityNotFoundError):
            await tag_service.remove_tag_from_task(people["owner"].id, task.id, tag.id)

    @pytest.mark.asyncio
    async def test_get_tags_combines_own_and_visible_tags(self, tag_service, store, people, task):
        shared = store.add_tag(people["owner"], "shared")
        store.task_tags.add((task.id, shared.id))
        own = store.add_tag(people["viewer"], "personal")
        store.add_tag(people["stranger"], "hidden")

        tags = await tag_service.get_tags(people["viewer"].id)

        assert [t.id for t in tags] == [shared.id, own.id]

    @pytest.mark.asyncio
    async def test_tasks_for_tag_are_limited_to_readable_lists(self, tag_service, store, people, task):
        tag = store.add_tag(people["owner"], "trip")
        private_list = store.add_list(people["stranger"], "Private")
        private_task = store.add_task(private_list, "Secret")
        store.task_tags.update({(task.id, tag.id), (private_task.id, tag.id)})

        tasks = await tag_service.get_tasks_for_tag(people["viewer"].id, tag.id)

        assert [t.id for t in tasks] == [task.id]
        with pytest.raises(EntityNotFoundError):
            await tag_service.get_tasks_for_tag(people["viewer"].id, 999999)

    @pytest.mark.asyncio
    async def test_only_author_deletes_tag(self, tag_service, store, people):
        tag = store.add_tag(people["editor"], "work")

        with pytest.raises(PermissionDeniedError):
            await tag_service.delete_tag(people["owner"].id, tag.id)

        await tag_service.delete_tag(people["editor"].id, tag.id)
        assert tag.id not in store.tags


class TestComments:
    @pytest.mark.asyncio
    async def test_editor_comments_viewer_reads(self, comment_service, people, task):
        created = await comment_service.add_comment(
            people["editor"].id, "editor", task.id, CommentCreate(text="Booked flights")
        )
        assert created.author_username == "editor"

        comments = await comment_service.get_comments(people["viewer"].id, task.id)
        assert [c.text for c in comments] == ["Booked flights"]

    @pytest.mark.asyncio
    async def test_viewer_cannot_comment(self, comment_service, people, task):
        with pytest.raises(PermissionDeniedError):
            await comment_service.add_comment(
                people["viewer"].id, "viewer", task.id, CommentCreate(text="hi")
            )

    @pytest.mark.asyncio
    async def test_only_author_edits(self, comment_service, store, people, task):
        comment = store.add_comment(task, people["editor"], "draft")

        with pytest.raises(PermissionDeniedError):
            await comment_service.update_comment(
                people["owner"].id, comment.id, CommentUpdate(text="hijack")
            )

        updated = await comment_service.update_comment(
            people["editor"].id, comment.id, CommentUpdate(text="final")
        )
        assert updated.text == "final"

    @pytest.mark.asyncio
    async def test_owner_deletes_any_comment(self, comment_service, store, people, task):
        comment = store.add_comment(task, people["editor"], "off topic")

        with pytest.raises(PermissionDeniedError):
            await comment_service.delete_comment(people["viewer"].id, comment.id)

        await comment_service.delete_comment(people["owner"].id, comment.id)
        assert comment.id not in store.comments

    @pytest.mark.asyncio
    async def test_comment_hidden_from_stranger(self, comment_service, store, people, task):
        comment = store.add_comment(task, people["editor"], "secret")

        with pytest.raises(EntityNotFoundError) as exc_info:
            await comment_service.delete_comment(people["stranger"].id, comment.id)
        assert exc_info.value.entity_name == "Comment"

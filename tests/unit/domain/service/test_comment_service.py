"""Unit tests for CommentService."""

from datetime import datetime, timedelta
from typing import Any

import pytest

from threadkit.config import CommentSettings
from threadkit.domain.error import (
    AuthorizationError,
    ConfigurationError,
    ErrorCode,
    NotFoundError,
    UnsupportedOperationError,
    ValidationError,
)
from threadkit.domain.model import Comment, CommentDraft
from threadkit.domain.repository import CommentStore
from threadkit.domain.service import CommentService
from threadkit.domain.tree import count_comments
from threadkit.domain.value import CommentState, QueryOptions
from threadkit.persistence.repository.inmemory import InMemoryCommentStore
from tests.harness import create_env_fixture

# Unit test fixture - in-memory store, no database needed
unit_env = create_env_fixture()


class SnakeCaseStore(CommentStore):
    """Store with only the required operations, keyed like SQL columns."""

    def __init__(self) -> None:
        self.rows: dict[str, dict[str, Any]] = {}
        self.queries: list[QueryOptions] = []
        self._clock = datetime(2025, 1, 1)

    async def get_comment(self, comment_id):
        return self.rows.get(comment_id)

    async def get_comments(self, post_id, options):
        self.queries.append(options)
        rows = [r for r in self.rows.values() if r["post_id"] == post_id]
        return rows[: options.limit]

    async def save_comment(self, draft: CommentDraft):
        self._clock += timedelta(seconds=1)
        row = {
            "id": f"row-{len(self.rows) + 1}",
            **draft.model_dump(),
            "created_at": self._clock,
        }
        self.rows[row["id"]] = row
        return row

    async def delete_comment(self, comment_id):
        self.rows[comment_id].update(content="[deleted]", is_deleted=True)


class TestConstruction:
    """Tests for service construction."""

    def test_accepts_complete_store(self):
        """A store with every operation enables every capability."""
        service = CommentService(InMemoryCommentStore())

        assert service.capabilities.update_score
        assert service.capabilities.get_replies
        assert service.capabilities.get_count

    def test_rejects_store_missing_required_operation(self):
        """Construction fails when a required operation is missing."""

        class NoDelete:
            async def get_comment(self, comment_id): ...
            async def get_comments(self, post_id, options): ...
            async def save_comment(self, draft): ...

        with pytest.raises(ConfigurationError, match="delete_comment") as exc:
            CommentService(NoDelete())

        assert exc.value.code == ErrorCode.INVALID_STORE

    def test_rejects_empty_store(self):
        """An object with no operations at all is rejected."""
        with pytest.raises(ConfigurationError):
            CommentService(object())

    def test_detects_missing_optional_operations(self):
        """Optional operations absent from the store are recorded."""
        service = CommentService(SnakeCaseStore())

        assert not service.capabilities.update_score
        assert not service.capabilities.get_replies
        assert not service.capabilities.get_count

    def test_uses_default_limits(self):
        """Defaults are depth 10 and length 10000."""
        service = CommentService(InMemoryCommentStore())

        assert service.settings.max_depth == 10
        assert service.settings.max_length == 10000

    def test_accepts_custom_limits(self):
        """Custom settings are kept."""
        settings = CommentSettings(max_depth=5, max_length=1000)
        service = CommentService(InMemoryCommentStore(), settings)

        assert service.settings.max_depth == 5
        assert service.settings.max_length == 1000


class TestCreate:
    """Tests for create method."""

    @pytest.mark.asyncio
    async def test_create_top_level_comment(self, unit_env):
        """A new comment is a root with zeroed votes."""
        # Arrange
        service = await unit_env.get(CommentService)
        store = await unit_env.get(CommentStore)

        # Act
        comment = await service.create("post_1", "agent_1", "Hello world!")

        # Assert
        assert comment.id
        assert comment.content == "Hello world!"
        assert comment.depth == 0
        assert comment.parent_id is None
        assert comment.is_root
        assert comment.score == 0
        assert comment.upvotes == 0
        assert comment.downvotes == 0
        assert comment.state == CommentState.ACTIVE

        saved = await store.get_comment(comment.id)
        assert saved is not None
        assert saved["postId"] == "post_1"

    @pytest.mark.asyncio
    async def test_create_trims_content(self, unit_env):
        """Surrounding whitespace is removed before storing."""
        service = await unit_env.get(CommentService)

        comment = await service.create("post_1", "agent_1", "  padded \n")

        assert comment.content == "padded"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "post_id, author_id, content, code",
        [
            (None, "agent_1", "Hi", ErrorCode.MISSING_POST),
            ("", "agent_1", "Hi", ErrorCode.MISSING_POST),
            ("post_1", None, "Hi", ErrorCode.MISSING_AUTHOR),
            ("post_1", "agent_1", None, ErrorCode.EMPTY_CONTENT),
            ("post_1", "agent_1", "", ErrorCode.EMPTY_CONTENT),
            ("post_1", "agent_1", "   \t", ErrorCode.EMPTY_CONTENT),
            ("post_1", "agent_1", 42, ErrorCode.EMPTY_CONTENT),
        ],
    )
    async def test_create_rejects_invalid_input(
        self, unit_env, post_id, author_id, content, code
    ):
        """Missing fields and blank content are rejected before storing."""
        service = await unit_env.get(CommentService)
        store = await unit_env.get(CommentStore)

        with pytest.raises(ValidationError) as exc:
            await service.create(post_id, author_id, content)

        assert exc.value.code == code
        assert store.all_records() == []

    @pytest.mark.asyncio
    async def test_create_enforces_max_length_after_trim(self):
        """Length is measured on trimmed content."""
        service = CommentService(InMemoryCommentStore(), CommentSettings(max_length=5))

        ok = await service.create("post_1", "agent_1", "  12345  ")
        with pytest.raises(ValidationError) as exc:
            await service.create("post_1", "agent_1", "123456")

        assert ok.content == "12345"
        assert exc.value.code == ErrorCode.MAX_LENGTH


class TestReply:
    """Tests for reply method."""

    @pytest.mark.asyncio
    async def test_reply_increments_depth(self, unit_env):
        """A reply sits one level below its parent."""
        service = await unit_env.get(CommentService)
        root = await service.create("post_1", "agent_1", "Root")

        reply = await service.reply("post_1", root.id, "agent_2", "Reply")

        assert reply.depth == 1
        assert reply.parent_id == root.id
        assert reply.post_id == "post_1"
        assert not reply.is_root
        assert reply.score == 0

    @pytest.mark.asyncio
    async def test_reply_chain_depth_matches_position(self):
        """The n-th reply in a chain has depth n, up to max_depth."""
        service = CommentService(InMemoryCommentStore(), CommentSettings(max_depth=3))
        current = await service.create("post_1", "agent_1", "Depth 0")

        for n in range(1, 4):
            current = await service.reply("post_1", current.id, "agent_1", f"Depth {n}")
            assert current.depth == n

        with pytest.raises(ValidationError) as exc:
            await service.reply("post_1", current.id, "agent_1", "Depth 4")

        assert exc.value.code == ErrorCode.MAX_DEPTH

    @pytest.mark.asyncio
    async def test_reply_with_unknown_parent_raises_not_found(self, unit_env):
        """Replying to a missing comment fails with PARENT_NOT_FOUND."""
        service = await unit_env.get(CommentService)

        with pytest.raises(NotFoundError) as exc:
            await service.reply("post_1", "comment_404", "agent_1", "Hello?")

        assert exc.value.code == ErrorCode.PARENT_NOT_FOUND
        assert exc.value.identifier == "comment_404"

    @pytest.mark.asyncio
    async def test_reply_to_parent_on_other_post_raises(self, unit_env):
        """Parent and reply must belong to the same post."""
        service = await unit_env.get(CommentService)
        root = await service.create("post_1", "agent_1", "Root")

        with pytest.raises(ValidationError, match="different post") as exc:
            await service.reply("post_2", root.id, "agent_2", "Wrong thread")

        assert exc.value.code == ErrorCode.INVALID_PARENT

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "post_id, parent_id, author_id, content, code",
        [
            (None, "comment_1", "agent_1", "Hi", ErrorCode.MISSING_POST),
            ("post_1", None, "agent_1", "Hi", ErrorCode.MISSING_PARENT),
            ("post_1", "comment_1", "", "Hi", ErrorCode.MISSING_AUTHOR),
            ("post_1", "comment_1", "agent_1", " ", ErrorCode.EMPTY_CONTENT),
        ],
    )
    async def test_reply_rejects_invalid_input(
        self, unit_env, post_id, parent_id, author_id, content, code
    ):
        """Validation errors are raised before anything is stored."""
        service = await unit_env.get(CommentService)
        store = await unit_env.get(CommentStore)
        await service.create("post_1", "agent_1", "Root")

        with pytest.raises(ValidationError) as exc:
            await service.reply(post_id, parent_id, author_id, content)

        assert exc.value.code == code
        assert len(store.all_records()) == 1

    @pytest.mark.asyncio
    async def test_reply_to_deleted_comment_succeeds(self, unit_env):
        """Soft deletion does not block threading."""
        service = await unit_env.get(CommentService)
        root = await service.create("post_1", "agent_1", "Soon gone")
        await service.delete(root.id, "agent_1")

        reply = await service.reply("post_1", root.id, "agent_2", "Still replying")

        assert reply.depth == 1
        assert reply.parent_id == root.id


class TestGetThread:
    """Tests for get_thread method."""

    @pytest.mark.asyncio
    async def test_get_thread_returns_nested_tree(self, unit_env):
        """Replies are nested under their roots."""
        service = await unit_env.get(CommentService)
        c1 = await service.create("post_1", "agent_1", "Comment 1")
        await service.reply("post_1", c1.id, "agent_2", "Reply to 1")
        await service.create("post_1", "agent_3", "Comment 2")

        thread = await service.get_thread("post_1")

        assert len(thread) == 2
        assert count_comments(thread) == 3
        with_reply = next(node for node in thread if node.id == c1.id)
        assert [r.content for r in with_reply.replies] == ["Reply to 1"]

    @pytest.mark.asyncio
    async def test_get_thread_ranks_by_score(self, unit_env):
        """Default ranking puts the highest scored root first."""
        service = await unit_env.get(CommentService)
        low = await service.create("post_1", "agent_1", "Low")
        high = await service.create("post_1", "agent_2", "High")
        await service.update_score(high.id, 5)
        await service.update_score(low.id, 1)

        thread = await service.get_thread("post_1")

        assert [node.id for node in thread] == [high.id, low.id]

    @pytest.mark.asyncio
    async def test_get_thread_ignores_store_ordering(self):
        """Results are re-ranked even if the store returns them unsorted."""
        store = SnakeCaseStore()
        service = CommentService(store)
        first = await service.create("post_1", "agent_1", "First")
        second = await service.create("post_1", "agent_1", "Second")

        newest_first = await service.get_thread("post_1", sort="new")
        oldest_first = await service.get_thread("post_1", sort="old")

        assert [n.id for n in newest_first] == [second.id, first.id]
        assert [n.id for n in oldest_first] == [first.id, second.id]

    @pytest.mark.asyncio
    async def test_get_thread_passes_hints_to_store(self):
        """Sort and pagination hints reach the store."""
        store = SnakeCaseStore()
        service = CommentService(store)

        await service.get_thread("post_1", sort="controversial", limit=10, offset=20)

        assert store.queries[-1].sort.value == "controversial"
        assert store.queries[-1].limit == 10
        assert store.queries[-1].offset == 20

    @pytest.mark.asyncio
    async def test_get_thread_for_empty_post(self, unit_env):
        """A post without comments has an empty thread."""
        service = await unit_env.get(CommentService)

        assert await service.get_thread("post_none") == []


class TestGetComment:
    """Tests for get_comment method."""

    @pytest.mark.asyncio
    async def test_get_comment_returns_stored_comment(self, unit_env):
        """Fetching by id returns the same comment."""
        service = await unit_env.get(CommentService)
        created = await service.create("post_1", "agent_1", "Test")

        fetched = await service.get_comment(created.id)

        assert fetched.id == created.id
        assert fetched.content == "Test"

    @pytest.mark.asyncio
    async def test_get_comment_not_found(self, unit_env):
        """Unknown ids raise NotFoundError."""
        service = await unit_env.get(CommentService)

        with pytest.raises(NotFoundError) as exc:
            await service.get_comment("fake_id")

        assert exc.value.code == ErrorCode.COMMENT_NOT_FOUND

    @pytest.mark.asyncio
    async def test_get_comment_normalizes_snake_case_records(self):
        """Records keyed in snake_case come back as Comment models."""
        service = CommentService(SnakeCaseStore())
        created = await service.create("post_1", "agent_1", "Snake")

        fetched = await service.get_comment(created.id)

        assert isinstance(fetched, Comment)
        assert fetched.post_id == "post_1"
        assert fetched.author_id == "agent_1"
        assert fetched.created_at == datetime(2025, 1, 1, 0, 0, 1)


class TestDelete:
    """Tests for delete method."""

    @pytest.mark.asyncio
    async def test_delete_replaces_content(self, unit_env):
        """Deleting keeps identity and position but blanks the content."""
        service = await unit_env.get(CommentService)
        root = await service.create("post_1", "agent_1", "Root")
        reply = await service.reply("post_1", root.id, "agent_2", "To be deleted")

        await service.delete(reply.id, "agent_2")

        deleted = await service.get_comment(reply.id)
        assert deleted.content == "[deleted]"
        assert deleted.is_deleted
        assert deleted.state == CommentState.DELETED
        assert deleted.id == reply.id
        assert deleted.parent_id == root.id
        assert deleted.depth == 1

    @pytest.mark.asyncio
    async def test_delete_keeps_children_attached(self, unit_env):
        """A deleted comment keeps its replies in the thread."""
        service = await unit_env.get(CommentService)
        root = await service.create("post_1", "agent_1", "Root")
        await service.reply("post_1", root.id, "agent_2", "Child")

        await service.delete(root.id, "agent_1")
        thread = await service.get_thread("post_1")

        assert len(thread) == 1
        assert thread[0].content == "[deleted]"
        assert [r.content for r in thread[0].replies] == ["Child"]

    @pytest.mark.asyncio
    async def test_delete_by_other_agent_is_forbidden(self, unit_env):
        """Only the author may delete a comment."""
        service = await unit_env.get(CommentService)
        comment = await service.create("post_1", "agent_1", "My comment")

        with pytest.raises(AuthorizationError) as exc:
            await service.delete(comment.id, "agent_2")

        assert exc.value.code == ErrorCode.FORBIDDEN
        assert (await service.get_comment(comment.id)).content == "My comment"

    @pytest.mark.asyncio
    async def test_delete_unknown_comment(self, unit_env):
        """Deleting a missing comment raises NotFoundError."""
        service = await unit_env.get(CommentService)

        with pytest.raises(NotFoundError):
            await service.delete("comment_404", "agent_1")

    @pytest.mark.asyncio
    async def test_delete_snake_case_record(self):
        """Authorship is read from snake_case records too."""
        store = SnakeCaseStore()
        service = CommentService(store)
        comment = await service.create("post_1", "agent_1", "Bye")

        with pytest.raises(AuthorizationError):
            await service.delete(comment.id, "agent_9")
        await service.delete(comment.id, "agent_1")

        assert store.rows[comment.id]["content"] == "[deleted]"


class TestGetReplies:
    """Tests for get_replies method."""

    @pytest.mark.asyncio
    async def test_get_replies_uses_store_operation(self, unit_env):
        """Stores with get_replies answer directly."""
        service = await unit_env.get(CommentService)
        root = await service.create("post_1", "agent_1", "Root")
        a = await service.reply("post_1", root.id, "agent_2", "A")
        b = await service.reply("post_1", root.id, "agent_3", "B")
        await service.reply("post_1", a.id, "agent_1", "Grandchild")

        replies = await service.get_replies(root.id, sort="old")

        assert [r.id for r in replies] == [a.id, b.id]
        assert all(isinstance(r, Comment) for r in replies)

    @pytest.mark.asyncio
    async def test_get_replies_falls_back_to_scan(self):
        """Without get_replies, replies are filtered from the post's comments."""
        store = SnakeCaseStore()
        service = CommentService(store)
        root = await service.create("post_1", "agent_1", "Root")
        a = await service.reply("post_1", root.id, "agent_2", "A")
        b = await service.reply("post_1", root.id, "agent_3", "B")
        c = await service.reply("post_1", root.id, "agent_4", "C")
        await service.reply("post_1", a.id, "agent_1", "Grandchild")

        replies = await service.get_replies(root.id, sort="new", limit=2)

        assert [r.id for r in replies] == [c.id, b.id]
        assert store.queries[-1].limit == 1000

    @pytest.mark.asyncio
    async def test_get_replies_fallback_requires_comment(self):
        """The scan fallback fails for unknown comments."""
        service = CommentService(SnakeCaseStore())

        with pytest.raises(NotFoundError):
            await service.get_replies("missing")


class TestGetCount:
    """Tests for get_count method."""

    @pytest.mark.asyncio
    async def test_get_count_uses_store_operation(self, unit_env):
        """Stores with get_count answer directly."""
        service = await unit_env.get(CommentService)
        root = await service.create("post_1", "agent_1", "Root")
        await service.reply("post_1", root.id, "agent_2", "Reply")
        await service.create("post_2", "agent_1", "Elsewhere")

        assert await service.get_count("post_1") == 2

    @pytest.mark.asyncio
    async def test_get_count_falls_back_to_scan(self):
        """Without get_count, the post's comments are counted."""
        service = CommentService(SnakeCaseStore())
        await service.create("post_1", "agent_1", "One")
        await service.create("post_1", "agent_1", "Two")

        assert await service.get_count("post_1") == 2

    @pytest.mark.asyncio
    async def test_get_count_fallback_is_capped(self):
        """The scan fallback under-counts beyond its bound."""
        service = CommentService(SnakeCaseStore(), CommentSettings(count_scan_limit=3))
        for i in range(5):
            await service.create("post_1", "agent_1", f"Comment {i}")

        assert await service.get_count("post_1") == 3


class TestUpdateScore:
    """Tests for update_score method."""

    @pytest.mark.asyncio
    async def test_update_score_returns_store_score(self, unit_env):
        """Deltas accumulate and the new score is returned."""
        service = await unit_env.get(CommentService)
        comment = await service.create("post_1", "agent_1", "Vote on me")

        assert await service.update_score(comment.id, 3) == 3
        assert await service.update_score(comment.id, -5) == -2
        assert (await service.get_comment(comment.id)).score == -2

    @pytest.mark.asyncio
    async def test_update_score_unknown_comment(self, unit_env):
        """Store failures propagate unchanged."""
        service = await unit_env.get(CommentService)

        with pytest.raises(NotFoundError):
            await service.update_score("comment_404", 1)

    @pytest.mark.asyncio
    async def test_update_score_unsupported(self):
        """Stores without update_score raise UnsupportedOperationError."""
        service = CommentService(SnakeCaseStore())
        comment = await service.create("post_1", "agent_1", "No votes here")

        with pytest.raises(UnsupportedOperationError) as exc:
            await service.update_score(comment.id, 1)

        assert exc.value.code == ErrorCode.UNSUPPORTED_OPERATION


class TestIntegerIds:
    """Tests for callers passing numeric ids."""

    @pytest.mark.asyncio
    async def test_integer_ids_match_stored_ids(self, unit_env):
        """Numeric post and author ids behave like their string form."""
        # Arrange
        service = await unit_env.get(CommentService)
        root = await service.create(1, 7, "Hello")

        # Act
        reply = await service.reply(1, root.id, 8, "Hi back")
        thread = await service.get_thread(1)

        # Assert
        assert root.post_id == "1"
        assert root.author_id == "7"
        assert reply.depth == 1
        assert count_comments(thread) == 2
        assert await service.get_count(1) == 2

    @pytest.mark.asyncio
    async def test_author_with_integer_id_can_delete(self, unit_env):
        """Authorship is checked against the normalized id."""
        service = await unit_env.get(CommentService)
        comment = await service.create(1, 7, "Mine")

        with pytest.raises(AuthorizationError):
            await service.delete(comment.id, 8)
        await service.delete(comment.id, 7)

        assert (await service.get_comment(comment.id)).is_deleted

    @pytest.mark.asyncio
    async def test_scan_fallback_with_integer_post(self):
        """The scan fallbacks see numeric post ids as stored strings."""
        service = CommentService(SnakeCaseStore())
        root = await service.create(3, 7, "Root")
        await service.reply(3, root.id, 8, "Child")

        replies = await service.get_replies(root.id)

        assert [r.content for r in replies] == ["Child"]
        assert await service.get_count(3) == 2


class TestNegativeLimits:
    """Tests for out-of-range pagination arguments."""

    @pytest.mark.asyncio
    async def test_get_thread_negative_limit_returns_nothing(self, unit_env):
        """Negative limit and offset are treated as zero."""
        service = await unit_env.get(CommentService)
        await service.create("post_1", "agent_1", "Present")

        assert await service.get_thread("post_1", limit=-1) == []
        assert len(await service.get_thread("post_1", offset=-5)) == 1

    @pytest.mark.asyncio
    async def test_get_replies_negative_limit_returns_nothing(self, unit_env):
        """Native replies with a negative limit come back empty."""
        service = await unit_env.get(CommentService)
        root = await service.create("post_1", "agent_1", "Root")
        await service.reply("post_1", root.id, "agent_2", "Child")

        assert await service.get_replies(root.id, limit=-3) == []

    @pytest.mark.asyncio
    async def test_scan_replies_negative_limit_returns_nothing(self):
        """The scan fallback does not slice from the end."""
        service = CommentService(SnakeCaseStore())
        root = await service.create("post_1", "agent_1", "Root")
        await service.reply("post_1", root.id, "agent_2", "A")
        await service.reply("post_1", root.id, "agent_3", "B")

        assert await service.get_replies(root.id, limit=-1) == []

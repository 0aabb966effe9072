"""In-memory comment store for testing and embedding."""

from datetime import datetime
from typing import Any, Optional

from threadkit.domain.error import NotFoundError
from threadkit.domain.model import Comment, CommentDraft
from threadkit.domain.ranking import sort_comments
from threadkit.domain.repository.comment import CommentStore
from threadkit.domain.value import DELETED_CONTENT, CommentId, PostId, QueryOptions


class InMemoryCommentStore(CommentStore):
    """In-memory implementation of CommentStore.

    Records are kept as camelCase dicts and ids are sequential
    (``comment_1``, ``comment_2``, ...). Implements every optional operation.
    """

    def __init__(self) -> None:
        self._comments: dict[CommentId, dict[str, Any]] = {}
        self._counter = 0

    async def get_comment(self, comment_id: CommentId) -> Optional[dict[str, Any]]:
        """Find a comment by ID."""
        record = self._comments.get(comment_id)
        return dict(record) if record is not None else None

    async def get_comments(
        self, post_id: PostId, options: QueryOptions
    ) -> list[dict[str, Any]]:
        """Find comments for a post, ranked and paginated."""
        records = [r for r in self._comments.values() if r["postId"] == post_id]
        ranked = self._rank(records, options)
        return ranked[options.offset : options.offset + options.limit]

    async def save_comment(self, draft: CommentDraft) -> dict[str, Any]:
        """Assign an id and timestamp and store the comment."""
        self._counter += 1
        comment_id = CommentId(f"comment_{self._counter}")
        record = {
            "id": comment_id,
            **draft.model_dump(by_alias=True),
            "createdAt": datetime.now(),
        }
        self._comments[comment_id] = record
        return dict(record)

    async def delete_comment(self, comment_id: CommentId) -> None:
        """Soft delete a comment in place."""
        record = self._comments.get(comment_id)
        if record is not None:
            record["content"] = DELETED_CONTENT
            record["isDeleted"] = True

    async def update_score(self, comment_id: CommentId, delta: int) -> int:
        """Add delta to a comment's score."""
        record = self._comments.get(comment_id)
        if record is None:
            raise NotFoundError("Comment", str(comment_id))
        record["score"] = record.get("score", 0) + delta
        return record["score"]

    async def get_replies(
        self, parent_id: CommentId, options: QueryOptions
    ) -> list[dict[str, Any]]:
        """Find direct replies of a comment."""
        records = [r for r in self._comments.values() if r["parentId"] == parent_id]
        return self._rank(records, options)[: options.limit]

    async def get_count(self, post_id: PostId) -> int:
        """Count comments on a post, deleted ones included."""
        return sum(1 for r in self._comments.values() if r["postId"] == post_id)

    async def clear(self) -> None:
        """Drop every comment and restart id numbering."""
        self._comments.clear()
        self._counter = 0

    def all_records(self) -> list[dict[str, Any]]:
        """Every stored record, in insertion order."""
        return [dict(record) for record in self._comments.values()]

    @staticmethod
    def _rank(records: list[dict[str, Any]], options: QueryOptions) -> list[dict[str, Any]]:
        by_id = {record["id"]: record for record in records}
        ranked = sort_comments(map(Comment.from_record, records), options.sort)
        return [dict(by_id[comment.id]) for comment in ranked]

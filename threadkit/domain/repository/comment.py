"""Comment store interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from threadkit.domain.model import CommentDraft, CommentRecord
from threadkit.domain.value import CommentId, PostId, QueryOptions

REQUIRED_OPERATIONS = ("get_comment", "get_comments", "save_comment", "delete_comment")
OPTIONAL_OPERATIONS = ("update_score", "get_replies", "get_count")


class CommentStore(ABC):
    """Storage contract for comments.

    Defines the operations the comment service needs from a backend.
    Implementations live in the persistence layer.

    Records may be returned as Comment instances or as mappings keyed in
    camelCase or snake_case; the service normalizes them.

    Stores may additionally implement any of these optional operations,
    which the service detects and uses when present:

        async def update_score(self, comment_id, delta) -> int
            Atomically add ``delta`` to the score and return the new score.

        async def get_replies(self, parent_id, options) -> Sequence[CommentRecord]
            Direct replies of a comment, ranked by ``options.sort`` and
            truncated to ``options.limit``.

        async def get_count(self, post_id) -> int
            Number of comments on a post.
    """

    @abstractmethod
    async def get_comment(self, comment_id: CommentId) -> Optional[CommentRecord]:
        """Find a comment by ID.

        Args:
            comment_id: The comment's unique identifier

        Returns:
            The comment if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_comments(
        self, post_id: PostId, options: QueryOptions
    ) -> Sequence[CommentRecord]:
        """Find comments for a post.

        Args:
            post_id: The post ID
            options: Sort hint and pagination (the sort is advisory)

        Returns:
            Comments on the post, in any order
        """
        pass

    @abstractmethod
    async def save_comment(self, draft: CommentDraft) -> CommentRecord:
        """Store a new comment.

        Args:
            draft: Comment fields without identity

        Returns:
            The stored comment with ``id`` and ``created_at`` assigned
        """
        pass

    @abstractmethod
    async def delete_comment(self, comment_id: CommentId) -> None:
        """Soft delete a comment.

        Must replace the content with ``[deleted]`` and set the deletion
        flag, leaving id, post, parent and depth untouched.

        Args:
            comment_id: The comment ID to delete
        """
        pass


@dataclass(frozen=True)
class StoreCapabilities:
    """Optional operations a store provides."""

    update_score: bool = False
    get_replies: bool = False
    get_count: bool = False

    @classmethod
    def detect(cls, store: Any) -> "StoreCapabilities":
        """Inspect a store for callable optional operations."""
        return cls(
            **{name: callable(getattr(store, name, None)) for name in OPTIONAL_OPERATIONS}
        )


def missing_operations(store: Any) -> list[str]:
    """List the required operations a store does not implement."""
    return [
        name for name in REQUIRED_OPERATIONS if not callable(getattr(store, name, None))
    ]

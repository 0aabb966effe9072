"""Comment entity.

Comments are threaded replies on posts. Threading is stored as a parent
pointer plus a precomputed depth; nested trees are only assembled on read.
"""

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Optional, Union

from pydantic import Field

from threadkit.domain.model.common import DomainModel
from threadkit.domain.value import AuthorId, CommentId, CommentState, PostId

CommentRecord = Union["Comment", Mapping[str, Any]]


class Comment(DomainModel):
    """Comment entity.

    Represents a comment on a post or a reply to another comment.

    Threading is managed through:
    - parent_id: Direct parent comment (None for top-level)
    - depth: Nesting level (0 for top-level, increments with each reply)

    Score is net votes maintained by an external voting subsystem and is not
    required to equal upvotes - downvotes.
    """

    id: CommentId
    post_id: PostId
    author_id: AuthorId
    content: str
    parent_id: Optional[CommentId] = None
    depth: int = Field(default=0, ge=0)
    score: int = 0
    upvotes: int = Field(default=0, ge=0)
    downvotes: int = Field(default=0, ge=0)
    is_deleted: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def state(self) -> CommentState:
        """Lifecycle state derived from the deletion flag."""
        return CommentState.DELETED if self.is_deleted else CommentState.ACTIVE

    @property
    def is_root(self) -> bool:
        """Whether this is a top-level comment."""
        return self.parent_id is None

    @classmethod
    def from_record(cls, record: CommentRecord) -> "Comment":
        """Normalize a store record into a Comment.

        Stores may hand back Comment instances or plain mappings whose keys
        use either camelCase (``postId``) or snake_case (``post_id``).

        Args:
            record: Record returned by a comment store

        Returns:
            Validated comment
        """
        if isinstance(record, cls):
            return record
        if isinstance(record, DomainModel):
            return cls.model_validate(record.model_dump())
        return cls.model_validate(dict(record))


class CommentDraft(DomainModel):
    """A comment that has not been stored yet.

    The store assigns ``id`` and ``created_at`` when saving.
    """

    post_id: PostId
    author_id: AuthorId
    content: str
    parent_id: Optional[CommentId] = None
    depth: int = Field(default=0, ge=0)
    score: int = 0
    upvotes: int = Field(default=0, ge=0)
    downvotes: int = Field(default=0, ge=0)
    is_deleted: bool = False


class CommentNode(Comment):
    """A comment placed in an assembled reply tree."""

    replies: list["CommentNode"] = Field(default_factory=list)

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentNode":
        """Wrap a flat comment in a node with no replies."""
        fields = {k: v for k, v in comment if k != "replies"}
        return cls.model_construct(**fields, replies=[])

    def to_comment(self) -> Comment:
        """Strip the replies and return the flat comment."""
        return Comment.model_construct(
            **{k: v for k, v in self if k != "replies"}
        )

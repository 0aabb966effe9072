"""Domain value objects for threadkit."""

from threadkit.domain.value.identifiers import (
    AuthorId,
    CommentId,
    PostId,
    normalize_id,
)
from threadkit.domain.value.types import (
    DELETED_CONTENT,
    CommentState,
    QueryOptions,
    SortOrder,
)

__all__ = [
    # Identifiers
    "AuthorId",
    "CommentId",
    "PostId",
    "normalize_id",
    # Types
    "CommentState",
    "DELETED_CONTENT",
    "QueryOptions",
    "SortOrder",
]

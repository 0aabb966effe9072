"""Domain model entities for threadkit."""

from threadkit.domain.model.comment import (
    Comment,
    CommentDraft,
    CommentNode,
    CommentRecord,
)

__all__ = [
    "Comment",
    "CommentDraft",
    "CommentNode",
    "CommentRecord",
]

"""Store implementations."""

from threadkit.persistence.repository.comment import SqlCommentStore

__all__ = [
    "SqlCommentStore",
]

"""In-memory store implementations."""

from .comment import InMemoryCommentStore

__all__ = [
    "InMemoryCommentStore",
]

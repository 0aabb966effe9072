"""Domain value objects for threadkit."""

from enum import Enum

from pydantic import Field

from threadkit.domain.value.common import ValueObject

# Content written over a soft-deleted comment
DELETED_CONTENT = "[deleted]"


class SortOrder(str, Enum):
    """Ranking policy for comment listings."""

    TOP = "top"  # score DESC, newer first on ties
    NEW = "new"  # created_at DESC
    OLD = "old"  # created_at ASC
    CONTROVERSIAL = "controversial"  # controversy DESC

    @classmethod
    def parse(cls, value: "SortOrder | str | None") -> "SortOrder":
        """Resolve a policy name, falling back to TOP for unknown names."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.TOP


class CommentState(str, Enum):
    """Lifecycle state of a comment.

    Stored as the boolean ``is_deleted`` flag; there is no way back from
    DELETED.
    """

    ACTIVE = "active"
    DELETED = "deleted"


class QueryOptions(ValueObject):
    """Listing hints passed to the comment store.

    The sort order is advisory; the engine re-ranks whatever comes back.
    """

    sort: SortOrder = SortOrder.TOP
    limit: int = Field(default=100, ge=0)
    offset: int = Field(default=0, ge=0)

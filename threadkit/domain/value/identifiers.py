"""Strongly typed identifiers for threadkit domain entities.

Identifiers are opaque strings chosen by the storage layer (sequential keys,
UUIDs, database row ids). NewType keeps comment, post and author ids from
being mixed up.
"""

from numbers import Number
from typing import Any, NewType

CommentId = NewType("CommentId", str)
PostId = NewType("PostId", str)
AuthorId = NewType("AuthorId", str)


def normalize_id(value: Any) -> Any:
    """Bring a caller-supplied id into the string form ids are stored in.

    Numeric ids (integer primary keys) become strings, matching how stored
    records are validated. ``None`` and strings pass through unchanged.
    """
    if isinstance(value, Number) and not isinstance(value, bool):
        return str(value)
    return value

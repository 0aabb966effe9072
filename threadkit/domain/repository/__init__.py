"""Repository interfaces for threadkit domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from threadkit.domain.repository.comment import (
    OPTIONAL_OPERATIONS,
    REQUIRED_OPERATIONS,
    CommentStore,
    StoreCapabilities,
    missing_operations,
)

__all__ = [
    "CommentStore",
    "OPTIONAL_OPERATIONS",
    "REQUIRED_OPERATIONS",
    "StoreCapabilities",
    "missing_operations",
]

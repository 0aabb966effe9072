"""Mappers between database rows and comment records.

Rows go back to the service as plain snake_case mappings; the service's
record normalization turns them into domain models.
"""

from datetime import datetime
from typing import Any, Dict

from threadkit.domain.model import CommentDraft
from threadkit.domain.value import CommentId


def draft_to_row(
    draft: CommentDraft, comment_id: CommentId, created_at: datetime
) -> Dict[str, Any]:
    """Convert a comment draft to a database row for insertion.

    Args:
        draft: Comment draft
        comment_id: Identifier assigned to the new row
        created_at: Creation timestamp

    Returns:
        Dict suitable for database insertion
    """
    return {"id": comment_id, **draft.model_dump(), "created_at": created_at}


def row_to_record(row: Any) -> Dict[str, Any]:
    """Convert a result row to a snake_case record.

    Args:
        row: SQLAlchemy result row

    Returns:
        Column name to value mapping
    """
    return dict(row._mapping)

"""SQL implementation of the comment store."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import uuid4

from sqlalchemy import asc, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from threadkit.domain.error import NotFoundError
from threadkit.domain.model import CommentDraft
from threadkit.domain.repository import CommentStore
from threadkit.domain.value import (
    DELETED_CONTENT,
    CommentId,
    PostId,
    QueryOptions,
    SortOrder,
)
from threadkit.persistence.mappers import draft_to_row, row_to_record
from threadkit.persistence.tables import comments_table

_c = comments_table.c

# ORDER BY clauses mirroring the ranking policies
_ORDERING = {
    SortOrder.TOP: (desc(_c.score), desc(_c.created_at)),
    SortOrder.NEW: (desc(_c.created_at),),
    SortOrder.OLD: (asc(_c.created_at),),
    SortOrder.CONTROVERSIAL: (
        desc((_c.upvotes + _c.downvotes) - func.abs(_c.upvotes - _c.downvotes)),
    ),
}


class SqlCommentStore(CommentStore):
    """SQLAlchemy implementation of CommentStore.

    Returns rows as snake_case mappings. Implements every optional operation.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize store with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def get_comment(self, comment_id: CommentId) -> Optional[Dict[str, Any]]:
        """Find a comment by ID."""
        stmt = select(comments_table).where(_c.id == comment_id)
        result = await self.session.execute(stmt)
        row = result.fetchone()
        return row_to_record(row) if row else None

    async def get_comments(
        self, post_id: PostId, options: QueryOptions
    ) -> List[Dict[str, Any]]:
        """Find comments for a post, ordered by the sort hint."""
        stmt = (
            select(comments_table)
            .where(_c.post_id == post_id)
            .order_by(*_ORDERING[options.sort])
            .limit(options.limit)
            .offset(options.offset)
        )
        result = await self.session.execute(stmt)
        return [row_to_record(row) for row in result.fetchall()]

    async def save_comment(self, draft: CommentDraft) -> Dict[str, Any]:
        """Insert a new comment with a UUID and creation time."""
        comment_id = CommentId(str(uuid4()))
        stmt = comments_table.insert().values(
            **draft_to_row(draft, comment_id, datetime.now())
        )
        await self.session.execute(stmt)
        await self.session.flush()

        saved = await self.get_comment(comment_id)
        if saved is None:
            raise NotFoundError("Comment", str(comment_id))
        return saved

    async def delete_comment(self, comment_id: CommentId) -> None:
        """Soft delete a comment."""
        stmt = (
            comments_table.update()
            .where(_c.id == comment_id)
            .values(content=DELETED_CONTENT, is_deleted=True)
        )
        await self.session.execute(stmt)
        await self.session.flush()

    async def update_score(self, comment_id: CommentId, delta: int) -> int:
        """Atomically add delta to the score."""
        stmt = (
            comments_table.update()
            .where(_c.id == comment_id)
            .values(score=_c.score + delta)
            .returning(_c.score)
        )
        result = await self.session.execute(stmt)
        score = result.scalar_one_or_none()
        if score is None:
            raise NotFoundError("Comment", str(comment_id))

        await self.session.flush()
        return score

    async def get_replies(
        self, parent_id: CommentId, options: QueryOptions
    ) -> List[Dict[str, Any]]:
        """Find direct replies of a comment."""
        stmt = (
            select(comments_table)
            .where(_c.parent_id == parent_id)
            .order_by(*_ORDERING[options.sort])
            .limit(options.limit)
        )
        result = await self.session.execute(stmt)
        return [row_to_record(row) for row in result.fetchall()]

    async def get_count(self, post_id: PostId) -> int:
        """Count comments on a post, deleted ones included."""
        stmt = select(func.count()).select_from(comments_table).where(_c.post_id == post_id)
        result = await self.session.execute(stmt)
        return result.scalar() or 0

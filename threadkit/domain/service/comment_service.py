"""Comment domain service."""

from typing import Any

import logfire

from threadkit.config import CommentSettings
from threadkit.domain.error import (
    AuthorizationError,
    ConfigurationError,
    ErrorCode,
    NotFoundError,
    UnsupportedOperationError,
    ValidationError,
)
from threadkit.domain.model import Comment, CommentDraft, CommentNode
from threadkit.domain.ranking import sort_comments
from threadkit.domain.repository import (
    CommentStore,
    StoreCapabilities,
    missing_operations,
)
from threadkit.domain.tree import build_tree, count_comments
from threadkit.domain.value import (
    AuthorId,
    CommentId,
    PostId,
    QueryOptions,
    SortOrder,
    normalize_id,
)

from .base import Service


class CommentService(Service):
    """Domain service for threaded comments.

    Validates new comments and replies, enforces depth and length limits,
    and shapes stored comments into ranked reply trees. Holds no mutable
    state of its own, so one instance can serve concurrent callers; write
    atomicity is left to the store.
    """

    def __init__(
        self,
        comment_store: CommentStore,
        settings: CommentSettings | None = None,
    ) -> None:
        """Initialize comment service.

        Args:
            comment_store: Comment store (any object with the required operations)
            settings: Depth/length limits and fallback scan bounds

        Raises:
            ConfigurationError: If the store lacks a required operation
        """
        missing = missing_operations(comment_store)
        if missing:
            logfire.error(
                "Comment store missing required operations",
                store=type(comment_store).__name__,
                missing=missing,
            )
            raise ConfigurationError(f"Comment store must implement {missing[0]}()")

        self.comment_store = comment_store
        self.settings = settings or CommentSettings()
        self.capabilities = StoreCapabilities.detect(comment_store)

    async def create(self, post_id: PostId, author_id: AuthorId, content: Any) -> Comment:
        """Create a top-level comment on a post.

        Args:
            post_id: Post ID
            author_id: Author ID (already authenticated)
            content: Comment text, trimmed before storing

        Returns:
            Stored comment (id and created_at assigned by the store)

        Raises:
            ValidationError: MISSING_POST, MISSING_AUTHOR, EMPTY_CONTENT, MAX_LENGTH
        """
        with logfire.span(
            "comment_service.create",
            post_id=str(post_id),
            author_id=str(author_id),
        ):
            self._require(post_id, ErrorCode.MISSING_POST, "Post ID is required")
            self._require(author_id, ErrorCode.MISSING_AUTHOR, "Author ID is required")
            text = self._validate_content(content)
            post_id, author_id = normalize_id(post_id), normalize_id(author_id)

            saved = await self._save(
                CommentDraft(
                    post_id=post_id,
                    author_id=author_id,
                    content=text,
                    parent_id=None,
                    depth=0,
                )
            )
            logfire.info(
                "Comment created",
                comment_id=str(saved.id),
                post_id=str(post_id),
                depth=0,
            )
            return saved

    async def reply(
        self,
        post_id: PostId,
        parent_id: CommentId,
        author_id: AuthorId,
        content: Any,
    ) -> Comment:
        """Reply to an existing comment.

        Replying to a soft-deleted comment is allowed; deletion keeps the
        comment in the thread.

        Args:
            post_id: Post ID (must match the parent's post)
            parent_id: Comment being replied to
            author_id: Author ID (already authenticated)
            content: Reply text, trimmed before storing

        Returns:
            Stored reply with depth = parent depth + 1

        Raises:
            ValidationError: MISSING_POST, MISSING_PARENT, MISSING_AUTHOR,
                EMPTY_CONTENT, MAX_LENGTH, INVALID_PARENT, MAX_DEPTH
            NotFoundError: PARENT_NOT_FOUND
        """
        with logfire.span(
            "comment_service.reply",
            post_id=str(post_id),
            parent_id=str(parent_id),
            author_id=str(author_id),
        ):
            self._require(post_id, ErrorCode.MISSING_POST, "Post ID is required")
            self._require(
                parent_id, ErrorCode.MISSING_PARENT, "Parent ID is required for replies"
            )
            self._require(author_id, ErrorCode.MISSING_AUTHOR, "Author ID is required")
            text = self._validate_content(content)
            post_id = normalize_id(post_id)
            parent_id = normalize_id(parent_id)
            author_id = normalize_id(author_id)

            parent = await self._fetch(parent_id)
            if parent is None:
                logfire.warn("Parent comment not found", parent_id=str(parent_id))
                raise NotFoundError(
                    "Parent comment", str(parent_id), ErrorCode.PARENT_NOT_FOUND
                )

            if parent.post_id != post_id:
                logfire.warn(
                    "Parent comment does not belong to post",
                    parent_id=str(parent_id),
                    parent_post_id=str(parent.post_id),
                    target_post_id=str(post_id),
                )
                raise ValidationError(
                    "Parent comment belongs to different post",
                    ErrorCode.INVALID_PARENT,
                )

            depth = parent.depth + 1
            if depth > self.settings.max_depth:
                logfire.warn(
                    "Reply exceeds maximum depth",
                    parent_id=str(parent_id),
                    depth=depth,
                    max_depth=self.settings.max_depth,
                )
                raise ValidationError(
                    f"Maximum comment depth of {self.settings.max_depth} exceeded",
                    ErrorCode.MAX_DEPTH,
                )

            saved = await self._save(
                CommentDraft(
                    post_id=post_id,
                    author_id=author_id,
                    content=text,
                    parent_id=parent_id,
                    depth=depth,
                )
            )
            logfire.info(
                "Reply created",
                comment_id=str(saved.id),
                parent_id=str(parent_id),
                post_id=str(post_id),
                depth=depth,
            )
            return saved

    async def get_thread(
        self,
        post_id: PostId,
        sort: SortOrder | str = SortOrder.TOP,
        limit: int = 100,
        offset: int = 0,
    ) -> list[CommentNode]:
        """Get the ranked reply tree for a post.

        The store's ordering is treated as a hint only: results are always
        re-ranked here before nesting.

        Args:
            post_id: Post ID
            sort: Ranking policy (unknown names rank as top)
            limit: Maximum comments fetched from the store (negative means none)
            offset: Comments to skip in the store listing

        Returns:
            Root comments with replies nested under their parents
        """
        post_id = normalize_id(post_id)
        order = SortOrder.parse(sort)
        limit, offset = max(limit, 0), max(offset, 0)
        with logfire.span(
            "comment_service.get_thread",
            post_id=str(post_id),
            sort=order.value,
            limit=limit,
            offset=offset,
        ):
            records = await self.comment_store.get_comments(
                post_id, QueryOptions(sort=order, limit=limit, offset=offset)
            )
            comments = [Comment.from_record(record) for record in records]
            tree = build_tree(sort_comments(comments, order))
            logfire.info(
                "Thread assembled",
                post_id=str(post_id),
                count=count_comments(tree),
                roots=len(tree),
            )
            return tree

    async def get_comment(self, comment_id: CommentId) -> Comment:
        """Get a comment by ID.

        Args:
            comment_id: Comment ID

        Returns:
            The comment

        Raises:
            NotFoundError: If the comment does not exist
        """
        comment_id = normalize_id(comment_id)
        with logfire.span("comment_service.get_comment", comment_id=str(comment_id)):
            return await self._get_existing(comment_id)

    async def delete(self, comment_id: CommentId, agent_id: AuthorId) -> None:
        """Soft delete a comment on behalf of its author.

        The store blanks the content and flags the comment; its position in
        the thread and its replies are left alone.

        Args:
            comment_id: Comment ID
            agent_id: Author requesting the deletion

        Raises:
            NotFoundError: If the comment does not exist
            AuthorizationError: If ``agent_id`` is not the author
        """
        comment_id, agent_id = normalize_id(comment_id), normalize_id(agent_id)
        with logfire.span(
            "comment_service.delete",
            comment_id=str(comment_id),
            agent_id=str(agent_id),
        ):
            comment = await self._get_existing(comment_id)

            if comment.author_id != agent_id:
                logfire.warn(
                    "Delete attempted by non-author",
                    comment_id=str(comment_id),
                    author_id=str(comment.author_id),
                    agent_id=str(agent_id),
                )
                raise AuthorizationError(
                    "delete", "comment", str(comment_id), str(agent_id)
                )

            await self.comment_store.delete_comment(comment_id)
            logfire.info(
                "Comment deleted",
                comment_id=str(comment_id),
                previous_state=comment.state.value,
            )

    async def get_replies(
        self,
        comment_id: CommentId,
        sort: SortOrder | str = SortOrder.TOP,
        limit: int = 25,
    ) -> list[Comment]:
        """Get the direct replies to a comment.

        Uses the store's own ``get_replies`` when it has one. Otherwise scans
        up to ``reply_scan_limit`` comments of the parent's post.

        Args:
            comment_id: Parent comment ID
            sort: Ranking policy
            limit: Maximum replies returned (negative means none)

        Returns:
            Ranked direct replies

        Raises:
            NotFoundError: If the scan fallback cannot find the comment
        """
        comment_id = normalize_id(comment_id)
        order = SortOrder.parse(sort)
        limit = max(limit, 0)
        if self.capabilities.get_replies:
            strategy, lookup = "store", self._replies_from_store
        else:
            strategy, lookup = "scan", self._replies_from_scan

        with logfire.span(
            "comment_service.get_replies",
            comment_id=str(comment_id),
            sort=order.value,
            limit=limit,
            strategy=strategy,
        ):
            replies = await lookup(comment_id, order, limit)
            logfire.info(
                "Replies retrieved", comment_id=str(comment_id), count=len(replies)
            )
            return replies

    async def get_count(self, post_id: PostId) -> int:
        """Count the comments on a post.

        Without a store-side count this is the size of a scan capped at
        ``count_scan_limit``, so larger threads are under-counted.

        Args:
            post_id: Post ID

        Returns:
            Number of comments
        """
        post_id = normalize_id(post_id)
        if self.capabilities.get_count:
            strategy, counter = "store", self._count_from_store
        else:
            strategy, counter = "scan", self._count_from_scan

        with logfire.span(
            "comment_service.get_count", post_id=str(post_id), strategy=strategy
        ):
            return await counter(post_id)

    async def update_score(self, comment_id: CommentId, delta: int) -> int:
        """Add ``delta`` to a comment's score.

        The store performs the update atomically; the returned score is
        passed through as reported.

        Args:
            comment_id: Comment ID
            delta: Score change (may be negative)

        Returns:
            New score

        Raises:
            UnsupportedOperationError: If the store has no update_score
        """
        comment_id = normalize_id(comment_id)
        with logfire.span(
            "comment_service.update_score",
            comment_id=str(comment_id),
            delta=delta,
        ):
            if not self.capabilities.update_score:
                logfire.warn(
                    "Score update not supported by store",
                    store=type(self.comment_store).__name__,
                )
                raise UnsupportedOperationError("update_score")

            score = await self.comment_store.update_score(comment_id, delta)
            logfire.info("Comment score updated", comment_id=str(comment_id), score=score)
            return score

    async def _replies_from_store(
        self, comment_id: CommentId, order: SortOrder, limit: int
    ) -> list[Comment]:
        records = await self.comment_store.get_replies(
            comment_id, QueryOptions(sort=order, limit=limit)
        )
        return [Comment.from_record(record) for record in records]

    async def _replies_from_scan(
        self, comment_id: CommentId, order: SortOrder, limit: int
    ) -> list[Comment]:
        parent = await self._get_existing(comment_id)
        records = await self.comment_store.get_comments(
            parent.post_id, QueryOptions(limit=self.settings.reply_scan_limit)
        )
        replies = [
            comment
            for comment in map(Comment.from_record, records)
            if comment.parent_id == comment_id
        ]
        return sort_comments(replies, order)[:limit]

    async def _count_from_store(self, post_id: PostId) -> int:
        return await self.comment_store.get_count(post_id)

    async def _count_from_scan(self, post_id: PostId) -> int:
        scan_limit = self.settings.count_scan_limit
        records = await self.comment_store.get_comments(
            post_id, QueryOptions(limit=scan_limit)
        )
        count = len(records)
        if count >= scan_limit:
            logfire.warn(
                "Comment count capped at scan limit",
                post_id=str(post_id),
                scan_limit=scan_limit,
            )
        return count

    async def _fetch(self, comment_id: CommentId) -> Comment | None:
        record = await self.comment_store.get_comment(comment_id)
        return Comment.from_record(record) if record is not None else None

    async def _get_existing(self, comment_id: CommentId) -> Comment:
        comment = await self._fetch(comment_id)
        if comment is None:
            logfire.warn("Comment not found", comment_id=str(comment_id))
            raise NotFoundError("Comment", str(comment_id))
        return comment

    async def _save(self, draft: CommentDraft) -> Comment:
        return Comment.from_record(await self.comment_store.save_comment(draft))

    @staticmethod
    def _require(value: Any, code: ErrorCode, message: str) -> None:
        if not value:
            logfire.warn("Comment validation failed", code=code.value)
            raise ValidationError(message, code)

    def _validate_content(self, content: Any) -> str:
        if not content or not isinstance(content, str):
            logfire.warn(
                "Comment validation failed", code=ErrorCode.EMPTY_CONTENT.value
            )
            raise ValidationError("Content is required", ErrorCode.EMPTY_CONTENT)

        text = content.strip()
        if not text:
            logfire.warn(
                "Comment validation failed", code=ErrorCode.EMPTY_CONTENT.value
            )
            raise ValidationError("Content cannot be empty", ErrorCode.EMPTY_CONTENT)

        if len(text) > self.settings.max_length:
            logfire.warn(
                "Comment validation failed",
                code=ErrorCode.MAX_LENGTH.value,
                length=len(text),
                max_length=self.settings.max_length,
            )
            raise ValidationError(
                f"Content exceeds maximum length of {self.settings.max_length}",
                ErrorCode.MAX_LENGTH,
            )

        return text

"""SQLAlchemy table definitions for threadkit.

Column names are snake_case; rows read from these tables are handed to the
comment service as-is and normalized there.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# COMMENTS TABLE
# ============================================================================
comments_table = Table(
    "comments",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("post_id", String(255), nullable=False),
    Column("author_id", String(255), nullable=False),
    Column("content", Text, nullable=False),
    Column("parent_id", String(36), nullable=True),  # No FK: soft deletes only
    Column("depth", Integer, nullable=False, server_default="0"),
    Column("score", Integer, nullable=False, server_default="0"),
    Column("upvotes", Integer, nullable=False, server_default="0"),
    Column("downvotes", Integer, nullable=False, server_default="0"),
    Column("is_deleted", Boolean, nullable=False, server_default="false"),
    Column("created_at", DateTime, nullable=False),
    CheckConstraint("depth >= 0", name="depth_non_negative"),
    CheckConstraint("upvotes >= 0", name="upvotes_non_negative"),
    CheckConstraint("downvotes >= 0", name="downvotes_non_negative"),
)

Index("idx_comments_post_id", comments_table.c.post_id)
Index("idx_comments_parent_id", comments_table.c.parent_id)
Index("idx_comments_created_at", comments_table.c.created_at)

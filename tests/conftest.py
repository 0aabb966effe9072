"""Test configuration and fixtures."""

from datetime import datetime, timedelta
from itertools import count
from typing import Any

import logfire
import pytest

from threadkit.domain.model import Comment
from threadkit.domain.value import AuthorId, CommentId, PostId

_ids = count(1)

BASE_TIME = datetime(2025, 1, 1, 12, 0, 0)


def make_comment(**overrides: Any) -> Comment:
    """Helper function to build a stored-looking comment for tests.

    Defaults to a root comment on ``post_1`` by ``agent_1``. Pass
    ``minutes`` to offset ``created_at`` from a fixed base time.

    Args:
        **overrides: Comment fields to override

    Returns:
        Comment domain model
    """
    minutes = overrides.pop("minutes", 0)
    fields: dict[str, Any] = {
        "id": CommentId(f"c{next(_ids)}"),
        "post_id": PostId("post_1"),
        "author_id": AuthorId("agent_1"),
        "content": "A comment",
        "parent_id": None,
        "depth": 0,
        "score": 0,
        "upvotes": 0,
        "downvotes": 0,
        "created_at": BASE_TIME + timedelta(minutes=minutes),
    }
    fields.update(overrides)
    return Comment(**fields)


@pytest.fixture(scope="session", autouse=True)
def quiet_logfire():
    """Keep Logfire local and silent during tests."""
    logfire.configure(send_to_logfire=False, console=False)

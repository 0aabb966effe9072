"""Comment ranking.

Pure functions only: nothing here touches storage or mutates its input.
"""

from collections.abc import Iterable
from datetime import datetime, timezone
from typing import TypeVar

from threadkit.domain.model import Comment
from threadkit.domain.value import SortOrder

C = TypeVar("C", bound=Comment)


def _created(comment: Comment) -> datetime:
    # Naive timestamps are read as UTC so they order against aware ones
    created = comment.created_at
    if created.tzinfo is None:
        return created.replace(tzinfo=timezone.utc)
    return created


def controversy_score(comment: Comment) -> float:
    """Score how evenly split and how busy the voting on a comment is.

    ``total * (1 - |up - down| / total)``, which reduces to
    ``total - |up - down|``. Zero for comments nobody voted on, highest for
    heavily voted comments with an even split.

    Args:
        comment: Comment with upvote/downvote tallies

    Returns:
        Controversy score (>= 0)
    """
    total = comment.upvotes + comment.downvotes
    if total == 0:
        return 0.0
    return float(total - abs(comment.upvotes - comment.downvotes))


def sort_comments(
    comments: Iterable[C] | None, sort: SortOrder | str = SortOrder.TOP
) -> list[C]:
    """Return a new list of comments ordered by a ranking policy.

    Policies:
    - top: score descending, newer first on ties (default)
    - new: newest first
    - old: oldest first
    - controversial: controversy score descending

    Unknown policy names rank as ``top``. Python's sort is stable, so equal
    keys keep their input order, which makes every policy idempotent.

    Args:
        comments: Comments to rank
        sort: Ranking policy

    Returns:
        Ranked copy of the input
    """
    ranked = list(comments or [])
    order = SortOrder.parse(sort)

    if order == SortOrder.NEW:
        ranked.sort(key=_created, reverse=True)
    elif order == SortOrder.OLD:
        ranked.sort(key=_created)
    elif order == SortOrder.CONTROVERSIAL:
        ranked.sort(key=controversy_score, reverse=True)
    else:
        ranked.sort(key=lambda c: (c.score, _created(c)), reverse=True)

    return ranked

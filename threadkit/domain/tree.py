"""Conversion between flat comment lists and nested reply trees."""

from collections.abc import Iterable, Mapping

from threadkit.domain.model import Comment, CommentNode
from threadkit.domain.value import CommentId

# Parent hops followed before get_depth gives up on malformed (cyclic) data
MAX_DEPTH_WALK = 100


def build_tree(comments: Iterable[Comment] | None) -> list[CommentNode]:
    """Nest a flat list of comments under their parents.

    Algorithm:
    1. Wrap every comment in a node with an empty replies list
    2. Index nodes by comment id
    3. Attach each node to its parent's replies, or make it a root when it
       has no parent or its parent is not part of the input (for example
       paginated out)

    Children are appended in input order and never re-sorted, so rank the
    input first to get a ranked tree.

    Args:
        comments: Flat comments, in the order siblings should appear

    Returns:
        Root nodes with replies populated recursively
    """
    nodes = [CommentNode.from_comment(comment) for comment in comments or []]
    by_id: dict[CommentId, CommentNode] = {node.id: node for node in nodes}

    roots: list[CommentNode] = []
    for node in nodes:
        parent = by_id.get(node.parent_id) if node.parent_id is not None else None
        if parent is None or parent is node:
            roots.append(node)
        else:
            parent.replies.append(node)

    return roots


def flatten_tree(tree: Iterable[CommentNode] | None) -> list[Comment]:
    """Flatten a reply tree back into a list, parents before children.

    Walks with an explicit stack, so thread depth is not bounded by the
    interpreter's recursion limit.

    Args:
        tree: Root nodes

    Returns:
        Flat comments in pre-order, sibling order preserved
    """
    result: list[Comment] = []
    stack = list(reversed(list(tree or [])))

    while stack:
        node = stack.pop()
        result.append(node.to_comment())
        # Reversed so the first reply is popped next
        stack.extend(reversed(node.replies))

    return result


def count_comments(tree: Iterable[CommentNode] | None) -> int:
    """Count every node in a reply tree, at any depth."""
    count = 0
    stack = list(tree or [])

    while stack:
        node = stack.pop()
        count += 1
        stack.extend(node.replies)

    return count


def get_depth(comment_id: CommentId, comments_by_id: Mapping[CommentId, Comment]) -> int:
    """Measure how many parent hops separate a comment from its root.

    A parent missing from ``comments_by_id`` still counts as one hop; the
    walk stops there.

    Args:
        comment_id: Comment to measure
        comments_by_id: Lookup of known comments

    Returns:
        Number of hops (0 for roots and unknown ids)
    """
    depth = 0
    current = comments_by_id.get(comment_id)

    while current is not None and current.parent_id is not None:
        current = comments_by_id.get(current.parent_id)
        depth += 1
        if depth >= MAX_DEPTH_WALK:
            break

    return depth

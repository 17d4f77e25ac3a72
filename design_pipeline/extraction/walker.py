"""Pre-order traversal over a DesignNode tree.

Every extraction pass (tokens, components, image assets) walks the tree
through here, so sibling order (and with it the first-encounter order of
deduplicated tokens) is defined in exactly one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Tuple

from ..models import DesignNode


@dataclass(frozen=True)
class NodeContext:
    """Position of a visited node: depth from the root (root = 0) and its parent."""

    depth: int
    parent: Optional[DesignNode] = None


def iter_tree(root: Optional[DesignNode]) -> Iterator[Tuple[DesignNode, NodeContext]]:
    """Yield (node, context) for every node, parents before children.

    A missing root yields nothing. Uses an explicit stack so very deep trees
    don't hit the recursion limit.
    """
    if root is None:
        return

    todo = [(root, NodeContext(depth=0))]
    while todo:
        node, ctx = todo.pop()
        yield node, ctx
        child_ctx = NodeContext(depth=ctx.depth + 1, parent=node)
        # Reversed so the first child is popped next
        todo.extend((child, child_ctx) for child in reversed(node.children))


def walk_tree(
    root: Optional[DesignNode],
    visitor: Callable[[DesignNode, NodeContext], None],
) -> int:
    """Invoke `visitor` once per node in pre-order. Returns the node count."""
    count = 0
    for node, ctx in iter_tree(root):
        visitor(node, ctx)
        count += 1
    return count

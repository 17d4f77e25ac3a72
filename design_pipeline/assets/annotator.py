"""Back-annotate a design tree with downloaded asset paths.

Builds a new tree rather than mutating the input: subtrees with nothing to
annotate are shared with the original, changed nodes are shallow copies.
Re-annotating with the same map returns the tree unchanged.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Tuple

from ..models import DesignNode

logger = logging.getLogger("design_pipeline.assets")


def usage_instruction(local_path: str) -> str:
    return f"USE THIS IMAGE SOURCE: {local_path}"


def _annotate_node(
    node: DesignNode, children: List[DesignNode], asset_map: Mapping[str, str]
) -> DesignNode:
    update = {}
    if any(new is not old for new, old in zip(children, node.children)):
        update["children"] = children

    path = asset_map.get(node.id)
    if path is not None:
        instruction = usage_instruction(path)
        if node.local_src != path:
            update["local_src"] = path
        if node.usage_instruction != instruction:
            update["usage_instruction"] = instruction

    if not update:
        return node
    return node.model_copy(update=update)


def _annotate(root: DesignNode, asset_map: Mapping[str, str]) -> DesignNode:
    # Post-order on an explicit stack; `done` holds finished siblings in order
    todo: List[Tuple[DesignNode, bool]] = [(root, False)]
    done: List[DesignNode] = []
    while todo:
        node, expanded = todo.pop()
        if not expanded:
            todo.append((node, True))
            todo.extend((child, False) for child in reversed(node.children))
            continue
        split = len(done) - len(node.children)
        children = done[split:]
        del done[split:]
        done.append(_annotate_node(node, children, asset_map))
    return done[0]


def annotate_tree(
    root: Optional[DesignNode], asset_map: Mapping[str, str]
) -> Optional[DesignNode]:
    """Return a tree where every node in `asset_map` carries localSrc + usageInstruction.

    Nodes absent from the map are left untouched.
    """
    if root is None or not asset_map:
        return root
    annotated = _annotate(root, asset_map)
    logger.info(f"annotate_tree: applied asset map with {len(asset_map)} entries")
    return annotated

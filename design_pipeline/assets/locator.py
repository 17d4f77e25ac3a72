"""Locate nodes whose visible fills include a bitmap (IMAGE) paint."""

from __future__ import annotations

import logging
from typing import List, Optional

from ..extraction.walker import iter_tree
from ..models import AssetTarget, DesignNode, ImagePaint

logger = logging.getLogger("design_pipeline.assets")


def has_visible_image_fill(node: DesignNode) -> bool:
    return any(isinstance(p, ImagePaint) and p.visible for p in node.fills)


def locate_image_nodes(root: Optional[DesignNode]) -> List[AssetTarget]:
    """Return (node_id, name) for each image-bearing node, in traversal order.

    Nodes whose only image fills are hidden are excluded.
    """
    targets = [
        AssetTarget(node_id=node.id, name=node.name)
        for node, _ in iter_tree(root)
        if has_visible_image_fill(node)
    ]
    logger.info(f"locate_image_nodes: {len(targets)} image nodes found")
    return targets

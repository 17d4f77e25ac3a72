"""Heuristic UI component detection over a Figma node tree.

Pure data-processing functions, no HTTP calls. Each category has an
independent predicate evaluated against every node in one pre-order pass, so
a node may count toward more than one category.

These are heuristics: the contract is determinism (same tree → same
counts), not ground truth. A node without a bounding box never matches a
size-dependent category.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Dict, List, Optional

from ..models import (
    ComponentCategory,
    ComponentDetectionSummary,
    DesignNode,
    GradientPaint,
    ImagePaint,
    SolidPaint,
    UnknownPaint,
)
from .walker import NodeContext, walk_tree

logger = logging.getLogger("design_pipeline.extraction.components")

# =====================================================================
# Constants
# =====================================================================

# Node types that can act as a component container
CONTAINER_TYPES = frozenset({"FRAME", "GROUP", "COMPONENT", "INSTANCE", "RECTANGLE"})
# Node types drawn as vector geometry
VECTOR_TYPES = frozenset({"VECTOR", "BOOLEAN_OPERATION", "STAR", "POLYGON", "ELLIPSE"})

# Button: small-to-medium control with one label
BUTTON_MIN_WIDTH = 40
BUTTON_MAX_WIDTH = 320
BUTTON_MIN_HEIGHT = 20
BUTTON_MAX_HEIGHT = 72
BUTTON_MAX_CHILDREN = 2
BUTTON_NAME_RE = re.compile(r"button|btn|cta", re.IGNORECASE)

# Card: rounded surface mixing text with imagery
CARD_MIN_RADIUS = 4
CARD_MIN_WIDTH = 100
CARD_MIN_HEIGHT = 80

# Navigation: wide, short row near the top of the tree
NAV_MAX_DEPTH = 3
NAV_MAX_HEIGHT = 120
NAV_MIN_ASPECT = 4.0
NAV_MIN_ITEMS = 3

# Form: inputs recognized by name or by a stroked, fill-less field shape
FORM_NAME_RE = re.compile(r"form|login|sign.?(in|up)|checkout|subscribe", re.IGNORECASE)
INPUT_NAME_RE = re.compile(r"input|text.?field|textbox|search|email|password", re.IGNORECASE)
INPUT_MIN_WIDTH = 120
INPUT_MIN_HEIGHT = 24
INPUT_MAX_HEIGHT = 64

# Icon: small vector leaf
ICON_MAX_SIZE = 48


# =====================================================================
# Node helpers
# =====================================================================


def _size(node: DesignNode) -> Optional[tuple]:
    w, h = node.width, node.height
    if w is None or h is None or w <= 0 or h <= 0:
        return None
    return w, h


def _has_visible_solid_fill(node: DesignNode) -> bool:
    return any(isinstance(p, SolidPaint) and p.visible for p in node.fills)


def _has_visible_fill(node: DesignNode) -> bool:
    return any(
        isinstance(p, (SolidPaint, GradientPaint, ImagePaint)) and p.visible
        for p in node.fills
    )


def _has_visible_image_fill(node: DesignNode) -> bool:
    return any(isinstance(p, ImagePaint) and p.visible for p in node.fills)


def _has_visible_stroke(node: DesignNode) -> bool:
    return any(not isinstance(p, UnknownPaint) and p.visible for p in node.strokes)


def _corner_radius(node: DesignNode) -> float:
    radii = [r for r in (node.rectangle_corner_radii or []) if r is not None]
    if node.corner_radius is not None:
        radii.append(node.corner_radius)
    return max(radii, default=0)


def _text_children(node: DesignNode) -> List[DesignNode]:
    return [c for c in node.children if c.type == "TEXT"]


def _is_row(node: DesignNode) -> bool:
    """Children laid out horizontally: auto-layout, or all vertically overlapping."""
    if node.layout_mode == "HORIZONTAL":
        return True
    if node.layout_mode == "VERTICAL" or len(node.children) < 2:
        return False

    spans = []
    for child in node.children:
        bbox = child.absolute_bounding_box
        if bbox is None or bbox.y is None or bbox.height is None:
            return False
        spans.append((bbox.y, bbox.y + bbox.height))
    top = max(s[0] for s in spans)
    bottom = min(s[1] for s in spans)
    return top < bottom


# =====================================================================
# Category predicates
# =====================================================================


def is_button(node: DesignNode, ctx: NodeContext) -> bool:
    if node.type not in CONTAINER_TYPES:
        return False
    size = _size(node)
    if size is None:
        return False
    w, h = size
    if not (BUTTON_MIN_WIDTH <= w <= BUTTON_MAX_WIDTH and BUTTON_MIN_HEIGHT <= h <= BUTTON_MAX_HEIGHT):
        return False
    if len(_text_children(node)) != 1 or len(node.children) > BUTTON_MAX_CHILDREN:
        return False
    if not (_has_visible_solid_fill(node) or _has_visible_stroke(node)):
        return False
    return bool(BUTTON_NAME_RE.search(node.name)) or _corner_radius(node) > 0


def _is_visual_child(child: DesignNode) -> bool:
    return child.type in VECTOR_TYPES or _has_visible_image_fill(child)


def is_card(node: DesignNode, ctx: NodeContext) -> bool:
    if node.type not in CONTAINER_TYPES or len(node.children) < 2:
        return False
    size = _size(node)
    if size is None or size[0] < CARD_MIN_WIDTH or size[1] < CARD_MIN_HEIGHT:
        return False
    if not (_has_visible_fill(node) or _has_visible_stroke(node)):
        return False
    if _corner_radius(node) < CARD_MIN_RADIUS:
        return False
    has_text = any(c.type == "TEXT" for c in node.children)
    has_visual = any(_is_visual_child(c) for c in node.children)
    return has_text and has_visual


def _is_nav_item(child: DesignNode) -> bool:
    if child.type == "TEXT":
        return True
    if is_icon(child, NodeContext(depth=0)):
        return True
    return child.type in CONTAINER_TYPES and bool(_text_children(child))


def is_navigation(node: DesignNode, ctx: NodeContext) -> bool:
    if node.type not in CONTAINER_TYPES or ctx.depth > NAV_MAX_DEPTH:
        return False
    size = _size(node)
    if size is None:
        return False
    w, h = size
    if h > NAV_MAX_HEIGHT or w / h < NAV_MIN_ASPECT:
        return False
    if not _is_row(node):
        return False
    return sum(1 for c in node.children if _is_nav_item(c)) >= NAV_MIN_ITEMS


def _is_input_like(child: DesignNode) -> bool:
    if INPUT_NAME_RE.search(child.name):
        return True
    if child.children or child.type not in ("RECTANGLE", "FRAME"):
        return False
    size = _size(child)
    if size is None:
        return False
    w, h = size
    return (
        w >= INPUT_MIN_WIDTH
        and INPUT_MIN_HEIGHT <= h <= INPUT_MAX_HEIGHT
        and _has_visible_stroke(child)
        and not _has_visible_solid_fill(child)
    )


def is_form(node: DesignNode, ctx: NodeContext) -> bool:
    if node.type not in CONTAINER_TYPES or not node.children:
        return False
    if FORM_NAME_RE.search(node.name):
        return True
    return any(_is_input_like(c) for c in node.children)


def is_icon(node: DesignNode, ctx: NodeContext) -> bool:
    if node.type not in VECTOR_TYPES or node.children:
        return False
    size = _size(node)
    return size is not None and size[0] <= ICON_MAX_SIZE and size[1] <= ICON_MAX_SIZE


DETECTORS: Dict[ComponentCategory, Callable[[DesignNode, NodeContext], bool]] = {
    ComponentCategory.BUTTON: is_button,
    ComponentCategory.CARD: is_card,
    ComponentCategory.NAVIGATION: is_navigation,
    ComponentCategory.FORM: is_form,
    ComponentCategory.ICON: is_icon,
}


# =====================================================================
# Detection pass
# =====================================================================


def detect_components(root: Optional[DesignNode]) -> ComponentDetectionSummary:
    """Count nodes matching each component heuristic.

    Returns:
        ComponentDetectionSummary with a count and the matched node ids
        (traversal order) for every category, zeros included.
    """
    matches: Dict[str, List[str]] = {c.value: [] for c in ComponentCategory}

    def _visit(node: DesignNode, ctx: NodeContext) -> None:
        for category, predicate in DETECTORS.items():
            if predicate(node, ctx):
                matches[category.value].append(node.id)

    walk_tree(root, _visit)

    summary = ComponentDetectionSummary(
        counts={k: len(v) for k, v in matches.items()},
        matches={k: tuple(v) for k, v in matches.items()},
    )
    logger.info(
        "detect_components: "
        + ", ".join(f"{k}={n}" for k, n in summary.counts.items())
    )
    return summary

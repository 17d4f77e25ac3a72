"""Design token extraction: one pre-order pass over the node tree.

Collects colors, fonts, gradients, typography buckets, spacing, borders,
effect counts and raw layout measurements into an immutable
DesignTokenSummary.

Dedup rule for colors/fonts/gradients: the first occurrence in traversal
order fixes the position; later duplicates (compared case-insensitively)
are dropped. Typography and layout sequences keep duplicates, since each
entry is one node's measurement.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Set

from ..models import (
    BlurEffect,
    BorderTokens,
    DesignNode,
    DesignTokenSummary,
    EffectCounts,
    GradientPaint,
    ImagePaint,
    LayoutTokens,
    ShadowEffect,
    SolidPaint,
    TypographyTokens,
    UnknownEffect,
    UnknownPaint,
)
from .figma_utils import (
    figma_color_to_hex,
    font_descriptor,
    gradient_descriptor,
    typography_descriptor,
)
from .walker import NodeContext, walk_tree

logger = logging.getLogger("design_pipeline.extraction.tokens")

# Typography buckets (font size in px, both bounds inclusive)
HEADING_MIN_FONT_SIZE = 24
CAPTION_MAX_FONT_SIZE = 12


def classify_font_size(size: float) -> str:
    """Bucket a font size: 'headings' (>= 24), 'captions' (<= 12) or 'body'."""
    if size >= HEADING_MIN_FONT_SIZE:
        return "headings"
    if size <= CAPTION_MAX_FONT_SIZE:
        return "captions"
    return "body"


class _OrderedSet:
    """Insertion-ordered set keyed case-insensitively."""

    def __init__(self) -> None:
        self._items: Dict[str, str] = {}

    def add(self, value: Optional[str]) -> None:
        if not value:
            return
        key = value.upper()
        if key not in self._items:
            self._items[key] = value

    def as_tuple(self) -> tuple:
        return tuple(self._items.values())


class _TokenAccumulator:
    def __init__(self) -> None:
        self.colors = _OrderedSet()
        self.fonts = _OrderedSet()
        self.gradients = _OrderedSet()
        self.typography: Dict[str, List[str]] = {"headings": [], "body": [], "captions": []}
        self.radii: Set[float] = set()
        self.widths: Set[float] = set()
        self.shadows = 0
        self.blurs = 0
        self.gaps: List[float] = []
        self.paddings: List[float] = []

    def visit(self, node: DesignNode, ctx: NodeContext) -> None:
        self._collect_fills(node)
        self._collect_strokes(node)
        self._collect_text(node)
        self._collect_layout(node)
        self._collect_borders(node)
        self._collect_effects(node)

    # -- paints --

    def _collect_fills(self, node: DesignNode) -> None:
        for paint in node.fills:
            if isinstance(paint, SolidPaint):
                if paint.visible:
                    self.colors.add(figma_color_to_hex(paint.color, paint.opacity))
            elif isinstance(paint, GradientPaint):
                if paint.visible:
                    self.gradients.add(gradient_descriptor(paint))
            elif isinstance(paint, (ImagePaint, UnknownPaint)):
                continue

    def _collect_strokes(self, node: DesignNode) -> None:
        for paint in node.strokes:
            if isinstance(paint, SolidPaint) and paint.visible:
                self.colors.add(figma_color_to_hex(paint.color, paint.opacity))

    # -- text --

    def _collect_text(self, node: DesignNode) -> None:
        style = node.style
        if style is None:
            return
        self.fonts.add(font_descriptor(style))

        descriptor = typography_descriptor(style)
        if descriptor is None:
            logger.debug(f"extract_design_tokens: node {node.id} has no usable font size")
            return
        self.typography[classify_font_size(style.font_size)].append(descriptor)

    # -- layout / borders / effects --

    def _collect_layout(self, node: DesignNode) -> None:
        if not node.is_layout_container:
            return
        if node.item_spacing is not None:
            self.gaps.append(node.item_spacing)
        for side in (node.padding_top, node.padding_right, node.padding_bottom, node.padding_left):
            if side is not None:
                self.paddings.append(side)

    def _collect_borders(self, node: DesignNode) -> None:
        if node.corner_radius is not None and node.corner_radius > 0:
            self.radii.add(node.corner_radius)
        for radius in node.rectangle_corner_radii or []:
            if radius is not None and radius > 0:
                self.radii.add(radius)

        has_visible_stroke = any(
            not isinstance(s, UnknownPaint) and s.visible for s in node.strokes
        )
        if has_visible_stroke and node.stroke_weight is not None and node.stroke_weight > 0:
            self.widths.add(node.stroke_weight)

    def _collect_effects(self, node: DesignNode) -> None:
        for effect in node.effects:
            if isinstance(effect, ShadowEffect):
                if effect.visible:
                    self.shadows += 1
            elif isinstance(effect, BlurEffect):
                if effect.visible:
                    self.blurs += 1
            elif isinstance(effect, UnknownEffect):
                continue

    def build(self) -> DesignTokenSummary:
        spacing = {v for v in self.gaps + self.paddings if v > 0}
        return DesignTokenSummary(
            colors=self.colors.as_tuple(),
            fonts=self.fonts.as_tuple(),
            gradients=self.gradients.as_tuple(),
            typography=TypographyTokens(
                headings=tuple(self.typography["headings"]),
                body=tuple(self.typography["body"]),
                captions=tuple(self.typography["captions"]),
            ),
            spacing_scale=tuple(sorted(spacing)),
            borders=BorderTokens(
                radius=tuple(sorted(self.radii)),
                widths=tuple(sorted(self.widths)),
            ),
            effects=EffectCounts(shadows=self.shadows, blurs=self.blurs),
            layout=LayoutTokens(gaps=tuple(self.gaps), paddings=tuple(self.paddings)),
        )


def extract_design_tokens(root: Optional[DesignNode]) -> DesignTokenSummary:
    """Extract a DesignTokenSummary from a tree. Never raises; None → empty summary."""
    acc = _TokenAccumulator()
    visited = walk_tree(root, acc.visit)
    summary = acc.build()
    logger.info(
        f"extract_design_tokens: {visited} nodes, {len(summary.colors)} colors, "
        f"{len(summary.fonts)} fonts, {len(summary.gradients)} gradients"
    )
    return summary

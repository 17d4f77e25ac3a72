"""Data model for the design extraction pipeline.

DesignNode mirrors the Figma REST node JSON (camelCase aliases, unknown keys
preserved as extras) so an annotated tree serializes back into the same shape
it was fetched in. Paints and effects are closed tagged variants: every
consumer handles SolidPaint / ImagePaint / GradientPaint (or ShadowEffect /
BlurEffect) explicitly and ignores the Unknown* catch-all.

Parsing is lenient: a malformed value degrades to None / Unknown* instead of
rejecting the whole tree.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, NamedTuple, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

logger = logging.getLogger("design_pipeline.models")


# =====================================================================
# Lenient scalar types
# =====================================================================


def _lenient_number(value: Any) -> Optional[Union[int, float]]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _lenient_str(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _lenient_opt_str(value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    return str(value)


def _visible_flag(value: Any) -> bool:
    # Figma omits `visible` for visible layers; only an explicit false hides.
    return value is not False


Number = Annotated[Optional[Union[int, float]], BeforeValidator(_lenient_number)]
Text = Annotated[str, BeforeValidator(_lenient_str)]
OptText = Annotated[Optional[str], BeforeValidator(_lenient_opt_str)]
Visible = Annotated[bool, BeforeValidator(_visible_flag)]


class _FigmaModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class Color(_FigmaModel):
    """RGBA color with 0-1 float channels."""

    r: Number = None
    g: Number = None
    b: Number = None
    a: Number = 1.0


class BoundingBox(_FigmaModel):
    x: Number = None
    y: Number = None
    width: Number = None
    height: Number = None


class TypeStyle(_FigmaModel):
    """Subset of Figma's TypeStyle used for font and typography tokens."""

    font_family: OptText = Field(default=None, alias="fontFamily")
    font_size: Number = Field(default=None, alias="fontSize")
    font_weight: Number = Field(default=None, alias="fontWeight")
    line_height_px: Number = Field(default=None, alias="lineHeightPx")


# =====================================================================
# Paint variants (fills / strokes)
# =====================================================================

GRADIENT_PAINT_TYPES = (
    "GRADIENT_LINEAR",
    "GRADIENT_RADIAL",
    "GRADIENT_ANGULAR",
    "GRADIENT_DIAMOND",
)


class SolidPaint(_FigmaModel):
    type: Literal["SOLID"] = "SOLID"
    visible: Visible = True
    opacity: Number = 1.0
    color: Optional[Color] = None


class ImagePaint(_FigmaModel):
    type: Literal["IMAGE"] = "IMAGE"
    visible: Visible = True
    opacity: Number = 1.0
    image_ref: OptText = Field(default=None, alias="imageRef")
    scale_mode: OptText = Field(default=None, alias="scaleMode")


class ColorStop(_FigmaModel):
    color: Optional[Color] = None
    position: Number = None


class GradientPaint(_FigmaModel):
    type: Literal[
        "GRADIENT_LINEAR", "GRADIENT_RADIAL", "GRADIENT_ANGULAR", "GRADIENT_DIAMOND"
    ]
    visible: Visible = True
    opacity: Number = 1.0
    gradient_stops: List[ColorStop] = Field(default_factory=list, alias="gradientStops")


class UnknownPaint(_FigmaModel):
    """Unrecognized or malformed paint, kept verbatim and ignored downstream."""

    type: Any = None


Paint = Union[SolidPaint, ImagePaint, GradientPaint, UnknownPaint]

_PAINT_MODELS: Dict[str, type] = {
    "SOLID": SolidPaint,
    "IMAGE": ImagePaint,
    **{t: GradientPaint for t in GRADIENT_PAINT_TYPES},
}


def parse_paint(raw: Any) -> Optional[Paint]:
    """Parse one raw paint dict into its variant. Non-dicts are dropped."""
    if isinstance(raw, (SolidPaint, ImagePaint, GradientPaint, UnknownPaint)):
        return raw
    if not isinstance(raw, dict):
        return None
    model = _PAINT_MODELS.get(raw.get("type"))
    if model is None:
        return UnknownPaint.model_validate(raw)
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        logger.debug(f"parse_paint: malformed {raw.get('type')} paint ignored: {e}")
        return UnknownPaint.model_validate(raw)


# =====================================================================
# Effect variants
# =====================================================================

SHADOW_EFFECT_TYPES = ("DROP_SHADOW", "INNER_SHADOW")
BLUR_EFFECT_TYPES = ("LAYER_BLUR", "BACKGROUND_BLUR")


class ShadowEffect(_FigmaModel):
    type: Literal["DROP_SHADOW", "INNER_SHADOW"]
    visible: Visible = True
    radius: Number = None
    color: Optional[Color] = None


class BlurEffect(_FigmaModel):
    type: Literal["LAYER_BLUR", "BACKGROUND_BLUR"]
    visible: Visible = True
    radius: Number = None


class UnknownEffect(_FigmaModel):
    type: Any = None


Effect = Union[ShadowEffect, BlurEffect, UnknownEffect]

_EFFECT_MODELS: Dict[str, type] = {
    **{t: ShadowEffect for t in SHADOW_EFFECT_TYPES},
    **{t: BlurEffect for t in BLUR_EFFECT_TYPES},
}


def parse_effect(raw: Any) -> Optional[Effect]:
    """Parse one raw effect dict into its variant. Non-dicts are dropped."""
    if isinstance(raw, (ShadowEffect, BlurEffect, UnknownEffect)):
        return raw
    if not isinstance(raw, dict):
        return None
    model = _EFFECT_MODELS.get(raw.get("type"))
    if model is None:
        return UnknownEffect.model_validate(raw)
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        logger.debug(f"parse_effect: malformed {raw.get('type')} effect ignored: {e}")
        return UnknownEffect.model_validate(raw)


# =====================================================================
# Design node tree
# =====================================================================


class DesignNode(_FigmaModel):
    """One node of a Figma document tree.

    The tree is strictly hierarchical (no shared or cyclic children); nothing
    in the pipeline guards against cycles.
    """

    id: Text = ""
    name: Text = ""
    type: Text = ""
    visible: Visible = True

    fills: List[Paint] = Field(default_factory=list)
    strokes: List[Paint] = Field(default_factory=list)
    stroke_weight: Number = Field(default=None, alias="strokeWeight")
    corner_radius: Number = Field(default=None, alias="cornerRadius")
    rectangle_corner_radii: Optional[List[Number]] = Field(
        default=None, alias="rectangleCornerRadii"
    )
    effects: List[Effect] = Field(default_factory=list)

    characters: OptText = None
    style: Optional[TypeStyle] = None

    layout_mode: OptText = Field(default=None, alias="layoutMode")
    item_spacing: Number = Field(default=None, alias="itemSpacing")
    padding_top: Number = Field(default=None, alias="paddingTop")
    padding_right: Number = Field(default=None, alias="paddingRight")
    padding_bottom: Number = Field(default=None, alias="paddingBottom")
    padding_left: Number = Field(default=None, alias="paddingLeft")

    absolute_bounding_box: Optional[BoundingBox] = Field(
        default=None, alias="absoluteBoundingBox"
    )

    children: List["DesignNode"] = Field(default_factory=list)

    # Set by the annotator for nodes with a downloaded image asset
    local_src: OptText = Field(default=None, alias="localSrc")
    usage_instruction: OptText = Field(default=None, alias="usageInstruction")

    @field_validator("fills", "strokes", mode="before")
    @classmethod
    def _parse_paints(cls, value: Any) -> List[Any]:
        if not isinstance(value, list):
            return []
        return [p for p in (parse_paint(raw) for raw in value) if p is not None]

    @field_validator("effects", mode="before")
    @classmethod
    def _parse_effects(cls, value: Any) -> List[Any]:
        if not isinstance(value, list):
            return []
        return [e for e in (parse_effect(raw) for raw in value) if e is not None]

    @field_validator("children", mode="before")
    @classmethod
    def _drop_invalid_children(cls, value: Any) -> List[Any]:
        if not isinstance(value, list):
            return []
        return [c for c in value if isinstance(c, (dict, DesignNode))]

    @field_validator("rectangle_corner_radii", mode="before")
    @classmethod
    def _radii_list(cls, value: Any) -> Optional[List[Any]]:
        return value if isinstance(value, list) else None

    @field_validator("style", mode="before")
    @classmethod
    def _lenient_style(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, TypeStyle)) else None

    @field_validator("absolute_bounding_box", mode="before")
    @classmethod
    def _lenient_bbox(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, BoundingBox)) else None

    @classmethod
    def from_api(cls, document: Optional[Dict[str, Any]]) -> Optional["DesignNode"]:
        """Build a tree from a Figma `document` dict. None/non-dict → None."""
        if not isinstance(document, dict):
            return None
        return cls.model_validate(document)

    def to_api_dict(self) -> Dict[str, Any]:
        """Serialize back to Figma-shaped JSON, keeping only fields that were set."""
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")

    @property
    def width(self) -> Optional[float]:
        bbox = self.absolute_bounding_box
        return bbox.width if bbox else None

    @property
    def height(self) -> Optional[float]:
        bbox = self.absolute_bounding_box
        return bbox.height if bbox else None

    @property
    def is_layout_container(self) -> bool:
        return self.layout_mode in ("HORIZONTAL", "VERTICAL")


DesignNode.model_rebuild()


# =====================================================================
# Derived summaries (immutable)
# =====================================================================


class _Summary(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class TypographyTokens(_Summary):
    headings: Tuple[str, ...] = ()
    body: Tuple[str, ...] = ()
    captions: Tuple[str, ...] = ()


class BorderTokens(_Summary):
    radius: Tuple[float, ...] = ()
    widths: Tuple[float, ...] = ()


class EffectCounts(_Summary):
    shadows: int = 0
    blurs: int = 0


class LayoutTokens(_Summary):
    gaps: Tuple[float, ...] = ()
    paddings: Tuple[float, ...] = ()


class DesignTokenSummary(_Summary):
    """Deduplicated design tokens in first-encounter order."""

    colors: Tuple[str, ...] = ()
    fonts: Tuple[str, ...] = ()
    gradients: Tuple[str, ...] = ()
    typography: TypographyTokens = Field(default_factory=TypographyTokens)
    spacing_scale: Tuple[float, ...] = ()
    borders: BorderTokens = Field(default_factory=BorderTokens)
    effects: EffectCounts = Field(default_factory=EffectCounts)
    layout: LayoutTokens = Field(default_factory=LayoutTokens)


class ComponentCategory(str, Enum):
    BUTTON = "button"
    CARD = "card"
    NAVIGATION = "navigation"
    FORM = "form"
    ICON = "icon"


class ComponentDetectionSummary(_Summary):
    """Per-category match counts plus the matched node ids for traceability."""

    counts: Dict[str, int] = Field(
        default_factory=lambda: {c.value: 0 for c in ComponentCategory}
    )
    matches: Dict[str, Tuple[str, ...]] = Field(
        default_factory=lambda: {c.value: () for c in ComponentCategory}
    )

    def count(self, category: Union[ComponentCategory, str]) -> int:
        key = category.value if isinstance(category, ComponentCategory) else category
        return self.counts.get(key, 0)


# =====================================================================
# Asset records
# =====================================================================


class AssetTarget(NamedTuple):
    """(identity, name) of a node with a visible image fill."""

    node_id: str
    name: str


@dataclass
class AssetRecord:
    """Outcome of resolving and downloading one image asset."""

    node_id: str
    name: str
    url: Optional[str] = None
    size_bytes: Optional[int] = None
    local_path: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.local_path is not None


@dataclass
class FrameImage:
    """A whole-frame rasterization after scale negotiation."""

    node_id: str
    content: bytes
    scale: float
    tried_scales: List[float] = field(default_factory=list)

    @property
    def size_bytes(self) -> int:
        return len(self.content)


# =====================================================================
# Pipeline result
# =====================================================================


class PipelineResult(BaseModel):
    """The four pipeline outputs handed to the orchestration layer."""

    model_config = ConfigDict(populate_by_name=True)

    token_summary: DesignTokenSummary = Field(
        default_factory=DesignTokenSummary, alias="tokenSummary"
    )
    component_summary: ComponentDetectionSummary = Field(
        default_factory=ComponentDetectionSummary, alias="componentSummary"
    )
    asset_map: Dict[str, str] = Field(default_factory=dict, alias="assetMap")
    annotated_tree: Optional[DesignNode] = Field(default=None, alias="annotatedTree")

    def to_payload(self) -> Dict[str, Any]:
        return {
            "tokenSummary": self.token_summary.model_dump(by_alias=True, mode="json"),
            "componentSummary": self.component_summary.model_dump(by_alias=True, mode="json"),
            "assetMap": dict(self.asset_map),
            "annotatedTree": (
                self.annotated_tree.to_api_dict() if self.annotated_tree else None
            ),
        }

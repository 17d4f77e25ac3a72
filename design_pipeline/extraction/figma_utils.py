"""Figma value normalization: colors, gradients, fonts and numbers.

Deterministic conversion from Figma API paint/type-style structures to the
canonical token strings used by the token summary. Every helper returns None
for values it cannot interpret instead of raising.
"""

from typing import Optional, Union

from ..models import Color, GradientPaint, TypeStyle

# ---------------------------------------------------------------------------
# Color / Token utilities
# ---------------------------------------------------------------------------

_GRADIENT_KINDS = {
    "GRADIENT_LINEAR": "linear",
    "GRADIENT_RADIAL": "radial",
    "GRADIENT_ANGULAR": "angular",
    "GRADIENT_DIAMOND": "diamond",
}


def _channel(value: Optional[float]) -> Optional[int]:
    if value is None or value < 0 or value > 1:
        return None
    return round(value * 255)


def figma_color_to_hex(color: Optional[Color], opacity: Optional[float] = 1.0) -> Optional[str]:
    """Convert a Figma RGBA float color to an uppercase hex string.

    '#RRGGBB' when fully opaque, '#RRGGBBAA' otherwise. Paint opacity
    multiplies the color's own alpha. Returns None when a channel is missing
    or out of range.
    """
    if color is None:
        return None
    r, g, b = _channel(color.r), _channel(color.g), _channel(color.b)
    if r is None or g is None or b is None:
        return None

    a = color.a if color.a is not None else 1.0
    if opacity is not None:
        a *= opacity
    hex_rgb = f"#{r:02X}{g:02X}{b:02X}"
    if 0 <= a < 1.0:
        hex_rgb += f"{round(a * 255):02X}"
    return hex_rgb


def format_number(value: Union[int, float]) -> str:
    """16.0 → '16', 13.5 → '13.5', 1.3333 → '1.33'."""
    rounded = round(float(value), 2)
    if rounded.is_integer():
        return str(int(rounded))
    return f"{rounded:.2f}".rstrip("0").rstrip(".")


def gradient_descriptor(paint: GradientPaint) -> Optional[str]:
    """Build 'linear-gradient(#FF0000 0%, #0000FF 100%)' from a gradient paint.

    Stops keep their declared order. A gradient with no stops or with any
    unparseable stop yields None.
    """
    kind = _GRADIENT_KINDS.get(paint.type)
    if kind is None or not paint.gradient_stops:
        return None

    parts = []
    for stop in paint.gradient_stops:
        hex_color = figma_color_to_hex(stop.color, paint.opacity)
        if hex_color is None or stop.position is None:
            return None
        parts.append(f"{hex_color} {format_number(stop.position * 100)}%")
    return f"{kind}-gradient({', '.join(parts)})"


def font_descriptor(style: TypeStyle) -> Optional[str]:
    """'Family: Inter, Weight: 700'; None when the family is missing."""
    family = (style.font_family or "").strip()
    if not family:
        return None
    if style.font_weight is None:
        return f"Family: {family}"
    return f"Family: {family}, Weight: {format_number(style.font_weight)}"


def typography_descriptor(style: TypeStyle) -> Optional[str]:
    """'Size: 32px, Weight: 700, Line Height: 40px'; None without a font size."""
    if style.font_size is None or style.font_size <= 0:
        return None
    weight = format_number(style.font_weight) if style.font_weight is not None else "normal"
    line_height = (
        f"{format_number(style.line_height_px)}px"
        if style.line_height_px is not None
        else "normal"
    )
    return (
        f"Size: {format_number(style.font_size)}px, "
        f"Weight: {weight}, Line Height: {line_height}"
    )

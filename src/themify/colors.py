"""WCAG luminance and contrast, plus the conversions between RGB, hex and HSL
used throughout the theme builder.

Hue, saturation and lightness are fractions in [0, 1] everywhere except in the
serialized ``hsl(H, S%, L%)`` form, where hue is in degrees and the other two
are percentages.
"""

from __future__ import annotations

import colorsys
import math
import re

RGB = tuple[int, int, int]
HSL = tuple[float, float, float]

# 4 and 8 digit forms carry an alpha channel, which is ignored
_HEX_PATTERN = re.compile(
    r"^#?([0-9A-Fa-f]{3}|[0-9A-Fa-f]{4}|[0-9A-Fa-f]{6}|[0-9A-Fa-f]{8})$"
)
_NUMBER = r"([0-9]*\.?[0-9]+)"
_SEPARATOR = r"(?:\s*,\s*|\s+)"
_RGB_FUNC_PATTERN = re.compile(
    rf"^rgba?\(\s*{_NUMBER}{_SEPARATOR}{_NUMBER}{_SEPARATOR}{_NUMBER}"
    r"(?:\s*[,/]\s*[0-9]*\.?[0-9]+%?)?\s*\)$",
    re.IGNORECASE,
)
_SIGNED_NUMBER = r"(-?[0-9]*\.?[0-9]+)"
_HSL_FUNC_PATTERN = re.compile(
    rf"^hsla?\(\s*{_SIGNED_NUMBER}(?:deg)?{_SEPARATOR}{_SIGNED_NUMBER}%"
    rf"{_SEPARATOR}{_SIGNED_NUMBER}%"
    r"(?:\s*[,/]\s*[0-9]*\.?[0-9]+%?)?\s*\)$",
    re.IGNORECASE,
)

LUMINANCE_WEIGHTS = (0.2126, 0.7152, 0.0722)


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def _linearize(channel: int) -> float:
    value = channel / 255.0
    if value <= 0.03928:
        return value / 12.92
    return ((value + 0.055) / 1.055) ** 2.4


def relative_luminance(rgb: RGB) -> float:
    """WCAG 2.x relative luminance of an 8-bit sRGB color, in [0, 1]."""
    r, g, b = (_linearize(int(c)) for c in rgb)
    wr, wg, wb = LUMINANCE_WEIGHTS
    return wr * r + wg * g + wb * b


def contrast_ratio(first: RGB, second: RGB) -> float:
    """WCAG contrast ratio, symmetric and in [1, 21]."""
    l1 = relative_luminance(first)
    l2 = relative_luminance(second)
    lighter, darker = max(l1, l2), min(l1, l2)
    return (lighter + 0.05) / (darker + 0.05)


def rgb_to_hex(rgb: RGB) -> str:
    return f"#{rgb[0]:02X}{rgb[1]:02X}{rgb[2]:02X}"


def hex_to_rgb(value: str) -> RGB:
    match = _HEX_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"invalid hex color '{value}'")
    digits = match.group(1)
    if len(digits) in (3, 4):
        digits = "".join(ch * 2 for ch in digits)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def rgb_to_hsl(rgb: RGB) -> HSL:
    r, g, b = (int(c) / 255.0 for c in rgb)
    h, l, s = colorsys.rgb_to_hls(r, g, b)
    return h % 1.0, s, l


def hsl_to_rgb(hue: float, saturation: float, lightness: float) -> RGB:
    r, g, b = colorsys.hls_to_rgb(
        hue % 1.0, clamp(lightness), clamp(saturation)
    )
    return (
        int(clamp(round(r * 255.0), 0, 255)),
        int(clamp(round(g * 255.0), 0, 255)),
        int(clamp(round(b * 255.0), 0, 255)),
    )


def format_hsl(hue: float, saturation: float, lightness: float) -> str:
    degrees = round((hue % 1.0) * 360.0, 1) % 360.0
    sat_pct = round(clamp(saturation) * 100.0, 1)
    light_pct = round(clamp(lightness) * 100.0, 1)
    return f"hsl({degrees:.1f}, {sat_pct:.1f}%, {light_pct:.1f}%)"


def parse_hsl(value: str) -> HSL | None:
    match = _HSL_FUNC_PATTERN.match(value.strip())
    if not match:
        return None
    degrees, sat_pct, light_pct = (float(match.group(i)) for i in range(1, 4))
    if not all(math.isfinite(v) for v in (degrees, sat_pct, light_pct)):
        return None
    return (
        (degrees % 360.0) / 360.0,
        clamp(sat_pct / 100.0),
        clamp(light_pct / 100.0),
    )


def parse_css_color(value: str) -> RGB | None:
    """Parse a CSS color literal (hex, ``rgb()``/``rgba()`` or ``hsl()``)."""
    text = value.strip()
    if _HEX_PATTERN.match(text) and text.startswith("#"):
        return hex_to_rgb(text)

    match = _RGB_FUNC_PATTERN.match(text)
    if match:
        channels = [float(match.group(i)) for i in range(1, 4)]
        return tuple(int(clamp(round(c), 0, 255)) for c in channels)  # type: ignore[return-value]

    hsl = parse_hsl(text)
    if hsl is not None:
        return hsl_to_rgb(*hsl)
    return None

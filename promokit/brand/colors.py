"""
Color and contrast helpers used to post-process scraped brand colors.

Colors are 6-digit hex strings (`#rrggbb`). HSL uses hue in degrees [0, 360)
and saturation/lightness in [0, 1]. Luminance and contrast follow WCAG 2.x.
"""

from __future__ import annotations

import re
from typing import List, Tuple

HEX_COLOR_RE = re.compile(r"^#?([0-9a-fA-F]{6})$")

MIN_CONTRAST = 3.0
LIGHTNESS_STEP = 0.2
WHITE = "#ffffff"
BLACK = "#000000"

RGB = Tuple[int, int, int]
HSL = Tuple[float, float, float]


def is_hex_color(value: str) -> bool:
    return bool(HEX_COLOR_RE.match((value or "").strip()))


def hex_to_rgb(value: str) -> RGB:
    match = HEX_COLOR_RE.match((value or "").strip())
    if not match:
        raise ValueError(f"Invalid hex color: {value!r}")
    digits = match.group(1)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def rgb_to_hex(r: float, g: float, b: float) -> str:
    def channel(v: float) -> str:
        return f"{max(0, min(255, int(round(v)))):02x}"

    return f"#{channel(r)}{channel(g)}{channel(b)}"


def rgb_to_hsl(r: int, g: int, b: int) -> HSL:
    rf, gf, bf = r / 255, g / 255, b / 255
    hi, lo = max(rf, gf, bf), min(rf, gf, bf)
    lightness = (hi + lo) / 2

    if hi == lo:
        return 0.0, 0.0, lightness

    d = hi - lo
    saturation = d / (2 - hi - lo) if lightness > 0.5 else d / (hi + lo)
    if hi == rf:
        hue = (gf - bf) / d + (6 if gf < bf else 0)
    elif hi == gf:
        hue = (bf - rf) / d + 2
    else:
        hue = (rf - gf) / d + 4
    return (hue * 60) % 360, saturation, lightness


def _hue_to_rgb(p: float, q: float, t: float) -> float:
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def hsl_to_rgb(h: float, s: float, lightness: float) -> RGB:
    if s == 0:
        v = int(round(lightness * 255))
        return v, v, v

    q = lightness * (1 + s) if lightness < 0.5 else lightness + s - lightness * s
    p = 2 * lightness - q
    hk = (h % 360) / 360
    return (
        int(round(_hue_to_rgb(p, q, hk + 1 / 3) * 255)),
        int(round(_hue_to_rgb(p, q, hk) * 255)),
        int(round(_hue_to_rgb(p, q, hk - 1 / 3) * 255)),
    )


def _linearize(channel: int) -> float:
    c = channel / 255
    return c / 12.92 if c <= 0.04045 else ((c + 0.055) / 1.055) ** 2.4


def relative_luminance(value: str) -> float:
    r, g, b = hex_to_rgb(value)
    return 0.2126 * _linearize(r) + 0.7152 * _linearize(g) + 0.0722 * _linearize(b)


def contrast_ratio(a: str, b: str) -> float:
    la, lb = relative_luminance(a), relative_luminance(b)
    lighter, darker = max(la, lb), min(la, lb)
    return (lighter + 0.05) / (darker + 0.05)


def adjust_lightness(value: str, delta: float) -> str:
    """Shift HSL lightness by a signed delta, clamped to [0, 1]."""
    h, s, lightness = rgb_to_hsl(*hex_to_rgb(value))
    lightness = max(0.0, min(1.0, lightness + delta))
    return rgb_to_hex(*hsl_to_rgb(h, s, lightness))


def lighten(value: str, amount: float = LIGHTNESS_STEP) -> str:
    return adjust_lightness(value, abs(amount))


def darken(value: str, amount: float = LIGHTNESS_STEP) -> str:
    return adjust_lightness(value, -abs(amount))


def adjust_contrast(color: str, background: str, minimum: float = MIN_CONTRAST) -> str:
    """
    One correction step towards legibility on `background`.

    Colors that already meet `minimum` come back unchanged. Otherwise the color is
    moved one LIGHTNESS_STEP away from the background (darkened on light
    backgrounds, lightened on dark ones). The result is not guaranteed to pass.
    """
    color = color.lower()
    if contrast_ratio(color, background) >= minimum:
        return color
    if relative_luminance(background) > 0.5:
        return darken(color)
    return lighten(color)


def refine_palette(colors: List[str]) -> List[str]:
    """Primary/secondary are checked against white, the accent against black."""
    refined = []
    for index, color in enumerate(colors):
        if index in (0, 1):
            refined.append(adjust_contrast(color, WHITE))
        elif index == 2:
            refined.append(adjust_contrast(color, BLACK))
        else:
            refined.append(color)
    return refined

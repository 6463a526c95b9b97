"""Colour temperature and picker-colour conversion to layer tints."""

from __future__ import annotations

import math
import re

__all__ = [
    "MAX_KELVIN",
    "MIN_KELVIN",
    "blackbody_to_rgb",
    "parse_hex_color",
]

MIN_KELVIN = 1000.0
MAX_KELVIN = 40000.0

_HEX_PATTERN = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def _channel(value: float) -> float:
    return max(0.0, min(255.0, value)) / 255.0


def blackbody_to_rgb(kelvin: float) -> tuple[float, float, float]:
    """Approximate the RGB hue of a black body at *kelvin*.

    The input is clamped to [1000, 40000] K. The result is normalised so its
    largest channel is 1.0; brightness is left to the layer exposure.
    """

    temp = max(MIN_KELVIN, min(MAX_KELVIN, float(kelvin))) / 100.0

    if temp <= 66.0:
        red = 255.0
        green = 99.4708025861 * math.log(temp) - 161.1195681661
    else:
        red = 329.698727446 * math.pow(temp - 60.0, -0.1332047592)
        green = 288.1221695283 * math.pow(temp - 60.0, -0.0755148492)

    if temp >= 66.0:
        blue = 255.0
    elif temp <= 19.0:
        blue = 0.0
    else:
        blue = 138.5177312231 * math.log(temp - 10.0) - 305.0447927307

    r, g, b = _channel(red), _channel(green), _channel(blue)
    peak = max(r, g, b)
    if peak <= 0.0:
        return (0.0, 0.0, 0.0)
    return (r / peak, g / peak, b / peak)


def parse_hex_color(value: str) -> tuple[float, float, float]:
    """Return ``#rrggbb`` / ``#rgb`` as floats in [0, 1]."""

    match = _HEX_PATTERN.match(str(value).strip())
    if match is None:
        raise ValueError(f"invalid colour {value!r}; expected #rrggbb")
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return tuple(int(digits[i : i + 2], 16) / 255.0 for i in (0, 2, 4))  # type: ignore[return-value]

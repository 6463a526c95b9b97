"""sRGB transfer functions (display encoding <-> scene-linear light)."""

from __future__ import annotations

from typing import Any

import numpy as np

from ._arrays import as_float_array, match_input

__all__ = ["linear_to_srgb", "srgb_to_linear"]

_DECODE_KNEE = 0.04045
_ENCODE_KNEE = 0.0031308
_LINEAR_SLOPE = 12.92
_GAMMA = 2.4


def srgb_to_linear(c: Any) -> Any:
    """Decode display-encoded sRGB values into linear light, per element."""

    arr = as_float_array(c)
    power = ((np.maximum(arr, _DECODE_KNEE) + 0.055) / 1.055) ** _GAMMA
    result = np.where(arr <= _DECODE_KNEE, arr / _LINEAR_SLOPE, power)
    return match_input(c, result)


def linear_to_srgb(c: Any) -> Any:
    """Encode linear light back to display sRGB, per element."""

    arr = as_float_array(c)
    power = 1.055 * np.maximum(arr, _ENCODE_KNEE) ** (1.0 / _GAMMA) - 0.055
    result = np.where(arr <= _ENCODE_KNEE, arr * _LINEAR_SLOPE, power)
    return match_input(c, result)

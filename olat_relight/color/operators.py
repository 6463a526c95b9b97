"""Tone reproduction operators and their analytic inverses.

Every operator works per channel on floats or numpy arrays. The inverses are
exact algebraic solutions of the forward curves, so a display-referred sample
that was produced by one of the curves can be taken back to scene-linear light
before re-compositing.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from ..datatypes import ToneMode
from ._arrays import as_float_array, match_input

__all__ = [
    "DEFAULT_MAX_POINT",
    "FILMIC_COEFFS",
    "filmic_tonemap",
    "inverse_filmic",
    "inverse_reinhard",
    "inverse_tonemap",
    "reinhard_tonemap",
    "tonemap",
]

DEFAULT_MAX_POINT = 16.0

# Rational filmic fit: x(ax+b) / (x(cx+d)+e)
FILMIC_COEFFS = {"a": 2.51, "b": 0.03, "c": 2.43, "d": 0.59, "e": 0.14}


def reinhard_tonemap(x: Any, max_point: float = DEFAULT_MAX_POINT) -> Any:
    """Extended Reinhard curve with white point ``max_point``."""

    arr = as_float_array(x)
    white_sq = float(max_point) * float(max_point)
    result = arr * (1.0 + arr / white_sq) / (1.0 + arr)
    return match_input(x, result)


def inverse_reinhard(y: Any, max_point: float = DEFAULT_MAX_POINT) -> Any:
    """Solve ``y = x(1 + x/M) / (1 + x)`` for ``x`` with ``M = max_point**2``."""

    arr = as_float_array(y)
    m = float(max_point) * float(max_point)
    shifted = m * (arr - 1.0)
    disc = np.maximum(shifted * shifted + 4.0 * m * arr, 0.0)
    result = (np.sqrt(disc) + shifted) / 2.0
    return match_input(y, result)


def filmic_tonemap(x: Any) -> Any:
    arr = as_float_array(x)
    a, b, c, d, e = (FILMIC_COEFFS[k] for k in "abcde")
    with np.errstate(divide="ignore", invalid="ignore"):
        result = np.clip((arr * (a * arr + b)) / (arr * (c * arr + d) + e), 0.0, 1.0)
    return match_input(x, result)


def inverse_filmic(y: Any) -> Any:
    """Invert the filmic curve using the physical (non-negative) root.

    The discriminant is clamped at zero so out-of-range samples never produce
    a domain error.
    """

    arr = as_float_array(y)
    a, b, c, d, e = (FILMIC_COEFFS[k] for k in "abcde")
    qa = arr * c - a
    qb = arr * d - b
    qc = arr * e
    disc = np.maximum(qb * qb - 4.0 * qa * qc, 0.0)
    with np.errstate(divide="ignore", invalid="ignore"):
        result = (-qb - np.sqrt(disc)) / (2.0 * qa)
    result = np.nan_to_num(result, nan=0.0, posinf=np.finfo(np.float32).max, neginf=0.0)
    return match_input(y, result)


def tonemap(x: Any, mode: ToneMode | str, max_point: float = DEFAULT_MAX_POINT) -> Any:
    """Apply the forward operator selected by *mode* (``LINEAR`` is identity)."""

    mode = ToneMode.parse(mode)
    if mode is ToneMode.REINHARD:
        return reinhard_tonemap(x, max_point)
    if mode is ToneMode.FILMIC:
        return filmic_tonemap(x)
    return x


def inverse_tonemap(y: Any, mode: ToneMode | str, max_point: float = DEFAULT_MAX_POINT) -> Any:
    mode = ToneMode.parse(mode)
    if mode is ToneMode.REINHARD:
        return inverse_reinhard(y, max_point)
    if mode is ToneMode.FILMIC:
        return inverse_filmic(y)
    return y

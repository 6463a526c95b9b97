"""Scalar/array plumbing shared by the colour functions."""

from __future__ import annotations

from typing import Any

import numpy as np


def as_float_array(value: Any) -> np.ndarray:
    arr = np.asarray(value)
    if not np.issubdtype(arr.dtype, np.floating):
        arr = arr.astype(np.float64)
    return arr


def match_input(value: Any, result: np.ndarray) -> Any:
    """Return a Python float for scalar input, the array otherwise."""

    if np.ndim(value) == 0:
        return float(result)
    return result

"""Mask centroid extraction used to place per-light overlay markers."""

from __future__ import annotations

import logging
from typing import Any, Optional

import numpy as np

__all__ = ["CENTER", "MASK_THRESHOLD", "mask_centroid"]

logger = logging.getLogger(__name__)

# Red channel value (0-255 scale) a pixel must exceed to count as lit.
MASK_THRESHOLD = 20
CENTER = (0.5, 0.5)


def _red_plane(mask: np.ndarray) -> np.ndarray:
    plane = mask[..., 0] if mask.ndim == 3 else mask
    if np.issubdtype(plane.dtype, np.floating):
        plane = plane * 255.0
    return plane


def mask_centroid(mask: Optional[Any]) -> tuple[float, float]:
    """Return the normalised ``(x, y)`` centroid of the lit pixels in *mask*.

    Masks are white-on-black images; only the red channel is inspected.
    Missing or empty masks fall back to the image centre.
    """

    if mask is None:
        return CENTER
    arr = np.asarray(mask)
    if arr.ndim not in (2, 3) or arr.shape[0] == 0 or arr.shape[1] == 0:
        return CENTER

    height, width = arr.shape[:2]
    ys, xs = np.nonzero(_red_plane(arr) > MASK_THRESHOLD)
    if xs.size == 0:
        logger.debug("mask %dx%d has no pixels above threshold", width, height)
        return CENTER
    return (float(xs.mean()) / width, float(ys.mean()) / height)

"""Per-pixel relighting composite.

``composite`` is a pure function of the background, the active layers and the
tone state. It never mutates its inputs and keeps no state between frames,
so callers may invoke it every refresh or only when something changed.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

import numpy as np

from ..color.config import DEFAULT_TM_CONFIG, TMConfig
from ..color.operators import inverse_tonemap, tonemap
from ..color.transfer import linear_to_srgb, srgb_to_linear
from ..datatypes import ToneMode
from ..layers import MAX_LAYERS, Background, Layer
from ..media import resample

__all__ = ["composite", "linear_sum", "output_shape"]

logger = logging.getLogger(__name__)


def output_shape(
    background: Optional[Background],
    layers: Iterable[Layer],
    shape: Optional[tuple[int, int]] = None,
) -> tuple[int, int]:
    """Frame size: the background's, else the first layer's, else *shape*."""

    if background is not None and background.shape is not None:
        return background.shape
    for layer in layers:
        return layer.shape
    if shape is None:
        raise ValueError("cannot infer frame size without a background, a layer, or an explicit shape")
    return (int(shape[0]), int(shape[1]))


def _background_radiance(background: Background, tone: TMConfig, shape: tuple[int, int]) -> np.ndarray:
    sample = resample(background.image[..., :3], shape)
    linear = srgb_to_linear(sample)
    if tone.mode is not ToneMode.LINEAR:
        # captures were exported through the same curve; undo it before summing
        linear = inverse_tonemap(linear, tone.mode, tone.max_point)
    return linear * np.float32(background.effective_scale)


def linear_sum(
    background: Optional[Background],
    layers: Iterable[Layer],
    tone: TMConfig = DEFAULT_TM_CONFIG,
    *,
    shape: Optional[tuple[int, int]] = None,
) -> np.ndarray:
    """Accumulate scene-linear radiance before the forward tone operator."""

    layers = list(layers)
    if len(layers) > MAX_LAYERS:
        raise ValueError(f"at most {MAX_LAYERS} layers can be composited, got {len(layers)}")
    height, width = output_shape(background, layers, shape)
    total = np.zeros((height, width, 3), dtype=np.float32)

    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        if background is not None and background.image is not None and background.effective_scale > 0:
            total += _background_radiance(background, tone, (height, width))

        for layer in layers:
            weights = layer.contribution_weights()
            if not weights.any():
                continue
            sample = resample(layer.image[..., :3], (height, width))
            total += sample * weights

    return total


def composite(
    background: Optional[Background],
    layers: Iterable[Layer],
    tone: TMConfig = DEFAULT_TM_CONFIG,
    *,
    shape: Optional[tuple[int, int]] = None,
) -> np.ndarray:
    """Return the display-encoded ``H x W x 4`` float32 frame (alpha = 1)."""

    tone = tone.resolved()
    total = linear_sum(background, layers, tone, shape=shape)
    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        mapped = tonemap(total, tone.mode, tone.max_point)
        encoded = linear_to_srgb(mapped)

    frame = np.ones(total.shape[:2] + (4,), dtype=np.float32)
    frame[..., :3] = encoded
    return frame

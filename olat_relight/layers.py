"""Per-light layer state and the ambient background."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence, TypeVar

import numpy as np

from .centroid import mask_centroid
from .color.temperature import blackbody_to_rgb, parse_hex_color
from .datatypes import ColorMode

__all__ = [
    "AMBIENT_RANGE",
    "DEFAULT_TEMPERATURE",
    "EV_RANGE",
    "MAX_LAYERS",
    "UI_TEMPERATURE_RANGE",
    "Background",
    "Layer",
    "truncate_layers",
]

logger = logging.getLogger(__name__)

MAX_LAYERS = 8
EV_RANGE = (-5.0, 2.0)
AMBIENT_RANGE = (0.0, 3.0)
UI_TEMPERATURE_RANGE = (2000.0, 12000.0)
DEFAULT_TEMPERATURE = 6500.0
DEFAULT_PICKER_COLOR = "#ffffff"

T = TypeVar("T")


def _clamp(value: float, bounds: tuple[float, float]) -> float:
    low, high = bounds
    return max(low, min(high, float(value)))


def _as_rgb(image: np.ndarray) -> np.ndarray:
    """Return a float32 ``H x W x 3`` view of a grey, grey+alpha, RGB or RGBA buffer."""

    arr = np.asarray(image, dtype=np.float32)
    if arr.ndim == 2:
        arr = arr[..., np.newaxis]
    if arr.ndim != 3 or arr.shape[-1] == 0:
        raise ValueError(f"expected an H x W or H x W x C pixel buffer, got shape {arr.shape}")
    if arr.shape[-1] < 3:
        # grey (optionally with alpha): replicate the luminance plane
        return np.repeat(arr[..., :1], 3, axis=2)
    return arr[..., :3]


def _freeze(image: Optional[np.ndarray]) -> Optional[np.ndarray]:
    if image is None:
        return None
    frozen = np.array(image, copy=True)
    frozen.flags.writeable = False
    return frozen


class Layer:
    """One OLAT capture plus the controls that shape its contribution.

    ``intensity`` and ``tint`` are derived values: intensity always equals
    ``2 ** ev`` and tint is recomputed whenever the colour mode or the active
    mode's parameter changes. Both colour parameters are retained across mode
    switches.
    """

    def __init__(
        self,
        label: str,
        image: np.ndarray,
        mask: Optional[np.ndarray] = None,
        *,
        enabled: bool = True,
        ev: float = 0.0,
        color_mode: ColorMode | str = ColorMode.TEMPERATURE,
        temperature: float = DEFAULT_TEMPERATURE,
        picker_color: str = DEFAULT_PICKER_COLOR,
    ) -> None:
        self.label = label
        self.image = _freeze(_as_rgb(image))
        self.mask = _freeze(mask)
        self.centroid = mask_centroid(self.mask)
        self.enabled = bool(enabled)
        self._ev = _clamp(ev, EV_RANGE)
        self._color_mode = ColorMode.parse(color_mode)
        self._temperature = float(temperature)
        parse_hex_color(picker_color)
        self._picker_color = picker_color
        self._tint = (1.0, 1.0, 1.0)
        self._refresh_tint()

    def __repr__(self) -> str:
        return (
            f"Layer(label={self.label!r}, enabled={self.enabled}, ev={self._ev}, "
            f"color_mode={self._color_mode.value}, tint={self._tint})"
        )

    @property
    def shape(self) -> tuple[int, int]:
        return self.image.shape[:2]

    @property
    def has_mask(self) -> bool:
        return self.mask is not None

    @property
    def ev(self) -> float:
        return self._ev

    @ev.setter
    def ev(self, value: float) -> None:
        self._ev = _clamp(value, EV_RANGE)

    @property
    def intensity(self) -> float:
        return 2.0 ** self._ev

    @property
    def color_mode(self) -> ColorMode:
        return self._color_mode

    @color_mode.setter
    def color_mode(self, value: ColorMode | str) -> None:
        self._color_mode = ColorMode.parse(value)
        self._refresh_tint()

    @property
    def temperature(self) -> float:
        return self._temperature

    @temperature.setter
    def temperature(self, value: float) -> None:
        self._temperature = float(value)
        self._refresh_tint()

    @property
    def picker_color(self) -> str:
        return self._picker_color

    @picker_color.setter
    def picker_color(self, value: str) -> None:
        parse_hex_color(value)
        self._picker_color = value
        self._refresh_tint()

    @property
    def tint(self) -> tuple[float, float, float]:
        return self._tint

    def _refresh_tint(self) -> None:
        if self._color_mode is ColorMode.TEMPERATURE:
            self._tint = blackbody_to_rgb(self._temperature)
        else:
            self._tint = parse_hex_color(self._picker_color)

    def reset(self) -> None:
        """Restore the defaults: enabled, 0 EV, 6500 K temperature mode."""

        self.enabled = True
        self._ev = 0.0
        self._temperature = DEFAULT_TEMPERATURE
        self._picker_color = DEFAULT_PICKER_COLOR
        self._color_mode = ColorMode.TEMPERATURE
        self._refresh_tint()

    def contribution_weights(self) -> np.ndarray:
        """Per-channel multiplier applied to the layer image (zero when disabled)."""

        if not self.enabled:
            return np.zeros(3, dtype=np.float32)
        return np.asarray(self._tint, dtype=np.float32) * np.float32(self.intensity)


class Background:
    """Display-encoded ambient capture and its scale control."""

    def __init__(
        self,
        image: Optional[np.ndarray] = None,
        *,
        ambient_enabled: bool = True,
        ambient_scale: float = 0.5,
    ) -> None:
        self.image = None if image is None else _freeze(_as_rgb(image))
        self.ambient_enabled = bool(ambient_enabled)
        self._ambient_scale = _clamp(ambient_scale, AMBIENT_RANGE)

    def __repr__(self) -> str:
        return (
            f"Background(shape={self.shape}, ambient_enabled={self.ambient_enabled}, "
            f"ambient_scale={self._ambient_scale})"
        )

    @property
    def ambient_scale(self) -> float:
        return self._ambient_scale

    @ambient_scale.setter
    def ambient_scale(self, value: float) -> None:
        self._ambient_scale = _clamp(value, AMBIENT_RANGE)

    @property
    def effective_scale(self) -> float:
        return self._ambient_scale if self.ambient_enabled else 0.0

    @property
    def shape(self) -> Optional[tuple[int, int]]:
        if self.image is None:
            return None
        return self.image.shape[:2]


def truncate_layers(
    items: Sequence[T],
    *,
    limit: int = MAX_LAYERS,
    on_warning: Optional[Callable[[str], None]] = None,
) -> list[T]:
    """Keep the first *limit* entries, warning (never raising) about the rest."""

    if len(items) <= limit:
        return list(items)
    message = f"Scene has {len(items)} OLATs, but max is {limit}. Truncating."
    logger.warning("%s", message)
    if on_warning is not None:
        on_warning(message)
    return list(items[:limit])

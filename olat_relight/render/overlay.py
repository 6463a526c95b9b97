"""Overlay markers placed on each light's mask centroid."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence

import cv2
import numpy as np

from ..layers import Layer
from .naming import marker_label

__all__ = [
    "AMBIENT_MARKER_POSITION",
    "OverlayMarker",
    "build_markers",
    "draw_markers",
    "pixel_position",
]

AMBIENT_MARKER_POSITION = (0.95, 0.95)

_ACTIVE_COLOR = (80, 200, 255, 255)
_INACTIVE_COLOR = (110, 110, 110, 255)
_AMBIENT_COLOR = (255, 140, 0, 255)


@dataclass(frozen=True, slots=True)
class OverlayMarker:
    """Placement and styling data for one interactive marker."""

    index: int
    text: str
    name: str
    position: tuple[float, float]
    enabled: bool
    ambient: bool = False


def build_markers(
    layers: Sequence[Layer],
    *,
    ambient_enabled: bool | None = None,
    include_maskless: bool = False,
) -> List[OverlayMarker]:
    """Return markers for masked layers (optionally all) plus the ambient toggle.

    Layers without a mask have no footprint to point at, so they are skipped
    unless *include_maskless* is set, in which case they sit at the image
    centre.
    """

    markers = [
        OverlayMarker(
            index=idx,
            text=marker_label(idx),
            name=layer.label,
            position=layer.centroid,
            enabled=layer.enabled,
        )
        for idx, layer in enumerate(layers)
        if layer.has_mask or include_maskless
    ]
    if ambient_enabled is not None:
        markers.append(
            OverlayMarker(
                index=-1,
                text="bg",
                name="ambient",
                position=AMBIENT_MARKER_POSITION,
                enabled=ambient_enabled,
                ambient=True,
            )
        )
    return markers


def pixel_position(marker: OverlayMarker, shape: tuple[int, int]) -> tuple[int, int]:
    """Convert a normalised marker position to integer ``(x, y)`` pixels."""

    height, width = shape
    x = min(max(int(round(marker.position[0] * width)), 0), max(width - 1, 0))
    y = min(max(int(round(marker.position[1] * height)), 0), max(height - 1, 0))
    return x, y


def draw_markers(frame: np.ndarray, markers: Iterable[OverlayMarker], *, radius: int = 12) -> np.ndarray:
    """Return a uint8 copy of *frame* with the markers drawn on top."""

    canvas = np.ascontiguousarray(frame, dtype=np.uint8).copy()
    channels = canvas.shape[-1]
    for marker in markers:
        if marker.ambient:
            color = _AMBIENT_COLOR if marker.enabled else _INACTIVE_COLOR
        else:
            color = _ACTIVE_COLOR if marker.enabled else _INACTIVE_COLOR
        color = color[:channels]
        center = pixel_position(marker, canvas.shape[:2])
        cv2.circle(canvas, center, radius, color, thickness=2, lineType=cv2.LINE_AA)
        cv2.putText(
            canvas,
            marker.text,
            (center[0] - radius, center[1] + radius * 2 + 4),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.4,
            color,
            1,
            cv2.LINE_AA,
        )
    return canvas

from __future__ import annotations

from typing import Callable

import numpy as np
import pytest

from olat_relight.layers import Layer
from olat_relight.render.overlay import (
    AMBIENT_MARKER_POSITION,
    OverlayMarker,
    build_markers,
    draw_markers,
    pixel_position,
)
from tests.helpers.assets import square_mask


def test_markers_only_for_masked_layers(make_layer: Callable[..., Layer]) -> None:
    layers = [
        make_layer(label="a", mask=square_mask((4, 6), 4, 2, 6, 4)),
        make_layer(label="b"),
        make_layer(label="c", mask=square_mask((4, 6), 0, 0, 2, 2), enabled=False),
    ]
    markers = build_markers(layers)
    assert [(m.index, m.text, m.name) for m in markers] == [(0, "m00", "a"), (2, "m02", "c")]
    assert markers[0].position == pytest.approx((4.5 / 6, 2.5 / 4))
    assert markers[0].enabled
    assert not markers[1].enabled


def test_maskless_layers_can_be_included_at_centre(make_layer: Callable[..., Layer]) -> None:
    markers = build_markers([make_layer(label="b")], include_maskless=True)
    assert markers[0].position == (0.5, 0.5)


def test_ambient_marker_reflects_toggle(make_layer: Callable[..., Layer]) -> None:
    markers = build_markers([], ambient_enabled=False)
    assert len(markers) == 1
    ambient = markers[0]
    assert ambient.ambient
    assert ambient.text == "bg"
    assert ambient.position == AMBIENT_MARKER_POSITION
    assert not ambient.enabled


def test_pixel_position_is_clamped_inside_frame() -> None:
    marker = OverlayMarker(index=0, text="m00", name="x", position=(1.0, 1.0), enabled=True)
    assert pixel_position(marker, (10, 20)) == (19, 9)
    centre = OverlayMarker(index=0, text="m00", name="x", position=(0.5, 0.25), enabled=True)
    assert pixel_position(centre, (8, 8)) == (4, 2)


def test_draw_markers_returns_annotated_copy() -> None:
    frame = np.zeros((64, 64, 4), dtype=np.uint8)
    frame[..., 3] = 255
    marker = OverlayMarker(index=0, text="m00", name="x", position=(0.5, 0.5), enabled=True)
    drawn = draw_markers(frame, [marker])
    assert drawn.shape == frame.shape
    assert drawn.dtype == np.uint8
    assert drawn[..., :3].any()
    assert not frame[..., :3].any()

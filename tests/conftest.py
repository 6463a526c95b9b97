from __future__ import annotations

from pathlib import Path
from typing import Callable

import numpy as np
import pytest
from click.testing import CliRunner

from olat_relight.layers import Layer
from tests.helpers.assets import encode_hdr, encode_png, solid, square_mask

SCENE_SHAPE = (8, 10)


@pytest.fixture
def runner() -> CliRunner:
    """Provide a Click runner configured for CLI smoke tests."""

    return CliRunner()


@pytest.fixture
def make_layer() -> Callable[..., Layer]:
    """Build uniform-grey layers with optional masks and controls."""

    def _factory(
        value: float = 0.5,
        *,
        shape: tuple[int, int] = (4, 6),
        label: str = "olat",
        mask: np.ndarray | None = None,
        **kwargs: object,
    ) -> Layer:
        return Layer(label, solid(shape, (value, value, value)), mask, **kwargs)  # type: ignore[arg-type]

    return _factory


@pytest.fixture
def scene_dir(tmp_path: Path) -> Path:
    """Write a two-scene manifest with real image assets under ``tmp_path``.

    ``scene2`` lists three layers, the last of which does not exist on disk,
    and a mask for the first layer only.
    """

    kitchen = tmp_path / "kitchen"
    kitchen.mkdir()
    (kitchen / "bg.png").write_bytes(encode_png(np.full(SCENE_SHAPE + (3,), 128, dtype=np.uint8)))
    (kitchen / "olat_00.hdr").write_bytes(encode_hdr(solid(SCENE_SHAPE, (0.25, 0.25, 0.25))))
    (kitchen / "olat_01.hdr").write_bytes(encode_hdr(solid(SCENE_SHAPE, (0.5, 0.5, 0.5))))
    (kitchen / "mask_00.png").write_bytes(encode_png(square_mask(SCENE_SHAPE, 0, 0, 4, 4)))

    garden = tmp_path / "garden"
    garden.mkdir()
    (garden / "bg.png").write_bytes(encode_png(np.zeros((4, 4, 3), dtype=np.uint8)))

    (tmp_path / "scene_manifest.yaml").write_text(
        "scenes:\n"
        "  scene10:\n"
        "    ours:\n"
        "      bg: garden/bg.png\n"
        "  scene2:\n"
        "    input: kitchen/bg.png\n"
        "    ours:\n"
        "      bg: kitchen/bg.png\n"
        "      olat: [kitchen/olat_00.hdr, kitchen/olat_01.hdr, kitchen/missing.hdr]\n"
        "      mask: [kitchen/mask_00.png]\n",
        encoding="utf-8",
    )
    return tmp_path

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from olat_relight.render.encoders import to_uint8, write_png
from olat_relight.errors import ExportError, ExportPathError, ExportWriterError, RelightError


def test_to_uint8_clips_and_rounds() -> None:
    frame = np.array([[[-0.5, 0.5, 2.0, np.nan]]], dtype=np.float32)
    np.testing.assert_array_equal(to_uint8(frame), [[[0, 128, 255, 0]]])


def test_write_png_creates_parent_directories(tmp_path: Path) -> None:
    frame = np.ones((3, 5, 4), dtype=np.float32)
    frame[..., 0] = 0.0
    target = tmp_path / "nested" / "out.png"
    assert write_png(target, frame) == target
    with Image.open(target) as image:
        assert image.mode == "RGBA"
        assert image.size == (5, 3)
        assert image.getpixel((0, 0)) == (0, 255, 255, 255)


def test_write_png_accepts_uint8_rgb(tmp_path: Path) -> None:
    pixels = np.zeros((2, 2, 3), dtype=np.uint8)
    target = write_png(tmp_path / "rgb.png", pixels)
    with Image.open(target) as image:
        assert image.mode == "RGB"


def test_write_png_rejects_bad_shape(tmp_path: Path) -> None:
    with pytest.raises(ExportWriterError):
        write_png(tmp_path / "bad.png", np.zeros((2, 2), dtype=np.float32))


def test_write_png_reports_unusable_directory(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(ExportPathError):
        write_png(blocker / "out.png", np.zeros((2, 2, 3), dtype=np.float32))


def test_export_errors_share_the_relight_root(tmp_path: Path) -> None:
    assert issubclass(ExportPathError, ExportError)
    assert issubclass(ExportWriterError, ExportError)
    with pytest.raises(RelightError):
        write_png(tmp_path / "bad.png", np.zeros((2, 2, 2), dtype=np.uint8))

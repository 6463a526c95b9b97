"""Decoding helpers that turn fetched bytes into pixel buffers.

HDR layers (OpenEXR / Radiance) go through OpenCV and stay linear float32.
Display-referred images (background, masks) go through Pillow.
"""

from __future__ import annotations

import io
import logging
import os

os.environ.setdefault("OPENCV_IO_ENABLE_OPENEXR", "1")

import cv2  # noqa: E402
import numpy as np  # noqa: E402
from PIL import Image, UnidentifiedImageError  # noqa: E402

from .errors import AssetLoadError  # noqa: E402

__all__ = [
    "decode_hdr",
    "decode_ldr",
    "decode_mask",
    "resample",
]

logger = logging.getLogger(__name__)


def decode_hdr(data: bytes, *, name: str = "<memory>") -> np.ndarray:
    """Decode an HDR image into a linear float32 ``H x W x 3`` RGB array."""

    buffer = np.frombuffer(data, dtype=np.uint8)
    try:
        img = cv2.imdecode(buffer, cv2.IMREAD_ANYCOLOR | cv2.IMREAD_ANYDEPTH | cv2.IMREAD_UNCHANGED)
    except cv2.error as exc:
        raise AssetLoadError(name, f"OpenCV failed to decode HDR image: {exc}") from exc
    if img is None:
        raise AssetLoadError(name, "OpenCV could not decode HDR image")
    if img.ndim == 2:
        img = cv2.cvtColor(img, cv2.COLOR_GRAY2RGB)
    else:
        # alpha is not used for compositing
        img = cv2.cvtColor(img[..., :3], cv2.COLOR_BGR2RGB)
    if not np.issubdtype(img.dtype, np.floating):
        scale = float(np.iinfo(img.dtype).max)
        img = img.astype(np.float32) / scale
    return np.ascontiguousarray(img, dtype=np.float32)


def _open_pillow(data: bytes, name: str) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise AssetLoadError(name, f"Pillow could not decode image: {exc}") from exc
    return image


def decode_ldr(data: bytes, *, name: str = "<memory>") -> np.ndarray:
    """Decode a display-encoded image into float32 RGB values in [0, 1]."""

    image = _open_pillow(data, name)
    rgb = np.asarray(image.convert("RGB"), dtype=np.float32)
    return rgb / 255.0


def decode_mask(data: bytes, *, name: str = "<memory>") -> np.ndarray:
    """Decode a mask into an 8-bit RGBA array (red channel carries the mask)."""

    image = _open_pillow(data, name)
    return np.asarray(image.convert("RGBA"), dtype=np.uint8)


def resample(image: np.ndarray, shape: tuple[int, int]) -> np.ndarray:
    """Bilinearly resample *image* to ``(height, width)``."""

    height, width = shape
    if image.shape[:2] == (height, width):
        return image
    logger.debug("resampling %s -> %s", image.shape[:2], (height, width))
    return cv2.resize(image, (width, height), interpolation=cv2.INTER_LINEAR)

"""Frame quantisation and PNG export."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
from PIL import Image

from ..errors import ExportPathError, ExportWriterError

__all__ = ["to_uint8", "write_png"]

logger = logging.getLogger(__name__)


def to_uint8(frame: np.ndarray) -> np.ndarray:
    """Quantise a display-encoded float frame to 8 bits per channel."""

    clipped = np.clip(np.nan_to_num(frame, nan=0.0), 0.0, 1.0)
    return np.rint(clipped * 255.0).astype(np.uint8)


def write_png(path: Path, frame: np.ndarray) -> Path:
    """Write *frame* (float in [0, 1] or uint8, RGB or RGBA) to *path* as PNG."""

    pixels = frame if frame.dtype == np.uint8 else to_uint8(frame)
    if pixels.ndim != 3 or pixels.shape[-1] not in (3, 4):
        raise ExportWriterError(f"expected an H x W x 3|4 frame, got shape {pixels.shape}")

    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ExportPathError(f"cannot create export directory {target.parent}: {exc}") from exc
    try:
        Image.fromarray(np.ascontiguousarray(pixels)).save(target, format="PNG")
    except (OSError, ValueError) as exc:
        raise ExportWriterError(f"failed to write {target}: {exc}") from exc
    logger.info("exported frame %dx%d -> %s", pixels.shape[1], pixels.shape[0], target)
    return target

from __future__ import annotations

import os
import re
from pathlib import Path

__all__ = [
    "INVALID_LABEL_PATTERN",
    "layer_label",
    "marker_label",
    "prepare_filename",
    "sanitise_label",
]


INVALID_LABEL_PATTERN = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_HDR_SUFFIXES = (".exr", ".hdr")


def sanitise_label(label: str) -> str:
    """Return a filesystem-safe label while preserving user intent when possible."""

    cleaned = INVALID_LABEL_PATTERN.sub("_", label)
    if os.name == "nt":
        cleaned = cleaned.rstrip(" .")
    cleaned = cleaned.strip()
    return cleaned or "scene"


def layer_label(location: str, index: int) -> str:
    """Derive a display label for a layer from its asset location."""

    name = Path(str(location).split("?", 1)[0]).name
    for suffix in _HDR_SUFFIXES:
        if name.lower().endswith(suffix):
            name = name[: -len(suffix)]
            break
    return name or f"OLAT {index}"


def marker_label(index: int) -> str:
    """Short overlay marker text for layer *index* (``m00``, ``m01``...)."""

    return f"m{index:02d}"


def prepare_filename(scene: str | None, template: str = "{scene}_blend.png") -> str:
    """Return the export filename for *scene* using *template*."""

    filename = template.format(scene=sanitise_label(scene or "scene"))
    if not filename.lower().endswith(".png"):
        filename += ".png"
    return filename

"""Pure render-time helpers: compositing, export encoding, naming, overlays."""

from __future__ import annotations

from . import compositor, encoders, naming, overlay
from .compositor import composite

__all__ = ["composite", "compositor", "encoders", "naming", "overlay"]

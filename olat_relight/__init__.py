"""Relight a still image from one-light-at-a-time captures."""

from .centroid import mask_centroid
from .color import TMConfig
from .config_loader import ConfigError, load_config
from .datatypes import AppConfig, ColorMode, ToneMode
from .errors import AssetLoadError, ExportError, ManifestError, RelightError, SceneNotFoundError
from .layers import MAX_LAYERS, Background, Layer
from .render.compositor import composite
from .scene import SceneLoader, SceneState
from .session import RelightSession

__all__ = [
    "MAX_LAYERS",
    "AppConfig",
    "AssetLoadError",
    "Background",
    "ColorMode",
    "ConfigError",
    "ExportError",
    "Layer",
    "ManifestError",
    "RelightError",
    "RelightSession",
    "SceneLoader",
    "SceneNotFoundError",
    "SceneState",
    "TMConfig",
    "ToneMode",
    "composite",
    "load_config",
    "mask_centroid",
]

"""Colour science entry points: transfer curves, tone operators, temperature."""

from .config import DEFAULT_TM_CONFIG, TMConfig
from .exceptions import TonemapConfigError, TonemapError
from .operators import (
    filmic_tonemap,
    inverse_filmic,
    inverse_reinhard,
    inverse_tonemap,
    reinhard_tonemap,
    tonemap,
)
from .temperature import blackbody_to_rgb, parse_hex_color
from .transfer import linear_to_srgb, srgb_to_linear

__all__ = [
    "DEFAULT_TM_CONFIG",
    "TMConfig",
    "TonemapConfigError",
    "TonemapError",
    "blackbody_to_rgb",
    "filmic_tonemap",
    "inverse_filmic",
    "inverse_reinhard",
    "inverse_tonemap",
    "linear_to_srgb",
    "parse_hex_color",
    "reinhard_tonemap",
    "srgb_to_linear",
    "tonemap",
]

"""Configuration dataclasses and shared enums for the relighting tool."""

from dataclasses import dataclass, field
from enum import Enum


class ToneMode(str, Enum):
    """Tone reproduction operator applied to the linear-light sum."""

    LINEAR = "linear"
    REINHARD = "reinhard"
    FILMIC = "filmic"

    @classmethod
    def parse(cls, value: "ToneMode | str") -> "ToneMode":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(
                f"unknown tone mode {value!r}; expected one of {[m.value for m in cls]}"
            ) from None


class ColorMode(str, Enum):
    """Which parameter drives a layer's tint."""

    TEMPERATURE = "temperature"
    DIRECT_RGB = "rgb"

    @classmethod
    def parse(cls, value: "ColorMode | str") -> "ColorMode":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        aliases = {"temp": "temperature", "temp (k)": "temperature", "rgb picker": "rgb", "picker": "rgb"}
        normalized = aliases.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(
                f"unknown colour mode {value!r}; expected 'temperature' or 'rgb'"
            ) from None


@dataclass
class PathsConfig:
    """Where the scene manifest lives and where assets resolve from."""

    manifest: str = "static/demo/scene_manifest.yaml"
    data_root: str = ""


@dataclass
class RenderConfig:
    """Initial render state; persists across scene switches."""

    tone_mapping: str = "reinhard"
    max_point: float = 16.0
    ambient_enabled: bool = True
    ambient_scale: float = 0.5


@dataclass
class LoaderConfig:
    """Asset fetch/decode behaviour."""

    max_workers: int = 4
    timeout_seconds: float = 30.0
    retries: int = 2
    resample_to_background: bool = True


@dataclass
class ExportConfig:
    """Exported frame location and naming."""

    directory: str = "exports"
    filename_template: str = "{scene}_blend.png"
    draw_markers: bool = False


@dataclass
class AppConfig:
    """Aggregated configuration loaded from the user-provided TOML file."""

    paths: PathsConfig = field(default_factory=PathsConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    loader: LoaderConfig = field(default_factory=LoaderConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

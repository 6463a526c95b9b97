"""Configuration loader that parses and validates user-provided TOML."""

from __future__ import annotations

import tomllib
from dataclasses import fields, is_dataclass
from typing import Any, Dict

from .datatypes import (
    AppConfig,
    ExportConfig,
    LoaderConfig,
    PathsConfig,
    RenderConfig,
    ToneMode,
)

__all__ = ["ConfigError", "load_config", "parse_config"]

_SECTIONS = {
    "paths": PathsConfig,
    "render": RenderConfig,
    "loader": LoaderConfig,
    "export": ExportConfig,
}


class ConfigError(ValueError):
    """Raised when the configuration file is malformed or fails validation."""


def _coerce_bool(value: Any, dotted_key: str) -> bool:
    """Return a bool, coercing simple 0/1 representations when necessary."""

    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"0", "1"}:
            return normalized == "1"
        if normalized in {"true", "false"}:
            return normalized == "true"
    raise ConfigError(f"{dotted_key} must be a boolean (use true/false).")


def _coerce_float(value: Any, dotted_key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{dotted_key} must be a number")
    return float(value)


def _sanitize_section(raw: dict[str, Any], name: str, cls):
    """
    Coerce a raw TOML table into an instance of ``cls``.

    Parameters:
        raw (dict[str, Any]): Raw TOML section data.
        name (str): Section name used when reporting validation errors.
        cls: Dataclass type used to construct the section object.

    Returns:
        Any: Instantiated dataclass populated with values from ``raw``.

    Raises:
        ConfigError: If the section is not a table or contains invalid keys or values.
    """
    if not isinstance(raw, dict):
        raise ConfigError(f"[{name}] must be a table")
    cleaned: Dict[str, Any] = {}
    cls_fields = {field.name: field for field in fields(cls)}
    bool_fields = {key for key, field in cls_fields.items() if field.type is bool}
    float_fields = {key for key, field in cls_fields.items() if field.type is float}
    nested_fields = {
        key: field.type
        for key, field in cls_fields.items()
        if is_dataclass(field.type)
    }
    for key, value in raw.items():
        if key in bool_fields:
            cleaned[key] = _coerce_bool(value, f"{name}.{key}")
        elif key in float_fields:
            cleaned[key] = _coerce_float(value, f"{name}.{key}")
        elif key in nested_fields:
            if not isinstance(value, dict):
                raise ConfigError(f"[{name}.{key}] must be a table")
            cleaned[key] = _sanitize_section(value, f"{name}.{key}", nested_fields[key])
        else:
            cleaned[key] = value
    try:
        return cls(**cleaned)
    except TypeError as exc:
        raise ConfigError(f"Invalid keys in [{name}]: {exc}") from exc


def parse_config(raw: dict[str, Any]) -> AppConfig:
    """Build and validate an :class:`AppConfig` from an already-parsed TOML mapping."""

    unknown = sorted(set(raw) - set(_SECTIONS))
    if unknown:
        raise ConfigError(f"Unknown configuration sections: {', '.join(unknown)}")

    app = AppConfig(
        **{
            section: _sanitize_section(raw.get(section, {}), section, cls)
            for section, cls in _SECTIONS.items()
        }
    )

    try:
        app.render.tone_mapping = ToneMode.parse(app.render.tone_mapping).value
    except ValueError as exc:
        raise ConfigError(f"render.tone_mapping: {exc}") from None
    if app.render.max_point <= 0:
        raise ConfigError("render.max_point must be > 0")
    if not 0.0 <= app.render.ambient_scale <= 3.0:
        raise ConfigError("render.ambient_scale must be between 0 and 3")

    if not str(app.paths.manifest).strip():
        raise ConfigError("paths.manifest must be set")

    if not isinstance(app.loader.max_workers, int) or app.loader.max_workers < 1:
        raise ConfigError("loader.max_workers must be an integer >= 1")
    if app.loader.timeout_seconds <= 0:
        raise ConfigError("loader.timeout_seconds must be > 0")
    if not isinstance(app.loader.retries, int) or app.loader.retries < 0:
        raise ConfigError("loader.retries must be an integer >= 0")

    if not str(app.export.directory).strip():
        raise ConfigError("export.directory must be set")
    if "{scene}" not in app.export.filename_template:
        raise ConfigError("export.filename_template must contain '{scene}'")

    return app


def load_config(path: str) -> AppConfig:
    """
    Load and validate an application configuration from a TOML file.

    Reads the file at `path` as UTF-8 TOML (a BOM is accepted) and returns a
    fully populated AppConfig.

    Raises:
        ConfigError: If the file is not UTF-8, TOML parsing fails, or any validation rule is violated.
    """

    with open(path, "rb") as handle:
        raw_bytes = handle.read()
    if raw_bytes.startswith(b"\xef\xbb\xbf"):
        raw_bytes = raw_bytes[3:]
    try:
        raw = tomllib.loads(raw_bytes.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise ConfigError("Configuration file must be UTF-8 encoded") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse TOML: {exc}") from exc
    return parse_config(raw)

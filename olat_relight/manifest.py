"""Scene manifest parsing and asset path resolution.

The manifest is YAML::

    scenes:
      kitchen:
        input: kitchen/input.png
        ours:
          bg: kitchen/bg.png
          olat: [kitchen/olat_00.exr, kitchen/olat_01.exr]
          mask: [kitchen/mask_00.png, kitchen/mask_01.png]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Mapping, Optional

import yaml
from natsort import natsorted

from .errors import AssetLoadError, ManifestError, SceneNotFoundError
from .net import fetch_bytes, is_url

__all__ = [
    "SceneAssets",
    "SceneManifest",
    "load_manifest",
    "parse_manifest",
    "resolve_path",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SceneAssets:
    """Resolved asset locations for one scene (not yet fetched)."""

    name: str
    background: Optional[str]
    layers: tuple[Optional[str], ...] = ()
    masks: tuple[Optional[str], ...] = ()
    input: Optional[str] = None


@dataclass(slots=True)
class SceneManifest:
    """All scenes known to the manifest, in natural sort order."""

    data_root: str
    scenes: dict[str, Mapping[str, Any]] = field(default_factory=dict)

    @property
    def names(self) -> list[str]:
        return list(self.scenes)

    def assets(self, name: str) -> SceneAssets:
        try:
            entry = self.scenes[name]
        except KeyError:
            raise SceneNotFoundError(f"scene {name!r} is not in the manifest") from None
        ours = entry.get("ours") or {}
        if not isinstance(ours, Mapping):
            raise ManifestError(f"scenes.{name}.ours must be a table")
        olat = _as_list(ours.get("olat"), f"scenes.{name}.ours.olat")
        mask = _as_list(ours.get("mask"), f"scenes.{name}.ours.mask")
        return SceneAssets(
            name=name,
            background=resolve_path(ours.get("bg"), self.data_root),
            # empty entries stay as None so layers and masks remain index aligned
            layers=tuple(resolve_path(p, self.data_root) for p in olat),
            masks=tuple(resolve_path(p, self.data_root) for p in mask),
            input=resolve_path(entry.get("input"), self.data_root),
        )


def _as_list(value: Any, dotted_key: str) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    raise ManifestError(f"{dotted_key} must be a list")


def resolve_path(path: Any, data_root: str) -> Optional[str]:
    """Resolve *path* against *data_root* unless it is already absolute or a URL."""

    if path is None or path == "":
        return None
    text = str(path)
    if is_url(text) or Path(text).is_absolute():
        return text
    if not data_root:
        return text
    if is_url(data_root):
        return data_root.rstrip("/") + "/" + str(PurePosixPath(text))
    return str(Path(data_root) / text)


def parse_manifest(text: str, data_root: str) -> SceneManifest:
    """Parse manifest YAML; scene order follows natural sorting of the names."""

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ManifestError(f"Failed to parse manifest YAML: {exc}") from exc
    if not isinstance(raw, Mapping):
        raise ManifestError("manifest must be a mapping with a 'scenes' table")
    scenes = raw.get("scenes")
    if not isinstance(scenes, Mapping):
        raise ManifestError("manifest is missing the 'scenes' table")

    by_name = {str(key): value for key, value in scenes.items()}
    ordered: dict[str, Mapping[str, Any]] = {}
    for name in natsorted(by_name):
        entry = by_name[name]
        if not isinstance(entry, Mapping):
            raise ManifestError(f"scenes.{name} must be a table")
        ordered[name] = entry
    logger.debug("manifest lists %d scenes", len(ordered))
    return SceneManifest(data_root=data_root, scenes=ordered)


def _default_root(location: str) -> str:
    if is_url(location):
        return location.rsplit("/", 1)[0]
    return str(Path(location).parent)


def load_manifest(location: str, *, data_root: str | None = None, timeout: float = 30.0) -> SceneManifest:
    """Fetch and parse the manifest at *location*.

    Failures here are fatal for the initial scene selection and surface as
    :class:`ManifestError`.
    """

    try:
        raw_bytes = fetch_bytes(location, timeout=timeout)
    except AssetLoadError as exc:
        raise ManifestError(f"Failed to load manifest: {exc}") from exc
    try:
        text = raw_bytes.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ManifestError("Manifest must be UTF-8 encoded") from exc
    return parse_manifest(text, data_root or _default_root(location))

"""Scene state and the loader that fetches and decodes a scene's assets."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Optional

import numpy as np

from .errors import AssetLoadError
from .layers import MAX_LAYERS, Background, Layer, truncate_layers
from .manifest import SceneManifest
from .media import decode_hdr, decode_ldr, decode_mask, resample
from .net import fetch_bytes, is_url, redact_url_for_logs
from .render.naming import layer_label

__all__ = ["SceneLoader", "SceneState"]

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], bytes]
Decoder = Callable[..., np.ndarray]


@dataclass(frozen=True)
class SceneState:
    """Everything the compositor needs for one scene.

    A new instance is built in full for every scene load and then published
    by reference, so readers never observe a mix of two scenes.
    """

    name: str
    background: Background = field(default_factory=Background)
    layers: tuple[Layer, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def shape(self) -> Optional[tuple[int, int]]:
        if self.background.shape is not None:
            return self.background.shape
        if self.layers:
            return self.layers[0].shape
        return None

    @classmethod
    def empty(cls) -> SceneState:
        return cls(name="")


def _display_location(location: str) -> str:
    return redact_url_for_logs(location) if is_url(location) else location


class SceneLoader:
    """Fetch and decode a scene's background, layers and masks concurrently."""

    def __init__(
        self,
        manifest: SceneManifest,
        *,
        fetch: Optional[Fetcher] = None,
        max_workers: int = 4,
        timeout: float = 30.0,
        retries: int = 2,
        resample_to_background: bool = True,
    ) -> None:
        self.manifest = manifest
        self._fetch = fetch or partial(fetch_bytes, timeout=timeout, retries=retries)
        self.max_workers = max(1, int(max_workers))
        self.resample_to_background = resample_to_background

    def _read(self, location: Optional[str], decoder: Decoder, kind: str) -> Optional[np.ndarray]:
        if not location:
            return None
        shown = _display_location(location)
        try:
            data = self._fetch(location)
            return decoder(data, name=shown)
        except AssetLoadError as exc:
            logger.warning("Failed to load %s %s: %s", kind, shown, exc.problem)
            return None

    def load(
        self,
        name: str,
        *,
        ambient_enabled: bool = True,
        ambient_scale: float = 0.5,
        on_warning: Optional[Callable[[str], None]] = None,
    ) -> SceneState:
        """Load scene *name* and return a fully built :class:`SceneState`.

        Individual asset failures degrade instead of raising: a missing
        background renders black, a missing layer is left out and a missing
        mask centres the layer's marker.
        """

        assets = self.manifest.assets(name)
        warnings: list[str] = []

        def warn(message: str) -> None:
            warnings.append(message)
            if on_warning is not None:
                on_warning(message)

        layer_paths = truncate_layers(assets.layers, on_warning=warn)
        mask_paths = list(assets.masks[:MAX_LAYERS])
        logger.info(
            "Loading scene %s: background=%s layers=%d masks=%d",
            name,
            bool(assets.background),
            len(layer_paths),
            len(mask_paths),
        )

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="relight-load") as pool:
            bg_future: Future = pool.submit(self._read, assets.background, decode_ldr, "background")
            layer_futures = [pool.submit(self._read, path, decode_hdr, "layer") for path in layer_paths]
            mask_futures = [pool.submit(self._read, path, decode_mask, "mask") for path in mask_paths]

            bg_image = bg_future.result()
            layer_images = [future.result() for future in layer_futures]
            masks = [future.result() for future in mask_futures]

        if assets.background and bg_image is None:
            warn(f"background for scene {name!r} unavailable; rendering ambient as black")
        background = Background(bg_image, ambient_enabled=ambient_enabled, ambient_scale=ambient_scale)

        layers: list[Layer] = []
        for idx, (path, image) in enumerate(zip(layer_paths, layer_images)):
            if path is None:
                warn(f"layer {idx} has no asset in the manifest; omitted")
                continue
            if image is None:
                warn(f"layer {idx} ({_display_location(path)}) unavailable; omitted")
                continue
            if self.resample_to_background and background.shape is not None:
                image = resample(image, background.shape)
            mask = masks[idx] if idx < len(masks) else None
            layers.append(Layer(layer_label(path, idx), image, mask))

        return SceneState(
            name=name,
            background=background,
            layers=tuple(layers),
            warnings=tuple(warnings),
        )

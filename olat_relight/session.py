"""Interactive relighting session: event handlers, scene switching and output.

The session owns an explicit state value (tone state, ambient settings and
the current :class:`~olat_relight.scene.SceneState`). Parameter events mutate
that state synchronously; :meth:`RelightSession.render` reads it and calls the
pure compositor. Scene loads run on a worker thread and are generation
stamped: only the most recently requested load may publish its result.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Optional

import numpy as np

from .color.config import DEFAULT_TM_CONFIG, TMConfig
from .datatypes import AppConfig, ColorMode, ExportConfig, ToneMode
from .layers import AMBIENT_RANGE, Layer
from .manifest import SceneManifest, load_manifest
from .render.compositor import composite
from .render.encoders import to_uint8, write_png
from .render.naming import prepare_filename
from .render.overlay import OverlayMarker, build_markers, draw_markers
from .scene import SceneLoader, SceneState

__all__ = ["RelightSession"]

logger = logging.getLogger(__name__)

DEFAULT_FRAME_SHAPE = (512, 512)


class RelightSession:
    """Explicitly owned render/interaction state for one viewer."""

    def __init__(
        self,
        loader: Optional[SceneLoader] = None,
        *,
        tone: TMConfig = DEFAULT_TM_CONFIG,
        ambient_enabled: bool = True,
        ambient_scale: float = 0.5,
        export: Optional[ExportConfig] = None,
        on_warning: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.loader = loader
        self.tone = tone.resolved()
        self.export_config = export or ExportConfig()
        self._ambient_enabled = bool(ambient_enabled)
        self._ambient_scale = min(max(float(ambient_scale), AMBIENT_RANGE[0]), AMBIENT_RANGE[1])
        self._on_warning = on_warning

        self._lock = threading.Lock()
        self._generation = 0
        self._pending: Optional[Future] = None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="relight-scene")
        self._scene = SceneState.empty()
        self._revision = 0
        self._cached: Optional[tuple[tuple, SceneState, np.ndarray, tuple]] = None

    @classmethod
    def from_config(
        cls,
        cfg: AppConfig,
        *,
        on_warning: Optional[Callable[[str], None]] = None,
    ) -> RelightSession:
        """Build a session from configuration, reading the manifest eagerly.

        Raises :class:`~olat_relight.errors.ManifestError` when the manifest
        cannot be loaded; there is no usable session without it.
        """

        manifest = load_manifest(
            cfg.paths.manifest,
            data_root=cfg.paths.data_root or None,
            timeout=cfg.loader.timeout_seconds,
        )
        loader = SceneLoader(
            manifest,
            max_workers=cfg.loader.max_workers,
            timeout=cfg.loader.timeout_seconds,
            retries=cfg.loader.retries,
            resample_to_background=cfg.loader.resample_to_background,
        )
        tone = TMConfig.from_mapping(
            {"mode": cfg.render.tone_mapping, "max_point": cfg.render.max_point}
        )
        return cls(
            loader,
            tone=tone,
            ambient_enabled=cfg.render.ambient_enabled,
            ambient_scale=cfg.render.ambient_scale,
            export=cfg.export,
            on_warning=on_warning,
        )

    def close(self) -> None:
        self._executor.shutdown(wait=True, cancel_futures=True)

    def __enter__(self) -> RelightSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- state access -----------------------------------------------------

    @property
    def scene(self) -> SceneState:
        return self._scene

    @property
    def manifest(self) -> Optional[SceneManifest]:
        return self.loader.manifest if self.loader is not None else None

    @property
    def scene_names(self) -> List[str]:
        manifest = self.manifest
        return manifest.names if manifest is not None else []

    @property
    def layers(self) -> tuple[Layer, ...]:
        return self._scene.layers

    @property
    def revision(self) -> int:
        return self._revision

    def invalidate(self) -> None:
        """Mark the current frame dirty after mutating state directly."""

        self._revision += 1

    def _layer(self, index: int) -> Layer:
        layers = self._scene.layers
        if not 0 <= index < len(layers):
            raise IndexError(f"layer index {index} out of range (scene has {len(layers)} layers)")
        return layers[index]

    # -- scene switching --------------------------------------------------

    def request_scene(self, name: str) -> Future:
        """Start loading *name* in the background.

        The returned future resolves to the published :class:`SceneState`, or
        ``None`` if a newer request superseded this one before it finished.
        """

        if self.loader is None:
            raise RuntimeError("session has no scene loader")
        with self._lock:
            self._generation += 1
            generation = self._generation
            previous = self._pending
            if previous is not None and previous.cancel():
                logger.debug("cancelled queued scene load before it started")
            future = self._executor.submit(self._load_and_commit, generation, name)
            self._pending = future
        return future

    def load_scene(self, name: str) -> Optional[SceneState]:
        """Blocking variant of :meth:`request_scene`."""

        return self.request_scene(name).result()

    def _load_and_commit(self, generation: int, name: str) -> Optional[SceneState]:
        if self.loader is None:
            raise RuntimeError("session has no scene loader")
        if generation != self._generation:
            logger.debug("skipping superseded load of scene %s", name)
            return None
        state = self.loader.load(
            name,
            ambient_enabled=self._ambient_enabled,
            ambient_scale=self._ambient_scale,
            on_warning=self._on_warning,
        )
        return self._commit(generation, state)

    def _commit(self, generation: int, state: SceneState) -> Optional[SceneState]:
        with self._lock:
            if generation != self._generation:
                logger.info("Discarding stale load of scene %s", state.name)
                return None
            # ambient controls may have changed while the load was running
            state.background.ambient_enabled = self._ambient_enabled
            state.background.ambient_scale = self._ambient_scale
            self._scene = state
            self._revision += 1
        logger.info("Scene %s ready with %d layers", state.name, len(state.layers))
        return state

    # -- parameter events -------------------------------------------------

    def set_layer_enabled(self, index: int, enabled: bool) -> None:
        self._layer(index).enabled = bool(enabled)
        self.invalidate()

    def toggle_layer(self, index: int) -> bool:
        layer = self._layer(index)
        layer.enabled = not layer.enabled
        self.invalidate()
        return layer.enabled

    def set_layer_ev(self, index: int, ev: float) -> None:
        self._layer(index).ev = ev
        self.invalidate()

    def set_layer_color_mode(self, index: int, mode: ColorMode | str) -> None:
        self._layer(index).color_mode = mode
        self.invalidate()

    def set_layer_temperature(self, index: int, kelvin: float) -> None:
        self._layer(index).temperature = kelvin
        self.invalidate()

    def set_layer_color(self, index: int, color: str) -> None:
        self._layer(index).picker_color = color
        self.invalidate()

    @property
    def ambient_enabled(self) -> bool:
        return self._ambient_enabled

    def set_ambient_enabled(self, enabled: bool) -> None:
        self._ambient_enabled = bool(enabled)
        self._scene.background.ambient_enabled = self._ambient_enabled
        self.invalidate()

    def toggle_ambient(self) -> bool:
        self.set_ambient_enabled(not self._ambient_enabled)
        return self._ambient_enabled

    @property
    def ambient_scale(self) -> float:
        return self._ambient_scale

    def set_ambient_scale(self, scale: float) -> None:
        self._scene.background.ambient_scale = scale
        self._ambient_scale = self._scene.background.ambient_scale
        self.invalidate()

    def set_tone_mode(self, mode: ToneMode | str) -> None:
        self.tone = self.tone.merged(mode=mode)
        self.invalidate()

    def set_max_point(self, max_point: float) -> None:
        self.tone = self.tone.merged(max_point=max_point)
        self.invalidate()

    def reset_layers(self) -> None:
        """Reset every layer to enabled, 0 EV, 6500 K temperature mode."""

        for layer in self._scene.layers:
            layer.reset()
        self.invalidate()

    def apply_batch_color(
        self,
        mode: ColorMode | str,
        *,
        temperature: Optional[float] = None,
        color: Optional[str] = None,
    ) -> None:
        """Switch every layer to *mode* and apply the shared colour parameter."""

        mode = ColorMode.parse(mode)
        for layer in self._scene.layers:
            if mode is ColorMode.TEMPERATURE and temperature is not None:
                layer.temperature = temperature
            elif mode is ColorMode.DIRECT_RGB and color is not None:
                layer.picker_color = color
            layer.color_mode = mode
        self.invalidate()

    def apply_batch_exposure(self, ev: float) -> None:
        for layer in self._scene.layers:
            layer.ev = ev
        self.invalidate()

    # -- output -----------------------------------------------------------

    def render(self) -> np.ndarray:
        """Composite the current state into a display-encoded RGBA frame."""

        scene = self._scene
        key = self._render_key(scene)
        cached = self._cached
        if cached is not None and cached[1] is scene and cached[0] == key:
            return cached[2]
        frame = composite(
            scene.background,
            scene.layers,
            self.tone,
            shape=scene.shape or DEFAULT_FRAME_SHAPE,
        )
        frame.flags.writeable = False
        # hold the buffers so the ids in the key stay unique while cached
        buffers = (scene.background.image,) + tuple(layer.image for layer in scene.layers)
        self._cached = (key, scene, frame, buffers)
        return frame

    def _render_key(self, scene: SceneState) -> tuple:
        """Snapshot of every value the composite depends on.

        Layers and the background are mutable, so the key is rebuilt from
        their current values on every read instead of trusting the revision.
        """

        background = scene.background
        layers = tuple(
            (id(layer.image), layer.enabled, layer.ev, layer.tint) for layer in scene.layers
        )
        return (
            self._revision,
            self.tone.mode,
            self.tone.max_point,
            id(background.image),
            background.effective_scale,
            layers,
        )

    def overlay_markers(self, *, include_ambient: bool = True) -> List[OverlayMarker]:
        """Marker placement and enabled styling for the current scene."""

        scene = self._scene
        return build_markers(
            scene.layers,
            ambient_enabled=self._ambient_enabled if include_ambient else None,
        )

    def export(self, target: Optional[Path | str] = None, *, markers: Optional[bool] = None) -> Path:
        """Write the current frame as PNG and return its path.

        *target* may be a file path, a directory (the configured filename
        template is used inside it) or ``None`` for the configured directory.
        """

        cfg = self.export_config
        if target is None:
            path = Path(cfg.directory) / prepare_filename(self._scene.name, cfg.filename_template)
        else:
            path = Path(target)
            if path.is_dir() or path.suffix == "":
                path = path / prepare_filename(self._scene.name, cfg.filename_template)

        pixels = to_uint8(self.render())
        draw = cfg.draw_markers if markers is None else markers
        if draw:
            pixels = draw_markers(pixels, self.overlay_markers())
        return write_png(path, pixels)

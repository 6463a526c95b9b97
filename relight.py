"""CLI entry point for rendering relit frames from an OLAT scene manifest."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterable, NoReturn, Optional, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from olat_relight.color.exceptions import TonemapConfigError
from olat_relight.config_loader import ConfigError, load_config
from olat_relight.datatypes import AppConfig, ColorMode, ToneMode
from olat_relight.errors import ExportError, ManifestError, SceneNotFoundError
from olat_relight.session import RelightSession

console = Console()
err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False, rich_tracebacks=True)],
        force=True,
    )


def _fail(message: str, code: int = 1) -> NoReturn:
    err_console.print(f"[red]{message}[/red]")
    sys.exit(code)


def _load_app_config(config_path: Optional[str], manifest: Optional[str]) -> AppConfig:
    if config_path:
        try:
            cfg = load_config(config_path)
        except FileNotFoundError:
            _fail(f"Config file not found: {config_path}")
        except ConfigError as exc:
            _fail(f"Invalid config: {exc}")
    else:
        cfg = AppConfig()
    if manifest:
        cfg.paths.manifest = manifest
    return cfg


def _open_session(cfg: AppConfig) -> RelightSession:
    try:
        return RelightSession.from_config(cfg)
    except ManifestError as exc:
        _fail(f"Error: {exc}")
    except TonemapConfigError as exc:
        _fail(f"Invalid tone settings: {exc}")


def _parse_assignments(values: Iterable[str], option: str, cast) -> list[Tuple[int, object]]:
    parsed = []
    for raw in values:
        index_text, sep, value_text = raw.partition("=")
        if not sep:
            raise click.BadParameter(f"expected IDX=VALUE, got {raw!r}", param_hint=option)
        try:
            parsed.append((int(index_text), cast(value_text)))
        except ValueError as exc:
            raise click.BadParameter(f"{raw!r}: {exc}", param_hint=option) from None
    return parsed


@click.group()
@click.option("--config", "config_path", default=None, help="Path to a config.toml (defaults are used when omitted).")
@click.option("--manifest", default=None, help="Override [paths.manifest] from the config.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], manifest: Optional[str], verbose: bool) -> None:
    """Relight still images from one-light-at-a-time captures."""

    _configure_logging(verbose)
    ctx.obj = _load_app_config(config_path, manifest)


@cli.command("list-scenes")
@click.pass_obj
def list_scenes(cfg: AppConfig) -> None:
    """List the scenes in the manifest in display order."""

    with _open_session(cfg) as session:
        names = session.scene_names
    if not names:
        console.print("[yellow]Manifest lists no scenes.[/yellow]")
        return
    for name in names:
        console.print(f" - {name}")


@cli.command()
@click.argument("scene")
@click.option("--tone", type=click.Choice([mode.value for mode in ToneMode], case_sensitive=False), default=None)
@click.option("--max-point", type=float, default=None, help="Reinhard white point.")
@click.option("--ambient-scale", type=click.FloatRange(0.0, 3.0), default=None)
@click.option("--no-ambient", is_flag=True, help="Disable the ambient background contribution.")
@click.option("--ev", "ev_values", multiple=True, metavar="IDX=EV", help="Per-layer exposure in stops.")
@click.option("--temp", "temp_values", multiple=True, metavar="IDX=K", help="Per-layer colour temperature.")
@click.option("--color", "color_values", multiple=True, metavar="IDX=#RRGGBB", help="Per-layer picker colour.")
@click.option("--disable", "disabled", multiple=True, type=int, metavar="IDX", help="Disable a layer.")
@click.option("--all-ev", type=float, default=None, help="Exposure applied to every layer.")
@click.option("--all-temp", type=float, default=None, help="Colour temperature applied to every layer.")
@click.option("--markers/--no-markers", default=None, help="Draw overlay markers on the exported frame.")
@click.option("--out", "out_path", default=None, help="Output PNG path or directory.")
@click.pass_obj
def render(
    cfg: AppConfig,
    scene: str,
    tone: Optional[str],
    max_point: Optional[float],
    ambient_scale: Optional[float],
    no_ambient: bool,
    ev_values: tuple[str, ...],
    temp_values: tuple[str, ...],
    color_values: tuple[str, ...],
    disabled: tuple[int, ...],
    all_ev: Optional[float],
    all_temp: Optional[float],
    markers: Optional[bool],
    out_path: Optional[str],
) -> None:
    """Render SCENE with the given light settings and export it as PNG."""

    ev_pairs = _parse_assignments(ev_values, "--ev", float)
    temp_pairs = _parse_assignments(temp_values, "--temp", float)
    color_pairs = _parse_assignments(color_values, "--color", str)

    with _open_session(cfg) as session:
        try:
            state = session.load_scene(scene)
        except SceneNotFoundError as exc:
            _fail(str(exc), code=2)
        if state is None:
            _fail(f"Scene {scene!r} was superseded before it finished loading")
        for warning in state.warnings:
            console.print(f"[yellow]warning:[/yellow] {warning}")

        if tone:
            session.set_tone_mode(tone)
        if max_point is not None:
            session.set_max_point(max_point)
        if ambient_scale is not None:
            session.set_ambient_scale(ambient_scale)
        if no_ambient:
            session.set_ambient_enabled(False)
        if all_ev is not None:
            session.apply_batch_exposure(all_ev)
        if all_temp is not None:
            session.apply_batch_color(ColorMode.TEMPERATURE, temperature=all_temp)

        try:
            for index, value in ev_pairs:
                session.set_layer_ev(index, value)
            for index, value in temp_pairs:
                session.set_layer_temperature(index, value)
                session.set_layer_color_mode(index, ColorMode.TEMPERATURE)
            for index, value in color_pairs:
                session.set_layer_color(index, value)
                session.set_layer_color_mode(index, ColorMode.DIRECT_RGB)
            for index in disabled:
                session.set_layer_enabled(index, False)
        except (IndexError, ValueError) as exc:
            _fail(f"Invalid layer setting: {exc}", code=2)
        except TonemapConfigError as exc:
            _fail(f"Invalid tone settings: {exc}", code=2)

        try:
            written = session.export(Path(out_path) if out_path else None, markers=markers)
        except ExportError as exc:
            _fail(f"Export failed: {exc}")

    console.print(f"[green]Wrote[/green] {written}")


@cli.command()
@click.argument("scene")
@click.pass_obj
def centroids(cfg: AppConfig, scene: str) -> None:
    """Show each layer's mask centroid (overlay placement)."""

    with _open_session(cfg) as session:
        try:
            state = session.load_scene(scene)
        except SceneNotFoundError as exc:
            _fail(str(exc), code=2)
        if state is None:
            _fail(f"Scene {scene!r} was superseded before it finished loading")
        markers = session.overlay_markers(include_ambient=False)
        maskless = [layer.label for layer in state.layers if not layer.has_mask]

    table = Table(title=f"{scene} overlay markers")
    table.add_column("Marker")
    table.add_column("Layer")
    table.add_column("x", justify="right")
    table.add_column("y", justify="right")
    table.add_column("Enabled")
    for marker in markers:
        table.add_row(
            marker.text,
            marker.name,
            f"{marker.position[0]:.4f}",
            f"{marker.position[1]:.4f}",
            "yes" if marker.enabled else "no",
        )
    console.print(table)
    if maskless:
        console.print(f"[yellow]No mask (centred):[/yellow] {', '.join(maskless)}")


if __name__ == "__main__":
    cli()

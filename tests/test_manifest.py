from __future__ import annotations

from pathlib import Path

import pytest

from olat_relight.errors import ManifestError, SceneNotFoundError
from olat_relight.manifest import SceneManifest, load_manifest, parse_manifest, resolve_path

MANIFEST = """
scenes:
  scene10:
    ours:
      bg: s10/bg.png
  scene2:
    input: s2/input.png
    ours:
      bg: s2/bg.png
      olat: [s2/olat_00.exr, "", s2/olat_01.exr]
      mask: [s2/mask_00.png]
  scene1:
    ours: {}
"""


def test_scenes_are_naturally_sorted() -> None:
    manifest = parse_manifest(MANIFEST, "/data")
    assert manifest.names == ["scene1", "scene2", "scene10"]


def test_assets_resolve_against_data_root() -> None:
    assets = parse_manifest(MANIFEST, "/data").assets("scene2")
    assert assets.name == "scene2"
    assert assets.background == str(Path("/data") / "s2/bg.png")
    assert assets.layers == (
        str(Path("/data") / "s2/olat_00.exr"),
        None,
        str(Path("/data") / "s2/olat_01.exr"),
    )
    assert assets.masks == (str(Path("/data") / "s2/mask_00.png"),)
    assert assets.input == str(Path("/data") / "s2/input.png")


def test_scene_without_assets() -> None:
    assets = parse_manifest(MANIFEST, "/data").assets("scene1")
    assert assets.background is None
    assert assets.layers == ()
    assert assets.masks == ()


def test_unknown_scene_raises() -> None:
    with pytest.raises(SceneNotFoundError):
        parse_manifest(MANIFEST, "/data").assets("attic")


def test_url_data_root() -> None:
    manifest = parse_manifest(MANIFEST, "https://cdn.example.com/demo/")
    assert manifest.assets("scene10").background == "https://cdn.example.com/demo/s10/bg.png"


def test_resolve_path_keeps_absolute_and_urls() -> None:
    assert resolve_path("https://x.example.com/a.exr", "/data") == "https://x.example.com/a.exr"
    absolute = str(Path("/elsewhere/a.exr").resolve())
    assert resolve_path(absolute, "/data") == absolute
    assert resolve_path("rel/a.exr", "") == "rel/a.exr"
    assert resolve_path("", "/data") is None
    assert resolve_path(None, "/data") is None


def test_non_string_scene_keys_are_usable() -> None:
    manifest = parse_manifest("scenes:\n  3:\n    ours: {bg: a.png}\n", "")
    assert manifest.names == ["3"]
    assert manifest.assets("3").background == "a.png"


@pytest.mark.parametrize(
    "text",
    [
        "scenes: [unclosed",
        "- just\n- a list\n",
        "other: {}\n",
        "scenes:\n  broken: 3\n",
    ],
)
def test_malformed_manifests_raise(text: str) -> None:
    with pytest.raises(ManifestError):
        parse_manifest(text, "")


def test_non_list_olat_entry_raises() -> None:
    manifest = SceneManifest(data_root="", scenes={"s": {"ours": {"olat": "one.exr"}}})
    with pytest.raises(ManifestError):
        manifest.assets("s")


def test_load_manifest_defaults_root_to_manifest_directory(tmp_path: Path) -> None:
    path = tmp_path / "scene_manifest.yaml"
    path.write_text("\ufeff" + MANIFEST, encoding="utf-8")
    manifest = load_manifest(str(path))
    assert manifest.data_root == str(tmp_path)
    assert manifest.assets("scene10").background == str(tmp_path / "s10/bg.png")


def test_load_manifest_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ManifestError):
        load_manifest(str(tmp_path / "absent.yaml"))


def test_empty_olat_entries_keep_masks_aligned() -> None:
    text = (
        "scenes:\n"
        "  s:\n"
        "    ours:\n"
        "      olat: [a.exr, null, c.exr]\n"
        "      mask: [a.png, b.png, c.png]\n"
    )
    assets = parse_manifest(text, "").assets("s")
    assert assets.layers == ("a.exr", None, "c.exr")
    assert assets.masks == ("a.png", "b.png", "c.png")
    assert assets.layers.index("c.exr") == assets.masks.index("c.png")

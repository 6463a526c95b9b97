from __future__ import annotations

import pytest

from olat_relight.render import naming


def test_sanitise_label_replaces_invalid_characters() -> None:
    result = naming.sanitise_label('Scene<>:"/\\|?*')
    disallowed = set('<>:"/\\|?*')
    assert all(ch not in disallowed for ch in result)
    assert result.startswith("Scene")


def test_sanitise_label_strips_windows_trailing_chars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(naming.os, "name", "nt", raising=False)
    assert naming.sanitise_label(" demo .") == "demo"


def test_sanitise_label_falls_back_when_empty() -> None:
    assert naming.sanitise_label("   ") == "scene"


def test_prepare_filename_uses_blend_template() -> None:
    assert naming.prepare_filename("kitchen") == "kitchen_blend.png"
    assert naming.prepare_filename(None) == "scene_blend.png"
    assert naming.prepare_filename("a/b", "{scene}-relit") == "a_b-relit.png"


@pytest.mark.parametrize(
    ("location", "expected"),
    [
        ("scenes/kitchen/olat_03.exr", "olat_03"),
        ("https://cdn.example.com/k/olat_04.HDR?sig=abc", "olat_04"),
        ("olat_05.png", "olat_05.png"),
        ("", "OLAT 2"),
    ],
)
def test_layer_label(location: str, expected: str) -> None:
    assert naming.layer_label(location, 2) == expected


def test_marker_label_is_zero_padded() -> None:
    assert naming.marker_label(0) == "m00"
    assert naming.marker_label(7) == "m07"

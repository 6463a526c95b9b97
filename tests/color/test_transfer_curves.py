from __future__ import annotations

import numpy as np
import pytest

from olat_relight.color.transfer import linear_to_srgb, srgb_to_linear


def test_srgb_decode_uses_linear_segment_below_knee() -> None:
    assert srgb_to_linear(0.04045) == pytest.approx(0.04045 / 12.92)
    assert srgb_to_linear(0.0) == 0.0


def test_srgb_decode_power_segment() -> None:
    assert srgb_to_linear(1.0) == pytest.approx(1.0)
    assert srgb_to_linear(0.5) == pytest.approx(((0.5 + 0.055) / 1.055) ** 2.4)


def test_srgb_encode_knee_and_white() -> None:
    assert linear_to_srgb(0.0031308) == pytest.approx(0.0031308 * 12.92)
    assert linear_to_srgb(1.0) == pytest.approx(1.0)


def test_srgb_round_trip_over_unit_range() -> None:
    samples = np.linspace(0.0, 1.0, 257)
    np.testing.assert_allclose(linear_to_srgb(srgb_to_linear(samples)), samples, atol=1e-6)


def test_scalar_input_returns_float_and_arrays_keep_shape() -> None:
    assert isinstance(srgb_to_linear(0.3), float)
    frame = np.full((2, 3, 3), 0.5, dtype=np.float32)
    out = linear_to_srgb(frame)
    assert out.shape == frame.shape
    assert out.dtype == np.float32


def test_srgb_round_trip_at_hundredths() -> None:
    samples = np.round(np.arange(0.0, 1.0001, 0.01), 2)
    np.testing.assert_allclose(linear_to_srgb(srgb_to_linear(samples)), samples, atol=1e-5)

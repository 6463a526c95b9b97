from __future__ import annotations

import numpy as np
import pytest

from olat_relight.color import operators
from olat_relight.datatypes import ToneMode


@pytest.mark.parametrize("max_point", [2.0, 4.0, 8.0, 16.0])
def test_reinhard_inverse_recovers_linear_values(max_point: float) -> None:
    linear = np.linspace(0.0, max_point, 64)
    mapped = operators.reinhard_tonemap(linear, max_point)
    np.testing.assert_allclose(operators.inverse_reinhard(mapped, max_point), linear, rtol=1e-6, atol=1e-9)


def test_reinhard_maps_white_point_to_one() -> None:
    assert operators.reinhard_tonemap(16.0, 16.0) == pytest.approx(1.0)
    assert operators.reinhard_tonemap(0.0) == 0.0


def test_reinhard_is_monotonic() -> None:
    values = operators.reinhard_tonemap(np.linspace(0.0, 50.0, 200), 16.0)
    assert np.all(np.diff(values) > 0)


def test_inverse_reinhard_handles_zero() -> None:
    assert operators.inverse_reinhard(0.0, 16.0) == pytest.approx(0.0)


def test_filmic_inverse_recovers_linear_values() -> None:
    linear = np.linspace(0.0, 5.0, 101)
    mapped = operators.filmic_tonemap(linear)
    assert np.all(mapped < 1.0)
    np.testing.assert_allclose(operators.inverse_filmic(mapped), linear, rtol=1e-6, atol=1e-9)


def test_filmic_output_is_clamped() -> None:
    assert operators.filmic_tonemap(1e6) == pytest.approx(1.0)
    assert operators.filmic_tonemap(0.0) == 0.0


def test_inverse_filmic_never_produces_nan() -> None:
    samples = np.linspace(-0.5, 1.5, 41)
    assert np.all(np.isfinite(operators.inverse_filmic(samples)))


def test_linear_mode_is_identity() -> None:
    data = np.array([0.0, 0.5, 7.0])
    assert operators.tonemap(data, ToneMode.LINEAR) is data
    assert operators.inverse_tonemap(data, "linear") is data


def test_dispatch_accepts_strings() -> None:
    assert operators.tonemap(1.0, "Reinhard", 4.0) == pytest.approx(operators.reinhard_tonemap(1.0, 4.0))
    assert operators.tonemap(1.0, "filmic") == pytest.approx(operators.filmic_tonemap(1.0))
    with pytest.raises(ValueError):
        operators.tonemap(1.0, "aces")


@pytest.mark.parametrize("max_point", [4.0, 16.0, 64.0])
def test_reinhard_round_trip_over_wide_range(max_point: float) -> None:
    linear = np.linspace(0.0, 50.0, 501)
    recovered = operators.inverse_reinhard(operators.reinhard_tonemap(linear, max_point), max_point)
    np.testing.assert_allclose(recovered, linear, atol=1e-4)


def test_filmic_forward_of_inverse_recovers_display_values() -> None:
    display = np.linspace(0.0, 0.99, 100)
    np.testing.assert_allclose(operators.filmic_tonemap(operators.inverse_filmic(display)), display, atol=1e-4)

"""Tests for the filter primitives."""

import numpy as np
import pytest

from audiodrivers.core.filters import (
    BiasedFilter,
    Filter,
    FilterParams,
    filter_gain,
    filter_tao,
    from_filter_params,
    to_filter_params,
)


class TestCoefficients:
    """Tests for FilterParams <-> coefficient conversion."""

    @pytest.mark.parametrize("gain", [0.0, 1.0, -1.0, 5.0, 1e6])
    def test_zero_tao_is_passthrough(self, gain):
        """tao=0 yields (1, 0) and ignores the gain."""
        assert from_filter_params(FilterParams(tao=0, gain=gain)) == (1.0, 0.0)

    def test_unit_tao(self):
        a, b = from_filter_params(FilterParams(tao=1, gain=2))
        assert a == pytest.approx(1.0)
        assert b == pytest.approx(1.0)

    @pytest.mark.parametrize("tao", [0.5, 2.924, 10.5, 138.0, 693.0])
    def test_coefficients_sum_to_gain(self, tao):
        a, b = from_filter_params(FilterParams(tao=tao, gain=-0.05))
        assert a + b == pytest.approx(-0.05)

    @pytest.mark.parametrize("tao", [1.0, 2.924, 56.6, 693.0])
    def test_tao_roundtrip(self, tao):
        """filter_tao recovers the half-life from the coefficients."""
        fp = to_filter_params(from_filter_params(FilterParams(tao=tao, gain=1.0)))

        assert fp.tao == pytest.approx(tao)
        assert fp.gain == pytest.approx(1.0)

    def test_negative_gain_keeps_tao(self):
        coeffs = from_filter_params(FilterParams(tao=138.0, gain=-1.0))
        assert filter_tao(coeffs) == pytest.approx(138.0)
        assert filter_gain(coeffs) == pytest.approx(1.0)

    def test_zero_gain_tao_is_zero(self):
        assert filter_tao((0.0, 0.0)) == 0.0

    def test_zero_b_tao_is_zero(self):
        assert filter_tao((1.0, 0.0)) == 0.0


class TestFilter:
    """Tests for the one-pole filter."""

    def test_step_response_monotonic_without_overshoot(self):
        """A constant input approaches 1.0 from below without overshoot."""
        f = Filter(1, FilterParams(tao=138, gain=1))
        history = [float(f.process(np.ones(1))[0]) for _ in range(2000)]

        assert np.all(np.diff(history) >= 0)
        assert max(history) <= 1.0 + 1e-12
        assert history[-1] > 0.99

    def test_half_life(self):
        """After tao steps of zero input an impulse state has halved."""
        f = Filter(1, FilterParams(tao=10, gain=1))
        f.values[:] = 1.0
        for _ in range(10):
            f.process(np.zeros(1))

        assert f.values[0] == pytest.approx(0.5)

    def test_process_returns_state(self):
        f = Filter(3, FilterParams(tao=2, gain=1))
        out = f.process(np.ones(3))
        assert out is f.values

    def test_set_params_keeps_state(self):
        f = Filter(2, FilterParams(tao=5, gain=1))
        f.process(np.ones(2))
        before = f.values.copy()

        f.set_params(FilterParams(tao=0, gain=1))

        np.testing.assert_array_equal(f.values, before)
        f.process(np.full(2, 3.0))
        np.testing.assert_array_equal(f.values, [3.0, 3.0])

    def test_channels_independent(self):
        f = Filter(2, FilterParams(tao=3, gain=1))
        f.process(np.array([1.0, 0.0]))
        assert f.values[1] == 0.0
        assert f.values[0] > 0.0


class TestBiasedFilter:
    """Tests for direction-dependent smoothing."""

    def test_falling_uses_pos_coefficients(self):
        """Inputs at or below the output follow the pos filter."""
        f = BiasedFilter(1, FilterParams(tao=0, gain=1), FilterParams(tao=100, gain=1))
        f.values[:] = 2.0
        f.process(np.array([-1.0]))

        assert f.values[0] == -1.0

    def test_rising_uses_neg_coefficients(self):
        """Inputs above the output follow the neg filter."""
        f = BiasedFilter(1, FilterParams(tao=0, gain=1), FilterParams(tao=100, gain=1))
        f.process(np.array([1.0]))

        a, _ = from_filter_params(FilterParams(tao=100, gain=1))
        assert f.values[0] == pytest.approx(a)

    def test_equal_input_uses_pos(self):
        f = BiasedFilter(1, FilterParams(tao=0, gain=2), FilterParams(tao=100, gain=1))
        f.process(np.array([0.0]))

        assert f.values[0] == 0.0

    def test_mixed_directions_per_channel(self):
        f = BiasedFilter(2, FilterParams(tao=0, gain=1), FilterParams(tao=0, gain=0.5))
        f.values[:] = [1.0, 1.0]
        f.process(np.array([0.5, 4.0]))

        np.testing.assert_allclose(f.values, [0.5, 4.0])

    def test_set_params_keeps_state(self):
        f = BiasedFilter(1, FilterParams(tao=4, gain=1), FilterParams(tao=4, gain=1))
        f.process(np.ones(1))
        before = f.values.copy()

        f.set_params(FilterParams(tao=8, gain=1), FilterParams(tao=16, gain=1))

        np.testing.assert_array_equal(f.values, before)
        assert f.pos_params.tao == 8

"""Tests for the GainController module."""

import numpy as np
import pytest

from audiodrivers.core.gain import MAX_GAIN, MIN_GAIN, GainController, log_error


class TestLogError:
    """Tests for the signed log error."""

    def test_zero_level_is_large_positive(self):
        """A silent channel asks for more gain."""
        assert log_error(np.array([1.0]))[0] == pytest.approx(-np.log2(1e-6), rel=1e-3)

    def test_unity_level_is_near_zero(self):
        assert abs(log_error(np.array([0.0]))[0]) < 1e-5

    def test_loud_level_is_negative(self):
        """A channel above unity asks for less gain."""
        assert log_error(np.array([-1.0]))[0] == pytest.approx(-1.0, abs=1e-5)


class TestGainController:
    """Tests for the PD gain loop."""

    def test_initial_gain_is_unity(self):
        gc = GainController(4)
        np.testing.assert_array_equal(gc.gain, 1.0)

    def test_default_loop_gains(self):
        gc = GainController(1)
        assert gc.kp == 0.001
        assert gc.kd == 0.005

    def test_process_scales_in_place(self):
        """The first frame is scaled by the initial unity gain."""
        gc = GainController(3)
        x = np.array([0.5, 1.0, 2.0])
        out = gc.process(x)

        assert out is x
        np.testing.assert_array_equal(x, [0.5, 1.0, 2.0])

    def test_gain_stays_clamped(self):
        """No input sequence pushes the gain outside its limits."""
        rng = np.random.default_rng(7)
        gc = GainController(6)

        for step in range(3000):
            if step < 1000:
                x = np.zeros(6)
            elif step < 2000:
                x = rng.random(6) * 1e4
            else:
                x = rng.random(6) * 1e-3
            gc.process(x)

            assert np.all(gc.gain >= MIN_GAIN)
            assert np.all(gc.gain <= MAX_GAIN)

    def test_silence_drives_gain_to_max(self):
        gc = GainController(2)
        for _ in range(10000):
            gc.process(np.zeros(2))

        np.testing.assert_allclose(gc.gain, MAX_GAIN)

    def test_quiet_input_raises_gain(self):
        gc = GainController(1)
        for _ in range(200):
            gc.process(np.full(1, 0.01))

        assert gc.gain[0] > 1.0

    def test_loud_input_lowers_gain(self):
        gc = GainController(1)
        for _ in range(2000):
            gc.process(np.full(1, 50.0))

        assert gc.gain[0] < 1.0

    def test_gain_is_read_only(self):
        gc = GainController(2)
        with pytest.raises(ValueError):
            gc.gain[0] = 5.0

    def test_nan_input_propagates(self):
        """NaN input is not guarded against and poisons the gain."""
        gc = GainController(2)
        gc.process(np.array([np.nan, 1.0]))

        assert np.isnan(gc.gain[0])
        assert np.isfinite(gc.gain[1])

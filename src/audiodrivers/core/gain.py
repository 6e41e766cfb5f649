"""
Automatic gain control.

Each bucket gets its own gain, adjusted by a proportional-derivative loop
so that the bucket's long-term filtered level settles near unity whatever
the absolute input level is.
"""

import numpy as np

from audiodrivers.core.filters import Filter, FilterParams

MAX_GAIN = 1e2
MIN_GAIN = 1.0 / MAX_GAIN

# Long-term level tracker driving the loop
LEVEL_FILTER_PARAMS = FilterParams(tao=138.0, gain=1.0)


def log_error(v: np.ndarray) -> np.ndarray:
    """
    Signed log2 distance from unity.

    With d = 1.000001 - v, returns -sign(d) * log2(|d|). The controller
    passes 1 - level, so the error is positive while the tracked level is
    below unity and negative above it.
    """
    d = 1.000001 - v
    sign = np.where(d < 0, 1.0, -1.0)
    with np.errstate(divide="ignore"):
        return sign * np.log2(np.abs(d))


class GainController:
    """Per-channel PD gain normalizer operating in log-error space."""

    def __init__(self, size: int, kp: float = 0.001, kd: float = 0.005):
        """
        Initialize the controller.

        Args:
            size: Number of channels.
            kp: Proportional gain of the loop.
            kd: Derivative gain of the loop.
        """
        self.kp = kp
        self.kd = kd
        self.filter = Filter(size, LEVEL_FILTER_PARAMS)
        self._gain = np.ones(size, dtype=np.float64)
        self._err = np.zeros(size, dtype=np.float64)

    @property
    def gain(self) -> np.ndarray:
        view = self._gain.view()
        view.flags.writeable = False
        return view

    def process(self, x: np.ndarray) -> np.ndarray:
        """
        Apply the current gains to ``x`` in place and update the loop.

        Args:
            x: Float array of ``size`` values; modified in place.

        Returns:
            The same array, scaled.
        """
        x *= self._gain

        filtered = self.filter.process(x)
        e = log_error(1.0 - filtered)

        u = self.kp * e + self.kd * (e - self._err)
        np.clip(self._gain + u, MIN_GAIN, MAX_GAIN, out=self._gain)
        self._err[:] = e

        return x

"""
Single-pole IIR smoothing primitives.

Filters are parameterized by a half-life ``tao`` (in frames) and a
steady-state ``gain`` rather than raw coefficients; the conversion
functions below map between the two forms.
"""

import math
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class FilterParams:
    """Half-life (frames) and steady-state gain of a one-pole filter."""

    tao: float
    gain: float


def from_filter_params(fp: FilterParams) -> tuple[float, float]:
    """
    Convert FilterParams into (a, b) coefficients.

    A zero half-life is a pass-through filter; its gain is ignored.
    """
    if fp.tao == 0:
        return 1.0, 0.0

    # 0.5 = b ** tao, shifted by one frame so tao=1 halves immediately
    b = 0.5 * 2.0 ** ((fp.tao - 1) / fp.tao)
    a = 1.0 - b
    return a * fp.gain, b * fp.gain


def filter_gain(coeffs) -> float:
    """Steady-state gain magnitude of (a, b) coefficients."""
    return abs(coeffs[0]) + abs(coeffs[1])


def filter_tao(coeffs) -> float:
    """
    Half-life of (a, b) coefficients, or 0 when it is undefined.

    The sign of a negative-gain filter is ignored.
    """
    g = filter_gain(coeffs)
    if g == 0:
        return 0.0

    b = abs(coeffs[1]) / g
    if b == 0:
        return 0.0

    return -math.log(2) / math.log(b)


def to_filter_params(coeffs) -> FilterParams:
    return FilterParams(tao=filter_tao(coeffs), gain=filter_gain(coeffs))


class Filter:
    """Per-channel one-pole low-pass: values = a*x + b*values."""

    def __init__(self, size: int, params: FilterParams):
        self.params = params
        self.values = np.zeros(size, dtype=np.float64)
        self._a, self._b = from_filter_params(params)

    @property
    def coefficients(self) -> tuple[float, float]:
        return self._a, self._b

    def process(self, x) -> np.ndarray:
        """Advance one step and return the (shared) state vector."""
        self.values *= self._b
        self.values += self._a * np.asarray(x, dtype=np.float64)
        return self.values

    def set_params(self, params: FilterParams) -> None:
        """Swap coefficients; accumulated state is kept."""
        self.params = params
        self._a, self._b = from_filter_params(params)


class BiasedFilter:
    """
    One-pole filter with separate coefficients for each direction.

    Channels whose input is at or below the current output use the
    ``pos`` coefficients; channels whose input rises above it use ``neg``.
    """

    def __init__(self, size: int, pos_params: FilterParams, neg_params: FilterParams):
        self.values = np.zeros(size, dtype=np.float64)
        self.set_params(pos_params, neg_params)

    @property
    def coefficients(self) -> tuple[float, float, float, float]:
        return self._pos + self._neg

    def process(self, x) -> np.ndarray:
        x = np.asarray(x, dtype=np.float64)
        pos_a, pos_b = self._pos
        neg_a, neg_b = self._neg

        falling = x <= self.values
        self.values[:] = np.where(
            falling,
            pos_a * x + pos_b * self.values,
            neg_a * x + neg_b * self.values,
        )
        return self.values

    def set_params(self, pos_params: FilterParams, neg_params: FilterParams) -> None:
        self.pos_params = pos_params
        self.neg_params = neg_params
        self._pos = from_filter_params(pos_params)
        self._neg = from_filter_params(neg_params)

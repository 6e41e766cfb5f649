"""
Frequency-domain driver processor.

Turns one bucketed spectrum per frame into the driver signals held by a
Drivers arena. Every frame runs the same fixed sequence:

1. preemphasis, tilting gain linearly towards high buckets
2. automatic gain control
3. amplitude and differential filter cascades
4. effects: write the amplitude column, differential and energy
5. sync: relax energy towards its neighbours and the global mean
6. value scaling: adaptive per-bucket contrast
7. mean of the new scaled column
"""

import logging
import math

import numpy as np

from audiodrivers.core.drivers import AudioSize, Drivers
from audiodrivers.core.filters import BiasedFilter, Filter
from audiodrivers.core.gain import GainController
from audiodrivers.params import AudioProcessorParams

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi

# Floor on the smoothed scale input before inversion
MIN_SCALE_LEVEL = 0.001


def _signed_square(d: float) -> float:
    return d * d if d >= 0 else -d * d


class FrequencyProcessor:
    """
    Owns a Drivers arena and all filter state feeding it.

    Not thread-safe; call ``process`` and ``set_params`` from one thread.
    """

    def __init__(self, size: AudioSize, params: AudioProcessorParams):
        """
        Initialize the processor.

        Args:
            size: Number of buckets and ring length.
            params: Initial parameters.
        """
        self.size = AudioSize(size.buckets, size.length)
        self.params = params

        buckets = size.buckets
        self.drivers = Drivers(buckets, size.length)
        self.gain_controller = GainController(buckets)

        self.gain_filter = Filter(buckets, params.gain_filter_params)
        self.gain_feedback = Filter(buckets, params.gain_feedback_params)
        self.diff_filter = Filter(buckets, params.diff_filter_params)
        self.diff_feedback = Filter(buckets, params.diff_feedback_params)
        self.scale_filter = BiasedFilter(
            buckets,
            params.pos_scale_filter_params,
            params.neg_scale_filter_params,
        )

        self._scale_input = np.zeros(buckets, dtype=np.float64)
        self._preemphasis = self._preemphasis_curve(params.preemphasis)
        self._has_update = False

        logger.debug("frequency processor created: %d buckets x %d columns", buckets, size.length)

    def _preemphasis_curve(self, preemphasis: float) -> np.ndarray:
        buckets = self.size.buckets
        incr = (preemphasis - 1.0) / buckets
        return 1.0 + np.arange(buckets, dtype=np.float64) * incr

    def process(self, input) -> Drivers:
        """
        Run one frame through the processor.

        Args:
            input: Bucketed spectrum with one value per bucket.

        Returns:
            The updated Drivers arena.
        """
        x = np.array(input, dtype=np.float64)

        self.apply_preemphasis(x)
        self.apply_gain_control(x)
        self.apply_filters(x)
        self.apply_effects()
        self.apply_sync()
        self.apply_value_scaling()
        self.calculate_mean()

        self._has_update = True
        return self.drivers

    def apply_preemphasis(self, x: np.ndarray) -> None:
        x *= self._preemphasis

    def apply_gain_control(self, x: np.ndarray) -> None:
        self.gain_controller.process(x)

    def apply_filters(self, x: np.ndarray) -> None:
        previous = self.gain_filter.values.copy()

        amplitude = self.gain_filter.process(x)
        self.gain_feedback.process(x)

        diff_input = amplitude - previous
        self.diff_filter.process(diff_input)
        self.diff_feedback.process(diff_input)

    def apply_effects(self) -> None:
        p = self.params
        drivers = self.drivers

        drivers.increment_column_idx()
        column = drivers.column_for_write()
        column[:] = p.amp_offset + p.amp_scale * (
            self.gain_filter.values + self.gain_feedback.values
        )

        diff = drivers.diff_for_write()
        diff[:] = p.diff_gain * (self.diff_filter.values + self.diff_feedback.values)

        energy = drivers.energy_for_write()
        energy += p.drag
        energy -= diff * p.accum

    def apply_sync(self) -> None:
        sync = self.params.sync
        energy = self.drivers.energy.tolist()
        n = len(energy)

        mean = sum(energy) / n

        # Sequential sweep: bucket i sees its already relaxed left neighbour
        for i in range(n):
            if i != 0:
                energy[i] += sync * _signed_square(energy[i - 1] - energy[i])
            if i != n - 1:
                energy[i] += sync * _signed_square(energy[i + 1] - energy[i])
            energy[i] += sync * _signed_square(mean - energy[i])

        mean = sum(energy) / n

        # Only wrap once every bucket is past the boundary so no single
        # bucket flips sign on its own
        if mean < -TWO_PI and all(e < -TWO_PI for e in energy):
            energy = [e + TWO_PI for e in energy]
        elif mean > TWO_PI and all(e > TWO_PI for e in energy):
            energy = [e - TWO_PI for e in energy]

        self.drivers.energy_for_write()[:] = energy

    def apply_value_scaling(self) -> None:
        column = self.drivers.get_column(0)
        scales = self.drivers.scales_for_write()

        np.abs(scales * (column - 1.0), out=self._scale_input)
        levels = self.scale_filter.process(self._scale_input)

        np.maximum(levels, MIN_SCALE_LEVEL, out=levels)
        scales[:] = 1.0 / levels

    def calculate_mean(self) -> None:
        drivers = self.drivers
        column = drivers.get_column(0)
        drivers.set_column_mean(float(np.mean(drivers.scales * (column - 1.0))))

    def get_drivers(self) -> tuple[Drivers, bool]:
        """
        Return the arena and whether it changed since the last call.

        The flag is consumed by this call.
        """
        has_update = self._has_update
        self._has_update = False
        return self.drivers, has_update

    def set_params(self, params: AudioProcessorParams) -> None:
        """Apply new parameters without discarding any filter history."""
        self.gain_filter.set_params(params.gain_filter_params)
        self.gain_feedback.set_params(params.gain_feedback_params)
        self.diff_filter.set_params(params.diff_filter_params)
        self.diff_feedback.set_params(params.diff_feedback_params)
        self.scale_filter.set_params(
            params.pos_scale_filter_params,
            params.neg_scale_filter_params,
        )
        self._preemphasis = self._preemphasis_curve(params.preemphasis)
        self.params = params

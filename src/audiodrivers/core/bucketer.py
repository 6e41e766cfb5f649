"""
Logarithmic frequency bucketing.

Collapses a linear spectrum into a small number of channels whose widths
grow with frequency, roughly following pitch perception.
"""

import math

import numpy as np

from audiodrivers.errors import InvalidArgument


def to_log_scale(x: float) -> float:
    return math.log2(1.0 + x)


def from_log_scale(x: float) -> float:
    return 2.0 ** x - 1.0


class Bucketer:
    """
    Averages spectrum bins into log-spaced buckets.

    Boundaries are computed once. Where the log mapping would place
    several boundaries on the same low-frequency bin, the later ones are
    pushed forward one bin at a time and the remaining span is compressed
    so every bucket covers at least one bin.
    """

    def __init__(
        self,
        input_size: int,
        buckets: int,
        f_min: float = 32.0,
        f_max: float = 16000.0,
    ):
        """
        Initialize the bucketer.

        Args:
            input_size: Number of spectrum bins per input frame.
            buckets: Number of output channels (1 <= buckets <= input_size).
            f_min: Lowest frequency of interest in Hz.
            f_max: Frequency represented by the end of the input.
        """
        if buckets < 1 or buckets > input_size:
            raise InvalidArgument(
                f"buckets must be in [1, {input_size}], got {buckets}"
            )

        self.input_size = input_size
        self.buckets = buckets
        self.f_min = f_min
        self.f_max = f_max
        self.indices = self._compute_indices()

    def _compute_indices(self) -> np.ndarray:
        input_size, buckets, f_max = self.input_size, self.buckets, self.f_max

        s_min = to_log_scale(self.f_min)
        s_max = to_log_scale(f_max)
        space = (s_max - s_min) / buckets
        offset_delta = (s_max - s_min) / input_size

        indices = np.zeros(buckets - 1, dtype=np.int64)
        last_idx = 0
        offset = 1

        for i in range(buckets - 1):
            adj_space = space - offset_delta * offset / buckets
            v = from_log_scale((i + 1) * adj_space + s_min + offset_delta * offset)
            idx = math.ceil(input_size * v / f_max)

            if idx <= last_idx:
                idx = last_idx + 1
                offset += 1

            # Leave one bin for each boundary still to come
            ceiling = input_size - (buckets - 1 - i)
            if idx > ceiling:
                idx = ceiling

            indices[i] = idx
            last_idx = idx

        return indices

    def bucket(self, input, out: np.ndarray | None = None) -> np.ndarray:
        """
        Average the input bins within each bucket.

        Args:
            input: Spectrum frame of input_size values.
            out: Optional array of length ``buckets`` to write into.

        Returns:
            Array of ``buckets`` averages (``out`` when supplied).

        Raises:
            InvalidArgument: If the input does not hold input_size bins.
        """
        input = np.asarray(input, dtype=np.float64)
        if len(input) != self.input_size:
            raise InvalidArgument(
                f"expected {self.input_size} spectrum bins, got {len(input)}"
            )

        starts = np.concatenate(([0], self.indices))
        stops = np.concatenate((self.indices, [len(input)]))
        sums = np.add.reduceat(input, starts)
        means = sums / (stops - starts)

        if out is None:
            return means
        out[:] = means
        return out

"""
Driver state arena.

Holds the signals renderers read every frame: a ring of amplitude
columns plus per-bucket scale, energy and differential vectors. Only the
owning FrequencyProcessor writes; every public accessor hands out a
read-only view.
"""

from dataclasses import dataclass

import numpy as np


@dataclass
class AudioSize:
    """Shape of the driver arena."""

    buckets: int
    length: int


def _readonly(array: np.ndarray) -> np.ndarray:
    view = array.view()
    view.flags.writeable = False
    return view


class Drivers:
    """
    Ring-buffered driver signals.

    ``amp`` has shape (length, buckets): row ``column_index`` is the most
    recent amplitude column, the row before it the one written a frame
    earlier, and so on around the ring.
    """

    def __init__(self, buckets: int, length: int):
        self._buckets = buckets
        self._length = length
        self._column_idx = 0

        self._amp = np.zeros((length, buckets), dtype=np.float64)
        self._scales = np.zeros(buckets, dtype=np.float64)
        self._energy = np.zeros(buckets, dtype=np.float64)
        self._diff = np.zeros(buckets, dtype=np.float64)
        # Average of each amp column after scaling by ``scales``
        self._mean = np.zeros(length, dtype=np.float64)

    @property
    def buckets(self) -> int:
        return self._buckets

    @property
    def length(self) -> int:
        return self._length

    @property
    def amp(self) -> np.ndarray:
        return _readonly(self._amp)

    @property
    def scales(self) -> np.ndarray:
        return _readonly(self._scales)

    @property
    def energy(self) -> np.ndarray:
        return _readonly(self._energy)

    @property
    def diff(self) -> np.ndarray:
        return _readonly(self._diff)

    @property
    def mean(self) -> np.ndarray:
        return _readonly(self._mean)

    def increment_column_idx(self) -> None:
        self._column_idx = (self._column_idx + 1) % self._length

    def get_column_index(self) -> int:
        return self._column_idx

    def _column_position(self, k: int) -> int:
        return (self._column_idx - k) % self._length

    def get_column(self, k: int) -> np.ndarray:
        """
        Amplitude column written ``k`` frames ago.

        ``k`` wraps modulo the ring length; 0 is the newest column.
        """
        return _readonly(self._amp[self._column_position(k)])

    # Writable access for the owning FrequencyProcessor

    def column_for_write(self) -> np.ndarray:
        """Writable view of the column at the current ring index."""
        return self._amp[self._column_idx]

    def scales_for_write(self) -> np.ndarray:
        return self._scales

    def energy_for_write(self) -> np.ndarray:
        return self._energy

    def diff_for_write(self) -> np.ndarray:
        return self._diff

    def set_column_mean(self, value: float) -> None:
        self._mean[self._column_idx] = value

    def history(self) -> np.ndarray:
        """Copy of all amplitude columns, newest first."""
        order = [self._column_position(k) for k in range(self._length)]
        return self._amp[order]

    def mean_history(self) -> np.ndarray:
        """Copy of the column means, newest first."""
        order = [self._column_position(k) for k in range(self._length)]
        return self._mean[order]

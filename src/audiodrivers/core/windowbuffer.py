"""
Circular sample buffer.

Keeps the most recent ``capacity`` samples of a stream so that
overlapping analysis windows can be read back after every push.
"""

import numpy as np

from audiodrivers.errors import InvalidArgument


class WindowBuffer:
    """Fixed-capacity ring of float samples."""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise InvalidArgument(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._buffer = np.zeros(capacity, dtype=np.float64)
        self._index = 0

    @property
    def index(self) -> int:
        """Position the next sample will be written to."""
        return self._index

    def push(self, chunk) -> None:
        """
        Append a chunk of samples, overwriting the oldest ones.

        Args:
            chunk: Samples to write. Must not be longer than the capacity.

        Raises:
            InvalidArgument: If the chunk exceeds the buffer capacity.
        """
        chunk = np.asarray(chunk, dtype=np.float64).ravel()
        n = len(chunk)
        if n > self.capacity:
            raise InvalidArgument(
                f"cannot push {n} samples into a buffer of capacity {self.capacity}"
            )

        end = self._index + n
        if end <= self.capacity:
            self._buffer[self._index:end] = chunk
        else:
            # Split the write across the end of the backing store
            head = self.capacity - self._index
            self._buffer[self._index:] = chunk[:head]
            self._buffer[: n - head] = chunk[head:]

        self._index = end % self.capacity

    def get(self, size: int) -> np.ndarray:
        """
        Read the most recent samples in chronological order.

        Args:
            size: Number of samples to read.

        Returns:
            New array of ``size`` samples, oldest first.

        Raises:
            InvalidArgument: If size is negative or exceeds the capacity.
        """
        if size < 0 or size > self.capacity:
            raise InvalidArgument(
                f"cannot get {size} samples from a buffer of capacity {self.capacity}"
            )

        start = self._index - size
        if start >= 0:
            return self._buffer[start:self._index].copy()
        return np.concatenate((self._buffer[start:], self._buffer[: self._index]))

"""
Sliding-window spectral framing.

Each incoming frame is appended to a window buffer, the latest
``fft_size`` samples are tapered with a Blackman-Harris window and
transformed, and the bin magnitudes are log-compressed so loud
transients do not dominate downstream normalization.
"""

from typing import Callable

import numpy as np
from scipy import fft as scipy_fft
from scipy import signal as scipy_signal

from audiodrivers.core.windowbuffer import WindowBuffer
from audiodrivers.errors import InvalidArgument

# Real frame of N samples -> at least N/2 complex bins
Transform = Callable[[np.ndarray], np.ndarray]


def blackman_harris(n: int) -> np.ndarray:
    """
    Symmetric 4-term Blackman-Harris window.

    Coefficients are a0=0.35875, a1=0.48829, a2=0.14128, a3=0.01168
    evaluated at f = 2*pi*i/(n-1).
    """
    return scipy_signal.windows.blackmanharris(n, sym=True)


class SlidingFFT:
    """
    Turns a stream of time-domain frames into log-magnitude spectra.

    The transform is pluggable; by default ``scipy.fft.rfft`` is used and
    its Nyquist bin is dropped so the output always holds fft_size/2 values.
    """

    def __init__(
        self,
        frame_size: int,
        fft_size: int,
        transform: Transform | None = None,
    ):
        """
        Initialize the framer.

        Args:
            frame_size: Nominal number of samples per incoming frame.
            fft_size: Transform length; also the window buffer capacity.
            transform: Callable mapping a real frame to complex bins.
        """
        if fft_size < 2 or fft_size % 2:
            raise InvalidArgument(f"fft_size must be even and >= 2, got {fft_size}")
        if frame_size < 1:
            raise InvalidArgument(f"frame_size must be >= 1, got {frame_size}")
        if frame_size > fft_size:
            raise InvalidArgument(
                f"frame_size {frame_size} exceeds fft_size {fft_size}"
            )

        self.fft_size = fft_size
        self.transform = transform or scipy_fft.rfft

        self.buffer = WindowBuffer(fft_size)
        self.window = blackman_harris(fft_size)

    @property
    def n_bins(self) -> int:
        """Number of magnitude bins produced per frame."""
        return self.fft_size // 2

    def process(self, frame) -> np.ndarray:
        """
        Push a frame and return the spectrum of the current window.

        Args:
            frame: Time-domain samples, at most fft_size long.

        Returns:
            Array of fft_size/2 values, log2(1 + |bin|).
        """
        self.buffer.push(frame)

        windowed = self.buffer.get(self.fft_size) * self.window
        spectrum = np.asarray(self.transform(windowed))[: self.n_bins]

        return np.log2(1.0 + np.abs(spectrum))

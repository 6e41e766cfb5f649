"""
Top-level per-frame audio integrator.

Wires SlidingFFT -> Bucketer -> FrequencyProcessor and coordinates
reconfiguration between frames.
"""

import logging
import math

import numpy as np

from audiodrivers.core.bucketer import Bucketer
from audiodrivers.core.drivers import AudioSize, Drivers
from audiodrivers.core.frequency import FrequencyProcessor
from audiodrivers.core.sfft import SlidingFFT, Transform
from audiodrivers.errors import InvalidArgument, UnsupportedVersion
from audiodrivers.params import (
    AudioProcessorParams,
    ParamUpdate,
    apply_update,
    from_export_settings,
    to_export_settings,
)

logger = logging.getLogger(__name__)


class AudioProcessor:
    """
    Converts raw sample frames into driver signals.

    ``size`` is the FFT length and ``block_size`` the capture block; each
    call to ``process`` is expected to carry ``block_size // 2`` samples.
    Changing ``buckets`` or ``decimation`` rebuilds the frequency processor
    and discards history; every other parameter change keeps it.
    """

    F_MIN = 32.0
    F_MAX = 16000.0

    def __init__(
        self,
        size: int = 1024,
        block_size: int = 1024,
        buckets: int = 36,
        length: int = 60,
        params: AudioProcessorParams | None = None,
        transform: Transform | None = None,
    ):
        """
        Initialize the processor.

        Args:
            size: FFT window length in samples.
            block_size: Capture block size; frames are half of it.
            buckets: Number of log-spaced frequency buckets.
            length: Ring length of the amplitude history before decimation.
            params: Initial parameters (defaults when None).
            transform: Optional replacement for the complex FFT.
        """
        self.size = size
        self.block_size = block_size
        self.params = params or AudioProcessorParams()
        self.base_length = length

        self.audio_size = AudioSize(
            buckets=buckets,
            length=self._decimated_length(self.params.decimation),
        )

        self.fft = SlidingFFT(self.frame_size, size, transform=transform)
        self.bucketer = self._make_bucketer()
        self.fs = FrequencyProcessor(self.audio_size, self.params)

        logger.debug(
            "audio processor: fft=%d frame=%d buckets=%d length=%d",
            size, self.frame_size, buckets, self.length,
        )

    @property
    def frame_size(self) -> int:
        return self.block_size // 2

    @property
    def buckets(self) -> int:
        return self.audio_size.buckets

    @property
    def length(self) -> int:
        return self.audio_size.length

    def _decimated_length(self, decimation: float) -> int:
        length = math.floor(self.base_length * decimation)
        if length < 1:
            raise InvalidArgument(
                f"decimation {decimation} leaves no columns of {self.base_length}"
            )
        return length

    def _make_bucketer(self) -> Bucketer:
        return Bucketer(self.size // 2, self.buckets, self.F_MIN, self.F_MAX)

    def process(self, frame) -> Drivers:
        """
        Run one captured frame through the whole chain.

        Args:
            frame: Time-domain samples.

        Returns:
            The updated Drivers arena.
        """
        spectrum = self.fft.process(frame)
        bucketed = self.bucketer.bucket(spectrum)
        return self.fs.process(bucketed)

    def get_drivers(self) -> tuple[Drivers, bool]:
        return self.fs.get_drivers()

    def resize(self, buckets: int) -> None:
        """Change the bucket count, discarding driver history."""
        if buckets == self.buckets:
            return

        bucketer = Bucketer(self.size // 2, buckets, self.F_MIN, self.F_MAX)
        self.audio_size = AudioSize(buckets=buckets, length=self.length)
        self.bucketer = bucketer
        self.fs = FrequencyProcessor(self.audio_size, self.params)
        logger.info("resized to %d buckets; driver history reset", buckets)

    def set_audio_params(self, params: AudioProcessorParams) -> None:
        """
        Install a new parameter record.

        A decimation change rebuilds the frequency processor with a new
        ring length; anything else updates coefficients in place.
        """
        if params.decimation != self.params.decimation:
            length = self._decimated_length(params.decimation)
            self.audio_size = AudioSize(buckets=self.buckets, length=length)
            self.fs = FrequencyProcessor(self.audio_size, params)
            logger.info(
                "decimation %s -> %s; ring length now %d, driver history reset",
                self.params.decimation, params.decimation, length,
            )
        else:
            self.fs.set_params(params)
        self.params = params

    def update(self, update: ParamUpdate) -> AudioProcessorParams:
        """Apply an update command and return the resulting parameters."""
        self.set_audio_params(apply_update(self.params, update))
        return self.params

    def export_settings(self) -> list:
        return to_export_settings(self.params)

    def load_settings(self, settings) -> bool:
        """
        Load a flat settings export.

        An unsupported version is reported and leaves the current
        parameters in place.

        Returns:
            True if the settings were applied.
        """
        try:
            params = from_export_settings(settings)
        except UnsupportedVersion as e:
            logger.warning("could not load settings: %s", e)
            return False

        self.set_audio_params(params)
        return True


def iter_frames(y: np.ndarray, frame_size: int):
    """Yield consecutive frame_size slices of y, zero-padding the last."""
    for start in range(0, len(y), frame_size):
        frame = y[start:start + frame_size]
        if len(frame) < frame_size:
            frame = np.pad(frame, (0, frame_size - len(frame)))
        yield frame

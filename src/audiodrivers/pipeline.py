"""
Offline replay pipeline.

Streams an audio file through an AudioProcessor frame by frame, exactly
as live capture would deliver it, and records the resulting drivers.
"""

import logging
from pathlib import Path
from typing import Any, Union

import librosa
import numpy as np

from audiodrivers.core.processor import AudioProcessor, iter_frames
from audiodrivers.core.trace import DriverTrace, TraceRecorder
from audiodrivers.io.exporter import DriversExporter
from audiodrivers.params import AudioProcessorParams, to_export_settings

logger = logging.getLogger(__name__)


class AudioPipeline:
    """
    Audio-file-to-driver-manifest pipeline.

    Combines loading, per-frame processing and export into a single
    interface. A fresh AudioProcessor is built for every run so results
    never depend on a previous file.
    """

    def __init__(
        self,
        sample_rate: int = 44100,
        fft_size: int = 1024,
        frame_size: int = 512,
        buckets: int = 36,
        length: int = 60,
        params: AudioProcessorParams | None = None,
    ):
        """
        Initialize the pipeline.

        Args:
            sample_rate: Rate audio is resampled to before processing.
            fft_size: FFT window length in samples.
            frame_size: Samples per processed frame.
            buckets: Number of frequency buckets.
            length: Amplitude ring length.
            params: Audio processing parameters.
        """
        self.sample_rate = sample_rate
        self.fft_size = fft_size
        self.frame_size = frame_size
        self.buckets = buckets
        self.length = length
        self.params = params or AudioProcessorParams()
        self.exporter = DriversExporter()

    @property
    def fps(self) -> float:
        """Driver frames per second of audio."""
        return self.sample_rate / self.frame_size

    def make_processor(self) -> AudioProcessor:
        return AudioProcessor(
            size=self.fft_size,
            block_size=self.frame_size * 2,
            buckets=self.buckets,
            length=self.length,
            params=self.params,
        )

    def load(self, audio_path: Union[str, Path]) -> tuple[np.ndarray, int]:
        """Load audio as mono at the pipeline sample rate."""
        y, sr = librosa.load(audio_path, sr=self.sample_rate, mono=True)
        return y, sr

    def trace(self, y: np.ndarray) -> DriverTrace:
        """
        Run samples through a new processor and record every frame.

        Args:
            y: Mono samples at the pipeline sample rate.

        Returns:
            DriverTrace with one row per frame.
        """
        processor = self.make_processor()
        recorder = TraceRecorder()

        for frame in iter_frames(np.asarray(y, dtype=np.float64), self.frame_size):
            recorder.record(processor.process(frame))

        logger.debug("traced %d frames", len(recorder))
        return recorder.to_trace(self.fps, buckets=self.buckets)

    def export(
        self,
        trace: DriverTrace,
        output_path: Union[str, Path],
        format: str = "json",
    ) -> Path:
        """Write a trace as "json" or "numpy"."""
        if format == "numpy":
            return self.exporter.export_numpy(trace, output_path)
        return self.exporter.export_json(
            trace,
            output_path,
            settings=to_export_settings(self.params),
        )

    def process_signal(
        self,
        y: np.ndarray,
        output_path: Union[str, Path] | None = None,
        format: str = "json",
    ) -> dict[str, Any]:
        """
        Run the pipeline on in-memory samples.

        Returns:
            Dictionary containing the manifest and processing info.
        """
        trace = self.trace(y)
        manifest = self.exporter.to_dict(trace, settings=to_export_settings(self.params))

        result = {
            "manifest": manifest,
            "n_frames": trace.n_frames,
            "duration": len(y) / self.sample_rate,
            "fps": self.fps,
        }

        if output_path:
            written_path = self.export(trace, output_path, format)
            result["output_path"] = str(written_path)

        return result

    def process(
        self,
        audio_path: Union[str, Path],
        output_path: Union[str, Path] | None = None,
        format: str = "json",
    ) -> dict[str, Any]:
        """
        Run the complete pipeline from audio file to manifest.

        Args:
            audio_path: Path to input audio file.
            output_path: Path for output manifest. If None, only returns dict.
            format: Output format ("json" or "numpy").

        Returns:
            Dictionary containing manifest data and processing info.
        """
        y, _ = self.load(audio_path)
        return self.process_signal(y, output_path=output_path, format=format)

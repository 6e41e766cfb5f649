"""Frame-by-frame recording of driver signals."""

from dataclasses import dataclass, field

import numpy as np

from audiodrivers.core.drivers import Drivers


@dataclass
class DriverTrace:
    """Driver signals captured once per processed frame."""

    amp: np.ndarray     # Shape: (n_frames, buckets), newest column each frame
    scales: np.ndarray  # Shape: (n_frames, buckets)
    energy: np.ndarray  # Shape: (n_frames, buckets)
    diff: np.ndarray    # Shape: (n_frames, buckets)
    mean: np.ndarray    # Shape: (n_frames,)

    fps: float
    frame_times: np.ndarray = field(default_factory=lambda: np.array([]))

    def __post_init__(self):
        if len(self.frame_times) == 0:
            self.frame_times = np.arange(self.n_frames) / self.fps

    @property
    def n_frames(self) -> int:
        return len(self.mean)

    @property
    def buckets(self) -> int:
        return self.amp.shape[1] if self.amp.ndim == 2 else 0


class TraceRecorder:
    """Accumulates copies of the newest driver values."""

    def __init__(self):
        self._amp = []
        self._scales = []
        self._energy = []
        self._diff = []
        self._mean = []

    def __len__(self) -> int:
        return len(self._mean)

    def record(self, drivers: Drivers) -> None:
        self._amp.append(np.array(drivers.get_column(0)))
        self._scales.append(np.array(drivers.scales))
        self._energy.append(np.array(drivers.energy))
        self._diff.append(np.array(drivers.diff))
        self._mean.append(float(drivers.mean[drivers.get_column_index()]))

    def to_trace(self, fps: float, buckets: int = 0) -> DriverTrace:
        """
        Stack the recorded frames.

        Args:
            fps: Frame rate the frames were captured at.
            buckets: Bucket count used for empty traces.
        """
        def stack(rows):
            if rows:
                return np.vstack(rows)
            return np.zeros((0, buckets), dtype=np.float64)

        return DriverTrace(
            amp=stack(self._amp),
            scales=stack(self._scales),
            energy=stack(self._energy),
            diff=stack(self._diff),
            mean=np.array(self._mean, dtype=np.float64),
            fps=fps,
        )

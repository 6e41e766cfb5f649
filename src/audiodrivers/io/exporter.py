"""
Driver serialization module.

Exports driver traces to JSON manifests or NumPy archives, and current
driver arenas to plain dictionaries for renderers running out of process.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

import numpy as np

from audiodrivers.core.drivers import Drivers
from audiodrivers.core.trace import DriverTrace


@dataclass
class ManifestMetadata:
    """Metadata header for a driver manifest."""

    fps: float
    n_frames: int
    buckets: int
    duration: float
    schema_version: str = "1.0"


class DriversExporter:
    """
    Exports driver traces and snapshots.

    Every frame of a manifest carries the newest amplitude column together
    with the per-bucket scale, energy and differential values.
    """

    def __init__(self, precision: int = 4):
        """
        Initialize the exporter.

        Args:
            precision: Decimal places for floating point values.
        """
        self.precision = precision

    def _round(self, value: float) -> float:
        """Round to configured precision."""
        return round(float(value), self.precision)

    def _round_list(self, values) -> list[float]:
        return [self._round(v) for v in values]

    def snapshot(self, drivers: Drivers) -> dict[str, Any]:
        """
        Serialize the current state of a Drivers arena.

        Amplitude columns and means are ordered newest first.
        """
        return {
            "buckets": drivers.buckets,
            "length": drivers.length,
            "column_index": drivers.get_column_index(),
            "amp": [self._round_list(column) for column in drivers.history()],
            "mean": self._round_list(drivers.mean_history()),
            "scales": self._round_list(drivers.scales),
            "energy": self._round_list(drivers.energy),
            "diff": self._round_list(drivers.diff),
        }

    def _build_frame(self, index: int, trace: DriverTrace) -> dict[str, Any]:
        return {
            "frame_index": index,
            "time": self._round(trace.frame_times[index]),
            "mean": self._round(trace.mean[index]),
            "amp": self._round_list(trace.amp[index]),
            "scales": self._round_list(trace.scales[index]),
            "energy": self._round_list(trace.energy[index]),
            "diff": self._round_list(trace.diff[index]),
        }

    def build_manifest(
        self,
        trace: DriverTrace,
        settings: list | None = None,
    ) -> dict[str, Any]:
        """
        Build the complete manifest dictionary.

        Args:
            trace: Recorded driver trace.
            settings: Optional flat settings export used for the run.

        Returns:
            Manifest dictionary ready for serialization.
        """
        metadata = ManifestMetadata(
            fps=self._round(trace.fps),
            n_frames=trace.n_frames,
            buckets=trace.buckets,
            duration=self._round(trace.n_frames / trace.fps),
        )

        manifest: dict[str, Any] = {
            "metadata": {
                "fps": metadata.fps,
                "n_frames": metadata.n_frames,
                "buckets": metadata.buckets,
                "duration": metadata.duration,
                "schema_version": metadata.schema_version,
            },
            "frames": [self._build_frame(i, trace) for i in range(trace.n_frames)],
        }
        if settings is not None:
            manifest["metadata"]["settings"] = list(settings)
        return manifest

    def export_json(
        self,
        trace: DriverTrace,
        output_path: Union[str, Path],
        settings: list | None = None,
        indent: int = 2,
    ) -> Path:
        """
        Export manifest to JSON file.

        Returns:
            Path to written file.
        """
        manifest = self.build_manifest(trace, settings)
        output_path = Path(output_path)

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(manifest, f, indent=indent)

        return output_path

    def export_numpy(
        self,
        trace: DriverTrace,
        output_path: Union[str, Path],
    ) -> Path:
        """
        Export the trace as a NumPy .npz archive for faster loading.

        Returns:
            Path to written file.
        """
        output_path = Path(output_path)

        np.savez_compressed(
            output_path,
            amp=trace.amp,
            scales=trace.scales,
            energy=trace.energy,
            diff=trace.diff,
            mean=trace.mean,
            frame_times=trace.frame_times,
            fps=trace.fps,
            n_frames=trace.n_frames,
        )

        return output_path

    def to_dict(self, trace: DriverTrace, settings: list | None = None) -> dict[str, Any]:
        """Return manifest as dictionary (for in-memory use)."""
        return self.build_manifest(trace, settings)

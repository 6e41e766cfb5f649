"""Audio-reactive driver signals for real-time visuals."""

from audiodrivers.core.processor import AudioProcessor
from audiodrivers.core.frequency import FrequencyProcessor
from audiodrivers.core.drivers import Drivers
from audiodrivers.params import AudioProcessorParams
from audiodrivers.io.exporter import DriversExporter
from audiodrivers.pipeline import AudioPipeline

__version__ = "0.1.0"
__all__ = [
    "AudioProcessor",
    "FrequencyProcessor",
    "Drivers",
    "AudioProcessorParams",
    "DriversExporter",
    "AudioPipeline",
]

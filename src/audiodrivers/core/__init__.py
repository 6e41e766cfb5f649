"""Core audio-to-driver processing modules."""

from audiodrivers.core.windowbuffer import WindowBuffer
from audiodrivers.core.sfft import SlidingFFT
from audiodrivers.core.bucketer import Bucketer
from audiodrivers.core.filters import BiasedFilter, Filter, FilterParams
from audiodrivers.core.gain import GainController
from audiodrivers.core.drivers import AudioSize, Drivers
from audiodrivers.core.frequency import FrequencyProcessor
from audiodrivers.core.processor import AudioProcessor

__all__ = [
    "WindowBuffer",
    "SlidingFFT",
    "Bucketer",
    "Filter",
    "BiasedFilter",
    "FilterParams",
    "GainController",
    "AudioSize",
    "Drivers",
    "FrequencyProcessor",
    "AudioProcessor",
]

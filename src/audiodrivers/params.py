"""
Audio processing parameters.

AudioProcessorParams is an immutable record of every tunable. Changes are
expressed as update commands resolved by ``apply_update`` into a new
record, and the whole record round-trips through a versioned flat list
suitable for sharing presets.
"""

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from numbers import Real
from typing import Any, Mapping, Union

from audiodrivers.core.filters import FilterParams
from audiodrivers.errors import InvalidArgument, UnsupportedVersion

SETTINGS_VERSION = "v0.1"


@dataclass(frozen=True)
class AudioProcessorParams:
    """Snapshot of all audio processing tunables."""

    preemphasis: float = 2.0
    gain_filter_params: FilterParams = field(default_factory=lambda: FilterParams(2.924, 1.0))
    gain_feedback_params: FilterParams = field(default_factory=lambda: FilterParams(138.0, -1.0))
    diff_filter_params: FilterParams = field(default_factory=lambda: FilterParams(10.5, 1.0))
    diff_feedback_params: FilterParams = field(default_factory=lambda: FilterParams(56.6, -0.05))
    pos_scale_filter_params: FilterParams = field(default_factory=lambda: FilterParams(69.0, 1.0))
    neg_scale_filter_params: FilterParams = field(default_factory=lambda: FilterParams(693.0, 1.0))
    diff_gain: float = 1.0
    amp_scale: float = 1.0
    amp_offset: float = 0.0
    sync: float = 1e-2
    # Column fade rate, applied by renderers
    decay: float = 0.35
    accum: float = 1.0
    drag: float = 0.0
    decimation: float = 1.0


class ParamKey(str, Enum):
    """Names of the individually settable fields."""

    PREEMPHASIS = "preemphasis"
    GAIN_FILTER_PARAMS = "gain_filter_params"
    GAIN_FEEDBACK_PARAMS = "gain_feedback_params"
    DIFF_FILTER_PARAMS = "diff_filter_params"
    DIFF_FEEDBACK_PARAMS = "diff_feedback_params"
    POS_SCALE_FILTER_PARAMS = "pos_scale_filter_params"
    NEG_SCALE_FILTER_PARAMS = "neg_scale_filter_params"
    DIFF_GAIN = "diff_gain"
    AMP_SCALE = "amp_scale"
    AMP_OFFSET = "amp_offset"
    SYNC = "sync"
    DECAY = "decay"
    ACCUM = "accum"
    DRAG = "drag"
    DECIMATION = "decimation"

    @property
    def is_filter(self) -> bool:
        return self.value.endswith("_params")


@dataclass(frozen=True)
class SetParam:
    """Replace a single field."""

    key: ParamKey
    value: Union[float, FilterParams]


@dataclass(frozen=True)
class ReplaceParams:
    """Replace the whole record."""

    params: AudioProcessorParams


@dataclass(frozen=True)
class LoadParams:
    """Merge a partial mapping of field name to value."""

    values: Mapping[str, Any]


ParamUpdate = Union[SetParam, ReplaceParams, LoadParams]


def _check_value(key: ParamKey, value: Any) -> Any:
    if key.is_filter:
        if not isinstance(value, FilterParams):
            raise InvalidArgument(f"{key.value} expects FilterParams, got {value!r}")
        return value
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidArgument(f"{key.value} expects a number, got {value!r}")
    return float(value)


def apply_update(params: AudioProcessorParams, update: ParamUpdate) -> AudioProcessorParams:
    """
    Resolve an update command against the current parameters.

    Args:
        params: Current parameter record.
        update: SetParam, ReplaceParams or LoadParams command.

    Returns:
        New AudioProcessorParams; ``params`` is left untouched.
    """
    if isinstance(update, ReplaceParams):
        return update.params

    if isinstance(update, SetParam):
        key = ParamKey(update.key)
        return dataclasses.replace(params, **{key.value: _check_value(key, update.value)})

    if isinstance(update, LoadParams):
        changes = {}
        for name, value in update.values.items():
            try:
                key = ParamKey(name)
            except ValueError:
                raise InvalidArgument(f"unknown audio parameter: {name!r}") from None
            changes[key.value] = _check_value(key, value)
        return dataclasses.replace(params, **changes)

    raise InvalidArgument(f"unknown parameter update: {update!r}")


# Field order of the flat export format
_EXPORT_LAYOUT = (
    "preemphasis",
    "gain_filter_params",
    "gain_feedback_params",
    "diff_filter_params",
    "diff_feedback_params",
    "pos_scale_filter_params",
    "neg_scale_filter_params",
    "diff_gain",
    "amp_scale",
    "amp_offset",
    "sync",
    "decay",
    "accum",
    "drag",
    "decimation",
)

# Trailing fields that older exports may omit
_LATE_DEFAULTS = (
    ("accum", 1.0),
    ("drag", 0.0002),
    ("decimation", 1.0),
)

EXPORT_LENGTH = 21
_MIN_EXPORT_LENGTH = EXPORT_LENGTH - len(_LATE_DEFAULTS)


def to_export_settings(params: AudioProcessorParams) -> list:
    """Flatten parameters to ``[version, 21 floats]``."""
    values: list = [SETTINGS_VERSION]
    for name in _EXPORT_LAYOUT:
        value = getattr(params, name)
        if isinstance(value, FilterParams):
            values.extend([float(value.tao), float(value.gain)])
        else:
            values.append(float(value))
    return values


def from_export_settings(settings) -> AudioProcessorParams:
    """
    Rebuild parameters from a flat export.

    Exports made before ``accum``, ``drag`` and ``decimation`` existed are
    accepted; the missing fields take their historical defaults.

    Raises:
        UnsupportedVersion: If the version tag is not recognised.
        InvalidArgument: If the payload is too short or not numeric.
    """
    if not settings:
        raise InvalidArgument("empty settings export")

    version = settings[0]
    if version != SETTINGS_VERSION:
        raise UnsupportedVersion(version)

    raw = list(settings[1:])
    if not _MIN_EXPORT_LENGTH <= len(raw) <= EXPORT_LENGTH:
        raise InvalidArgument(
            f"expected {_MIN_EXPORT_LENGTH}-{EXPORT_LENGTH} values, got {len(raw)}"
        )
    try:
        raw = [float(v) for v in raw]
    except (TypeError, ValueError) as e:
        raise InvalidArgument(f"non-numeric settings value: {e}") from e

    kwargs: dict[str, Any] = {}
    pos = 0
    for name in _EXPORT_LAYOUT:
        if pos >= len(raw):
            break
        if name.endswith("_params"):
            kwargs[name] = FilterParams(tao=raw[pos], gain=raw[pos + 1])
            pos += 2
        else:
            kwargs[name] = raw[pos]
            pos += 1

    for name, default in _LATE_DEFAULTS:
        kwargs.setdefault(name, default)

    return AudioProcessorParams(**kwargs)

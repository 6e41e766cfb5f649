"""Exception types raised by the driver pipeline."""


class AudioDriversError(Exception):
    """Base class for all pipeline errors."""


class InvalidArgument(AudioDriversError, ValueError):
    """A size, index or settings value is outside what a component accepts."""


class UnsupportedVersion(AudioDriversError, ValueError):
    """Exported settings carry a version tag this package cannot read."""

    def __init__(self, version):
        self.version = version
        super().__init__(f"unsupported settings version: {version!r}")

"""Exceptions raised by asciify."""


class AsciifyError(Exception):
    """Base class for all asciify errors."""


class InvalidConfiguration(AsciifyError, ValueError):
    """A reader/renderer setting or a requested size is unusable."""


class UnsupportedFilter(InvalidConfiguration):
    """Unknown resample filter name."""

    def __init__(self, name):
        super().__init__(f"Unrecognized resample filter: {name!r}")
        self.name = name


class InvalidImageData(AsciifyError):
    """The input could not be decoded as an image."""

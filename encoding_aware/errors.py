"""Exception taxonomy for encoding resolution and transcoding.

Missing configuration is never an error: it resolves to "no external
encoding" and the value is left alone.  Everything below is raised to
the attribute-access call site without local recovery.
"""

from __future__ import annotations

from typing import Any


class EncodingAwareError(Exception):
    """Base class for all errors raised by this library."""


class UnknownEncodingError(EncodingAwareError, LookupError):
    """An encoding name is not known to the Python codec registry."""

    def __init__(self, name: str):
        super().__init__(f"unknown encoding: {name!r}")
        self.name = name


class EncodingConfigurationError(EncodingAwareError, ValueError):
    """Encoding settings that would never take effect.

    Raised for field settings on a subclass that name a column the parent
    mapper owns; the column converts with the parent's settings.
    """


class TranscodeError(EncodingAwareError, ValueError):
    """A value could not be converted between its declared encodings."""

    def __init__(
        self,
        message: str,
        *,
        encoding: str,
        entity: Any = None,
        field: str | None = None,
    ):
        super().__init__(message)
        self.encoding = encoding
        self.entity = entity
        self.field = field

    def for_column(self, entity: Any, field: str | None) -> TranscodeError:
        """Attach the owning entity and field once they are known."""
        self.entity = entity
        self.field = field
        return self


class MalformedInputError(TranscodeError):
    """Stored bytes are not a valid sequence in the external encoding."""


class UnrepresentableOutputError(TranscodeError):
    """Text has characters with no mapping in the target encoding."""


class InvalidOperationError(EncodingAwareError, RuntimeError):
    """A transcode was requested with an unknown direction.

    This is a programming error and is not meant to be handled.
    """

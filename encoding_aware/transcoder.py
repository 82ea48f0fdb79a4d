"""Byte-level conversion between external and internal encodings.

Reads turn the raw bytes a driver hands back into ``str``; writes turn
``str`` back into bytes in the external encoding.  Every call returns a
``TranscodedValue`` whose ``processed`` flag guards against converting
the same value twice within one read or write.  Inputs are never
mutated: conversion always produces a new object.
"""

import enum
import logging
from typing import Any, NamedTuple

from encoding_aware.errors import (
    InvalidOperationError,
    MalformedInputError,
    UnrepresentableOutputError,
)

logger = logging.getLogger(__name__)

BYTES_TYPES = (bytes, bytearray, memoryview)


class Direction(str, enum.Enum):
    READ = "read"
    WRITE = "write"


class TranscodedValue(NamedTuple):
    value: Any
    processed: bool = False


def _to_text(data, name: str) -> str:
    try:
        return bytes(data).decode(name)
    except UnicodeDecodeError as exc:
        raise MalformedInputError(
            f"bytes are not valid {name}: {exc.reason} at position {exc.start}",
            encoding=name,
        ) from exc


def _to_bytes(text: str, name: str) -> bytes:
    try:
        return text.encode(name)
    except UnicodeEncodeError as exc:
        raise UnrepresentableOutputError(
            f"{exc.object[exc.start:exc.end]!r} has no representation in {name}",
            encoding=name,
        ) from exc


def decode(
    value: Any,
    external: str | None,
    internal: str,
    already_processed: bool = False,
) -> TranscodedValue:
    """Interpret ``value``'s bytes as ``external`` and return the text.

    The text is checked against ``internal`` so a character the
    application's encoding cannot hold fails here instead of later.
    Values that are not bytes, or have no external encoding, pass through.
    """
    if already_processed or external is None or not isinstance(value, BYTES_TYPES):
        return TranscodedValue(value, True)

    text = _to_text(value, external)
    _to_bytes(text, internal)
    return TranscodedValue(text, True)


def encode(
    value: Any,
    internal: str,
    external: str | None,
    already_processed: bool = False,
) -> TranscodedValue:
    """Return a copy of ``value`` encoded in ``external``.

    ``str`` is encoded directly; bytes are taken to be ``internal``-encoded
    and transcoded.  Without an external encoding the value is handed to
    storage unmodified.
    """
    if already_processed or external is None:
        return TranscodedValue(value, True)

    if isinstance(value, str):
        return TranscodedValue(_to_bytes(value, external), True)
    if isinstance(value, BYTES_TYPES):
        return TranscodedValue(_to_bytes(_to_text(value, internal), external), True)
    return TranscodedValue(value, True)


def transcode(
    value: Any,
    direction: Direction,
    external: str | None,
    internal: str,
    already_processed: bool = False,
) -> TranscodedValue:
    """Dispatch to ``decode`` or ``encode`` by direction."""
    if direction == Direction.READ:
        return decode(value, external, internal, already_processed)
    if direction == Direction.WRITE:
        return encode(value, internal, external, already_processed)
    logger.error("Transcode requested with unknown direction %r", direction)
    raise InvalidOperationError(f"unknown transcode direction: {direction!r}")

"""Transcode string columns between a database's byte encoding and the
encoding application code expects.

    from encoding_aware import get_registry
    from encoding_aware.db import EncodedString, external_encoding

    @external_encoding("ISO-8859-1", for_="comment")
    class User(Base):
        __tablename__ = "users"
        id = mapped_column(Integer, primary_key=True)
        comment = mapped_column(EncodedString())
"""

from encoding_aware.config import Settings, get_settings
from encoding_aware.encodings import FALLBACK_ENCODING, EncodingSpec
from encoding_aware.errors import (
    EncodingAwareError,
    EncodingConfigurationError,
    InvalidOperationError,
    MalformedInputError,
    TranscodeError,
    UnknownEncodingError,
    UnrepresentableOutputError,
)
from encoding_aware.logging_config import setup_logging
from encoding_aware.registry import EncodingRegistry, get_registry
from encoding_aware.transcoder import Direction, TranscodedValue, decode, encode, transcode

__version__ = "0.3.0"

__all__ = [
    "FALLBACK_ENCODING",
    "Direction",
    "EncodingAwareError",
    "EncodingConfigurationError",
    "EncodingRegistry",
    "EncodingSpec",
    "InvalidOperationError",
    "MalformedInputError",
    "Settings",
    "TranscodeError",
    "TranscodedValue",
    "UnknownEncodingError",
    "UnrepresentableOutputError",
    "decode",
    "encode",
    "get_registry",
    "get_settings",
    "setup_logging",
    "transcode",
]

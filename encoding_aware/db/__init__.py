"""SQLAlchemy integration: the ``EncodedString`` column type and helpers.

Importing this package registers the mapper listener that binds encoded
columns to their models.
"""

from encoding_aware.db import events  # noqa: F401
from encoding_aware.db.declarative import encoding, external_encoding, internal_encoding
from encoding_aware.db.encoded_type import ColumnCodec, EncodedString

__all__ = [
    "ColumnCodec",
    "EncodedString",
    "encoding",
    "external_encoding",
    "internal_encoding",
]

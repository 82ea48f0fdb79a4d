"""SQLAlchemy column type for transparent encoding conversion.

Decodes on read, encodes on write: application code works with ``str``
while the database keeps bytes in whatever encoding it actually uses.
"""

import logging
from collections.abc import Hashable

from sqlalchemy import LargeBinary, TypeDecorator

from encoding_aware.errors import TranscodeError
from encoding_aware.registry import EncodingRegistry, get_registry
from encoding_aware.transcoder import BYTES_TYPES, TranscodedValue, decode, encode

logger = logging.getLogger(__name__)


class ColumnCodec:
    """Transcoding step for one (entity, field) pair.

    ``read_for_consumption`` is the path for values handed to application
    code; ``read_for_persistence`` is the path for values being serialized
    into an INSERT or UPDATE.
    """

    def __init__(
        self,
        entity: Hashable = None,
        field: str | None = None,
        registry: EncodingRegistry | None = None,
    ):
        self.entity = entity
        self.field = field
        self._registry = registry

    @property
    def registry(self) -> EncodingRegistry:
        return self._registry or get_registry()

    def read_for_consumption(self, raw, already_processed: bool = False) -> TranscodedValue:
        spec = self.registry.resolve(self.entity, self.field)
        try:
            return decode(raw, spec.external, spec.internal, already_processed)
        except TranscodeError as exc:
            self._log_failure("decode", exc)
            raise exc.for_column(self.entity, self.field)

    def read_for_persistence(
        self,
        value,
        already_processed: bool = False,
        binary: bool = False,
    ) -> TranscodedValue:
        """Encode for storage.

        With ``binary`` set, text left unconverted because no external
        encoding is configured is stored in the internal encoding.
        """
        spec = self.registry.resolve(self.entity, self.field)
        try:
            result = encode(value, spec.internal, spec.external, already_processed)
            if binary and isinstance(result.value, str):
                result = encode(result.value, spec.internal, spec.internal)
            if binary and not isinstance(result.value, BYTES_TYPES):
                raise TranscodeError(
                    f"expected text or bytes, got {type(result.value).__name__}",
                    encoding=spec.external or spec.internal,
                )
            return result
        except TranscodeError as exc:
            self._log_failure("encode", exc)
            raise exc.for_column(self.entity, self.field)

    def _log_failure(self, action: str, exc: TranscodeError) -> None:
        logger.warning(
            "Failed to %s %s.%s: %s",
            action,
            getattr(self.entity, "__name__", self.entity),
            self.field,
            exc,
            extra={"entity": str(self.entity), "field": self.field},
        )


class EncodedString(TypeDecorator):
    """A binary column whose bytes are exposed as text.

    The type is bound to its owning model and attribute as soon as the
    mapper is constructed (see ``encoding_aware.db.events``); for Core
    tables pass ``entity`` and ``field`` explicitly.

    ``python_type`` is ``str``, but a column with no external encoding at
    any level is not decoded and reads back as the stored ``bytes``.
    Writes accept ``str`` or bytes-like values only; anything else raises
    ``TranscodeError`` rather than being coerced.
    """

    impl = LargeBinary
    cache_ok = True

    def __init__(
        self,
        length: int | None = None,
        entity: Hashable = None,
        field: str | None = None,
        registry: EncodingRegistry | None = None,
    ):
        super().__init__(length=length)
        self.length = length
        self.entity = entity
        self.field = field
        self.registry = registry

    @property
    def is_bound(self) -> bool:
        return self.entity is not None or self.field is not None

    @property
    def codec(self) -> ColumnCodec:
        return ColumnCodec(self.entity, self.field, self.registry)

    def bind(self, entity: Hashable, field: str) -> "EncodedString":
        """Return a copy of this type bound to ``entity.field``."""
        return EncodedString(self.length, entity, field, self.registry)

    def process_bind_param(self, value, dialect):
        """Encode into the external encoding before writing."""
        if value is None:
            return None
        return self.codec.read_for_persistence(value, binary=True).value

    def process_result_value(self, value, dialect):
        """Decode from the external encoding when reading."""
        if value is None:
            return None
        return self.codec.read_for_consumption(value).value

    @property
    def python_type(self):
        return str

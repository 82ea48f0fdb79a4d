"""Per-entity encoding configuration and its resolution chain.

External encoding resolves field override -> entity default -> process
default, and may end unset, meaning "leave the bytes alone".  Internal
encoding continues past the process default to the environment defaults
from settings and finally to "UTF-8", so it is always concrete.
"""

import logging
import threading
from collections.abc import Hashable, Iterable
from functools import lru_cache

from encoding_aware.config import Settings, get_settings
from encoding_aware.encodings import FALLBACK_ENCODING, UNSET, EncodingSpec

logger = logging.getLogger(__name__)


def field_names_of(field_names: str | Iterable[str]) -> list[str]:
    if isinstance(field_names, str):
        names = [field_names]
    else:
        names = [str(name) for name in field_names]
    if not names:
        raise ValueError("at least one field name is required")
    return names


class _Entry:
    __slots__ = ("default", "fields")

    def __init__(self):
        self.default: EncodingSpec = UNSET
        self.fields: dict[str, EncodingSpec] = {}


class EncodingRegistry:
    """Encoding configuration keyed by entity and field name.

    Entities are any hashable key; the SQLAlchemy integration uses the
    mapped model class.  Populate at startup; reads and writes are
    serialized on one lock so a resolution never sees a partial update.
    """

    def __init__(self, settings: Settings | None = None):
        self._settings = settings or get_settings()
        self._lock = threading.RLock()
        self._entries: dict[Hashable, _Entry] = {}
        self._process_default = self._seed()

    def _seed(self) -> EncodingSpec:
        return EncodingSpec(
            external=self._settings.external_encoding,
            internal=self._settings.internal_encoding,
        )

    def _entry(self, entity: Hashable) -> _Entry:
        entry = self._entries.get(entity)
        if entry is None:
            entry = self._entries[entity] = _Entry()
        return entry

    # ─── Primitive setters ───────────────────────────────────────────────────

    def set_default(self, entity: Hashable, spec: EncodingSpec) -> None:
        with self._lock:
            self._entry(entity).default = spec
        logger.debug("Default encoding for %s set to %s", entity, spec)

    def set_field_override(
        self,
        entity: Hashable,
        field_names: str | Iterable[str],
        spec: EncodingSpec,
    ) -> None:
        names = field_names_of(field_names)
        with self._lock:
            fields = self._entry(entity).fields
            for name in names:
                fields[name] = spec
        logger.debug("Encoding for %s.%s set to %s", entity, ",".join(names), spec)

    def set_process_default(self, spec: EncodingSpec) -> None:
        with self._lock:
            self._process_default = spec
        logger.debug("Process default encoding set to %s", spec)

    # ─── Per-side configuration ──────────────────────────────────────────────

    def _configure(
        self,
        entity: Hashable,
        for_: str | Iterable[str] | None,
        **sides: str | None,
    ) -> None:
        with self._lock:
            if for_ is None:
                entry = self._entry(entity)
                self.set_default(entity, entry.default.replace(**sides))
                return
            fields = self._entry(entity).fields
            for name in field_names_of(for_):
                self.set_field_override(entity, name, fields.get(name, UNSET).replace(**sides))

    def external_encoding(
        self,
        entity: Hashable,
        name: str | None,
        for_: str | Iterable[str] | None = None,
    ) -> None:
        """Declare how the database encodes the entity's (or fields') bytes."""
        self._configure(entity, for_, external=name)

    def internal_encoding(
        self,
        entity: Hashable,
        name: str | None,
        for_: str | Iterable[str] | None = None,
    ) -> None:
        """Declare the encoding application code expects to consume."""
        self._configure(entity, for_, internal=name)

    def encoding(
        self,
        entity: Hashable,
        name: str | None,
        for_: str | Iterable[str] | None = None,
    ) -> None:
        """Set both sides at once."""
        if for_ is None:
            self.set_default(entity, EncodingSpec.both(name))
        else:
            self.set_field_override(entity, for_, EncodingSpec.both(name))

    def set_process_external_encoding(self, name: str | None) -> None:
        with self._lock:
            self.set_process_default(self._process_default.replace(external=name))

    def set_process_internal_encoding(self, name: str | None) -> None:
        with self._lock:
            self.set_process_default(self._process_default.replace(internal=name))

    def set_process_encoding(self, name: str | None) -> None:
        self.set_process_default(EncodingSpec.both(name))

    # ─── Resolution ──────────────────────────────────────────────────────────

    def _chain(self, entity: Hashable, field: str | None) -> list[EncodingSpec]:
        entry = self._entries.get(entity)
        if entry is None:
            return [self._process_default]
        chain = [entry.default, self._process_default]
        if field is not None and field in entry.fields:
            chain.insert(0, entry.fields[field])
        return chain

    def resolve_external(self, entity: Hashable, field: str | None) -> str | None:
        with self._lock:
            chain = self._chain(entity, field)
        for spec in chain:
            if spec.external:
                return spec.external
        return None

    def resolve_internal(self, entity: Hashable, field: str | None) -> str:
        with self._lock:
            chain = self._chain(entity, field)
        for spec in chain:
            if spec.internal:
                return spec.internal
        return (
            self._settings.default_internal_encoding
            or self._settings.default_external_encoding
            or FALLBACK_ENCODING
        )

    def resolve(self, entity: Hashable, field: str | None) -> EncodingSpec:
        """Resolve both sides from a single consistent snapshot."""
        with self._lock:
            return EncodingSpec(
                external=self.resolve_external(entity, field),
                internal=self.resolve_internal(entity, field),
            )

    # ─── Introspection ───────────────────────────────────────────────────────

    @property
    def process_default(self) -> EncodingSpec:
        return self._process_default

    def default_for(self, entity: Hashable) -> EncodingSpec:
        with self._lock:
            entry = self._entries.get(entity)
            return entry.default if entry else UNSET

    def encodings_for(self, entity: Hashable) -> dict[str, EncodingSpec]:
        """Snapshot copy of the field overrides for ``entity``."""
        with self._lock:
            entry = self._entries.get(entity)
            return dict(entry.fields) if entry else {}

    def clear(self) -> None:
        """Forget all entity configuration and reseed the process default."""
        with self._lock:
            self._entries.clear()
            self._process_default = self._seed()


@lru_cache
def get_registry() -> EncodingRegistry:
    """Process-wide registry used when none is injected."""
    return EncodingRegistry()

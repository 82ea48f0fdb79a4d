"""Class decorators for declaring encodings on mapped models.

    @external_encoding("ISO-8859-1", for_="comment")
    class User(Base):
        ...

Without ``for_`` the encoding applies to every ``EncodedString`` column of
the model that has no field-level setting of its own.  Columns a subclass
inherits keep converting with the parent's settings, so naming one in
``for_`` on the subclass raises ``EncodingConfigurationError``.
"""

from collections.abc import Iterable

from encoding_aware.db.events import check_inherited_fields
from encoding_aware.registry import EncodingRegistry, get_registry


def _decorator(method: str, name: str | None, for_, registry: EncodingRegistry | None):
    def decorate(cls):
        check_inherited_fields(cls, for_)
        getattr(registry or get_registry(), method)(cls, name, for_)
        return cls

    return decorate


def external_encoding(
    name: str | None,
    for_: str | Iterable[str] | None = None,
    registry: EncodingRegistry | None = None,
):
    """Declare the encoding the database actually uses for this model."""
    return _decorator("external_encoding", name, for_, registry)


def internal_encoding(
    name: str | None,
    for_: str | Iterable[str] | None = None,
    registry: EncodingRegistry | None = None,
):
    """Declare the encoding text is checked against when read."""
    return _decorator("internal_encoding", name, for_, registry)


def encoding(
    name: str | None,
    for_: str | Iterable[str] | None = None,
    registry: EncodingRegistry | None = None,
):
    """Declare both encodings at once."""
    return _decorator("encoding", name, for_, registry)

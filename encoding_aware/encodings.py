"""Immutable external/internal encoding pairs."""

import codecs

from pydantic import BaseModel, field_validator

from encoding_aware.errors import UnknownEncodingError

FALLBACK_ENCODING = "UTF-8"


def check_encoding(name: str | None) -> str | None:
    """Return ``name`` unchanged if Python knows the codec, else raise."""
    if name is None:
        return None
    try:
        codecs.lookup(name)
    except LookupError:
        raise UnknownEncodingError(name) from None
    return name


class EncodingSpec(BaseModel):
    """An (external, internal) pair; either side may be unset."""

    external: str | None = None
    internal: str | None = None

    model_config = {"frozen": True}

    @field_validator("external", "internal", mode="before")
    @classmethod
    def _known_codec(cls, value):
        # UnknownEncodingError is a LookupError, which pydantic lets through
        # instead of folding it into a ValidationError.
        return check_encoding(value)

    @classmethod
    def both(cls, name: str | None) -> "EncodingSpec":
        return cls(external=name, internal=name)

    def replace(self, **changes) -> "EncodingSpec":
        """Build a new spec with some sides changed."""
        values = {"external": self.external, "internal": self.internal}
        values.update(changes)
        return EncodingSpec(**values)


UNSET = EncodingSpec()

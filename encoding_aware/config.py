import codecs
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Library configuration loaded from environment variables."""

    debug: bool = False

    # Process-wide encodings, the equivalent of calling
    # EncodingRegistry.set_process_default() at startup.
    # Leaving external_encoding unset means no conversion is done.
    external_encoding: str | None = None
    internal_encoding: str | None = None

    # Environment-level fallbacks consulted after the process default
    # when resolving the internal encoding.  "UTF-8" is used past these.
    default_internal_encoding: str | None = None
    default_external_encoding: str | None = None

    model_config = {
        "env_prefix": "ENCODING_AWARE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator(
        "external_encoding",
        "internal_encoding",
        "default_internal_encoding",
        "default_external_encoding",
    )
    @classmethod
    def _known_codec(cls, value: str | None) -> str | None:
        if value is None or value == "":
            return None
        try:
            codecs.lookup(value)
        except LookupError:
            raise ValueError(f"unknown encoding: {value}") from None
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()

"""SQLAlchemy ORM event listeners that bind encoded columns to their models."""

import logging
from collections.abc import Iterable

from sqlalchemy import Column, event, inspect
from sqlalchemy.orm import Mapper

from encoding_aware.db.encoded_type import EncodedString
from encoding_aware.errors import EncodingConfigurationError
from encoding_aware.registry import EncodingRegistry, field_names_of, get_registry

logger = logging.getLogger(__name__)


def _encoded_columns(mapper):
    for key, column in mapper.columns.items():
        if isinstance(column, Column) and isinstance(column.type, EncodedString):
            yield key, column


def inherited_encoded_columns(mapper) -> dict[str, Column]:
    """Encoded columns of ``mapper`` that belong to a parent mapper."""
    if mapper is None or mapper.inherits is None:
        return {}
    return {
        key: column
        for key, column in _encoded_columns(mapper)
        if key in mapper.inherits.columns
    }


def check_inherited_fields(class_, for_: str | Iterable[str] | None) -> None:
    """Refuse settings on ``class_`` that its parent's columns would ignore.

    Column types convert with the settings of the class that owns the
    column, so a subclass cannot retarget an inherited one.
    """
    mapper = inspect(class_, raiseerr=False)
    inherited = inherited_encoded_columns(mapper)
    if not inherited:
        return
    if for_ is None:
        logger.warning(
            "Encoding on %s does not apply to inherited columns %s; configure %s instead",
            class_.__name__,
            ", ".join(sorted(inherited)),
            mapper.inherits.class_.__name__,
        )
        return
    named = sorted(set(field_names_of(for_)) & set(inherited))
    if named:
        raise EncodingConfigurationError(
            f"{class_.__name__}.{', '.join(named)} inherited from a parent mapper; "
            "set the encoding on the class that defines the column"
        )


@event.listens_for(Mapper, "after_mapper_constructed")
def bind_encoded_columns(mapper, class_):
    """Point every ``EncodedString`` column of a mapped class at its owner.

    Encoding configuration is looked up by (model class, attribute key),
    so each column type needs to know both before any statement runs,
    including Core statements issued before the mappers are configured.
    Columns inherited from a parent mapper stay bound to the parent.  A
    type instance already bound elsewhere (shared between tables) is
    copied rather than rebound.
    """
    inherited = inherited_encoded_columns(mapper)
    for key, column in _encoded_columns(mapper):
        if key in inherited:
            continue
        column_type = column.type
        if column_type.entity is class_ and column_type.field == key:
            continue
        if column_type.is_bound:
            column.type = column_type.bind(class_, key)
        else:
            column_type.entity = class_
            column_type.field = key
        logger.debug("Bound encoded column %s.%s", class_.__name__, key)


@event.listens_for(Mapper, "mapper_configured")
def reject_inherited_overrides(mapper, class_):
    """Fail configuration when a subclass names an inherited encoded column."""
    for key, column in inherited_encoded_columns(mapper).items():
        registry: EncodingRegistry = column.type.registry or get_registry()
        if key in registry.encodings_for(class_):
            raise EncodingConfigurationError(
                f"{class_.__name__}.{key} inherited from a parent mapper; "
                "set the encoding on the class that defines the column"
            )

"""
Statement building across SQLAlchemy query styles.

A relation may be backed by a 2.0-style ``Select`` or by a legacy
``orm.Query``. Everything downstream works on a ``Select``; this module is
the only place that knows about the difference.
"""

from sqlalchemy import Select
from sqlalchemy.orm import Query


def is_legacy_query(source: object) -> bool:
    """Return True for ``session.query(...)`` style sources."""
    return isinstance(source, Query)


def build_statement(source: Select | Query) -> Select:
    """Return the ``Select`` a relation source represents."""
    if is_legacy_query(source):
        return source.statement  # type: ignore[union-attr]
    return source  # type: ignore[return-value]


def root_entity(source: Select | Query) -> type | None:
    """Return the first mapped class a source selects, if any."""
    for description in source.column_descriptions:
        entity = description.get("entity")
        if entity is not None:
            return entity
    return None

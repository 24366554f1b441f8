"""
SET-clause preparation for bulk updates.

Two input shapes are accepted:

- a mapping of column -> value, which gets the optimistic-locking increment
  when the model uses a version column and the caller did not set it;
- a sequence of ``(column, expression)`` pairs, lowered as-is, in order. The
  caller owns locking semantics for this form.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import Column, func
from sqlalchemy.orm.attributes import QueryableAttribute
from sqlalchemy.sql.elements import ColumnElement

from ormtenant.adapters.sqlalchemy.introspection import ModelInspector
from ormtenant.core.errors import ValidationError

UpdateValues = Mapping[Any, Any] | Sequence[tuple[Any, Any]]


def increment_expression(column: Column[Any]) -> ColumnElement[Any]:
    """``COALESCE(column, 0) + 1``"""
    return func.coalesce(column, 0) + 1


def _key_names(key: Any) -> set[str]:
    if isinstance(key, str):
        return {key}
    if isinstance(key, QueryableAttribute):
        return {key.key}
    if isinstance(key, Column):
        return {key.name, key.key}
    return set()


def sets_locking_column(updates: Mapping[Any, Any], inspector: ModelInspector) -> bool:
    """Check whether any key names the locking column, by column or attribute name."""
    column = inspector.locking_column
    if column is None:
        return False
    wanted = {column.name, column.key, inspector.attribute_key(column)}
    return any(_key_names(key) & wanted for key in updates)


def with_locking_increment(
    updates: Mapping[Any, Any],
    inspector: ModelInspector,
) -> dict[Any, Any]:
    """Return the updates plus a version bump when locking applies."""
    result = dict(updates)
    column = inspector.locking_column
    if column is not None and not sets_locking_column(updates, inspector):
        result[column.name] = increment_expression(column)
    return result


def lower_values(
    updates: UpdateValues,
    inspector: ModelInspector,
    *,
    increment_locking: bool = True,
) -> dict[Column[Any], Any] | list[tuple[Column[Any], Any]]:
    """
    Lower an update request into table columns.

    Returns a dict for the mapping form and an ordered list of pairs for the
    raw form.
    """
    if isinstance(updates, Mapping):
        if increment_locking:
            updates = with_locking_increment(updates, inspector)
        values = {inspector.resolve_column(key): value for key, value in updates.items()}
        if not values:
            raise ValidationError("Bulk updates must set at least one column")
        return values

    if isinstance(updates, (str, bytes)) or not isinstance(updates, Sequence):
        raise ValidationError(
            "Bulk updates must be a mapping or a sequence of (column, value) pairs; "
            "SQL assignment strings are not accepted"
        )

    pairs: list[tuple[Column[Any], Any]] = []
    for item in updates:
        if not isinstance(item, tuple) or len(item) != 2:
            raise ValidationError(f"Expected a (column, value) pair, got {item!r}")
        key, value = item
        pairs.append((inspector.resolve_column(key), value))
    if not pairs:
        raise ValidationError("Bulk updates must set at least one column")
    return pairs

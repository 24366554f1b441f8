"""
SQLAlchemy model introspection.

Reads the table, key, and optimistic-locking metadata the bulk interceptors
need from a mapped class.
"""

from typing import Any

from sqlalchemy import Column, Table, inspect
from sqlalchemy.orm import ColumnProperty, Mapper
from sqlalchemy.orm.attributes import QueryableAttribute
from sqlalchemy.orm.exc import UnmappedColumnError

from ormtenant.core.errors import ValidationError
from ormtenant.core.types import PrimaryKey


class ModelInspector:
    """
    Inspects a single mapped class.
    """

    def __init__(self, model: type) -> None:
        self.model = model
        self.mapper: Mapper[Any] = inspect(model)

    @property
    def table(self) -> Table:
        return self.mapper.local_table  # type: ignore[return-value]

    @property
    def primary_key(self) -> PrimaryKey:
        return PrimaryKey.for_table(self.table)

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.table.columns]

    @property
    def locking_column(self) -> Column[Any] | None:
        """The ``version_id_col`` of the mapper, when optimistic locking is on."""
        column = self.mapper.version_id_col
        if column is None:
            return None
        return self.table.c[column.key]

    def locking_enabled(self) -> bool:
        return self.locking_column is not None

    def attribute_key(self, column: Column[Any]) -> str:
        """The mapped attribute name for a table column."""
        try:
            return self.mapper.get_property_by_column(column).key
        except UnmappedColumnError:
            return column.key

    def resolve_column(self, key: Any) -> Column[Any]:
        """
        Resolve an update key to a column of the target table.

        Accepts a column name, a mapped attribute name, an ORM attribute
        (``Order.status``), or a ``Column``.
        """
        if isinstance(key, str):
            if key in self.table.c:
                return self.table.c[key]
            prop = self.mapper.attrs.get(key)
            if isinstance(prop, ColumnProperty):
                return self._own_column(prop.columns[0], key)
            raise ValidationError(
                f"Column '{key}' does not exist on table '{self.table.name}'",
                field=key,
            )

        if isinstance(key, QueryableAttribute):
            prop = key.property
            if isinstance(prop, ColumnProperty):
                return self._own_column(prop.columns[0], key.key)
            raise ValidationError(
                f"Attribute '{key.key}' is not a column of '{self.table.name}'",
                field=key.key,
            )

        if isinstance(key, Column):
            return self._own_column(key, key.name)

        raise ValidationError(f"Unsupported update key: {key!r}")

    def _own_column(self, column: Any, label: str) -> Column[Any]:
        name = getattr(column, "name", None)
        owner = getattr(column, "table", None)
        if name is None or name not in self.table.c or (
            owner is not None and getattr(owner, "name", None) != self.table.name
        ):
            raise ValidationError(
                f"Column '{label}' does not belong to table '{self.table.name}'",
                field=label,
            )
        return self.table.c[name]

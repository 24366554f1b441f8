"""
Shared type definitions for ormtenant.
"""

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Column, Table, inspect

from ormtenant.core.errors import ConfigurationError


@dataclass(frozen=True)
class PrimaryKey:
    """
    Ordered primary key columns of a table.

    Composite keys (more than one column) must be matched as a row value,
    never column by column.
    """

    columns: tuple[Column[Any], ...]

    def __post_init__(self) -> None:
        if not self.columns:
            raise ConfigurationError("Primary key must have at least one column")

    @classmethod
    def for_model(cls, model: type) -> "PrimaryKey":
        """Build the descriptor from a mapped class."""
        mapper = inspect(model)
        columns = tuple(mapper.primary_key)
        if not columns:
            raise ConfigurationError(
                f"Model '{model.__name__}' has no primary key columns",
                model=model.__name__,
            )
        return cls(columns)

    @classmethod
    def for_table(cls, table: Table) -> "PrimaryKey":
        """Build the descriptor from a Core table."""
        columns = tuple(table.primary_key.columns)
        if not columns:
            raise ConfigurationError(
                f"Table '{table.name}' has no primary key columns",
                model=table.name,
            )
        return cls(columns)

    @property
    def names(self) -> list[str]:
        return [c.name for c in self.columns]

    @property
    def is_composite(self) -> bool:
        return len(self.columns) > 1

    def __len__(self) -> int:
        return len(self.columns)

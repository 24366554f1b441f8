"""
Configuration for tenant-scoped bulk operations.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PredicateMatch(str, Enum):
    """How an existing tenant predicate is recognised in a statement."""

    STRUCTURAL = "structural"  # Same column, "=" operator, same bound value
    TEXT = "text"  # Same rendered SQL


class ScopingConfig(BaseModel):
    """
    Settings shared by the subquery engine and the bulk interceptors.
    """

    predicate_match: PredicateMatch = Field(default=PredicateMatch.STRUCTURAL)

    # Add "<locking column> = COALESCE(<locking column>, 0) + 1" to mapping updates
    increment_locking_column: bool = Field(default=True)

    # Log every compiled bulk statement at DEBUG level
    log_statements: bool = Field(default=False)

    model_config = {"frozen": True}

    @classmethod
    def from_env(cls, prefix: str = "ORMTENANT_") -> "ScopingConfig":
        """
        Build a config from environment variables.

        Recognised variables (with the default prefix):
            ORMTENANT_PREDICATE_MATCH: "structural" or "text"
            ORMTENANT_INCREMENT_LOCKING_COLUMN: "true" / "false"
            ORMTENANT_LOG_STATEMENTS: "true" / "false"
        """
        settings = ScopingSettings(_env_prefix=prefix)
        return cls(**settings.model_dump())


class ScopingSettings(BaseSettings):
    """Environment-backed source for ScopingConfig."""

    model_config = SettingsConfigDict(env_prefix="ORMTENANT_", extra="ignore")

    predicate_match: PredicateMatch = PredicateMatch.STRUCTURAL
    increment_locking_column: bool = True
    log_statements: bool = False

    @field_validator("predicate_match", mode="before")
    @classmethod
    def _normalize_match(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value


DEFAULT_CONFIG = ScopingConfig()

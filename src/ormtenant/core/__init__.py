"""
ormtenant core module.

Contains the tenant context, configuration, error taxonomy, and shared types.
"""

from ormtenant.core.config import DEFAULT_CONFIG, PredicateMatch, ScopingConfig
from ormtenant.core.context import (
    TenantContext,
    TenantContextProvider,
    TenantRegistry,
    default_partition_key,
)
from ormtenant.core.errors import ConfigurationError, OrmTenantError, ValidationError
from ormtenant.core.types import PrimaryKey

__all__ = [
    # Config
    "DEFAULT_CONFIG",
    "PredicateMatch",
    "ScopingConfig",
    # Context
    "TenantContext",
    "TenantContextProvider",
    "TenantRegistry",
    "default_partition_key",
    # Errors
    "OrmTenantError",
    "ConfigurationError",
    "ValidationError",
    # Types
    "PrimaryKey",
]

"""
ormtenant - tenant isolation for ORM bulk mutations.

ormtenant rewrites bulk DELETE and UPDATE statements issued through
SQLAlchemy so that they only touch rows owned by the current tenant. Queries
may carry arbitrary filters, joins, and eager-loaded relationships; the bulk
statement is restricted through a primary-key membership subquery rather than
by flattening the query.
"""

__version__ = "0.1.0"

from ormtenant.adapters.sqlalchemy import SessionManager, TenantQuery
from ormtenant.core.config import PredicateMatch, ScopingConfig
from ormtenant.core.context import TenantContext, TenantContextProvider, TenantRegistry
from ormtenant.core.errors import ConfigurationError, OrmTenantError, ValidationError
from ormtenant.core.types import PrimaryKey
from ormtenant.scoping import SubqueryEngine, should_bypass_scoping

__all__ = [
    # Version
    "__version__",
    # Context
    "TenantContext",
    "TenantContextProvider",
    "TenantRegistry",
    # Config
    "PredicateMatch",
    "ScopingConfig",
    # Scoping
    "SubqueryEngine",
    "should_bypass_scoping",
    # SQLAlchemy
    "SessionManager",
    "TenantQuery",
    # Types
    "PrimaryKey",
    # Errors
    "OrmTenantError",
    "ConfigurationError",
    "ValidationError",
]

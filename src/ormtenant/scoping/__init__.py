"""
Tenant scoping for bulk statements.

The gate decides whether scoping applies; the subquery engine turns a query
into a primary-key membership predicate restricted to the current tenant.
"""

from ormtenant.scoping.gate import should_bypass_scoping
from ormtenant.scoping.predicates import (
    count_tenant_predicates,
    has_tenant_predicate,
    tenant_predicate,
)
from ormtenant.scoping.subquery import SubqueryEngine

__all__ = [
    "SubqueryEngine",
    "count_tenant_predicates",
    "has_tenant_predicate",
    "should_bypass_scoping",
    "tenant_predicate",
]

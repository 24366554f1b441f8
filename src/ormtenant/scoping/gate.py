"""
Decides whether a bulk operation needs tenant scoping at all.
"""

from ormtenant.core.context import TenantContextProvider


def should_bypass_scoping(tenant: TenantContextProvider | None) -> bool:
    """
    Return True when the unscoped bulk operation should run unchanged.

    Scoping is skipped when there is no current tenant, or when the tenant is
    given as a bare id. A bare id carries no class, so the partition column
    cannot be derived from it.
    """
    if tenant is None:
        return True
    return tenant.current_tenant() is None or tenant.current_tenant_is_id()

"""
Tenant context for scoped bulk operations.

The tenant context answers four questions for the scoping layer: who the
current tenant is, which class it belongs to, which column partitions rows by
that class, and which value that column must hold. It is always passed
explicitly; nothing here is stored in a global.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from sqlalchemy import inspect

# Tenants given as one of these types are treated as raw identifiers
RAW_ID_TYPES: tuple[type, ...] = (str, int, UUID)


def default_partition_key(tenant_class: type) -> str:
    """Derive a partition key from a class name (``CustomerAccount`` -> ``customer_account_id``)."""
    name = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", tenant_class.__name__)
    return f"{name.lower()}_id"


class TenantContextProvider(ABC):
    """
    Interface the scoping layer consumes to learn about the current tenant.

    Implement this to plug in an existing request/tenant resolution scheme.
    """

    @abstractmethod
    def current_tenant(self) -> Any:
        """Return the current tenant (instance or raw id), or None."""
        ...

    @abstractmethod
    def current_tenant_is_id(self) -> bool:
        """Return True when the current tenant is a bare identifier."""
        ...

    @abstractmethod
    def current_tenant_class(self) -> type | None:
        """Return the class of the current tenant, if known."""
        ...

    @abstractmethod
    def partition_key(self, tenant_class: type | None) -> str | None:
        """Return the column name that stores a row's owning tenant."""
        ...

    @abstractmethod
    def current_tenant_id(self) -> Any:
        """Return the value the partition column must equal."""
        ...


class TenantRegistry:
    """
    Registry of tenant classes and the partition keys that reference them.

    Example:
        registry = TenantRegistry()
        registry.register(Account)  # partition key "account_id"
        registry.register(Company, partition_key="org_id")

        ctx = registry.context(current_account)
    """

    def __init__(self, default_tenant_class: type | None = None) -> None:
        """
        Initialize the registry.

        Args:
            default_tenant_class: Class assumed when the tenant is a raw id
        """
        self.default_tenant_class = default_tenant_class
        self._partition_keys: dict[type, str] = {}

    def register(self, tenant_class: type, partition_key: str | None = None) -> str:
        """Register a tenant class and return its partition key."""
        key = partition_key or default_partition_key(tenant_class)
        self._partition_keys[tenant_class] = key
        return key

    def is_registered(self, tenant_class: type) -> bool:
        return tenant_class in self._partition_keys

    def partition_key(self, tenant_class: type | None) -> str | None:
        """Look up the partition key, falling back to the derived default."""
        if tenant_class is None:
            return None
        if tenant_class in self._partition_keys:
            return self._partition_keys[tenant_class]
        return default_partition_key(tenant_class)

    def context(self, tenant: Any) -> "TenantContext":
        """Build a context for the given tenant instance or id."""
        return TenantContext(current=tenant, registry=self)

    def without(self) -> "TenantContext":
        """Build a context with no current tenant."""
        return TenantContext(current=None, registry=self)


@dataclass(frozen=True)
class TenantContext(TenantContextProvider):
    """
    Immutable tenant context for one unit of work.

    A tenant given as a mapped instance resolves its id from the instance's
    primary key (a scalar, or a tuple for composite keys). A tenant given as a
    raw id is reported through ``current_tenant_is_id``.
    """

    current: Any = None
    registry: TenantRegistry = field(default_factory=TenantRegistry, compare=False)

    def current_tenant(self) -> Any:
        return self.current

    def current_tenant_is_id(self) -> bool:
        return isinstance(self.current, RAW_ID_TYPES)

    def current_tenant_class(self) -> type | None:
        if self.current is None:
            return None
        if self.current_tenant_is_id():
            return self.registry.default_tenant_class
        return type(self.current)

    def partition_key(self, tenant_class: type | None) -> str | None:
        return self.registry.partition_key(tenant_class)

    def current_tenant_id(self) -> Any:
        if self.current is None or self.current_tenant_is_id():
            return self.current

        state = inspect(self.current)
        values = state.mapper.primary_key_from_instance(self.current)
        if len(values) == 1:
            return values[0]
        return tuple(values)

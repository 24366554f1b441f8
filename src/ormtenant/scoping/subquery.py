"""
Membership predicate construction for scoped bulk statements.

A bulk DELETE or UPDATE cannot carry the joins an ORM query may have picked up
through filtering or eager loading. Instead of flattening the query into the
bulk statement, the engine turns it into a subquery that selects primary keys
and restricts the bulk statement to rows whose key is in that set:

    DELETE FROM orders
    WHERE orders.id IN (
        SELECT orders.id FROM orders LEFT OUTER JOIN customers ON ...
        WHERE customers.name = 'x' AND orders.tenant_id = 't1'
    )

Composite keys use a row value: ``(a, b) IN (SELECT a, b FROM ...)``.
"""

from typing import Any

from sqlalchemy import Select, Table, tuple_
from sqlalchemy.sql.elements import ColumnElement

from ormtenant.core.config import DEFAULT_CONFIG, ScopingConfig
from ormtenant.core.context import TenantContextProvider
from ormtenant.core.types import PrimaryKey
from ormtenant.logging import get_logger
from ormtenant.scoping.predicates import has_tenant_predicate, tenant_predicate

logger = get_logger(__name__)


class SubqueryEngine:
    """
    Builds the ``primary key IN (subquery)`` predicate for a scoped bulk statement.

    The engine is a pure transformation: it never executes SQL and, since
    SQLAlchemy statements are generative, never modifies the statement it is
    given.
    """

    def __init__(self, config: ScopingConfig | None = None) -> None:
        self.config = config or DEFAULT_CONFIG

    def resolve_tenant(
        self,
        tenant: TenantContextProvider | None,
    ) -> tuple[str | None, Any]:
        """Return the partition key and tenant id, either of which may be None."""
        if tenant is None:
            return None, None
        partition_key = tenant.partition_key(tenant.current_tenant_class())
        return partition_key, tenant.current_tenant_id()

    def apply_tenant_predicate(
        self,
        statement: Select,
        *,
        table: Table,
        tenant: TenantContextProvider | None,
    ) -> Select:
        """
        Restrict the statement to the current tenant's rows.

        The statement is returned unchanged when there is no tenant id, when
        the table has no partition column, or when an equivalent predicate is
        already present.
        """
        partition_key, tenant_id = self.resolve_tenant(tenant)
        if tenant_id is None or partition_key is None:
            return statement

        if partition_key not in table.c:
            logger.debug(
                "Table has no partition column, tenant predicate skipped",
                table=table.name,
                partition_key=partition_key,
            )
            return statement

        if has_tenant_predicate(
            statement, table, partition_key, tenant_id, self.config.predicate_match
        ):
            return statement

        return statement.where(tenant_predicate(table, partition_key, tenant_id))

    def primary_key_subquery(self, statement: Select, primary_key: PrimaryKey) -> Select:
        """Replace the projection with the primary key columns, in declared order."""
        return statement.with_only_columns(*primary_key.columns).correlate(None)

    def membership_predicate(
        self,
        statement: Select,
        *,
        table: Table,
        primary_key: PrimaryKey,
        tenant: TenantContextProvider | None,
    ) -> ColumnElement[bool]:
        """
        Build the predicate that limits a bulk statement to the query's rows.

        Args:
            statement: The relation's statement, already rooted at ``table``
            table: The bulk statement's target table
            primary_key: The table's primary key columns
            tenant: The tenant context, or None for an unscoped predicate
        """
        scoped = self.apply_tenant_predicate(statement, table=table, tenant=tenant)
        subquery = self.primary_key_subquery(scoped, primary_key)

        if primary_key.is_composite:
            return tuple_(*primary_key.columns).in_(subquery)
        return primary_key.columns[0].in_(subquery)

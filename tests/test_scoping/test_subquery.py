"""
Tests for the subquery engine.

These tests only build and compile statements; nothing is executed.
"""

import pytest
from sqlalchemy import select

from conftest import Account, AuditEntry, LineItem, Order

from ormtenant.core.config import PredicateMatch, ScopingConfig
from ormtenant.core.context import TenantRegistry
from ormtenant.core.types import PrimaryKey
from ormtenant.scoping.predicates import canonical_text, count_tenant_predicates
from ormtenant.scoping.subquery import SubqueryEngine

ORDERS = Order.__table__
LINE_ITEMS = LineItem.__table__


@pytest.fixture
def tenant(registry):
    return registry.context(Account(id=1, name="Acme"))


@pytest.fixture
def subquery_engine():
    return SubqueryEngine()


class TestResolveTenant:
    def test_resolves_key_and_id(self, subquery_engine, tenant):
        assert subquery_engine.resolve_tenant(tenant) == ("account_id", 1)

    def test_no_context(self, subquery_engine):
        assert subquery_engine.resolve_tenant(None) == (None, None)

    def test_empty_context(self, subquery_engine, registry):
        assert subquery_engine.resolve_tenant(registry.without()) == (None, None)


class TestApplyTenantPredicate:
    def test_adds_predicate(self, subquery_engine, tenant):
        stmt = subquery_engine.apply_tenant_predicate(select(Order), table=ORDERS, tenant=tenant)
        assert count_tenant_predicates(stmt, ORDERS, "account_id", 1) == 1

    @pytest.mark.parametrize("match", list(PredicateMatch))
    def test_idempotent(self, tenant, match):
        subquery_engine = SubqueryEngine(ScopingConfig(predicate_match=match))
        once = subquery_engine.apply_tenant_predicate(select(Order), table=ORDERS, tenant=tenant)
        twice = subquery_engine.apply_tenant_predicate(once, table=ORDERS, tenant=tenant)
        assert twice is once
        assert count_tenant_predicates(twice, ORDERS, "account_id", 1) == 1

    def test_existing_caller_predicate_is_kept_single(self, subquery_engine, tenant):
        stmt = select(Order).where(Order.account_id == 1, Order.status == "pending")
        scoped = subquery_engine.apply_tenant_predicate(stmt, table=ORDERS, tenant=tenant)
        assert scoped is stmt

    def test_predicate_under_or_is_not_trusted(self, subquery_engine, tenant):
        stmt = select(Order).where((Order.status == "x") | (Order.account_id == 1))
        scoped = subquery_engine.apply_tenant_predicate(stmt, table=ORDERS, tenant=tenant)
        assert count_tenant_predicates(scoped, ORDERS, "account_id", 1) == 1
        assert scoped is not stmt

    def test_missing_partition_column(self, subquery_engine, tenant):
        stmt = select(AuditEntry).where(AuditEntry.id > 1)
        scoped = subquery_engine.apply_tenant_predicate(
            stmt, table=AuditEntry.__table__, tenant=tenant
        )
        assert scoped is stmt

    def test_no_tenant_id(self, subquery_engine, registry):
        stmt = select(Order)
        assert subquery_engine.apply_tenant_predicate(stmt, table=ORDERS, tenant=registry.without()) is stmt
        assert subquery_engine.apply_tenant_predicate(stmt, table=ORDERS, tenant=None) is stmt

    def test_unknown_partition_key(self, subquery_engine):
        registry = TenantRegistry()
        registry.register(Account, partition_key="org_id")
        stmt = select(Order)
        scoped = subquery_engine.apply_tenant_predicate(
            stmt, table=ORDERS, tenant=registry.context(Account(id=1, name="Acme"))
        )
        assert scoped is stmt


class TestMembershipPredicate:
    def test_single_column_key(self, subquery_engine, tenant):
        predicate = subquery_engine.membership_predicate(
            select(Order).where(Order.status == "pending").select_from(ORDERS),
            table=ORDERS,
            primary_key=PrimaryKey.for_model(Order),
            tenant=tenant,
        )
        sql = canonical_text(predicate)
        assert sql.startswith("orders.id IN (SELECT orders.id FROM orders WHERE")
        assert "orders.status = 'pending'" in sql
        assert "orders.account_id = 1" in sql

    def test_composite_key_uses_row_value(self, subquery_engine, tenant):
        predicate = subquery_engine.membership_predicate(
            select(LineItem).where(LineItem.sku == "X").select_from(LINE_ITEMS),
            table=LINE_ITEMS,
            primary_key=PrimaryKey.for_model(LineItem),
            tenant=tenant,
        )
        sql = canonical_text(predicate)
        assert sql.startswith(
            "(line_items.order_id, line_items.line_no) IN "
            "(SELECT line_items.order_id, line_items.line_no FROM line_items"
        )
        assert "line_items.account_id = 1" in sql

    def test_join_stays_inside_subquery(self, subquery_engine, tenant):
        stmt = select(Order).outerjoin(Order.customer).select_from(ORDERS)
        predicate = subquery_engine.membership_predicate(
            stmt,
            table=ORDERS,
            primary_key=PrimaryKey.for_model(Order),
            tenant=tenant,
        )
        sql = canonical_text(predicate)
        assert sql.startswith("orders.id IN (SELECT orders.id FROM orders LEFT OUTER JOIN customers")

    def test_unscoped_predicate(self, subquery_engine):
        predicate = subquery_engine.membership_predicate(
            select(Order).where(Order.status == "pending"),
            table=ORDERS,
            primary_key=PrimaryKey.for_model(Order),
            tenant=None,
        )
        assert "account_id" not in canonical_text(predicate)

    def test_input_statement_is_not_modified(self, subquery_engine, tenant):
        stmt = select(Order)
        subquery_engine.membership_predicate(
            stmt,
            table=ORDERS,
            primary_key=PrimaryKey.for_model(Order),
            tenant=tenant,
        )
        assert stmt.whereclause is None
        assert len(stmt.selected_columns) == len(ORDERS.columns)

    def test_primary_key_subquery_projects_key_only(self, subquery_engine):
        subquery = subquery_engine.primary_key_subquery(select(Order), PrimaryKey.for_model(Order))
        assert [c.name for c in subquery.selected_columns] == ["id"]

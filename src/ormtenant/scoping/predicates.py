"""
Tenant predicate construction and duplicate detection.

A statement may already carry the tenant predicate, for example when a scoped
relation is built on top of another scoped relation. Only the top-level AND
conjuncts of the WHERE clause are searched: a tenant comparison nested under
OR or NOT does not restrict the statement and must not suppress the predicate.
"""

from collections.abc import Iterator
from typing import Any

from sqlalchemy import Select, Table
from sqlalchemy.exc import CompileError
from sqlalchemy.sql import operators
from sqlalchemy.sql.elements import (
    BinaryExpression,
    BindParameter,
    BooleanClauseList,
    ColumnClause,
    ColumnElement,
    Grouping,
)

from ormtenant.core.config import PredicateMatch


def tenant_predicate(table: Table, partition_key: str, tenant_id: Any) -> ColumnElement[bool]:
    """Build ``table.partition_key = tenant_id``."""
    return table.c[partition_key] == tenant_id


def conjuncts(clause: ColumnElement[Any] | None) -> Iterator[ColumnElement[Any]]:
    """Yield the top-level AND terms of a WHERE clause, without grouping parens."""
    if clause is None:
        return
    if isinstance(clause, Grouping):
        yield from conjuncts(clause.element)
    elif isinstance(clause, BooleanClauseList) and clause.operator is operators.and_:
        for term in clause.clauses:
            yield from conjuncts(term)
    else:
        yield clause


def _same_column(element: Any, table: Table, name: str) -> bool:
    if not isinstance(element, ColumnClause) or element.name != name:
        return False
    owner = element.table
    if owner is None:
        return False
    return owner is table or (
        getattr(owner, "name", None) == table.name
        and getattr(owner, "schema", None) == table.schema
    )


def _matches_structurally(node: Any, table: Table, partition_key: str, tenant_id: Any) -> bool:
    if not isinstance(node, BinaryExpression) or node.operator is not operators.eq:
        return False
    for column_side, value_side in ((node.left, node.right), (node.right, node.left)):
        if (
            _same_column(column_side, table, partition_key)
            and isinstance(value_side, BindParameter)
            and value_side.effective_value == tenant_id
        ):
            return True
    return False


def canonical_text(element: ColumnElement[Any]) -> str | None:
    """Render with literal values and collapsed whitespace, or None if not renderable."""
    try:
        rendered = str(element.compile(compile_kwargs={"literal_binds": True}))
    except CompileError:
        return None
    return " ".join(rendered.split())


def has_tenant_predicate(
    statement: Select,
    table: Table,
    partition_key: str,
    tenant_id: Any,
    match: PredicateMatch = PredicateMatch.STRUCTURAL,
) -> bool:
    """
    Check whether the statement's WHERE clause already restricts to the tenant.

    A false negative is safe: the caller then ANDs an equal predicate again.
    """
    terms = list(conjuncts(statement.whereclause))
    if not terms:
        return False

    if match == PredicateMatch.TEXT:
        wanted = canonical_text(tenant_predicate(table, partition_key, tenant_id))
        return wanted is not None and any(canonical_text(term) == wanted for term in terms)

    return any(_matches_structurally(term, table, partition_key, tenant_id) for term in terms)


def count_tenant_predicates(
    statement: Select,
    table: Table,
    partition_key: str,
    tenant_id: Any,
) -> int:
    """Count top-level tenant predicates in the WHERE clause."""
    return sum(
        1
        for term in conjuncts(statement.whereclause)
        if _matches_structurally(term, table, partition_key, tenant_id)
    )

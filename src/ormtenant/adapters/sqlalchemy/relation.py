"""
Tenant-aware relation over a SQLAlchemy statement.

``TenantQuery`` wraps a session, a mapped class and a statement, and offers
``delete_all`` / ``update_all`` that restrict the affected rows to the current
tenant. The statement may carry any filtering and joins; the bulk statement
only ever targets the model's table and selects rows through a primary-key
membership subquery.
"""

from typing import Any

from sqlalchemy import Column, Select, Table, delete, select, update
from sqlalchemy.orm import Query, Session, contains_eager
from sqlalchemy.sql.dml import Delete, Update
from sqlalchemy.sql.elements import ColumnElement

from ormtenant.adapters.sqlalchemy.assignments import UpdateValues, lower_values
from ormtenant.adapters.sqlalchemy.compat import build_statement, root_entity
from ormtenant.adapters.sqlalchemy.introspection import ModelInspector
from ormtenant.core.config import DEFAULT_CONFIG, ScopingConfig
from ormtenant.core.context import TenantContextProvider
from ormtenant.core.errors import ConfigurationError
from ormtenant.core.types import PrimaryKey
from ormtenant.logging import get_logger
from ormtenant.scoping.gate import should_bypass_scoping
from ormtenant.scoping.subquery import SubqueryEngine

logger = get_logger(__name__)


class TenantQuery:
    """
    A relation whose bulk mutations are scoped to the current tenant.

    Builder methods (``where``, ``join``, ``includes``...) return new
    instances; the original statement is never modified.

    Example:
        orders = TenantQuery(session, Order, tenant=registry.context(account))
        orders.where(Order.status == "stale").delete_all()
        orders.includes(Order.customer).where(Customer.name == "x").update_all(
            {"status": "archived"}
        )
    """

    def __init__(
        self,
        session: Session,
        model: type,
        statement: Select | Query | None = None,
        *,
        tenant: TenantContextProvider | None = None,
        config: ScopingConfig | None = None,
        includes: tuple[Any, ...] = (),
        joined: bool | None = None,
    ) -> None:
        """
        Initialize the relation.

        Args:
            session: Session used to execute statements
            model: Mapped class whose table is the bulk target
            statement: Select or legacy Query (defaults to ``select(model)``)
            tenant: Tenant context; None means unscoped
            config: Scoping configuration
            includes: Relationship attributes to eager load
            joined: Whether the statement carries joins. A caller-supplied
                statement of unknown shape is assumed to.
        """
        self.session = session
        self.model = model
        self.tenant = tenant
        self.config = config or DEFAULT_CONFIG
        self.inspector = ModelInspector(model)
        self.subquery_engine = SubqueryEngine(self.config)
        self._source: Select | Query = statement if statement is not None else select(model)
        self._includes = tuple(includes)
        self._joined = statement is not None if joined is None else joined
        self._records: list[Any] | None = None

    @classmethod
    def from_query(
        cls,
        query: Query,
        *,
        tenant: TenantContextProvider | None = None,
        config: ScopingConfig | None = None,
    ) -> "TenantQuery":
        """Wrap a legacy ``session.query(Model)...`` object."""
        model = root_entity(query)
        if model is None:
            raise ConfigurationError("Query does not select a mapped entity")
        return cls(query.session, model, query, tenant=tenant, config=config)

    # =========================================================================
    # METADATA
    # =========================================================================

    @property
    def table(self) -> Table:
        return self.inspector.table

    @property
    def primary_key(self) -> PrimaryKey:
        return self.inspector.primary_key

    @property
    def column_names(self) -> list[str]:
        return self.inspector.column_names

    @property
    def locking_column(self) -> Column[Any] | None:
        return self.inspector.locking_column

    # =========================================================================
    # BUILDING
    # =========================================================================

    def _clone(self, source: Select | Query, **overrides: Any) -> "TenantQuery":
        return TenantQuery(
            self.session,
            self.model,
            source,
            tenant=overrides.get("tenant", self.tenant),
            config=self.config,
            includes=overrides.get("includes", self._includes),
            joined=overrides.get("joined", self._joined),
        )

    def where(self, *criteria: Any) -> "TenantQuery":
        return self._clone(self._source.where(*criteria))

    def filter_by(self, **kwargs: Any) -> "TenantQuery":
        return self._clone(self._source.filter_by(**kwargs))

    def join(
        self,
        target: Any,
        onclause: Any = None,
        *,
        isouter: bool = False,
    ) -> "TenantQuery":
        return self._clone(
            self._source.join(target, onclause, isouter=isouter),
            joined=True,
        )

    def outerjoin(self, target: Any, onclause: Any = None) -> "TenantQuery":
        return self.join(target, onclause, isouter=True)

    def includes(self, *relationships: Any) -> "TenantQuery":
        """Eager load relationships through a LEFT OUTER JOIN."""
        return self._clone(self._source, includes=self._includes + relationships)

    def with_tenant(self, tenant: TenantContextProvider | None) -> "TenantQuery":
        return self._clone(self._source, tenant=tenant)

    def eager_loading(self) -> bool:
        return bool(self._includes)

    def build_statement(self) -> Select:
        """The relation's statement without eager-load joins."""
        return build_statement(self._source)

    def apply_join_dependency(self) -> Select:
        """The relation's statement with one outer join per included relationship."""
        statement = self.build_statement()
        for relationship in self._includes:
            statement = statement.outerjoin(relationship)
        return statement

    @property
    def statement(self) -> Select:
        """The statement used to load records."""
        if not self.eager_loading():
            return self.build_statement()
        return self.apply_join_dependency().options(
            *(contains_eager(relationship) for relationship in self._includes)
        )

    # =========================================================================
    # LOADING
    # =========================================================================

    def all(self) -> list[Any]:
        """Load and memoize the relation's records."""
        if self._records is None:
            result = self.session.scalars(self.statement)
            if self.eager_loading():
                result = result.unique()
            self._records = list(result.all())
        return self._records

    @property
    def loaded(self) -> bool:
        return self._records is not None

    def reset(self) -> "TenantQuery":
        """Forget memoized records."""
        self._records = None
        return self

    # =========================================================================
    # BULK OPERATIONS
    # =========================================================================

    def delete_all(self) -> int:
        """
        Delete every row of the relation that belongs to the current tenant.

        Returns the number of deleted rows.
        """
        label = f"{self.model.__name__} Delete All"
        if should_bypass_scoping(self.tenant):
            return self._base_delete_all(label)

        stmt = delete(self.table).where(self._in_condition(self.tenant))
        return self._execute(stmt, label, scoped=True)

    def update_all(self, updates: UpdateValues) -> int:
        """
        Update every row of the relation that belongs to the current tenant.

        Args:
            updates: Mapping of column -> value, or a sequence of
                (column, expression) pairs applied in order

        Returns the number of updated rows.
        """
        label = f"{self.model.__name__} Update All"
        if should_bypass_scoping(self.tenant):
            return self._base_update_all(updates, label)

        stmt = self._update_statement(updates).where(self._in_condition(self.tenant))
        return self._execute(stmt, label, scoped=True)

    def _base_delete_all(self, label: str) -> int:
        stmt = delete(self.table)
        whereclause = self._unscoped_where()
        if whereclause is not None:
            stmt = stmt.where(whereclause)
        return self._execute(stmt, label, scoped=False)

    def _base_update_all(self, updates: UpdateValues, label: str) -> int:
        stmt = self._update_statement(updates)
        whereclause = self._unscoped_where()
        if whereclause is not None:
            stmt = stmt.where(whereclause)
        return self._execute(stmt, label, scoped=False)

    def _update_statement(self, updates: UpdateValues) -> Update:
        values = lower_values(
            updates,
            self.inspector,
            increment_locking=self.config.increment_locking_column,
        )
        stmt = update(self.table)
        if isinstance(values, dict):
            return stmt.values(values)
        return stmt.ordered_values(*values)

    def _rooted_statement(self) -> Select:
        statement = self.apply_join_dependency() if self.eager_loading() else self.build_statement()
        return statement.select_from(self.table)

    def _in_condition(self, tenant: TenantContextProvider | None) -> ColumnElement[bool]:
        return self.subquery_engine.membership_predicate(
            self._rooted_statement(),
            table=self.table,
            primary_key=self.primary_key,
            tenant=tenant,
        )

    def _unscoped_where(self) -> ColumnElement[bool] | None:
        # A bulk statement cannot carry joins or extra FROM entries; such
        # relations go through the membership subquery without a tenant predicate.
        statement = self.build_statement()
        if self._joined or self.eager_loading() or len(statement.get_final_froms()) > 1:
            return self._in_condition(None)
        return statement.whereclause

    def _execute(self, stmt: Delete | Update, label: str, *, scoped: bool) -> int:
        if self.config.log_statements:
            logger.debug(label, model=self.model.__name__, label=label, statement=str(stmt))

        # The identity map is not synchronized with bulk changes
        result = self.session.execute(
            stmt, execution_options={"synchronize_session": False}
        )
        self.reset()

        logger.debug(
            label,
            model=self.model.__name__,
            label=label,
            scoped=scoped,
            rowcount=result.rowcount,
        )
        return result.rowcount

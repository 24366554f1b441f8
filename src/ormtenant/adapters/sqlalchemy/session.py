"""
SQLAlchemy session management.

Provides a unit-of-work session and a shortcut for tenant-scoped relations.
"""

from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import Any, TypeVar

from sqlalchemy import Engine, Select
from sqlalchemy.orm import Session, sessionmaker

from ormtenant.adapters.sqlalchemy.relation import TenantQuery
from ormtenant.core.config import DEFAULT_CONFIG, ScopingConfig
from ormtenant.core.context import TenantContextProvider
from ormtenant.logging.context import LogContext, with_log_context

T = TypeVar("T")


class SessionManager:
    """
    Manages SQLAlchemy sessions for tenant-scoped bulk operations.
    """

    def __init__(
        self,
        engine: Engine,
        session_factory: sessionmaker | None = None,
        config: ScopingConfig | None = None,
    ) -> None:
        """
        Initialize the session manager.

        Args:
            engine: SQLAlchemy engine
            session_factory: Optional pre-configured session factory
            config: Scoping configuration handed to every relation
        """
        self.engine = engine
        self.config = config or DEFAULT_CONFIG
        self._session_factory = session_factory or sessionmaker(
            engine,
            expire_on_commit=False,
        )

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Context manager for a unit of work.

        Automatically commits on success and rolls back on error.
        """
        session: Session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def tenant_session(
        self,
        tenant: TenantContextProvider | None,
        **log_fields: Any,
    ) -> Generator[Session, None, None]:
        """A unit of work whose log records carry the tenant id."""
        with with_log_context(LogContext.from_tenant(tenant, extra=log_fields)):
            with self.session() as session:
                yield session

    def query(
        self,
        session: Session,
        model: type,
        tenant: TenantContextProvider | None,
        statement: Select | None = None,
    ) -> TenantQuery:
        """Build a tenant-scoped relation bound to the given session."""
        return TenantQuery(session, model, statement, tenant=tenant, config=self.config)

    def run_in_transaction(self, fn: Callable[[Session], T]) -> T:
        """Execute a function within a transaction."""
        with self.session() as session:
            return fn(session)

"""
Shared test fixtures.
"""

import pytest
from sqlalchemy import Float, ForeignKey, Integer, String, create_engine, event
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, relationship

from ormtenant.core.context import TenantRegistry

# === Test Models ===


class Base(DeclarativeBase):
    pass


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))


class Customer(Base):
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(primary_key=True)
    account_id: Mapped[int] = mapped_column(ForeignKey("accounts.id"))
    name: Mapped[str] = mapped_column(String(255))

    orders: Mapped[list["Order"]] = relationship("Order", back_populates="customer")


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    account_id: Mapped[int] = mapped_column(ForeignKey("accounts.id"))
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id"))
    status: Mapped[str] = mapped_column(String(50))
    total: Mapped[float] = mapped_column(Float)
    lock_version: Mapped[int] = mapped_column(Integer, nullable=False)

    customer: Mapped["Customer"] = relationship("Customer", back_populates="orders")

    __mapper_args__ = {"version_id_col": lock_version}


class LineItem(Base):
    __tablename__ = "line_items"

    order_id: Mapped[int] = mapped_column(primary_key=True)
    line_no: Mapped[int] = mapped_column(primary_key=True)
    account_id: Mapped[int] = mapped_column(ForeignKey("accounts.id"))
    sku: Mapped[str] = mapped_column(String(50))
    quantity: Mapped[int] = mapped_column(Integer, default=1)


class AuditEntry(Base):
    """A shared table without a partition column."""

    __tablename__ = "audit_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    message: Mapped[str] = mapped_column(String(255))


# === Fixtures ===


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def executed_sql(engine):
    """Collect every SQL string sent to the database."""
    statements: list[str] = []

    @event.listens_for(engine, "before_cursor_execute")
    def _record(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    return statements


@pytest.fixture
def session(engine):
    """Create a database session."""
    with Session(engine) as session:
        yield session


@pytest.fixture
def registry():
    """Registry with Account as the tenant class."""
    registry = TenantRegistry(default_tenant_class=Account)
    registry.register(Account)
    return registry


@pytest.fixture
def seeded_session(session):
    """Session with two tenants' worth of data."""
    session.add_all([
        Account(id=1, name="Acme"),
        Account(id=2, name="Globex"),
    ])
    session.add_all([
        Customer(id=1, account_id=1, name="Alice"),
        Customer(id=2, account_id=1, name="Bob"),
        Customer(id=3, account_id=2, name="Alice"),
    ])
    session.add_all([
        Order(id=1, account_id=1, customer_id=1, status="pending", total=10.0),
        Order(id=2, account_id=1, customer_id=1, status="shipped", total=20.0),
        Order(id=3, account_id=1, customer_id=2, status="pending", total=30.0),
        Order(id=4, account_id=2, customer_id=3, status="pending", total=40.0),
        Order(id=5, account_id=2, customer_id=3, status="shipped", total=50.0),
    ])
    session.add_all([
        LineItem(order_id=1, line_no=1, account_id=1, sku="A"),
        LineItem(order_id=1, line_no=2, account_id=1, sku="X"),
        LineItem(order_id=2, line_no=1, account_id=1, sku="X"),
        LineItem(order_id=2, line_no=2, account_id=1, sku="B"),
        LineItem(order_id=4, line_no=1, account_id=2, sku="X"),
    ])
    session.add_all([
        AuditEntry(id=1, message="created"),
        AuditEntry(id=2, message="updated"),
        AuditEntry(id=3, message="deleted"),
    ])
    session.commit()
    session.expunge_all()
    return session


@pytest.fixture
def acme(seeded_session):
    return seeded_session.get(Account, 1)


@pytest.fixture
def acme_ctx(registry, acme):
    """Tenant context for the Acme account."""
    return registry.context(acme)


@pytest.fixture
def globex_ctx(registry, seeded_session):
    """Tenant context for the Globex account."""
    return registry.context(seeded_session.get(Account, 2))

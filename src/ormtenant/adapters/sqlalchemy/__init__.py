"""
SQLAlchemy adapter for ormtenant.

Provides tenant-scoped bulk delete and update for SQLAlchemy 2.0+ relations.
"""

from ormtenant.adapters.sqlalchemy.introspection import ModelInspector
from ormtenant.adapters.sqlalchemy.relation import TenantQuery
from ormtenant.adapters.sqlalchemy.session import SessionManager

__all__ = [
    "ModelInspector",
    "SessionManager",
    "TenantQuery",
]

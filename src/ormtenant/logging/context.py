"""
Logging context management for ormtenant.

Provides context injection for structured logging, so that the tenant and
unit-of-work identifiers are included in every log message emitted while a
bulk operation runs.
"""

from __future__ import annotations

import contextvars
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ormtenant.core.context import TenantContextProvider

_log_context: contextvars.ContextVar[dict[str, Any] | None] = contextvars.ContextVar(
    "ormtenant_log_context",
    default=None,
)


@dataclass
class LogContext:
    """
    Structured logging context.

    Fields set here are attached to every record passing through a handler
    that carries the ContextFilter.
    """

    tenant_id: Any = None
    request_id: str | None = None
    model: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_tenant(cls, tenant: TenantContextProvider | None, **kwargs: Any) -> LogContext:
        """Create a LogContext carrying the tenant's id."""
        tenant_id = tenant.current_tenant_id() if tenant is not None else None
        return cls(tenant_id=tenant_id, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary of non-None values."""
        result: dict[str, Any] = {}
        if self.tenant_id is not None:
            result["tenant_id"] = self.tenant_id
        if self.request_id is not None:
            result["request_id"] = self.request_id
        if self.model is not None:
            result["model"] = self.model
        result.update(self.extra)
        return result


def get_log_context() -> dict[str, Any]:
    """Get the current log context."""
    ctx = _log_context.get()
    return ctx.copy() if ctx else {}


def clear_log_context() -> None:
    """Clear the current log context."""
    _log_context.set(None)


@contextmanager
def with_log_context(
    context: LogContext | dict[str, Any] | None = None,
    **kwargs: Any,
) -> Iterator[None]:
    """
    Context manager for setting log context within a scope.

    Example:
        with with_log_context(LogContext.from_tenant(ctx), request_id="123"):
            orders.delete_all()

    Args:
        context: Optional LogContext or dict of context fields
        **kwargs: Additional context fields
    """
    previous = _log_context.get()

    if context is not None:
        new_context = (
            context.to_dict() if isinstance(context, LogContext) else context.copy()
        )
    else:
        new_context = previous.copy() if previous else {}

    new_context.update(kwargs)
    _log_context.set(new_context)

    try:
        yield
    finally:
        _log_context.set(previous)


class ContextFilter(logging.Filter):
    """
    Logging filter that injects context fields into log records.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in get_log_context().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True

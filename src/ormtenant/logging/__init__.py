"""
ormtenant structured logging.

JSON or text output with tenant context injection.
"""

from ormtenant.logging.config import (
    LogFormat,
    LogLevel,
    OrmTenantLogger,
    configure_logging,
    get_logger,
)
from ormtenant.logging.context import (
    ContextFilter,
    LogContext,
    clear_log_context,
    get_log_context,
    with_log_context,
)
from ormtenant.logging.formatters import JSONFormatter, TextFormatter

__all__ = [
    # Configuration
    "configure_logging",
    "get_logger",
    "OrmTenantLogger",
    "LogLevel",
    "LogFormat",
    # Formatters
    "JSONFormatter",
    "TextFormatter",
    # Context
    "LogContext",
    "ContextFilter",
    "with_log_context",
    "get_log_context",
    "clear_log_context",
]

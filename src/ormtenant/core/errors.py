"""
Error taxonomy for ormtenant.

All ormtenant errors inherit from OrmTenantError and include:
- A unique error code for programmatic handling
- A human-readable message
- Optional structured details

Errors raised by SQLAlchemy while executing a bulk statement are not wrapped;
they reach the caller unchanged.
"""

from typing import Any


class OrmTenantError(Exception):
    """
    Base class for all ormtenant errors.

    Attributes:
        code: Unique error code for programmatic handling
        message: Human-readable error message
        details: Additional error context
    """

    code: str = "ORMTENANT_ERROR"

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a dictionary for serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(OrmTenantError):
    """A model or tenant setup cannot be scoped as configured."""

    code = "CONFIGURATION_ERROR"

    def __init__(
        self,
        message: str,
        model: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message,
            details={"model": model} if model else {},
            **kwargs,
        )


class ValidationError(OrmTenantError):
    """Input to a bulk operation refers to something the table does not have."""

    code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        field: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message,
            details={"field": field} if field else {},
            **kwargs,
        )

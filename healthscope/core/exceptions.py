"""
Exception hierarchy for the conditions backend.

Only ValidationError is allowed to cross the service boundary; the others are
raised by source clients and absorbed by the aggregation layer.
"""

from typing import Any, Dict, Optional


class HealthScopeError(Exception):
    """Base exception for all HealthScope errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(HealthScopeError):
    """Malformed identifier, country code or search query."""

    def __init__(
        self,
        message: str,
        field: str = "unknown",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details={"field": field, **(details or {})},
        )
        self.field = field


class SourceUnavailable(HealthScopeError):
    """Network failure, timeout or unparsable payload from an external source."""

    def __init__(
        self,
        message: str,
        source: str = "unknown",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="SOURCE_UNAVAILABLE",
            details={"source": source, **(details or {})},
        )
        self.source = source

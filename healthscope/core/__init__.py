"""
Core package initialization.
"""

from healthscope.core.config import settings, get_settings
from healthscope.core.exceptions import (
    HealthScopeError,
    SourceUnavailable,
    ValidationError,
)

__all__ = [
    "settings",
    "get_settings",
    "HealthScopeError",
    "SourceUnavailable",
    "ValidationError",
]

"""
Shared dependencies for FastAPI dependency injection.
"""

from functools import lru_cache

from healthscope.core.config import get_settings
from healthscope.services.conditions_service import ConditionsService
from healthscope.utils.cache import TTLCache


@lru_cache()
def get_abstract_cache() -> TTLCache:
    """Process-wide abstract cache shared by every request."""
    settings = get_settings()
    return TTLCache(default_ttl=settings.abstract_cache_ttl_seconds)


@lru_cache()
def get_conditions_service() -> ConditionsService:
    """Dependency to get the conditions service instance."""
    settings = get_settings()
    return ConditionsService.from_settings(settings, cache=get_abstract_cache())

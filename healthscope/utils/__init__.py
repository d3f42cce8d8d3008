"""
Utils package initialization.
"""

from healthscope.utils.cache import TTLCache
from healthscope.utils.outcome import Outcome, capture, gather_outcomes
from healthscope.utils.text import (
    clean_items,
    collapse_whitespace,
    is_blank,
    normalize_key,
)

__all__ = [
    "TTLCache",
    "Outcome",
    "capture",
    "gather_outcomes",
    "clean_items",
    "collapse_whitespace",
    "is_blank",
    "normalize_key",
]

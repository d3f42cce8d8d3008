"""
Services package initialization.
"""

from healthscope.services.conditions_service import ConditionsService
from healthscope.services.scoring import (
    build_score_list,
    compute_indicators,
    estimate_geo,
)

__all__ = [
    "ConditionsService",
    "build_score_list",
    "compute_indicators",
    "estimate_geo",
]

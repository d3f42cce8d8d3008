"""
Schemas package initialization.
"""

from healthscope.schemas.common import ErrorResponse, HealthCheck
from healthscope.schemas.condition import (
    AbstractRecord,
    BodyImpact,
    BodySystem,
    ConditionDetails,
    ConditionSections,
    CountryStats,
    DocumentRecord,
    GeoComponents,
    GeoEstimate,
    GraphRecord,
    Indicator,
    ScoredItem,
    SearchResult,
    SourceLink,
)

__all__ = [
    "ErrorResponse",
    "HealthCheck",
    "AbstractRecord",
    "BodyImpact",
    "BodySystem",
    "ConditionDetails",
    "ConditionSections",
    "CountryStats",
    "DocumentRecord",
    "GeoComponents",
    "GeoEstimate",
    "GraphRecord",
    "Indicator",
    "ScoredItem",
    "SearchResult",
    "SourceLink",
]

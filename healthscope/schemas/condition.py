"""
Pydantic schemas for condition records and derived analytics.

Attributes are snake_case in Python and serialized with camelCase aliases,
which is the shape the web client consumes.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing field names as camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )


# Source records


class SearchResult(CamelModel):
    """One ranked hit from the graph source text search."""

    id: str
    label: str
    description: Optional[str] = None


class BodySystem(CamelModel):
    """Body system or anatomical location affected by a condition."""

    id: str
    label: str


class GraphRecord(CamelModel):
    """Structured facts from the graph source."""

    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    symptoms: List[str] = Field(default_factory=list)
    risk_factors: List[str] = Field(default_factory=list)
    body_systems: List[BodySystem] = Field(default_factory=list)


class AbstractRecord(CamelModel):
    """Prose abstract and canonical URL from the abstract source."""

    url: Optional[str] = None
    abstract: Optional[str] = None


class DocumentRecord(CamelModel):
    """Sections scraped from the document source."""

    url: Optional[str] = None
    overview: Optional[str] = None
    symptoms: List[str] = Field(default_factory=list)
    risk_factors: List[str] = Field(default_factory=list)
    prevention: List[str] = Field(default_factory=list)


class CountryStats(CamelModel):
    """Population and area of a country."""

    iso: str
    label: Optional[str] = None
    population: Optional[float] = None
    area_km2: Optional[float] = None


# Aggregate


class ScoredItem(CamelModel):
    """Term with a 0-100 agreement score."""

    label: str
    score: int = Field(ge=0, le=100)


class Indicator(CamelModel):
    """Bounded derived metric."""

    label: str
    value: int = Field(ge=0, le=100)


class SourceLink(CamelModel):
    """Named source with the URL it contributed."""

    name: str
    url: str


class ConditionSections(CamelModel):
    """Narrative and list sections of a condition record."""

    overview: Optional[str] = None
    symptoms: List[str] = Field(default_factory=list)
    risk_factors: List[str] = Field(default_factory=list)
    prevention: List[str] = Field(default_factory=list)
    symptoms_scores: List[ScoredItem] = Field(default_factory=list)
    risk_factors_scores: List[ScoredItem] = Field(default_factory=list)


class ConditionDetails(CamelModel):
    """Merged record built from all three sources."""

    id: str
    name: str
    description: Optional[str] = None
    sections: ConditionSections
    body_systems: List[BodySystem] = Field(default_factory=list)
    indicators: List[Indicator] = Field(default_factory=list)
    sources: List[SourceLink] = Field(default_factory=list)

    def indicator(self, label: str) -> Optional[int]:
        """Return the value of the indicator called ``label``, if any."""
        for item in self.indicators:
            if item.label == label:
                return item.value
        return None


class BodyImpact(CamelModel):
    """Body systems affected by a condition."""

    id: str
    body_systems: List[BodySystem] = Field(default_factory=list)


class GeoComponents(CamelModel):
    prevalence_indicator: int
    density_multiplier: float


class GeoEstimate(CamelModel):
    """Country-level prevalence estimate for a condition."""

    id: str
    country: str
    country_label: Optional[str] = None
    population: Optional[float] = None
    area_km2: Optional[float] = None
    density: Optional[float] = None
    estimated_prevalence_percent: int = Field(ge=1, le=95)
    confidence: int = Field(ge=0, le=3)
    components: GeoComponents

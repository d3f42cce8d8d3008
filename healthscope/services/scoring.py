"""
Deterministic analytics derived from a merged condition record.

- ``build_score_list``: agreement score of symptom / risk-factor terms across
  the graph source (weight 0.6) and the document source (weight 0.4).
- ``compute_indicators``: four bounded 0-100 indicators from aggregate counts.
- ``estimate_geo``: country-level prevalence estimate from the Prevalence
  indicator and population density.
"""

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from healthscope.schemas.condition import Indicator, ScoredItem
from healthscope.utils.text import collapse_whitespace, normalize_key

GRAPH_WEIGHT = 0.6
DOCUMENT_WEIGHT = 0.4
MAX_SCORED_ITEMS = 20

INDICATOR_MIN = 5
INDICATOR_MAX = 95

PREVALENCE = "Prevalence"
SEVERITY = "Severity"
IMPACT = "Impact"
TREATMENT_OPTIONS = "Treatment Options"

DEFAULT_PREVALENCE = 30
DENSITY_MULTIPLIER_MIN = 0.5
DENSITY_MULTIPLIER_MAX = 2.5
ESTIMATE_MIN = 1
ESTIMATE_MAX = 95


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 upwards (not banker's rounding)."""
    return int(math.floor(value + 0.5))


# ScoreBuilder


@dataclass
class _Presence:
    label: str
    in_graph: bool = False
    in_document: bool = False

    @property
    def raw_score(self) -> float:
        return (GRAPH_WEIGHT if self.in_graph else 0.0) + (
            DOCUMENT_WEIGHT if self.in_document else 0.0
        )


def build_score_list(
    graph_terms: Optional[Iterable[str]],
    document_terms: Optional[Iterable[str]],
    limit: int = MAX_SCORED_ITEMS,
) -> List[ScoredItem]:
    """
    Score terms by how many sources mention them.

    Terms are keyed case-insensitively after whitespace collapse; the first
    spelling seen (graph terms first) is kept as the label. Scores are
    normalized so the best-supported term gets 100, then sorted descending
    with a stable sort so ties keep first-seen order.

    Args:
        graph_terms: Terms from the graph source
        document_terms: Terms from the document source
        limit: Maximum number of items returned

    Returns:
        Scored items, best first
    """
    presence: Dict[str, _Presence] = {}

    def entry(term) -> Optional[_Presence]:
        text = term if isinstance(term, str) else str(term or "")
        key = normalize_key(text)
        if not key:
            return None
        return presence.setdefault(key, _Presence(collapse_whitespace(text)))

    for term in graph_terms or []:
        item = entry(term)
        if item is not None:
            item.in_graph = True

    for term in document_terms or []:
        item = entry(term)
        if item is not None:
            item.in_document = True

    max_raw = max((p.raw_score for p in presence.values()), default=0.0) or 1.0

    scored = [
        ScoredItem(label=p.label, score=round_half_up(p.raw_score / max_raw * 100))
        for p in presence.values()
    ]
    scored.sort(key=lambda item: item.score, reverse=True)
    return scored[:limit]


# IndicatorCalculator


def compute_indicators(
    symptoms_count: int,
    risk_count: int,
    body_system_count: int,
    description_length: int = 0,
    prevention_count: int = 0,
) -> List[Indicator]:
    """Prevalence, Severity, Impact and Treatment Options, each within [5, 95]."""

    def bounded(value: float) -> int:
        return int(clamp(value, INDICATOR_MIN, INDICATOR_MAX))

    prevalence = 20 + 3 * symptoms_count + 1 * risk_count + 4 * body_system_count
    severity = 30 + 12 * body_system_count + min(20, description_length // 200)
    impact = 25 + 4 * symptoms_count + 2 * risk_count
    treatment = 70 if prevention_count > 0 else 35

    return [
        Indicator(label=PREVALENCE, value=bounded(prevalence)),
        Indicator(label=SEVERITY, value=bounded(severity)),
        Indicator(label=IMPACT, value=bounded(impact)),
        Indicator(label=TREATMENT_OPTIONS, value=bounded(treatment)),
    ]


# GeoEstimator


@dataclass(frozen=True)
class GeoComputation:
    """Intermediate and final values of a prevalence estimate."""

    density: Optional[float]
    density_multiplier: float
    estimated_prevalence_percent: int
    confidence: int


def population_density(
    population: Optional[float], area_km2: Optional[float]
) -> Optional[float]:
    """People per km2, or None when either input is unknown."""
    if not population or not area_km2:
        return None
    return population / max(1.0, area_km2)


def density_multiplier(density: Optional[float]) -> float:
    """Log-scaled adjustment: 1 + log10(density + 1) / 4, kept in [0.5, 2.5]."""
    if density is None:
        return 1.0
    return clamp(
        1 + math.log10(density + 1) * 0.25,
        DENSITY_MULTIPLIER_MIN,
        DENSITY_MULTIPLIER_MAX,
    )


def estimate_geo(
    prevalence_indicator: Optional[float],
    population: Optional[float],
    area_km2: Optional[float],
    has_symptoms: bool,
    has_risk_factors: bool,
) -> GeoComputation:
    """
    Combine the Prevalence indicator with country density.

    Args:
        prevalence_indicator: Condition's Prevalence value, None if the
            condition lookup failed (falls back to 30)
        population: Country population, if known
        area_km2: Country area, if known
        has_symptoms: The condition record carried a symptoms array
        has_risk_factors: The condition record carried a risk-factors array
    """
    base = DEFAULT_PREVALENCE if prevalence_indicator is None else prevalence_indicator
    density = population_density(population, area_km2)
    multiplier = density_multiplier(density)
    estimate = int(clamp(round_half_up(base * multiplier), ESTIMATE_MIN, ESTIMATE_MAX))
    confidence = min(
        3, int(has_symptoms) + int(has_risk_factors) + int(bool(population))
    )
    return GeoComputation(
        density=density,
        density_multiplier=multiplier,
        estimated_prevalence_percent=estimate,
        confidence=confidence,
    )

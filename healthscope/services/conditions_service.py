"""
Conditions service: merges the graph, abstract and document sources.

For one identifier the graph record is fetched first; its label then drives
the document lookup, which runs concurrently with the abstract lookup. Both
optional branches settle to an Outcome so a failing source only empties its
own fields. Only ValidationError ever leaves this service.
"""

import logging
import re
from typing import List, Optional

import httpx

from healthscope.core.config import Settings
from healthscope.core.exceptions import SourceUnavailable, ValidationError
from healthscope.core.logging import log_event
from healthscope.schemas.condition import (
    AbstractRecord,
    BodyImpact,
    ConditionDetails,
    ConditionSections,
    CountryStats,
    DocumentRecord,
    GeoComponents,
    GeoEstimate,
    GraphRecord,
    SearchResult,
    SourceLink,
)
from healthscope.services.scoring import (
    DEFAULT_PREVALENCE,
    PREVALENCE,
    build_score_list,
    compute_indicators,
    estimate_geo,
)
from healthscope.sources.base import DocumentAdapter
from healthscope.sources.dbpedia import AbstractCache, DbpediaClient
from healthscope.sources.http import build_http_client
from healthscope.sources.wikidata import WikidataClient, is_wikidata_id
from healthscope.sources.wikidoc import WikidocClient
from healthscope.utils.cache import TTLCache
from healthscope.utils.outcome import capture, gather_outcomes
from healthscope.utils.text import is_blank

logger = logging.getLogger(__name__)

COUNTRY_RE = re.compile(r"^[A-Z]{2}$")
MIN_QUERY_LENGTH = 2
MAX_LEGACY_ITEMS = 20


def validate_condition_id(value: Optional[str]) -> str:
    qid = (value or "").strip()
    if not is_wikidata_id(qid):
        raise ValidationError(
            "Invalid id. Expected something like Q35869.",
            field="id",
            details={"value": value},
        )
    return qid


def validate_country(value: Optional[str]) -> str:
    iso = str(value or "").strip().upper()
    if not COUNTRY_RE.match(iso):
        raise ValidationError(
            "Invalid country code. Use ISO alpha-2, e.g. RO",
            field="country",
            details={"value": value},
        )
    return iso


class ConditionsService:
    """Aggregates condition knowledge from Wikidata, DBpedia and WikiDoc."""

    def __init__(
        self,
        graph: WikidataClient,
        abstracts: AbstractCache,
        documents: DocumentAdapter,
        timeout: Optional[float] = 15.0,
        document_timeout: Optional[float] = 45.0,
        http: Optional[httpx.AsyncClient] = None,
    ):
        self.graph = graph
        self.abstracts = abstracts
        self.documents = documents
        self.timeout = timeout
        self.document_timeout = document_timeout
        self._http = http

    @classmethod
    def from_settings(
        cls, settings: Settings, cache: Optional[TTLCache] = None
    ) -> "ConditionsService":
        """Wire the production clients around one shared HTTP client."""
        http = build_http_client(settings)
        abstracts = AbstractCache(
            DbpediaClient(http, settings),
            cache=cache,
            ttl_seconds=settings.abstract_cache_ttl_seconds,
        )
        return cls(
            graph=WikidataClient(http, settings),
            abstracts=abstracts,
            documents=WikidocClient(http, settings),
            timeout=settings.http_timeout_seconds,
            document_timeout=settings.document_timeout_seconds,
            http=http,
        )

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()

    # ── Public operations ─────────────────────────────────────────────────

    async def search(self, q: Optional[str]) -> List[SearchResult]:
        """Ranked graph-source matches for a free-text query."""
        query = (q or "").strip()
        if len(query) < MIN_QUERY_LENGTH:
            raise ValidationError(
                "Query must be at least 2 characters.", field="q", details={"value": q}
            )

        try:
            return await self.graph.search(query)
        except SourceUnavailable as e:
            log_event(
                "[Conditions] search failed",
                {"q": query, "error": e.message},
                logging.WARNING,
            )
            return []

    async def get_condition(self, condition_id: Optional[str]) -> ConditionDetails:
        """
        Merged record for one condition.

        Raises:
            ValidationError: ``condition_id`` is not a Wikidata item id
        """
        qid = validate_condition_id(condition_id)
        graph = await self._graph_record(qid)

        # Names that are themselves ids would only make WikiDoc guess.
        doc_name = graph.name if graph.name and not is_wikidata_id(graph.name) else None

        abstract_outcome, document_outcome = await gather_outcomes(
            capture(
                self.abstracts.get(qid), timeout=self.timeout, label=f"abstract {qid}"
            ),
            capture(
                self.documents.get_page(doc_name),
                timeout=self.document_timeout,
                label=f"document {doc_name!r}",
            ),
        )
        if not abstract_outcome.ok:
            log_event(
                "[Conditions] DBpedia failed",
                {"id": qid, "error": repr(abstract_outcome.error)},
                logging.WARNING,
            )
        if not document_outcome.ok:
            log_event(
                "[Conditions] WikiDoc failed",
                {"name": doc_name, "error": repr(document_outcome.error)},
                logging.WARNING,
            )

        abstract = abstract_outcome.unwrap_or(AbstractRecord())
        document = document_outcome.unwrap_or(DocumentRecord())

        details = self._merge(qid, graph, abstract, document)
        log_event(
            "[Conditions] getCondition",
            {
                "id": qid,
                "hasName": bool(graph.name),
                "hasDescription": bool(graph.description),
                "overviewSource": "wikidoc"
                if not is_blank(document.overview)
                else "dbpedia"
                if not is_blank(abstract.abstract)
                else "none",
                "symptoms": len(details.sections.symptoms_scores),
                "riskFactors": len(details.sections.risk_factors_scores),
                "prevention": len(details.sections.prevention),
                "bodySystems": len(details.body_systems),
            },
        )
        return details

    async def get_body_impact(self, condition_id: Optional[str]) -> BodyImpact:
        qid = validate_condition_id(condition_id)
        graph = await self._graph_record(qid)
        return BodyImpact(id=qid, body_systems=graph.body_systems)

    async def get_geo(
        self, condition_id: Optional[str], country: Optional[str]
    ) -> GeoEstimate:
        """
        Country-level prevalence estimate.

        The condition lookup and the country statistics run concurrently;
        either may fail without failing the estimate.

        Raises:
            ValidationError: malformed id or country code
        """
        qid = validate_condition_id(condition_id)
        iso = validate_country(country)

        condition_outcome, stats_outcome = await gather_outcomes(
            capture(self.get_condition(qid), label=f"condition {qid}"),
            capture(
                self.graph.get_country_stats(iso),
                timeout=self.timeout,
                label=f"country stats {iso}",
            ),
        )
        condition: Optional[ConditionDetails] = condition_outcome.unwrap_or(None)
        stats: Optional[CountryStats] = stats_outcome.unwrap_or(None)
        if not stats_outcome.ok:
            log_event(
                "[Conditions] country stats failed",
                {"country": iso, "error": repr(stats_outcome.error)},
                logging.WARNING,
            )

        population = stats.population if stats else None
        area = stats.area_km2 if stats else None
        prevalence = condition.indicator(PREVALENCE) if condition else None
        base = DEFAULT_PREVALENCE if prevalence is None else prevalence

        result = estimate_geo(
            prevalence_indicator=prevalence,
            population=population,
            area_km2=area,
            has_symptoms=condition is not None,
            has_risk_factors=condition is not None,
        )
        return GeoEstimate(
            id=qid,
            country=iso,
            country_label=stats.label if stats else None,
            population=population,
            area_km2=area,
            density=result.density,
            estimated_prevalence_percent=result.estimated_prevalence_percent,
            confidence=result.confidence,
            components=GeoComponents(
                prevalence_indicator=int(base),
                density_multiplier=round(result.density_multiplier, 3),
            ),
        )

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _graph_record(self, qid: str) -> GraphRecord:
        """Graph record for ``qid``; an unreachable graph source yields an empty one."""
        outcome = await capture(
            self.graph.get_record(qid), timeout=self.timeout, label=f"graph {qid}"
        )
        if not outcome.ok:
            log_event(
                "[Conditions] Wikidata failed",
                {"id": qid, "error": repr(outcome.error)},
                logging.WARNING,
            )
        return outcome.unwrap_or(GraphRecord(id=qid))

    def _merge(
        self,
        qid: str,
        graph: GraphRecord,
        abstract: AbstractRecord,
        document: DocumentRecord,
    ) -> ConditionDetails:
        if not is_blank(document.overview):
            overview = document.overview
        elif not is_blank(abstract.abstract):
            overview = abstract.abstract
        else:
            overview = None

        symptoms_scores = build_score_list(graph.symptoms, document.symptoms)
        risk_scores = build_score_list(graph.risk_factors, document.risk_factors)

        indicators = compute_indicators(
            symptoms_count=len(symptoms_scores),
            risk_count=len(risk_scores),
            body_system_count=len(graph.body_systems),
            description_length=len(graph.description or ""),
            prevention_count=len(document.prevention),
        )

        sources = [SourceLink(name="Wikidata", url=self.graph.entity_page_url(qid))]
        if document.url:
            name = getattr(self.documents, "name", "Document")
            sources.append(SourceLink(name=name, url=document.url))
        if abstract.url:
            sources.append(SourceLink(name="DBpedia", url=abstract.url))

        return ConditionDetails(
            id=qid,
            name=graph.name or qid,
            description=graph.description,
            sections=ConditionSections(
                overview=overview,
                symptoms=(graph.symptoms + document.symptoms)[:MAX_LEGACY_ITEMS],
                risk_factors=(graph.risk_factors + document.risk_factors)[
                    :MAX_LEGACY_ITEMS
                ],
                prevention=document.prevention,
                symptoms_scores=symptoms_scores,
                risk_factors_scores=risk_scores,
            ),
            body_systems=graph.body_systems,
            indicators=indicators,
            sources=sources,
        )

"""
Wikidata client: the structured graph source.

Search runs against ``wbsearchentities`` and keeps only hits that a SPARQL
query confirms as diseases; full records come from
``wbgetentities`` followed by one batched label lookup for every item the
record's claims point at. Country statistics use the SPARQL endpoint.
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Set

import httpx

from healthscope.core.config import Settings
from healthscope.core.exceptions import SourceUnavailable, ValidationError
from healthscope.schemas.condition import (
    BodySystem,
    CountryStats,
    GraphRecord,
    SearchResult,
)
from healthscope.sources.http import SourceClient, binding_value

logger = logging.getLogger(__name__)

WIKIDATA_ID_RE = re.compile(r"^Q\d+$")
ISO_ALPHA2_RE = re.compile(r"^[A-Z]{2}$")

# Claim properties read from a condition item
PROP_SYMPTOMS = "P780"
PROP_RISK_FACTORS = "P5642"
PROP_ANATOMICAL_LOCATION = "P927"
PROP_HEALTH_SPECIALTY = "P1995"
BODY_SYSTEM_PROPS = (PROP_ANATOMICAL_LOCATION, PROP_HEALTH_SPECIALTY)

# Search hits must be an instance of (a subclass of) disease
DISEASE_CLASS = "Q12136"
ENTITY_URI_PREFIX = "http://www.wikidata.org/entity/"

SEARCH_LIMIT = 10
LABEL_BATCH_SIZE = 50
LANGUAGE = "en"

DISEASE_FILTER_QUERY = """
SELECT DISTINCT ?item WHERE {{
  VALUES ?item {{ {values} }}
  ?item wdt:P31/wdt:P279* wd:{disease} .
}}
"""

COUNTRY_STATS_QUERY = """
SELECT ?country ?countryLabel ?population ?area WHERE {{
  ?country wdt:P297 "{iso}" .
  OPTIONAL {{ ?country wdt:P1082 ?population . }}
  OPTIONAL {{ ?country wdt:P2046 ?area . }}
  SERVICE wikibase:label {{ bd:serviceParam wikibase:language "en". }}
}}
LIMIT 1
"""


def is_wikidata_id(value: Optional[str]) -> bool:
    return bool(value) and bool(WIKIDATA_ID_RE.match(value))


def _text(entity: Dict[str, Any], key: str) -> Optional[str]:
    """English label/description of an entity payload, or None."""
    value = (entity.get(key) or {}).get(LANGUAGE) or {}
    text = value.get("value") if isinstance(value, dict) else None
    if not isinstance(text, str):
        return None
    return text.strip() or None


def _claim_item_ids(claims: Dict[str, Any], prop: str) -> List[str]:
    """Item ids referenced by the value snaks of ``prop``, in claim order."""
    ids: List[str] = []
    for claim in claims.get(prop) or []:
        if not isinstance(claim, dict):
            continue
        snak = claim.get("mainsnak") or {}
        if snak.get("snaktype") != "value":
            continue
        value = (snak.get("datavalue") or {}).get("value")
        item_id = value.get("id") if isinstance(value, dict) else None
        if is_wikidata_id(item_id) and item_id not in ids:
            ids.append(item_id)
    return ids


def _to_float(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class WikidataClient(SourceClient):
    """Structured-knowledge lookups against Wikidata."""

    source_name = "wikidata"

    def __init__(self, http: httpx.AsyncClient, settings: Settings):
        super().__init__(http)
        self.api_url = settings.wikidata_api_url
        self.sparql_url = settings.wikidata_sparql_url
        self.entity_url = settings.wikidata_entity_url

    def entity_page_url(self, qid: str) -> str:
        return f"{self.entity_url}{qid}"

    async def search(self, query: str) -> List[SearchResult]:
        """
        Ranked text search over item labels and aliases, restricted to
        diseases.

        Args:
            query: Free-text condition name

        Returns:
            Up to ten disease items in the API's ranking order
        """
        data = await self.get_json(
            self.api_url,
            params={
                "action": "wbsearchentities",
                "search": query,
                "language": LANGUAGE,
                "uselang": LANGUAGE,
                "type": "item",
                "limit": SEARCH_LIMIT,
                "format": "json",
            },
        )
        hits = data.get("search") if isinstance(data, dict) else None
        results: List[SearchResult] = []
        for hit in hits or []:
            if not isinstance(hit, dict) or not is_wikidata_id(hit.get("id")):
                continue
            results.append(
                SearchResult(
                    id=hit["id"],
                    label=hit.get("label") or hit["id"],
                    description=hit.get("description") or None,
                )
            )
        if not results:
            return results

        diseases = await self.filter_diseases([r.id for r in results])
        return [r for r in results if r.id in diseases]

    async def filter_diseases(self, qids: List[str]) -> Set[str]:
        """Subset of ``qids`` that are instances of disease or one of its subclasses."""
        query = DISEASE_FILTER_QUERY.format(
            values=" ".join(f"wd:{qid}" for qid in qids), disease=DISEASE_CLASS
        )
        rows = await self.sparql(self.sparql_url, query)
        found: Set[str] = set()
        for row in rows:
            uri = binding_value(row, "item") or ""
            if uri.startswith(ENTITY_URI_PREFIX):
                found.add(uri[len(ENTITY_URI_PREFIX):])
        return found

    async def get_record(self, qid: str) -> GraphRecord:
        """
        Fetch a condition item and resolve its referenced items to labels.

        Missing fields degrade to empty values; only transport or payload
        failures raise.

        Raises:
            ValidationError: ``qid`` is not a Wikidata item id
            SourceUnavailable: The API could not be reached or answered garbage
        """
        if not is_wikidata_id(qid):
            raise ValidationError(f"Invalid Wikidata id: {qid!r}", field="id")

        entity = await self._get_entity(qid)
        if entity is None:
            return GraphRecord(id=qid)

        claims = entity.get("claims") or {}
        symptom_ids = _claim_item_ids(claims, PROP_SYMPTOMS)
        risk_ids = _claim_item_ids(claims, PROP_RISK_FACTORS)
        body_ids: List[str] = []
        for prop in BODY_SYSTEM_PROPS:
            for item_id in _claim_item_ids(claims, prop):
                if item_id not in body_ids:
                    body_ids.append(item_id)

        labels = await self.resolve_labels(symptom_ids + risk_ids + body_ids)

        return GraphRecord(
            id=qid,
            name=_text(entity, "labels"),
            description=_text(entity, "descriptions"),
            symptoms=[labels[i] for i in symptom_ids if i in labels],
            risk_factors=[labels[i] for i in risk_ids if i in labels],
            body_systems=[
                BodySystem(id=i, label=labels[i]) for i in body_ids if i in labels
            ],
        )

    async def _get_entity(self, qid: str) -> Optional[Dict[str, Any]]:
        data = await self.get_json(
            self.api_url,
            params={
                "action": "wbgetentities",
                "ids": qid,
                "props": "labels|descriptions|claims",
                "languages": LANGUAGE,
                "format": "json",
            },
        )
        if not isinstance(data, dict) or "error" in data:
            raise SourceUnavailable(
                f"wbgetentities rejected {qid}", source=self.source_name
            )
        entity = (data.get("entities") or {}).get(qid)
        if not isinstance(entity, dict) or "missing" in entity:
            logger.info(f"Wikidata item {qid} not found")
            return None
        return entity

    async def resolve_labels(self, ids: Iterable[str]) -> Dict[str, str]:
        """Map item ids to English labels, batching the lookup."""
        unique: List[str] = []
        for item_id in ids:
            if item_id not in unique:
                unique.append(item_id)

        labels: Dict[str, str] = {}
        for start in range(0, len(unique), LABEL_BATCH_SIZE):
            batch = unique[start : start + LABEL_BATCH_SIZE]
            data = await self.get_json(
                self.api_url,
                params={
                    "action": "wbgetentities",
                    "ids": "|".join(batch),
                    "props": "labels",
                    "languages": LANGUAGE,
                    "format": "json",
                },
            )
            entities = data.get("entities") if isinstance(data, dict) else None
            for item_id, entity in (entities or {}).items():
                if not isinstance(entity, dict):
                    continue
                label = _text(entity, "labels")
                if label:
                    labels[item_id] = label
        return labels

    async def get_country_stats(self, iso: str) -> Optional[CountryStats]:
        """
        Population and area for an ISO 3166-1 alpha-2 country code.

        Returns:
            CountryStats, or None when no country carries that code
        """
        if not ISO_ALPHA2_RE.match(iso or ""):
            raise ValidationError(f"Invalid country code: {iso!r}", field="country")

        rows = await self.sparql(self.sparql_url, COUNTRY_STATS_QUERY.format(iso=iso))
        if not rows:
            return None

        row = rows[0]
        return CountryStats(
            iso=iso,
            label=binding_value(row, "countryLabel"),
            population=_to_float(binding_value(row, "population")),
            area_km2=_to_float(binding_value(row, "area")),
        )

"""
DBpedia abstract lookup and the TTL cache in front of it.
"""

import logging
from typing import Optional

import httpx

from healthscope.core.config import Settings
from healthscope.core.exceptions import SourceUnavailable, ValidationError
from healthscope.schemas.condition import AbstractRecord
from healthscope.sources.http import SourceClient, binding_value
from healthscope.sources.wikidata import is_wikidata_id
from healthscope.utils.cache import TTLCache

logger = logging.getLogger(__name__)

ABSTRACT_QUERY = """
SELECT ?s ?abstract ?comment WHERE {{
  ?s owl:sameAs <http://www.wikidata.org/entity/{qid}> .
  OPTIONAL {{ ?s dbo:abstract ?abstract . FILTER (lang(?abstract) = "en") }}
  OPTIONAL {{ ?s rdfs:comment ?comment . FILTER (lang(?comment) = "en") }}
}}
LIMIT 1
"""


class DbpediaClient(SourceClient):
    """Semantic cross-reference from a Wikidata item to its DBpedia resource."""

    source_name = "dbpedia"

    def __init__(self, http: httpx.AsyncClient, settings: Settings):
        super().__init__(http)
        self.endpoint = settings.dbpedia_sparql_url

    async def fetch_abstract(self, qid: str) -> AbstractRecord:
        """
        Look up the resource that is ``owl:sameAs`` the Wikidata item.

        The English ``dbo:abstract`` is preferred; the shorter
        ``rdfs:comment`` is used when the resource has no abstract.
        """
        if not is_wikidata_id(qid):
            raise ValidationError(f"Invalid Wikidata id: {qid!r}", field="id")

        rows = await self.sparql(self.endpoint, ABSTRACT_QUERY.format(qid=qid))
        if not rows:
            return AbstractRecord()

        row = rows[0]
        if not isinstance(row, dict):
            raise SourceUnavailable("Unexpected SPARQL row", source=self.source_name)
        abstract = binding_value(row, "abstract") or binding_value(row, "comment")
        return AbstractRecord(
            url=binding_value(row, "s"),
            abstract=abstract.strip() if abstract and abstract.strip() else None,
        )


class AbstractCache:
    """
    Time-limited memo of DBpedia abstracts keyed by Wikidata id.

    A live entry is served without network access. Every completed lookup is
    stored, including one that found no DBpedia resource. Lookup failures
    return an empty record and are not cached, so the next call retries.
    """

    def __init__(
        self,
        client: DbpediaClient,
        cache: Optional[TTLCache] = None,
        ttl_seconds: float = 3600.0,
    ):
        self.client = client
        self.ttl_seconds = ttl_seconds
        self.cache: TTLCache = (
            cache if cache is not None else TTLCache(default_ttl=ttl_seconds)
        )

    async def get(self, qid: str) -> AbstractRecord:
        if not is_wikidata_id(qid):
            raise ValidationError(f"Invalid Wikidata id: {qid!r}", field="id")

        cached = self.cache.get(qid)
        if cached is not None:
            logger.debug(f"Abstract cache hit for {qid}")
            return cached

        try:
            record = await self.client.fetch_abstract(qid)
        except SourceUnavailable as e:
            logger.warning(f"DBpedia lookup failed for {qid}: {e.message}")
            return AbstractRecord()

        self.cache.set(qid, record, ttl=self.ttl_seconds)
        return record

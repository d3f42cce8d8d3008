"""
Test the Wikidata and DBpedia clients and the abstract cache.
"""

import httpx
import pytest

from healthscope.core.exceptions import SourceUnavailable, ValidationError
from healthscope.schemas.condition import AbstractRecord
from healthscope.sources.dbpedia import AbstractCache, DbpediaClient
from healthscope.sources.wikidata import WikidataClient
from healthscope.utils.cache import TTLCache
from tests.conftest import RecordingHandler, mock_http


def _item_claim(item_id):
    return {
        "mainsnak": {
            "snaktype": "value",
            "datavalue": {"type": "wikibase-entityid", "value": {"id": item_id}},
        }
    }


ASTHMA_ENTITY = {
    "entities": {
        "Q35869": {
            "id": "Q35869",
            "labels": {"en": {"language": "en", "value": "asthma"}},
            "descriptions": {"en": {"language": "en", "value": "chronic airway disease"}},
            "claims": {
                "P780": [_item_claim("Q38933"), _item_claim("Q35805"), {"mainsnak": {"snaktype": "novalue"}}],
                "P5642": [_item_claim("Q662860")],
                "P927": [_item_claim("Q7886")],
                "P1995": [_item_claim("Q7886"), _item_claim("Q1071953")],
            },
        }
    }
}

LABELS = {
    "entities": {
        "Q38933": {"labels": {"en": {"value": "wheeze"}}},
        "Q35805": {"labels": {"en": {"value": "cough"}}},
        "Q662860": {"labels": {"en": {"value": "tobacco smoking"}}},
        "Q7886": {"labels": {"en": {"value": "respiratory system"}}},
        "Q1071953": {"labels": {}},
    }
}


def _wikidata_api(request: httpx.Request) -> httpx.Response:
    params = request.url.params
    if request.url.host == "query.wikidata.test":
        # only Q35869 is a disease
        return httpx.Response(
            200,
            json={"results": {"bindings": [{"item": {"type": "uri", "value": "http://www.wikidata.org/entity/Q35869"}}]}},
        )
    if params.get("action") == "wbsearchentities":
        return httpx.Response(
            200,
            json={
                "search": [
                    {"id": "Q35869", "label": "asthma", "description": "chronic airway disease"},
                    {"id": "Q1", "label": "Asthma (film)"},
                    {"id": "P31", "label": "not an item"},
                ]
            },
        )
    if params.get("action") == "wbgetentities":
        if params.get("props") == "labels":
            return httpx.Response(200, json=LABELS)
        if params.get("ids") == "Q404":
            return httpx.Response(200, json={"entities": {"Q404": {"id": "Q404", "missing": ""}}})
        return httpx.Response(200, json=ASTHMA_ENTITY)
    return httpx.Response(400)


class TestWikidataClient:
    @pytest.mark.asyncio
    async def test_get_record_resolves_labels(self, settings):
        handler = RecordingHandler(_wikidata_api)
        client = WikidataClient(mock_http(handler), settings)

        record = await client.get_record("Q35869")

        assert record.name == "asthma"
        assert record.description == "chronic airway disease"
        assert record.symptoms == ["wheeze", "cough"]
        assert record.risk_factors == ["tobacco smoking"]
        # unlabeled items are skipped, duplicates across properties merged
        assert [(b.id, b.label) for b in record.body_systems] == [("Q7886", "respiratory system")]
        label_calls = [r for r in handler.requests if r.url.params.get("props") == "labels"]
        assert len(label_calls) == 1
        assert label_calls[0].url.params["ids"] == "Q38933|Q35805|Q662860|Q7886|Q1071953"

    @pytest.mark.asyncio
    async def test_missing_item_degrades_to_empty_record(self, settings):
        client = WikidataClient(mock_http(_wikidata_api), settings)

        record = await client.get_record("Q404")

        assert record.id == "Q404"
        assert record.name is None
        assert record.symptoms == [] and record.body_systems == []

    @pytest.mark.asyncio
    async def test_invalid_id_is_rejected_without_request(self, settings):
        handler = RecordingHandler(_wikidata_api)
        client = WikidataClient(mock_http(handler), settings)

        with pytest.raises(ValidationError):
            await client.get_record("asthma")
        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_transport_failure_raises_source_unavailable(self, settings):
        client = WikidataClient(mock_http(lambda r: httpx.Response(502)), settings)

        with pytest.raises(SourceUnavailable):
            await client.get_record("Q35869")

    @pytest.mark.asyncio
    async def test_search_keeps_only_disease_items(self, settings):
        handler = RecordingHandler(_wikidata_api)
        client = WikidataClient(mock_http(handler), settings)

        results = await client.search("asthma")

        assert [(r.id, r.label, r.description) for r in results] == [
            ("Q35869", "asthma", "chronic airway disease"),
        ]
        filter_query = handler.requests[-1].url.params["query"]
        assert "VALUES ?item { wd:Q35869 wd:Q1 }" in filter_query
        assert "wdt:P31/wdt:P279* wd:Q12136" in filter_query

    @pytest.mark.asyncio
    async def test_search_without_hits_skips_disease_filter(self, settings):
        handler = RecordingHandler(lambda request: httpx.Response(200, json={"search": []}))
        client = WikidataClient(mock_http(handler), settings)

        assert await client.search("zzzz") == []
        assert handler.count("query.wikidata.test") == 0

    @pytest.mark.asyncio
    async def test_search_filter_failure_raises(self, settings):
        def respond(request: httpx.Request) -> httpx.Response:
            if request.url.host == "query.wikidata.test":
                return httpx.Response(503)
            return _wikidata_api(request)

        client = WikidataClient(mock_http(respond), settings)

        with pytest.raises(SourceUnavailable):
            await client.search("asthma")

    @pytest.mark.asyncio
    async def test_country_stats(self, settings):
        def sparql(request: httpx.Request) -> httpx.Response:
            assert 'wdt:P297 "RO"' in request.url.params["query"]
            return httpx.Response(
                200,
                json={
                    "results": {
                        "bindings": [
                            {
                                "countryLabel": {"type": "literal", "value": "Romania"},
                                "population": {"type": "literal", "value": "19053815"},
                                "area": {"type": "literal", "value": "238397"},
                            }
                        ]
                    }
                },
            )

        client = WikidataClient(mock_http(sparql), settings)

        stats = await client.get_country_stats("RO")

        assert stats.label == "Romania"
        assert stats.population == 19053815
        assert stats.area_km2 == 238397

    @pytest.mark.asyncio
    async def test_unknown_country_returns_none(self, settings):
        client = WikidataClient(
            mock_http(lambda r: httpx.Response(200, json={"results": {"bindings": []}})), settings
        )
        assert await client.get_country_stats("XX") is None


def _dbpedia(row):
    def respond(request: httpx.Request) -> httpx.Response:
        assert "http://www.wikidata.org/entity/Q35869" in request.url.params["query"]
        return httpx.Response(200, json={"results": {"bindings": [row] if row else []}})

    return RecordingHandler(respond)


class TestDbpediaClient:
    @pytest.mark.asyncio
    async def test_prefers_abstract(self, settings):
        handler = _dbpedia(
            {
                "s": {"value": "http://dbpedia.org/resource/Asthma"},
                "abstract": {"value": "Asthma is a long-term inflammatory disease."},
                "comment": {"value": "Asthma is a disease."},
            }
        )
        record = await DbpediaClient(mock_http(handler), settings).fetch_abstract("Q35869")

        assert record.url == "http://dbpedia.org/resource/Asthma"
        assert record.abstract == "Asthma is a long-term inflammatory disease."

    @pytest.mark.asyncio
    async def test_falls_back_to_comment(self, settings):
        handler = _dbpedia(
            {
                "s": {"value": "http://dbpedia.org/resource/Asthma"},
                "comment": {"value": "Asthma is a disease."},
            }
        )
        record = await DbpediaClient(mock_http(handler), settings).fetch_abstract("Q35869")

        assert record.abstract == "Asthma is a disease."

    @pytest.mark.asyncio
    async def test_malformed_response_raises(self, settings):
        client = DbpediaClient(mock_http(lambda r: httpx.Response(200, text="<html>")), settings)
        with pytest.raises(SourceUnavailable):
            await client.fetch_abstract("Q35869")


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestAbstractCache:
    ROW = {
        "s": {"value": "http://dbpedia.org/resource/Asthma"},
        "abstract": {"value": "Asthma is a long-term inflammatory disease."},
    }

    @pytest.mark.asyncio
    async def test_one_network_call_within_ttl_and_refetch_after_expiry(self, settings):
        handler = _dbpedia(self.ROW)
        clock = FakeClock()
        cache = AbstractCache(
            DbpediaClient(mock_http(handler), settings),
            cache=TTLCache(default_ttl=3600, clock=clock),
            ttl_seconds=3600,
        )

        first = await cache.get("Q35869")
        second = await cache.get("Q35869")
        assert first == second
        assert len(handler.requests) == 1

        clock.now += 3601
        third = await cache.get("Q35869")
        assert third == first
        assert len(handler.requests) == 2

    @pytest.mark.asyncio
    async def test_failures_are_not_cached(self, settings):
        responses = [httpx.Response(503), httpx.Response(200, json={"results": {"bindings": [self.ROW]}})]
        handler = RecordingHandler(lambda r: responses.pop(0))
        cache = AbstractCache(DbpediaClient(mock_http(handler), settings))

        assert await cache.get("Q35869") == AbstractRecord()
        recovered = await cache.get("Q35869")

        assert recovered.abstract == "Asthma is a long-term inflammatory disease."
        assert len(handler.requests) == 2

    @pytest.mark.asyncio
    async def test_empty_lookup_is_cached(self, settings):
        handler = _dbpedia(None)
        cache = AbstractCache(DbpediaClient(mock_http(handler), settings))

        assert await cache.get("Q35869") == AbstractRecord()
        assert await cache.get("Q35869") == AbstractRecord()
        assert len(handler.requests) == 1

    @pytest.mark.asyncio
    async def test_invalid_id_rejected(self, settings):
        handler = _dbpedia(self.ROW)
        cache = AbstractCache(DbpediaClient(mock_http(handler), settings))

        with pytest.raises(ValidationError):
            await cache.get("35869")
        assert handler.requests == []

"""
Basic test configuration and fixtures.
"""

from typing import Callable, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from healthscope.core.config import Settings
from healthscope.core.exceptions import SourceUnavailable
from healthscope.schemas.condition import (
    AbstractRecord,
    BodySystem,
    CountryStats,
    DocumentRecord,
    GraphRecord,
    SearchResult,
)
from healthscope.sources.base import DocumentAdapter


@pytest.fixture
def settings() -> Settings:
    """Settings fixture for testing."""
    return Settings(
        wikidata_api_url="https://wikidata.test/w/api.php",
        wikidata_sparql_url="https://query.wikidata.test/sparql",
        wikidata_entity_url="https://wikidata.test/wiki/",
        dbpedia_sparql_url="https://dbpedia.test/sparql",
        wikidoc_base_url="https://wikidoc.test/index.php/",
        wikidoc_api_url="https://wikidoc.test/api.php",
        http_timeout_seconds=2.0,
        document_timeout_seconds=2.0,
    )


def mock_http(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by ``handler``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class RecordingHandler:
    """MockTransport handler that records requests and dispatches on a callback."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]):
        self.respond = respond
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)

    def count(self, host: str) -> int:
        return sum(1 for r in self.requests if r.url.host == host)


# Fakes for the aggregation layer


class FakeGraph:
    """In-memory stand-in for WikidataClient."""

    def __init__(
        self,
        record: Optional[GraphRecord] = None,
        error: Optional[Exception] = None,
        stats: Optional[CountryStats] = None,
        stats_error: Optional[Exception] = None,
        results: Optional[List[SearchResult]] = None,
    ):
        self.record = record
        self.error = error
        self.stats = stats
        self.stats_error = stats_error
        self.results = results or []
        self.calls: Dict[str, int] = {"get_record": 0, "search": 0, "get_country_stats": 0}

    def entity_page_url(self, qid: str) -> str:
        return f"https://www.wikidata.org/wiki/{qid}"

    async def get_record(self, qid: str) -> GraphRecord:
        self.calls["get_record"] += 1
        if self.error:
            raise self.error
        return self.record or GraphRecord(id=qid)

    async def search(self, query: str) -> List[SearchResult]:
        self.calls["search"] += 1
        if self.error:
            raise self.error
        return self.results

    async def get_country_stats(self, iso: str) -> Optional[CountryStats]:
        self.calls["get_country_stats"] += 1
        if self.stats_error:
            raise self.stats_error
        return self.stats


class FakeAbstracts:
    def __init__(self, record: Optional[AbstractRecord] = None, error: Optional[Exception] = None):
        self.record = record or AbstractRecord()
        self.error = error
        self.calls = 0

    async def get(self, qid: str) -> AbstractRecord:
        self.calls += 1
        if self.error:
            raise self.error
        return self.record


class FakeDocuments(DocumentAdapter):
    name = "WikiDoc"

    def __init__(self, record: Optional[DocumentRecord] = None, error: Optional[Exception] = None):
        self.record = record or DocumentRecord()
        self.error = error
        self.names: List[Optional[str]] = []

    async def get_page(self, condition_name: Optional[str]) -> DocumentRecord:
        self.names.append(condition_name)
        if self.error:
            raise self.error
        if not condition_name:
            return DocumentRecord()
        return self.record


@pytest.fixture
def asthma_record() -> GraphRecord:
    return GraphRecord(
        id="Q35869",
        name="asthma",
        description="long-term inflammatory disease of the airways of the lungs",
        symptoms=["wheezing", "cough", "shortness of breath", "chest tightness", "fatigue"],
        risk_factors=["smoking", "air pollution", "obesity"],
        body_systems=[
            BodySystem(id="Q7886", label="respiratory system"),
            BodySystem(id="Q7204", label="lung"),
        ],
    )


@pytest.fixture
def unavailable() -> SourceUnavailable:
    return SourceUnavailable("connection refused", source="test")


@pytest.fixture
def client():
    """Test client fixture."""
    from healthscope.main import app

    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()

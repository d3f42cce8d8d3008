"""
Knowledge-source clients.
"""

from healthscope.sources.base import DocumentAdapter
from healthscope.sources.dbpedia import AbstractCache, DbpediaClient
from healthscope.sources.http import build_http_client
from healthscope.sources.wikidata import WikidataClient
from healthscope.sources.wikidoc import WikidocClient

__all__ = [
    "AbstractCache",
    "DbpediaClient",
    "DocumentAdapter",
    "WikidataClient",
    "WikidocClient",
    "build_http_client",
]

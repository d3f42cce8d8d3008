"""
Resolves free-text condition names to WikiDoc page titles.
"""

import logging
import re
from typing import Any, Callable, Awaitable, List, Optional

import httpx

from healthscope.core.config import Settings
from healthscope.core.exceptions import SourceUnavailable
from healthscope.sources.http import SourceClient
from healthscope.utils.text import collapse_whitespace

logger = logging.getLogger(__name__)

CANDIDATE_LIMIT = 10

EXCLUDED_NAMESPACES = {
    "template",
    "category",
    "file",
    "image",
    "help",
    "special",
    "talk",
    "user",
    "mediawiki",
    "portal",
    "wikidoc",
}

SUBSECTION_RE = re.compile(
    r"[\s_](?:overview|diagnosis|treatment|screening|prognosis|epidemiology"
    r"|pathophysiology|classification|history|complications)\b",
    re.IGNORECASE,
)


def _query_field(data: Any, key: str) -> Any:
    """``data["query"][key]`` of a MediaWiki response, or None on any other shape."""
    query = data.get("query") if isinstance(data, dict) else None
    return query.get(key) if isinstance(query, dict) else None


def _comparable(title: str) -> str:
    return collapse_whitespace(title.replace("_", " ")).casefold()


def is_acceptable_title(title: Optional[str]) -> bool:
    """False for namespaced pages and pages that look like a topic's subsection."""
    if not title or not title.strip():
        return False
    prefix, sep, _ = title.partition(":")
    if sep and prefix.strip().casefold() in EXCLUDED_NAMESPACES:
        return False
    return not SUBSECTION_RE.search(title)


def pick_title(query: str, candidates: List[str]) -> Optional[str]:
    """Exact case-insensitive match wins, otherwise the first ranked candidate."""
    acceptable = [c for c in candidates if is_acceptable_title(c)]
    if not acceptable:
        return None
    wanted = _comparable(query)
    for candidate in acceptable:
        if _comparable(candidate) == wanted:
            return candidate
    return acceptable[0]


class WikidocTitleResolver(SourceClient):
    """
    Three-strategy title lookup against the WikiDoc MediaWiki API.

    Strategies run in order (full-text search, opensearch, direct title
    probes) and the first one that yields an acceptable candidate decides.
    A strategy that fails on the network counts as yielding nothing.
    """

    source_name = "wikidoc"

    def __init__(self, http: httpx.AsyncClient, settings: Settings):
        super().__init__(http)
        self.api_url = settings.wikidoc_api_url

    async def resolve(self, query: str) -> Optional[str]:
        query = collapse_whitespace(query)
        if not query:
            return None

        strategies: List[Callable[[str], Awaitable[List[str]]]] = [
            self.search_titles,
            self.opensearch_titles,
            self.probe_titles,
        ]
        for strategy in strategies:
            try:
                candidates = await strategy(query)
            except SourceUnavailable as e:
                logger.warning(
                    f"WikiDoc {strategy.__name__} failed for {query!r}: {e.message}"
                )
                continue

            title = pick_title(query, candidates)
            if title:
                logger.debug(
                    f"Resolved {query!r} to WikiDoc title {title!r} "
                    f"via {strategy.__name__}"
                )
                return title

        logger.info(f"No WikiDoc title found for {query!r}")
        return None

    async def search_titles(self, query: str) -> List[str]:
        """Ranked full-text search."""
        data = await self.get_json(
            self.api_url,
            params={
                "action": "query",
                "list": "search",
                "srsearch": query,
                "srlimit": CANDIDATE_LIMIT,
                "format": "json",
            },
        )
        hits = _query_field(data, "search")
        if not isinstance(hits, list):
            return []
        return [
            h["title"]
            for h in hits
            if isinstance(h, dict) and isinstance(h.get("title"), str)
        ]

    async def opensearch_titles(self, query: str) -> List[str]:
        """Lightweight prefix search; the response is ``[query, titles, ...]``."""
        data = await self.get_json(
            self.api_url,
            params={
                "action": "opensearch",
                "search": query,
                "limit": CANDIDATE_LIMIT,
                "namespace": 0,
                "format": "json",
            },
        )
        if not isinstance(data, list) or len(data) < 2 or not isinstance(data[1], list):
            return []
        return [t for t in data[1] if isinstance(t, str)][:CANDIDATE_LIMIT]

    async def probe_titles(self, query: str) -> List[str]:
        """Check whether the raw query or its title-cased variant exists as a page."""
        variants: List[str] = []
        for variant in (query, query.title()):
            if variant not in variants:
                variants.append(variant)

        data = await self.get_json(
            self.api_url,
            params={
                "action": "query",
                "titles": "|".join(variants),
                "redirects": 1,
                "format": "json",
            },
        )
        pages = _query_field(data, "pages")
        if not isinstance(pages, dict):
            return []

        existing = [
            page["title"]
            for page in pages.values()
            if isinstance(page, dict)
            and "missing" not in page
            and "invalid" not in page
            and isinstance(page.get("title"), str)
        ]
        # keep the probe order: raw query first
        order = {_comparable(v): i for i, v in enumerate(variants)}
        return sorted(existing, key=lambda t: order.get(_comparable(t), len(order)))

"""
WikiDoc document adapter.

Resolves a condition name to a page, fetches it and extracts the overview,
symptoms, risk factors and prevention sections. A section missing from the
main page is looked up on a linked sub-page (for example
``Asthma_risk_factors``), with content-level fallbacks on that sub-page.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote

import httpx
from bs4 import BeautifulSoup

from healthscope.core.config import Settings
from healthscope.core.exceptions import SourceUnavailable
from healthscope.schemas.condition import DocumentRecord
from healthscope.sources.base import DocumentAdapter
from healthscope.sources.http import SourceClient
from healthscope.sources.wikidoc.extractor import SectionExtractor, parse_html
from healthscope.sources.wikidoc.title_resolver import WikidocTitleResolver
from healthscope.utils.text import clean_items, collapse_whitespace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SectionSpec:
    """Heading aliases and sub-page link tokens for one section."""

    aliases: Tuple[str, ...]
    link_tokens: Tuple[str, ...]


OVERVIEW = SectionSpec(
    aliases=("overview", "introduction"),
    link_tokens=("_overview", " overview"),
)
SYMPTOMS = SectionSpec(
    aliases=("signs and symptoms", "symptoms", "clinical presentation"),
    link_tokens=("_symptoms", "symptoms"),
)
RISK_FACTORS = SectionSpec(
    aliases=("risk factors", "causes", "etiology"),
    link_tokens=("risk", "etiology", "causes"),
)
PREVENTION = SectionSpec(
    aliases=("prevention", "primary prevention", "prophylaxis"),
    link_tokens=("_prevention", "prevention", "prophylaxis"),
)


class WikidocClient(SourceClient, DocumentAdapter):
    """Structured page content from WikiDoc for a condition name."""

    source_name = "wikidoc"
    name = "WikiDoc"

    def __init__(
        self,
        http: httpx.AsyncClient,
        settings: Settings,
        resolver: Optional[WikidocTitleResolver] = None,
        extractor: Optional[SectionExtractor] = None,
    ):
        super().__init__(http)
        self.base_url = settings.wikidoc_base_url
        self.resolver = resolver or WikidocTitleResolver(http, settings)
        self.extractor = extractor or SectionExtractor()

    def page_url(self, title: str) -> str:
        return f"{self.base_url}{quote(collapse_whitespace(title).replace(' ', '_'))}"

    async def get_page(self, condition_name: Optional[str]) -> DocumentRecord:
        name = collapse_whitespace(condition_name)
        if not name:
            return DocumentRecord()

        title = await self.resolver.resolve(name)
        if not title:
            return DocumentRecord()

        url = self.page_url(title)
        soup = parse_html(await self.get_text(url))
        # sub-pages fetched while filling this record, keyed by URL
        subpages: Dict[str, Optional[BeautifulSoup]] = {}

        overview = self.extractor.extract_narrative(soup, OVERVIEW.aliases)
        if not overview:
            overview = await self._narrative_from_subpage(soup, url, OVERVIEW, subpages)

        symptoms = await self._list_section(soup, url, SYMPTOMS, subpages)
        risk_factors = await self._list_section(soup, url, RISK_FACTORS, subpages)
        prevention = await self._list_section(soup, url, PREVENTION, subpages)

        logger.debug(
            f"WikiDoc {title!r}: overview={bool(overview)} symptoms={len(symptoms)} "
            f"risk_factors={len(risk_factors)} prevention={len(prevention)} "
            f"subpages={len(subpages)}"
        )
        return DocumentRecord(
            url=url,
            overview=overview or None,
            symptoms=symptoms,
            risk_factors=risk_factors,
            prevention=prevention,
        )

    async def _list_section(
        self,
        soup: BeautifulSoup,
        url: str,
        section: SectionSpec,
        subpages: Dict[str, Optional[BeautifulSoup]],
    ) -> List[str]:
        items = self.extractor.extract_list(soup, section.aliases)
        if items:
            return clean_items(items)

        subpage = await self._subpage(soup, url, section, subpages)
        if subpage is None:
            return []
        items = self.extractor.extract_list(subpage, section.aliases)
        if not items:
            items = self.extractor.first_list(subpage)
        return clean_items(items)

    async def _narrative_from_subpage(
        self,
        soup: BeautifulSoup,
        url: str,
        section: SectionSpec,
        subpages: Dict[str, Optional[BeautifulSoup]],
    ) -> str:
        subpage = await self._subpage(soup, url, section, subpages)
        if subpage is None:
            return ""
        text = self.extractor.extract_narrative(subpage, section.aliases)
        return text or self.extractor.lead_paragraphs(subpage)

    async def _subpage(
        self,
        soup: BeautifulSoup,
        url: str,
        section: SectionSpec,
        subpages: Dict[str, Optional[BeautifulSoup]],
    ) -> Optional[BeautifulSoup]:
        """Fetch the sub-page linked for ``section``; a failed fetch yields None."""
        link = self.extractor.find_section_link(soup, section.link_tokens, url)
        if not link:
            return None
        if link not in subpages:
            try:
                subpages[link] = parse_html(await self.get_text(link))
            except SourceUnavailable as e:
                logger.warning(f"WikiDoc sub-page {link} unavailable: {e.message}")
                subpages[link] = None
        return subpages[link]

"""
Heading-anchored section extraction from WikiDoc (MediaWiki) HTML.

Sections are located by heading id or heading text and read by walking the
heading's following siblings until the next heading of the same or higher
rank. Nothing here mutates the parsed document, so running an extraction
twice over the same soup gives the same result.
"""

import re
from typing import Iterable, Iterator, List, Optional
from urllib.parse import unquote, urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup, Tag

from healthscope.utils.text import clean_items, collapse_whitespace

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
PAGE_TITLE_ID = "firstHeading"
LIST_TAGS = ["ul", "ol"]

EDIT_MARKER_RE = re.compile(r"\[\s*edit[^\]]*\]", re.IGNORECASE)
CITATION_RE = re.compile(r"\[\s*(?:\d+|citation needed)\s*\]", re.IGNORECASE)
BULLET_RE = re.compile(r"^[•·▪●◦‣–—*\-]+\s*")

LEAD_PARAGRAPH_COUNT = 3
LEAD_PARAGRAPH_MIN_LENGTH = 60
SHORT_PARAGRAPH_MAX_LENGTH = 200
MIN_LIST_ITEMS = 2

# Containers whose lists are navigation, not content
NON_CONTENT_IDS = {"toc", "catlinks", "footer", "mw-navigation"}
NON_CONTENT_CLASSES = {
    "toc",
    "navbox",
    "reflist",
    "references",
    "mw-references-wrap",
    "catlinks",
}

CONTENT_SELECTORS = (
    "#mw-content-text .mw-parser-output",
    "#mw-content-text",
    "#bodyContent",
    "main",
    "article",
)

SKIPPED_LINK_MARKERS = (
    "action=",
    "special:",
    "file:",
    "image:",
    "category:",
    "template:",
    "help:",
    "talk:",
)


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def _text(node: Tag) -> str:
    return collapse_whitespace(CITATION_RE.sub("", node.get_text()))


def _normalize_heading(text: Optional[str]) -> str:
    text = EDIT_MARKER_RE.sub(" ", (text or "").replace("_", " "))
    return collapse_whitespace(text).casefold()


def _matches(text: str, aliases: Iterable[str]) -> bool:
    """Equal, or one contains the other (case-insensitive)."""
    if not text:
        return False
    for alias in aliases:
        alias = _normalize_heading(alias)
        if alias and (text == alias or alias in text or text in alias):
            return True
    return False


def heading_rank(node: Tag) -> Optional[int]:
    """Rank of a heading (1-6), including MediaWiki ``div.mw-heading`` wrappers."""
    if not isinstance(node, Tag):
        return None
    if node.name in HEADING_TAGS:
        return int(node.name[1])
    if node.name == "div" and "mw-heading" in (node.get("class") or []):
        inner = node.find(HEADING_TAGS)
        if inner is not None:
            return int(inner.name[1])
    return None


def _is_non_content(node: Tag) -> bool:
    for el in [node, *node.parents]:
        if not isinstance(el, Tag):
            continue
        if el.get("id") in NON_CONTENT_IDS:
            return True
        if NON_CONTENT_CLASSES.intersection(el.get("class") or []):
            return True
        if el.name == "table":
            return True
    return False


def _list_items(list_node: Tag) -> List[str]:
    """Text of the top-level items of a list, without nested sub-lists."""
    items: List[str] = []
    for li in list_node.find_all("li", recursive=False):
        parts = []
        for child in li.children:
            if isinstance(child, Tag):
                if child.name in LIST_TAGS:
                    continue
                parts.append(child.get_text())
            else:
                parts.append(str(child))
        items.append(CITATION_RE.sub("", "".join(parts)))
    return clean_items(items)


def _is_page_title(node: Tag) -> bool:
    return node.get("id") == PAGE_TITLE_ID or PAGE_TITLE_ID in (node.get("class") or [])


def main_content(soup: BeautifulSoup) -> Tag:
    """The article body container, falling back to the whole document."""
    for selector in CONTENT_SELECTORS:
        node = soup.select_one(selector)
        if node is not None:
            return node
    return soup.body or soup


class SectionExtractor:
    """Reads named sections from a parsed WikiDoc page."""

    def find_heading(
        self, soup: BeautifulSoup, aliases: Iterable[str]
    ) -> Optional[Tag]:
        """
        First heading in the article body whose id or text matches one of
        ``aliases``. The page title is never a section heading.
        """
        aliases = list(aliases)
        wanted_ids = {_normalize_heading(a) for a in aliases}
        root = main_content(soup)

        for heading in root.find_all(HEADING_TAGS):
            if _is_page_title(heading):
                continue
            ids = [heading.get("id")]
            ids += [el.get("id") for el in heading.find_all(id=True)]
            if any(_normalize_heading(i) in wanted_ids for i in ids if i):
                return heading
            if _matches(_normalize_heading(heading.get_text()), aliases):
                return heading

        # id on an element outside any heading, e.g. a bare anchor span
        for el in root.find_all(id=True):
            if _is_page_title(el):
                continue
            if _normalize_heading(el.get("id")) in wanted_ids:
                if el.name in HEADING_TAGS:
                    return el
                parent = el.find_parent(HEADING_TAGS)
                if parent is not None and not _is_page_title(parent):
                    return parent
        return None

    def iter_section(self, heading: Tag) -> Iterator[Tag]:
        """Blocks after ``heading`` up to the next heading of equal or higher rank."""
        rank = heading_rank(heading) or 6
        start = heading
        parent = heading.parent
        if (
            isinstance(parent, Tag)
            and parent.name == "div"
            and heading_rank(parent) is not None
        ):
            start = parent

        for sibling in start.find_next_siblings():
            sibling_rank = heading_rank(sibling)
            if sibling_rank is not None and sibling_rank <= rank:
                break
            yield sibling

    def extract_narrative(self, soup: BeautifulSoup, aliases: Iterable[str]) -> str:
        """
        Paragraph text of a section, paragraphs separated by a blank line.

        Returns an empty string when no heading matches.
        """
        heading = self.find_heading(soup, aliases)
        if heading is None:
            return ""

        texts = []
        for block in self.iter_section(heading):
            if block.name == "p":
                text = _text(block)
                if text:
                    texts.append(text)
        return "\n\n".join(texts).strip()

    def extract_list(self, soup: BeautifulSoup, aliases: Iterable[str]) -> List[str]:
        """
        Items of a list-valued section.

        Prefers the first ``ul``/``ol`` in the section. Without one, bullet-like
        paragraph lines (leading marker or a colon) are used, and failing that
        each short paragraph becomes one item.
        """
        heading = self.find_heading(soup, aliases)
        if heading is None:
            return []

        paragraphs: List[Tag] = []
        for block in self.iter_section(heading):
            if block.name in LIST_TAGS:
                return _list_items(block)
            if block.name == "div":
                nested = block.find(LIST_TAGS)
                if nested is not None and not _is_non_content(nested):
                    return _list_items(nested)
            if block.name == "p":
                paragraphs.append(block)

        bullets = []
        for paragraph in paragraphs:
            raw = CITATION_RE.sub("", paragraph.get_text("\n"))
            for line in raw.splitlines():
                line = collapse_whitespace(line)
                if not line:
                    continue
                if BULLET_RE.match(line) or ":" in line:
                    bullets.append(BULLET_RE.sub("", line))
        if bullets:
            return clean_items(bullets)

        short = []
        for paragraph in paragraphs:
            text = _text(paragraph)
            if text and len(text) <= SHORT_PARAGRAPH_MAX_LENGTH:
                short.append(text)
        return clean_items(short)

    def lead_paragraphs(self, soup: BeautifulSoup) -> str:
        """First few substantive paragraphs of the main content, verbatim."""
        texts = []
        for paragraph in main_content(soup).find_all("p"):
            if _is_non_content(paragraph):
                continue
            text = _text(paragraph)
            if len(text) > LEAD_PARAGRAPH_MIN_LENGTH:
                texts.append(text)
                if len(texts) >= LEAD_PARAGRAPH_COUNT:
                    break
        return "\n\n".join(texts)

    def first_list(self, soup: BeautifulSoup) -> List[str]:
        """First content list of the main container with at least two items."""
        for list_node in main_content(soup).find_all(LIST_TAGS):
            if _is_non_content(list_node):
                continue
            if list_node.find_parent(LIST_TAGS) is not None:
                continue
            items = _list_items(list_node)
            if len(items) >= MIN_LIST_ITEMS:
                return items
        return []

    def find_section_link(
        self, soup: BeautifulSoup, tokens: Iterable[str], page_url: str
    ) -> Optional[str]:
        """
        Absolute URL of the first same-site link whose href or text has a token.

        Links back to ``page_url`` itself, in-page anchors and MediaWiki
        special or namespaced pages are ignored.
        """
        tokens = [t.casefold() for t in tokens if t]
        page, _ = urldefrag(page_url)
        site = urlparse(page_url).netloc

        for anchor in main_content(soup).find_all("a", href=True):
            href = anchor["href"]
            if href.startswith("#"):
                continue
            target, _ = urldefrag(urljoin(page_url, href))
            if urlparse(target).netloc != site or target == page:
                continue
            decoded = unquote(href).casefold()
            if any(marker in decoded for marker in SKIPPED_LINK_MARKERS):
                continue
            haystack = f"{decoded} {collapse_whitespace(anchor.get_text()).casefold()}"
            if any(token in haystack for token in tokens):
                return target
        return None

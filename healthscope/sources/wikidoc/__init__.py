"""
WikiDoc document source.
"""

from healthscope.sources.wikidoc.client import WikidocClient
from healthscope.sources.wikidoc.extractor import SectionExtractor, parse_html
from healthscope.sources.wikidoc.title_resolver import WikidocTitleResolver

__all__ = ["WikidocClient", "SectionExtractor", "WikidocTitleResolver", "parse_html"]

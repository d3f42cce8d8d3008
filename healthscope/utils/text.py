"""
Text cleanup helpers shared by the scrapers and the scoring code.
"""

import re
from typing import Iterable, List, Optional

_WHITESPACE_RE = re.compile(r"\s+")

MAX_SECTION_ITEMS = 30


def collapse_whitespace(value: Optional[str]) -> str:
    """Collapse runs of whitespace into single spaces and trim."""
    if not value:
        return ""
    return _WHITESPACE_RE.sub(" ", value).strip()


def normalize_key(value: Optional[str]) -> str:
    """Case-insensitive comparison key for a term."""
    return collapse_whitespace(value).casefold()


def clean_items(
    items: Iterable[Optional[str]], limit: int = MAX_SECTION_ITEMS
) -> List[str]:
    """
    Normalize a scraped list.

    Trims and collapses whitespace, drops empty entries, removes
    case-insensitive duplicates (first spelling wins) and caps the result.

    Args:
        items: Raw strings, possibly containing None
        limit: Maximum number of items to keep

    Returns:
        Cleaned list of at most ``limit`` items
    """
    seen = set()
    cleaned: List[str] = []
    for item in items:
        text = collapse_whitespace(item)
        if not text:
            continue
        key = normalize_key(text)
        if key in seen:
            continue
        seen.add(key)
        cleaned.append(text)
        if len(cleaned) >= limit:
            break
    return cleaned


def is_blank(value: Optional[str]) -> bool:
    return not value or not value.strip()

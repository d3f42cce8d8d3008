"""
Interface implemented by every semi-structured document source.
"""

from abc import ABC, abstractmethod
from typing import Optional

from healthscope.schemas.condition import DocumentRecord


class DocumentAdapter(ABC):
    """Turns a condition name into the sections of one document source."""

    name: str = "document"

    @abstractmethod
    async def get_page(self, condition_name: Optional[str]) -> DocumentRecord:
        """
        Resolve, fetch and extract the page for ``condition_name``.

        Returns an empty DocumentRecord when the name is missing or no page
        can be found. Transport failures may raise SourceUnavailable.
        """

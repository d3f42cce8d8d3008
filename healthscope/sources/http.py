"""
Shared async HTTP plumbing for the knowledge-source clients.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from healthscope.core.config import Settings
from healthscope.core.exceptions import SourceUnavailable

logger = logging.getLogger(__name__)


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create the AsyncClient shared by every source of one service."""
    return httpx.AsyncClient(
        timeout=settings.http_timeout_seconds,
        headers={"User-Agent": settings.user_agent},
        follow_redirects=True,
    )


class SourceClient:
    """
    Base for clients of one external source.

    Wraps an injected ``httpx.AsyncClient`` and turns transport errors,
    non-2xx responses and undecodable bodies into ``SourceUnavailable``.
    """

    source_name = "source"

    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    async def _get(
        self, url: str, params: Optional[Dict[str, Any]] = None
    ) -> httpx.Response:
        logger.debug(f"[{self.source_name}] GET {url} params={params}")
        try:
            response = await self.http.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SourceUnavailable(
                f"{self.source_name} returned HTTP {e.response.status_code}",
                source=self.source_name,
                details={"url": url},
            ) from e
        except httpx.HTTPError as e:
            raise SourceUnavailable(
                f"{self.source_name} request failed: {e}",
                source=self.source_name,
                details={"url": url},
            ) from e
        return response

    async def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        response = await self._get(url, params=params)
        try:
            return response.json()
        except ValueError as e:
            raise SourceUnavailable(
                f"{self.source_name} returned malformed JSON",
                source=self.source_name,
                details={"url": url},
            ) from e

    async def get_text(self, url: str, params: Optional[Dict[str, Any]] = None) -> str:
        response = await self._get(url, params=params)
        return response.text

    async def sparql(self, endpoint: str, query: str) -> list:
        """Run a SPARQL SELECT and return ``results.bindings``."""
        data = await self.get_json(endpoint, params={"format": "json", "query": query})
        try:
            bindings = data["results"]["bindings"]
        except (KeyError, TypeError) as e:
            raise SourceUnavailable(
                f"{self.source_name} SPARQL response has no bindings",
                source=self.source_name,
            ) from e
        if not isinstance(bindings, list):
            raise SourceUnavailable(
                f"{self.source_name} SPARQL bindings are not a list",
                source=self.source_name,
            )
        return bindings


def binding_value(row: Dict[str, Any], name: str) -> Optional[str]:
    """Read ``row[name].value`` from a SPARQL JSON binding, or None."""
    cell = row.get(name) if isinstance(row, dict) else None
    if not isinstance(cell, dict):
        return None
    value = cell.get("value")
    return value if isinstance(value, str) else None

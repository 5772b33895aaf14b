"""Async client for the Exa search API.

Endpoints used: ``/search``, ``/contents`` and ``/answer``, all ``POST``
with the key in the ``x-api-key`` header.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from zeta_stream.errors import ConfigError, NetworkError, classify_http_error

_logger = logging.getLogger(__name__)

# Domain hints merged into includeDomains for a category search
CATEGORY_DOMAINS: dict[str, list[str]] = {
    "research paper": [
        "arxiv.org", "scholar.google.com", "pubmed.ncbi.nlm.nih.gov",
        "semanticscholar.org", "researchgate.net",
    ],
    "github": ["github.com"],
    "tweet": ["twitter.com", "x.com"],
    "financial report": ["sec.gov", "investor.com"],
}

CATEGORIES = (
    "company", "research paper", "news", "pdf", "github", "tweet",
    "personal site", "people", "financial report",
)


class ExaClient:
    """Thin async wrapper around the three Exa endpoints."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.exa.ai",
        timeout: float = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ConfigError("Exa API key is not configured (EXA_API_KEY)")
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "x-api-key": api_key,
                "Content-Type": "application/json",
                "accept": "application/json",
            },
            timeout=httpx.Timeout(timeout, connect=10),
            transport=transport,
        )

    async def _post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        try:
            resp = await self._client.post(path, json=body)
        except (httpx.TimeoutException, httpx.TransportError) as e:
            raise NetworkError(f"Exa {path} failed: {e}") from e
        if not resp.is_success:
            raise classify_http_error(resp.status_code, resp.text, "Exa")
        return resp.json()

    async def search(
        self,
        query: str,
        *,
        type: str = "auto",
        num_results: int = 5,
        category: str | None = None,
        text_chars: int | None = None,
        include_domains: list[str] | None = None,
        subpages: int = 0,
        subpage_target: list[str] | None = None,
        livecrawl: str | None = None,
        livecrawl_timeout: int | None = None,
        image_links: int = 3,
    ) -> dict[str, Any]:
        """Run a search and return the decoded response body."""
        body: dict[str, Any] = {
            "query": query,
            "type": type,
            "numResults": num_results,
            "useAutoprompt": True,
        }
        if category:
            body["category"] = category

        contents: dict[str, Any] = {
            "text": {"maxCharacters": text_chars} if text_chars else True,
            "extras": {"imageLinks": image_links},
        }
        if type == "deep":
            contents["context"] = True
        if livecrawl:
            contents["livecrawl"] = livecrawl
        if livecrawl_timeout:
            contents["livecrawl_timeout"] = livecrawl_timeout
        if subpages > 0:
            contents["subpages"] = subpages
        if subpage_target:
            contents["subpage_target"] = subpage_target
        body["contents"] = contents

        domains = list(include_domains or [])
        if category:
            domains += CATEGORY_DOMAINS.get(category, [])
        if domains:
            body["includeDomains"] = domains

        _logger.debug("Exa search type=%s category=%s n=%d", type, category, num_results)
        data = await self._post("/search", body)
        _logger.debug("Exa search returned %d result(s)", len(data.get("results") or []))
        return data

    async def get_contents(
        self,
        urls: list[str],
        max_chars: int = 3000,
        livecrawl: str = "preferred",
        livecrawl_timeout: int = 10000,
    ) -> dict[str, Any]:
        """Fetch page text for specific URLs."""
        body: dict[str, Any] = {
            "urls": urls,
            "text": {"maxCharacters": max_chars},
            "livecrawl": livecrawl,
        }
        if livecrawl == "preferred" and livecrawl_timeout > 0:
            body["livecrawl_timeout"] = livecrawl_timeout
        data = await self._post("/contents", body)
        for item in data.get("results") or []:
            text = item.get("text") or ""
            if len(text) > max_chars:
                item["text"] = text[:max_chars] + "..."
        return data

    async def answer(self, query: str) -> dict[str, Any]:
        """Direct answer with citations."""
        return await self._post("/answer", {"query": query, "text": True})

    async def close(self) -> None:
        await self._client.aclose()

from __future__ import annotations

import logging
import re

import httpx

from methodmate.http import HttpClientFactory, transient_retry
from methodmate.settings import MethodMateSettings

logger = logging.getLogger(__name__)

_DOI_PREFIX_RE = re.compile(r"^doi:", re.IGNORECASE)


class CoreClient:
    """CORE API client, used as the full-text source.

    Docs: https://core.ac.uk/services/api

    Looks a paper up by title first and by DOI second; when CORE has no full
    text for the hit, its abstract is returned instead.

    Rate limiting and server errors raise ``httpx.HTTPStatusError`` so callers
    can tell a provider outage from a paper CORE does not have; other 4xx
    answers and unparseable bodies mean no text.
    """

    def __init__(self, config: MethodMateSettings, transport: httpx.AsyncBaseTransport | None = None):
        headers = {"Content-Type": "application/json"}
        if config.core_api_key:
            headers["Authorization"] = f"Bearer {config.core_api_key}"
        self._client = HttpClientFactory.client(
            base_url="https://api.core.ac.uk/v3",
            headers=headers,
            transport=transport,
        )

    async def aclose(self):
        await self._client.aclose()

    async def full_text(self, title: str, doi: str | None = None) -> str | None:
        text = await self._first_text(title)
        if text:
            return text
        if doi:
            clean = _DOI_PREFIX_RE.sub("", doi).strip()
            logger.info("title search found nothing, trying DOI %s", clean)
            return await self._first_text(f'doi:"{clean}"')
        return None

    @transient_retry()
    async def _first_text(self, query: str) -> str | None:
        r = await self._client.post(
            "/search/works",
            json={"q": query, "limit": 1, "fields": ["title", "fullText", "abstract", "doi"]},
        )
        if r.status_code == 429 or r.status_code >= 500:
            r.raise_for_status()
        if r.status_code >= 400:
            logger.error("CORE search failed (%s): %s", r.status_code, r.text[:200])
            return None
        try:
            body = r.json()
        except ValueError:
            logger.error("CORE returned a non-JSON body: %s", r.text[:200])
            return None
        if not isinstance(body, dict):
            return None
        results = body.get("results") or []
        if not results:
            return None
        hit = results[0]
        if hit.get("fullText"):
            return hit["fullText"]
        if hit.get("abstract"):
            logger.info("no full text on CORE for %r, using abstract", query)
            return hit["abstract"]
        return None

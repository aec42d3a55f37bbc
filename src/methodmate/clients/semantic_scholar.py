from __future__ import annotations

import httpx

from methodmate.http import HttpClientFactory, transient_retry
from methodmate.models import Author, Identifier, PaperRecord
from methodmate.settings import MethodMateSettings

SEARCH_FIELDS = "title,authors,abstract,year,citationCount,venue,url,openAccessPdf,externalIds"


class SemanticScholarClient:
    """Semantic Scholar Graph API client.

    Docs: https://api.semanticscholar.org/

    Respect rate limits; the unauthenticated pool is small.
    """

    def __init__(self, config: MethodMateSettings, transport: httpx.AsyncBaseTransport | None = None):
        headers = {"Accept": "application/json"}
        if config.semantic_scholar_api_key:
            headers["x-api-key"] = config.semantic_scholar_api_key
        self._client = HttpClientFactory.client(
            base_url="https://api.semanticscholar.org/graph/v1",
            headers=headers,
            transport=transport,
        )

    async def aclose(self):
        await self._client.aclose()

    @transient_retry()
    async def search(
        self,
        query: str,
        limit: int = 10,
        venues: list[str] | None = None,
        fields: str = SEARCH_FIELDS,
    ) -> list[PaperRecord]:
        params = {"query": query, "limit": limit, "fields": fields}
        if venues:
            params["venue"] = ",".join(venues)
        r = await self._client.get("/paper/search", params=params)
        r.raise_for_status()
        items = r.json().get("data") or []
        return [self._to_record(x) for x in items]

    def _to_record(self, d: dict) -> PaperRecord:
        ext = d.get("externalIds") or {}

        authors = []
        for a in d.get("authors") or []:
            if a.get("name"):
                authors.append(Author(name=a["name"], author_id=a.get("authorId")))

        pdf_url = None
        oapdf = d.get("openAccessPdf")
        if isinstance(oapdf, dict):
            pdf_url = oapdf.get("url")

        return PaperRecord(
            ids=Identifier(doi=ext.get("DOI"), s2_paper_id=d.get("paperId")),
            title=d.get("title") or "",
            abstract=d.get("abstract"),
            authors=authors,
            venue=d.get("venue") or None,
            year=d.get("year"),
            citation_count=d.get("citationCount"),
            landing_page_url=d.get("url"),
            pdf_url=pdf_url,
            source_payloads={"semantic_scholar": d},
        )

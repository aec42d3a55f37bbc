from __future__ import annotations

import json

import httpx
import pytest

from methodmate.clients.core import CoreClient
from methodmate.clients.semantic_scholar import SemanticScholarClient
from methodmate.settings import MethodMateSettings

CONFIG = MethodMateSettings(core_api_key="core-key")


async def test_core_prefers_title_hit_full_text():
    queries = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        queries.append(body["q"])
        return httpx.Response(200, json={"results": [{"fullText": "FULL", "abstract": "ABS"}]})

    client = CoreClient(CONFIG, transport=httpx.MockTransport(handler))
    try:
        assert await client.full_text("A title", doi="10.1/x") == "FULL"
    finally:
        await client.aclose()
    assert queries == ["A title"]


async def test_core_falls_back_to_doi_then_abstract():
    queries = []

    def handler(request: httpx.Request) -> httpx.Response:
        q = json.loads(request.content)["q"]
        queries.append(q)
        if q.startswith("doi:"):
            return httpx.Response(200, json={"results": [{"abstract": "ABS"}]})
        return httpx.Response(200, json={"results": []})

    client = CoreClient(CONFIG, transport=httpx.MockTransport(handler))
    try:
        assert await client.full_text("A title", doi="DOI:10.1/x") == "ABS"
    finally:
        await client.aclose()
    assert queries == ["A title", 'doi:"10.1/x"']


async def test_core_client_error_status_is_no_text():
    client = CoreClient(CONFIG, transport=httpx.MockTransport(lambda r: httpx.Response(404, text="missing")))
    try:
        assert await client.full_text("A title") is None
    finally:
        await client.aclose()


@pytest.mark.parametrize("status", [429, 503])
async def test_core_rate_limit_and_outage_raise(status):
    client = CoreClient(CONFIG, transport=httpx.MockTransport(lambda r: httpx.Response(status, text="busy")))
    try:
        with pytest.raises(httpx.HTTPStatusError):
            await client.full_text("A title")
    finally:
        await client.aclose()


async def test_core_non_json_body_is_no_text():
    client = CoreClient(
        CONFIG, transport=httpx.MockTransport(lambda r: httpx.Response(200, text="<html>gateway</html>"))
    )
    try:
        assert await client.full_text("A title", doi="10.1/x") is None
    finally:
        await client.aclose()


async def test_semantic_scholar_search_maps_records():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        return httpx.Response(
            200,
            json={
                "data": [
                    {
                        "paperId": "abc",
                        "title": "Designing with older adults",
                        "venue": "CHI",
                        "year": 2023,
                        "citationCount": 12,
                        "authors": [{"authorId": "1", "name": "R. Lee"}],
                        "externalIds": {"DOI": "10.1145/123"},
                        "openAccessPdf": {"url": "https://example.org/p.pdf"},
                    }
                ]
            },
        )

    client = SemanticScholarClient(MethodMateSettings(), transport=httpx.MockTransport(handler))
    try:
        papers = await client.search("co-design,older adults", limit=5, venues=["CHI", "CSCW"])
    finally:
        await client.aclose()

    assert seen["params"]["query"] == "co-design,older adults"
    assert seen["params"]["venue"] == "CHI,CSCW"
    [paper] = papers
    assert paper.ids.doi == "10.1145/123"
    assert paper.venue == "CHI"
    assert paper.pdf_url == "https://example.org/p.pdf"
    assert paper.authors[0].name == "R. Lee"

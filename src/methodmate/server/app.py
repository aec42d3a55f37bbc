from __future__ import annotations

import logging
from functools import lru_cache

import httpx
from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field

from methodmate import __version__
from methodmate.clients.core import CoreClient
from methodmate.clients.semantic_scholar import SemanticScholarClient
from methodmate.errors import OracleError
from methodmate.extract.orchestrator import MethodExtractor
from methodmate.extract.prompts import statistical_method_prompt
from methodmate.extract.types import Found
from methodmate.oracle.client import CozeOracle, Oracle, new_conversation_id
from methodmate.pipeline.enrich import FullTextSource, PaperEnricher
from methodmate.search.keywords import format_keyword_query, split_phrases
from methodmate.search.suggest import ChatTurn, KeywordSuggester
from methodmate.settings import settings
from methodmate.venues.catalog import TOP_VENUES
from methodmate.venues.classifier import classify_venue

logging.basicConfig(
    level=(settings.log_level or "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="MethodMate - research method extraction", version=__version__)


@lru_cache(maxsize=1)
def get_oracle() -> Oracle:
    return CozeOracle(settings)


@lru_cache(maxsize=1)
def get_fulltext_source() -> FullTextSource:
    return CoreClient(settings)


@lru_cache(maxsize=1)
def get_search_client() -> SemanticScholarClient:
    return SemanticScholarClient(settings)


def get_extractor(oracle: Oracle = Depends(get_oracle)) -> MethodExtractor:
    return MethodExtractor(oracle, settings)


def get_enricher(
    source: FullTextSource = Depends(get_fulltext_source),
    extractor: MethodExtractor = Depends(get_extractor),
) -> PaperEnricher:
    return PaperEnricher(source, extractor)


class ExtractMethodRequest(BaseModel):
    full_text: str
    title: str | None = None


class FullContentRequest(BaseModel):
    title: str
    doi: str | None = None


class MethodSummaryRequest(BaseModel):
    title: str
    full_text: str


class VenueRequest(BaseModel):
    venue: str


class KeywordsRequest(BaseModel):
    keywords: str


class SuggestRequest(BaseModel):
    history: list[ChatTurn] = Field(default_factory=list)
    session_id: str | None = None


class RecommendRequest(BaseModel):
    history: list[ChatTurn] = Field(default_factory=list)
    session_id: str | None = None
    filter_venues: bool = False
    limit: int = Field(default=5, gt=0, le=100)


class StatisticalMethodRequest(BaseModel):
    method: str = Field(min_length=1)


@app.get("/health")
async def health():
    return {"ok": True}


@app.post("/api/paper/extract-method")
async def extract_method(req: ExtractMethodRequest, extractor: MethodExtractor = Depends(get_extractor)):
    outcome = await extractor.extract(req.full_text)
    if isinstance(outcome, Found):
        return {"found": True, "research_method": outcome.text, "provenance": outcome.provenance}
    return {"found": False, "research_method": None, "reason": outcome.reason}


@app.post("/api/paper/get-full-content")
async def get_full_content(
    req: FullContentRequest,
    source: FullTextSource = Depends(get_fulltext_source),
    extractor: MethodExtractor = Depends(get_extractor),
):
    try:
        full_text = await source.full_text(req.title, req.doi)
    except httpx.HTTPError as e:
        raise HTTPException(status_code=502, detail=f"full text provider failed: {e}") from e
    method = None
    if full_text:
        outcome = await extractor.extract(full_text)
        method = outcome.text if isinstance(outcome, Found) else None
    return {
        "title": req.title,
        "doi": req.doi,
        "full_text": full_text,
        "research_method": method,
        "has_content": bool(full_text),
    }


@app.post("/api/paper/generate-method-summary")
async def generate_method_summary(
    req: MethodSummaryRequest, extractor: MethodExtractor = Depends(get_extractor)
):
    summary = await extractor.summarize_method(req.full_text)
    if not summary:
        raise HTTPException(status_code=404, detail="no methodology found")
    return {"title": req.title, "method_summary": summary}


@app.post("/api/venue/classify")
async def venue_classify(req: VenueRequest):
    match = classify_venue(req.venue)
    return {"venue": req.venue, "is_top_venue": match.matched, "canonical_name": match.canonical_name}


@app.post("/api/keywords/format")
async def keywords_format(req: KeywordsRequest):
    return {"query": format_keyword_query(req.keywords), "phrases": split_phrases(req.keywords)}


@app.post("/api/keywords/suggest")
async def keywords_suggest(req: SuggestRequest, oracle: Oracle = Depends(get_oracle)):
    query = await KeywordSuggester(oracle).suggest(req.history, session_id=req.session_id)
    return {"query": query, "session_id": req.session_id}


@app.post("/api/semantic-recommend")
async def semantic_recommend(
    req: RecommendRequest,
    oracle: Oracle = Depends(get_oracle),
    search: SemanticScholarClient = Depends(get_search_client),
    enricher: PaperEnricher = Depends(get_enricher),
):
    query = await KeywordSuggester(oracle).suggest(req.history, session_id=req.session_id)
    venues = list(TOP_VENUES) if req.filter_venues else None
    try:
        papers = await search.search(query, limit=req.limit, venues=venues)
    except httpx.HTTPError as e:
        raise HTTPException(status_code=502, detail=f"paper search failed: {e}") from e
    enriched = await enricher.enrich_all(papers, concurrency=settings.enrich_concurrency)
    return {"query": query, "session_id": req.session_id, "papers": enriched}


@app.post("/api/query-statistical-method")
async def query_statistical_method(req: StatisticalMethodRequest, oracle: Oracle = Depends(get_oracle)):
    try:
        reply = await oracle.ask(statistical_method_prompt(req.method), new_conversation_id("query_method"))
    except OracleError as e:
        raise HTTPException(status_code=502, detail=f"oracle failed: {e}") from e
    if reply.refused or not reply.text.strip():
        raise HTTPException(status_code=404, detail="no explanation available")
    return {"method": req.method, "explanation": reply.text.strip()}

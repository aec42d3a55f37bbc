from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Protocol

from methodmate.extract.orchestrator import MethodExtractor
from methodmate.extract.types import Found
from methodmate.models import EnrichedPaper, PaperRecord
from methodmate.util_text import preview
from methodmate.venues.catalog import TOP_VENUES
from methodmate.venues.classifier import classify_venue

logger = logging.getLogger(__name__)


def _describe(e: Exception) -> str:
    return str(e) or type(e).__name__


class FullTextSource(Protocol):
    async def full_text(self, title: str, doi: str | None = None) -> str | None: ...


class PaperEnricher:
    """Attaches full text, research method and venue rank to candidate papers.

    ``enrich`` handles one paper and is safe to await concurrently; each call
    owns its result. ``enrich_all`` fans a list out over a bounded pool of
    workers and returns results in input order.
    """

    def __init__(
        self,
        source: FullTextSource,
        extractor: MethodExtractor,
        venues: Sequence[str] = TOP_VENUES,
    ):
        self._source = source
        self._extractor = extractor
        self._venues = venues

    async def enrich(self, paper: PaperRecord) -> EnrichedPaper:
        match = classify_venue(paper.venue, self._venues)
        result = EnrichedPaper(
            paper=paper,
            is_top_venue=match.matched,
            canonical_venue=match.canonical_name,
        )

        try:
            text = await self._source.full_text(paper.title, paper.ids.doi)
        except Exception as e:
            logger.warning("full text lookup failed for %r: %s", preview(paper.title), e)
            return result.model_copy(update={"error": f"full_text: {_describe(e)}"})

        if not text:
            logger.info("no full text for %r", preview(paper.title))
            return result

        update: dict = {"full_text": text}
        try:
            outcome = await self._extractor.extract(text)
        except Exception as e:
            logger.exception("method extraction crashed for %r", preview(paper.title))
            update["error"] = f"extract: {_describe(e)}"
            return result.model_copy(update=update)
        if isinstance(outcome, Found):
            update["research_method"] = outcome.text
            update["method_provenance"] = outcome.provenance
            logger.info("research method extracted for %r (%s)", preview(paper.title), outcome.provenance)
        return result.model_copy(update=update)

    async def enrich_all(self, papers: Sequence[PaperRecord], concurrency: int = 4) -> list[EnrichedPaper]:
        if concurrency <= 0:
            raise ValueError("concurrency must be positive")

        # one slot per paper, written by index
        slots: list[EnrichedPaper | None] = [None] * len(papers)
        queue: asyncio.Queue[int] = asyncio.Queue()
        for i in range(len(papers)):
            queue.put_nowait(i)

        async def worker() -> None:
            while True:
                try:
                    i = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                slots[i] = await self.enrich(papers[i])

        await asyncio.gather(*(worker() for _ in range(min(concurrency, len(papers)))))
        return [s for s in slots if s is not None]

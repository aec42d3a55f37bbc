from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from methodmate.errors import MalformedInputError, OracleEmptyAnswer, OracleError
from methodmate.extract.chunking import split_into_chunks
from methodmate.extract.prompts import clean_answer, extraction_prompt, summary_prompt
from methodmate.extract.sections import locate_method_section
from methodmate.extract.types import ExtractionOutcome, Found, NotFound, Provenance
from methodmate.oracle.client import Oracle, OracleReply, new_conversation_id
from methodmate.settings import MethodMateSettings
from methodmate.util_text import PARAGRAPH_SEPARATOR

logger = logging.getLogger(__name__)


def ensure_document(text: object) -> str:
    if not isinstance(text, str):
        raise MalformedInputError(f"paper text must be str, got {type(text).__name__}")
    if not text.strip():
        raise MalformedInputError("paper text is empty")
    return text


@dataclass(frozen=True)
class _SegmentResult:
    text: str | None
    summarized: bool = False


class MethodExtractor:
    """Pulls the research-methodology description out of a paper's full text.

    Short papers go to the oracle whole. Longer ones are narrowed to the
    method section first and chunked when that is still too long; chunk
    answers are merged and, if the merge overflows the bound, summarized.

    Every oracle call is retried on transport failure with a flat delay and
    falls back to the summary prompt once retries are spent. A refusal skips
    the retries and goes straight to the summary prompt.

    ``extract`` never raises; failures come back as ``NotFound``.
    """

    def __init__(self, oracle: Oracle, config: MethodMateSettings):
        self._oracle = oracle
        self._config = config

    async def extract(self, text: str) -> ExtractionOutcome:
        try:
            ensure_document(text)
        except MalformedInputError as e:
            logger.info("%s; skipping method extraction", e)
            return NotFound("malformed_input")
        try:
            return await self._extract(text)
        except Exception:
            logger.exception("unexpected error while extracting research method")
            return NotFound("error")

    async def summarize_method(self, text: str) -> str | None:
        """Ask for a concise methodology summary. Single attempt, no retry."""
        if not isinstance(text, str) or not text.strip():
            return None
        try:
            reply = await self._oracle.ask(summary_prompt(text), new_conversation_id("generate_summary"))
        except OracleError as e:
            logger.warning("method summary failed: %s", e)
            return None
        if reply.refused:
            logger.info("oracle refused the method summary")
            return None
        return clean_answer(reply.text) or None

    async def _extract(self, text: str) -> ExtractionOutcome:
        max_len = self._config.max_chunk_length
        logger.info("paper text length: %d chars", len(text))

        if len(text) <= max_len:
            return self._single(await self._extract_segment(text), "direct")

        section = locate_method_section(text, fallback_chars=self._config.section_fallback_chars)
        if section is None:
            logger.info("no method section located; chunking the whole paper")
            return await self._extract_chunked(text)

        logger.info("method section located (%d chars, title=%r)", len(section), section.matched_title)
        if len(section) <= max_len:
            return self._single(await self._extract_segment(section.text), "section-direct")
        return await self._extract_chunked(section.text)

    @staticmethod
    def _single(result: _SegmentResult, provenance: Provenance) -> ExtractionOutcome:
        if not result.text:
            return NotFound("no_result")
        return Found(text=result.text, provenance="summarized-fallback" if result.summarized else provenance)

    async def _extract_chunked(self, text: str) -> ExtractionOutcome:
        max_len = self._config.max_chunk_length
        pacing = self._config.chunk_pacing_ms / 1000

        results: list[str] = []
        for i, chunk in enumerate(split_into_chunks(text, max_len)):
            if i:
                # rate limit: one chunk request at a time, spaced out
                await asyncio.sleep(pacing)
            logger.info("processing chunk %d (%d chars)", i + 1, len(chunk))
            seg = await self._extract_segment(chunk)
            if seg.text:
                results.append(seg.text)

        if not results:
            logger.info("no chunk yielded a research method")
            return NotFound("no_result")

        merged = PARAGRAPH_SEPARATOR.join(results)
        logger.info("merged method text from %d chunks (%d chars)", len(results), len(merged))
        if len(merged) <= max_len:
            return Found(text=merged, provenance="chunked-merged")

        summary = await self.summarize_method(merged)
        if not summary:
            return NotFound("no_result")
        return Found(text=summary, provenance="summarized-fallback")

    async def _extract_segment(self, text: str) -> _SegmentResult:
        try:
            reply = await self._ask_with_retry(extraction_prompt(text))
        except OracleError as e:
            logger.warning(
                "method extraction failed after %d attempts (%s); trying summary",
                self._config.retry_count + 1,
                e,
            )
            return _SegmentResult(await self.summarize_method(text), summarized=True)

        if reply.refused:
            logger.info("oracle refused extraction; trying summary")
            return _SegmentResult(await self.summarize_method(text), summarized=True)

        return _SegmentResult(clean_answer(reply.text) or None)

    async def _ask_with_retry(self, prompt: str) -> OracleReply:
        retrying = AsyncRetrying(
            reraise=True,
            stop=stop_after_attempt(self._config.retry_count + 1),
            wait=wait_fixed(self._config.retry_delay_ms / 1000),
            retry=retry_if_exception_type(OracleError),
            before_sleep=before_sleep_log(logger, logging.INFO),
        )
        async for attempt in retrying:
            with attempt:
                reply = await self._oracle.ask(prompt, new_conversation_id("extract_method"))
                if not reply.refused and not reply.text.strip():
                    raise OracleEmptyAnswer("oracle returned an empty answer")
        return reply

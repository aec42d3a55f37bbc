from __future__ import annotations

import asyncio

import pytest

from methodmate.errors import MalformedInputError, OracleTransportError
from methodmate.extract.orchestrator import MethodExtractor, ensure_document
from methodmate.extract.types import Found, NotFound
from methodmate.settings import MethodMateSettings

from .helpers import ScriptedOracle, answer, filler, is_summary, refusal


def _always(reply):
    return lambda _prompt: reply


async def test_short_paper_goes_direct(fast_settings):
    oracle = ScriptedOracle(_always(answer("Here is the research methodology section: We surveyed 40 people.")))
    outcome = await MethodExtractor(oracle, fast_settings).extract("3. Method\nWe surveyed 40 people.")

    assert outcome == Found(text="We surveyed 40 people.", provenance="direct")
    assert len(oracle.prompts) == 1


async def test_malformed_input_skips_oracle(fast_settings):
    oracle = ScriptedOracle(_always(answer("unused")))
    extractor = MethodExtractor(oracle, fast_settings)

    assert await extractor.extract("") == NotFound("malformed_input")
    assert await extractor.extract("   \n ") == NotFound("malformed_input")
    assert await extractor.extract(None) == NotFound("malformed_input")  # type: ignore[arg-type]
    assert oracle.prompts == []


async def test_retry_exhaustion_then_failed_summary(fast_settings):
    oracle = ScriptedOracle(_always(OracleTransportError("timed out")))
    outcome = await MethodExtractor(oracle, fast_settings).extract("A short paper.")

    assert outcome == NotFound("no_result")
    assert oracle.extraction_calls == fast_settings.retry_count + 1
    assert oracle.summary_calls == 1
    # summary only after all primary attempts
    assert is_summary(oracle.prompts[-1])
    assert not any(is_summary(p) for p in oracle.prompts[:-1])


async def test_retry_exhaustion_recovers_through_summary(fast_settings):
    def respond(prompt):
        if is_summary(prompt):
            return answer("A two-phase interview study.")
        return OracleTransportError("status 502", status_code=502)

    oracle = ScriptedOracle(respond)
    outcome = await MethodExtractor(oracle, fast_settings).extract("A short paper.")

    assert outcome == Found(text="A two-phase interview study.", provenance="summarized-fallback")
    assert oracle.extraction_calls == 4


async def test_transient_failure_then_success(fast_settings):
    replies = [OracleTransportError("reset"), answer("Mixed methods.")]
    oracle = ScriptedOracle(lambda _p: replies.pop(0))

    outcome = await MethodExtractor(oracle, fast_settings).extract("A short paper.")

    assert outcome == Found(text="Mixed methods.", provenance="direct")
    assert len(oracle.prompts) == 2


async def test_empty_answer_is_retried(fast_settings):
    replies = [answer("   "), answer("Field study.")]
    oracle = ScriptedOracle(lambda _p: replies.pop(0))

    outcome = await MethodExtractor(oracle, fast_settings).extract("A short paper.")

    assert outcome == Found(text="Field study.", provenance="direct")
    assert oracle.extraction_calls == 2


async def test_refusal_short_circuits_to_summary(fast_settings):
    def respond(prompt):
        return answer("Survey of 200 students.") if is_summary(prompt) else refusal()

    oracle = ScriptedOracle(respond)
    outcome = await MethodExtractor(oracle, fast_settings).extract("A short paper.")

    assert outcome == Found(text="Survey of 200 students.", provenance="summarized-fallback")
    assert oracle.extraction_calls == 1
    assert oracle.summary_calls == 1


async def test_refused_summary_means_not_found(fast_settings):
    oracle = ScriptedOracle(_always(refusal()))
    outcome = await MethodExtractor(oracle, fast_settings).extract("A short paper.")

    assert outcome == NotFound("no_result")
    assert len(oracle.prompts) == 2


async def test_null_answer_is_not_found_without_retry(fast_settings):
    oracle = ScriptedOracle(_always(answer("null")))
    outcome = await MethodExtractor(oracle, fast_settings).extract("A short paper.")

    assert outcome == NotFound("no_result")
    assert len(oracle.prompts) == 1


async def test_long_paper_uses_located_section(fast_settings):
    paper = (
        "1. Introduction\n" + filler(9000) + "\n3. Method\nWe interviewed twelve designers.\n"
        "4. Results\n" + filler(2000)
    )
    oracle = ScriptedOracle(_always(answer("We interviewed twelve designers.")))

    outcome = await MethodExtractor(oracle, fast_settings).extract(paper)

    assert outcome == Found(text="We interviewed twelve designers.", provenance="section-direct")
    assert len(oracle.prompts) == 1
    assert "3. Method\nWe interviewed twelve designers." in oracle.prompts[0]
    assert "1. Introduction" not in oracle.prompts[0]


async def test_long_paper_without_section_is_chunked(fast_settings):
    paper = "\n\n".join(filler(3000, tag=f"P{i}") for i in range(4))

    def respond(prompt):
        if "P0 " in prompt:
            return answer("Part one.")
        if "P2 " in prompt:
            return answer("Part two.")
        return answer("null")

    oracle = ScriptedOracle(respond)
    outcome = await MethodExtractor(oracle, fast_settings).extract(paper)

    assert outcome == Found(text="Part one.\n\nPart two.", provenance="chunked-merged")
    assert len(oracle.prompts) == 2


async def test_chunks_without_results_are_not_found(fast_settings):
    paper = "\n\n".join(filler(3000, tag=f"P{i}") for i in range(4))
    oracle = ScriptedOracle(_always(answer("null")))

    outcome = await MethodExtractor(oracle, fast_settings).extract(paper)

    assert outcome == NotFound("no_result")


async def test_oversized_merge_is_summarized(fast_settings):
    paper = "\n\n".join(filler(3000, tag=f"P{i}") for i in range(4))

    def respond(prompt):
        if is_summary(prompt):
            return answer("Concise summary.")
        return answer("x" * 5000)

    oracle = ScriptedOracle(respond)
    outcome = await MethodExtractor(oracle, fast_settings).extract(paper)

    assert outcome == Found(text="Concise summary.", provenance="summarized-fallback")
    assert oracle.extraction_calls == 2
    assert oracle.summary_calls == 1


async def test_chunks_are_paced(monkeypatch):
    delays: list[float] = []

    async def fake_sleep(seconds, *args, **kwargs):
        delays.append(seconds)

    monkeypatch.setattr(asyncio, "sleep", fake_sleep)
    paper = "\n\n".join(filler(3000, tag=f"P{i}") for i in range(6))
    oracle = ScriptedOracle(_always(answer("Something.")))

    await MethodExtractor(oracle, MethodMateSettings()).extract(paper)

    # three chunks, a pause before the second and the third
    assert len(oracle.prompts) == 3
    assert delays == [1.0, 1.0]


async def test_unexpected_error_is_absorbed(fast_settings):
    oracle = ScriptedOracle(_always(RuntimeError("bug")))
    outcome = await MethodExtractor(oracle, fast_settings).extract("A short paper.")

    assert outcome == NotFound("error")


async def test_summarize_method_is_single_shot(fast_settings):
    oracle = ScriptedOracle(_always(OracleTransportError("down")))

    assert await MethodExtractor(oracle, fast_settings).summarize_method("text") is None
    assert len(oracle.prompts) == 1


def test_ensure_document_rejects_blank_and_non_text():
    assert ensure_document("x") == "x"
    with pytest.raises(MalformedInputError):
        ensure_document("  \n")
    with pytest.raises(MalformedInputError, match="must be str"):
        ensure_document(b"bytes")

from __future__ import annotations

import pytest

from methodmate.extract.sections import keyword_hits, locate_method_section
from methodmate.extract.types import Section

from .helpers import filler

PAPER = (
    "1. Introduction\n"
    "Design tools shape creative practice.\n"
    "3. Method\n"
    "We used X.\n"
    "4. Results\n"
    "Results follow."
)


def test_numbered_section_spans_to_next_heading():
    section = locate_method_section(PAPER)

    assert section is not None
    assert section.text.startswith("3. Method")
    assert section.text.rstrip() == "3. Method\nWe used X."
    assert PAPER[section.end_offset:].startswith("4. Results")
    assert section.matched_title == "3. Method"
    assert section.source_length == len(PAPER)


def test_roman_numeral_heading():
    text = "I. Introduction\nSome context.\nIII. Methodology\nWe ran a study.\nIV. Discussion\nDone."
    section = locate_method_section(text)

    assert section is not None
    assert section.text.startswith("III. Methodology")
    assert "Discussion" not in section.text


def test_earliest_title_wins():
    text = "2. Study Design\nTwo phases.\n3. Data Collection\nLogs.\n4. Findings\n"
    section = locate_method_section(text)

    assert section is not None
    assert section.matched_title == "2. Study Design"
    assert section.text == "2. Study Design\nTwo phases.\n"


def test_chinese_title():
    text = "一、引言\n背景介绍。\n研究方法\n我们进行了访谈。\n"
    section = locate_method_section(text)

    assert section is not None
    assert section.text.startswith("研究方法")


def test_missing_end_heading_caps_section():
    text = "3. Method\n" + filler(500)
    section = locate_method_section(text, fallback_chars=100)

    assert section is not None
    assert section.end_offset == len("3. Method") + 100


def test_cap_never_exceeds_document():
    text = "3. Method\nshort."
    section = locate_method_section(text)

    assert section is not None
    assert section.end_offset == len(text)


def test_keyword_paragraph_fallback():
    dense = "Each participant completed a questionnaire and an interview; the sample was small."
    sparse = "The weather was pleasant throughout the year."
    text = "\n\n".join([sparse, dense, sparse, dense + " Again."])

    section = locate_method_section(text)

    assert section is not None
    assert section.matched_title is None
    assert section.text == dense + "\n\n" + dense + " Again."
    assert text[section.start_offset:].startswith(dense)


def test_returns_none_without_title_or_dense_paragraph():
    text = "\n\n".join([filler(200), filler(300)])
    assert locate_method_section(text) is None


def test_keyword_hits_counts_distinct_keywords():
    assert keyword_hits("survey survey survey") == 1
    assert keyword_hits("A survey with each participant and an interview") == 3


def test_section_range_invariant():
    with pytest.raises(ValueError):
        Section(start_offset=5, end_offset=5, matched_title=None, source_length=10, text="")


def test_plural_methods_heading_is_not_a_title():
    text = "1. Introduction\nBackground.\n\n2. Methods\nWe talked to people.\n\n3. Results\nAll good."
    assert locate_method_section(text) is None


def test_plural_methods_heading_falls_back_to_paragraph_scoring():
    dense = "2. Methods\nWe ran a survey and an interview with each participant."
    text = f"1. Introduction\nBackground.\n\n{dense}\n\n3. Results\nAll good."
    section = locate_method_section(text)

    assert section is not None
    assert section.matched_title is None
    assert section.text == dense

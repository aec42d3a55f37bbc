from __future__ import annotations

import logging
import re

from methodmate.extract.types import Section
from methodmate.util_text import PARAGRAPH_SEPARATOR

logger = logging.getLogger(__name__)

# Ordered; on equal offsets the earlier title wins.
# Known gap: titles match as whole words, so a plural heading such as
# "2. Methods" is not recognised and the paragraph scorer takes over.
METHOD_TITLES: tuple[str, ...] = (
    "method",
    "methodology",
    "research design",
    "experimental design",
    "research methodology",
    "data collection",
    "procedure",
    "experimental setup",
    "research approach",
    "study design",
    "research procedure",
    "materials and methods",
    "方法",
    "研究方法",
    "实验方法",
    "实验设计",
    "研究设计",
    "数据收集",
    "实验程序",
)

METHOD_KEYWORDS: tuple[str, ...] = (
    "participant",
    "procedure",
    "measure",
    "analysis",
    "collect data",
    "sample",
    "experiment",
    "survey",
    "interview",
    "questionnaire",
    "observation",
    "statistical analysis",
    "research design",
    "study design",
    "method",
    "参与者",
    "程序",
    "测量",
    "分析",
    "收集数据",
    "样本",
    "实验",
    "调查",
    "访谈",
    "问卷",
    "观察",
    "统计分析",
    "研究设计",
    "研究方法",
)

MIN_KEYWORD_HITS = 3
SECTION_FALLBACK_CHARS = 10000

_PARAGRAPH_BREAK_RE = re.compile(r"\n\s*\n")

# Line-leading headings only, matched against the original casing.
_NEXT_SECTION_RE = re.compile(
    r"^[ \t]*(?:\d+\.[ \t]*|[IVX]+\.[ \t]+|Chapter[ \t]+\d+[ \t]*[:.]?[ \t]*|\d+[ \t]*:[ \t]*)[A-Z]",
    re.MULTILINE,
)


def _title_patterns(title: str) -> list[re.Pattern[str]]:
    t = re.escape(title)
    return [
        re.compile(rf"\b\d+\.?\s+{t}\b", re.IGNORECASE),
        re.compile(rf"\b{t}\b", re.IGNORECASE),
        re.compile(rf"\b[ivxlcdm]+\.?\s+{t}\b", re.IGNORECASE),
    ]


_TITLE_PATTERNS: list[re.Pattern[str]] = [p for t in METHOD_TITLES for p in _title_patterns(t)]


def _find_title(text: str) -> re.Match[str] | None:
    best: re.Match[str] | None = None
    for pattern in _TITLE_PATTERNS:
        m = pattern.search(text)
        if m and (best is None or m.start() < best.start()):
            best = m
    return best


def _section_end(text: str, title_end: int, fallback_chars: int) -> int:
    nxt = _NEXT_SECTION_RE.search(text, title_end)
    if nxt:
        return nxt.start()
    return min(title_end + fallback_chars, len(text))


def keyword_hits(paragraph: str, keywords: tuple[str, ...] = METHOD_KEYWORDS) -> int:
    """Number of distinct method keywords occurring in ``paragraph``."""
    lowered = paragraph.lower()
    return sum(1 for kw in keywords if kw in lowered)


def _scored_paragraphs(text: str, min_hits: int) -> Section | None:
    spans: list[tuple[int, int]] = []
    start = 0
    for brk in _PARAGRAPH_BREAK_RE.finditer(text):
        spans.append((start, brk.start()))
        start = brk.end()
    spans.append((start, len(text)))

    picked = [
        (s, e)
        for s, e in spans
        if text[s:e].strip() and keyword_hits(text[s:e]) >= min_hits
    ]
    if not picked:
        return None

    logger.debug("found %d keyword-dense paragraphs", len(picked))
    return Section(
        start_offset=picked[0][0],
        end_offset=picked[-1][1],
        matched_title=None,
        source_length=len(text),
        text=PARAGRAPH_SEPARATOR.join(text[s:e] for s, e in picked),
    )


def locate_method_section(
    text: str,
    *,
    fallback_chars: int = SECTION_FALLBACK_CHARS,
    min_hits: int = MIN_KEYWORD_HITS,
) -> Section | None:
    """Find the part of a paper most likely to describe its methodology.

    Titled sections are tried first ("3. Method", "Method", "III. Method");
    the earliest title occurrence wins. The section runs until the next
    line-leading heading or ``fallback_chars`` past the title. Without any
    title, paragraphs mentioning at least ``min_hits`` distinct method
    keywords are stitched together instead.
    """
    if not text:
        return None

    title = _find_title(text)
    if title is not None:
        end = _section_end(text, title.end(), fallback_chars)
        logger.debug("method title %r at %d, section ends at %d", title.group(0), title.start(), end)
        return Section(
            start_offset=title.start(),
            end_offset=end,
            matched_title=title.group(0),
            source_length=len(text),
            text=text[title.start():end],
        )

    return _scored_paragraphs(text, min_hits)

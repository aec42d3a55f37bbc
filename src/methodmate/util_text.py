from __future__ import annotations

import re
import unicodedata

_WHITESPACE_RE = re.compile(r"\s+")
_PARAGRAPH_BREAK_RE = re.compile(r"\n\s*\n")

PARAGRAPH_SEPARATOR = "\n\n"


def normalize_text(text: str) -> str:
    """Collapse whitespace and apply NFKC; used for matching, never for output."""
    if not text:
        return ""
    text = unicodedata.normalize("NFKC", text)
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()


def split_paragraphs(text: str) -> list[str]:
    """Split on blank lines, dropping whitespace-only paragraphs."""
    if not text:
        return []
    return [p for p in _PARAGRAPH_BREAK_RE.split(text) if p.strip()]


def preview(text: str, limit: int = 50) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."

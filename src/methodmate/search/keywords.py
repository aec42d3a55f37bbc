from __future__ import annotations

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_QUERY = "research methodology quantitative analysis experimental design"

# Joiners that never start a phrase of their own.
STOPWORDS = frozenset({"and", "or", "the", "in", "on", "at", "to", "of", "for", "with"})

_QUOTED_TOKEN_RE = re.compile(r"\"([^\"]+)\"|'([^']+)'|([^\s,]+)")
_PHRASE_END = (",", ".")

_JSON_FENCE_RE = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)
_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_KEYWORD_LINE_RES = (
    re.compile(r"关键词[:：]\s*([^\n]+)"),
    re.compile(r"keywords[:：]\s*([^\n]+)", re.IGNORECASE),
    re.compile(r"key\s*words[:：]\s*([^\n]+)", re.IGNORECASE),
)
_NUMBERED_ITEM_RE = re.compile(r"\d+\.\s*([^\n,]+)(?:,|\n|$)")
_PUNCT_RE = re.compile(r"[^\w\s]")


def _quoted_phrases(raw: str) -> list[list[str]]:
    phrases = []
    for m in _QUOTED_TOKEN_RE.finditer(raw):
        token = next(g for g in m.groups() if g is not None).strip().strip("\"'")
        if token:
            phrases.append(token.split())
    return phrases


def _grouped_phrases(raw: str) -> list[list[str]]:
    phrases: list[list[str]] = []
    current: list[str] = []

    for word in raw.split():
        if len(word) <= 2 or word.lower() in STOPWORDS:
            # joiners extend an open phrase and are dropped otherwise
            if current:
                current.append(word)
        elif not current:
            current = [word]
        elif current[-1].endswith(_PHRASE_END):
            phrases.append(current)
            current = [word]
        else:
            current.append(word)

    if current:
        phrases.append(current)

    cleaned = []
    for phrase in phrases:
        last = phrase[-1].rstrip(",.")
        phrase = phrase[:-1] + ([last] if last else [])
        if phrase:
            cleaned.append(phrase)
    return cleaned


def split_phrases(raw: str) -> list[list[str]]:
    """Break a keyword string into phrases, each an ordered list of words."""
    if not raw or not raw.strip():
        return []
    if "," in raw:
        return [p.split() for p in raw.split(",") if p.strip()]
    if '"' in raw or "'" in raw:
        return _quoted_phrases(raw)
    return _grouped_phrases(raw)


def format_keyword_query(raw: str) -> str:
    """Turn oracle keywords into a comma-delimited, phrase-preserving query.

    Search backends read commas as phrase separators and spaces as words
    within one phrase, so multi-word terms must not be split on spaces.
    Input that already contains commas is returned unchanged.
    """
    if not raw:
        return ""
    if "," in raw:
        return raw
    return ",".join(" ".join(phrase) for phrase in split_phrases(raw))


def _keywords_from_json(reply: str) -> str | None:
    m = _JSON_FENCE_RE.search(reply) or _JSON_OBJECT_RE.search(reply)
    if not m:
        return None
    blob = m.group(1) if m.groups() else m.group(0)
    try:
        data = json.loads(blob)
    except json.JSONDecodeError as e:
        logger.debug("keyword JSON did not parse: %s", e)
        return None
    if not isinstance(data, dict) or not isinstance(data.get("keywords"), list):
        return None
    keywords = [kw.strip() for kw in data["keywords"] if isinstance(kw, str) and kw.strip()]
    return ",".join(keywords) or None


def parse_keywords(reply: Any) -> str:
    """Recover a keyword string from a free-form oracle reply.

    Tried in order: a JSON object with a ``keywords`` list, a "keywords:"
    line, a numbered list, then the first plain English words. Falls back to
    ``DEFAULT_QUERY``.
    """
    if isinstance(reply, dict):
        reply = reply["content"] if isinstance(reply.get("content"), str) else json.dumps(reply)
    if not isinstance(reply, str) or not reply.strip():
        return DEFAULT_QUERY

    from_json = _keywords_from_json(reply)
    if from_json:
        return from_json

    for pattern in _KEYWORD_LINE_RES:
        m = pattern.search(reply)
        if m and m.group(1).strip():
            return m.group(1).strip()

    items = [i.strip() for i in _NUMBERED_ITEM_RE.findall(reply) if i.strip()]
    if items:
        return ",".join(items)

    words = [
        w
        for w in _PUNCT_RE.sub(" ", reply).split()
        if len(w) > 3 and w.isascii() and w.isalpha()
    ][:10]
    if words:
        return " ".join(words)

    logger.info("no keywords recognised in oracle reply; using default query")
    return DEFAULT_QUERY

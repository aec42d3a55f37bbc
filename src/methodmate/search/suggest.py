from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Literal

from pydantic import BaseModel

from methodmate.errors import OracleError
from methodmate.oracle.client import Oracle, new_conversation_id
from methodmate.search.keywords import DEFAULT_QUERY, format_keyword_query, parse_keywords

logger = logging.getLogger(__name__)

KEYWORD_PROMPT = """Please analyze the following text and extract 2-3 key academic search terms.
Focus on specific technical terms, methodologies, and core concepts.

Please respond in the following JSON format:
```json
{{
  "keywords": ["keyword1", "keyword2", "keyword3"]
}}
```

Text to analyze: "{text}"
"""

GENERAL_REQUEST = (
    "Please provide some general academic research method keywords, especially in quantitative "
    "research methods, experimental design, data analysis, and related fields."
)

_PUNCT_RE = re.compile(r"[^\w\s]")


class ChatTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str
    is_error: bool = False


def _usable(history: Sequence[ChatTurn]) -> list[ChatTurn]:
    return [t for t in history if t.role == "user" or not t.is_error]


def build_keyword_prompt(history: Sequence[ChatTurn]) -> str:
    turns = _usable(history)
    last_user = next((t.content for t in reversed(turns) if t.role == "user"), "")
    prompt = KEYWORD_PROMPT.format(text=last_user)

    if len(turns) > 1:
        lines = ["", "Conversation history:"]
        for i, turn in enumerate(turns[-8:], start=1):
            lines.append(f"{turn.role.capitalize()} {i}: {turn.content}")
        lines.append("")
        lines.append("Based on the above conversation, extract the most relevant academic search keywords.")
        return prompt + "\n".join(lines)
    if not last_user:
        return prompt + "\n" + GENERAL_REQUEST
    return prompt


def backup_keywords(history: Sequence[ChatTurn]) -> str:
    """Crude keywords from the last few turns, for when the oracle is down."""
    text = " ".join(t.content for t in _usable(history)[-4:])
    words = [w for w in _PUNCT_RE.sub(" ", text).split() if len(w) > 2][:10]
    return " ".join(words)


class KeywordSuggester:
    """Turns a conversation into a phrase-preserving paper search query."""

    def __init__(self, oracle: Oracle):
        self._oracle = oracle

    async def suggest(self, history: Sequence[ChatTurn], session_id: str | None = None) -> str:
        turns = _usable(history)
        query = DEFAULT_QUERY
        try:
            reply = await self._oracle.ask(
                build_keyword_prompt(turns),
                f"{session_id}_keywords" if session_id else new_conversation_id("keywords"),
            )
        except OracleError as e:
            logger.warning("keyword extraction via oracle failed: %s", e)
            if len(turns) > 1:
                query = backup_keywords(turns) or DEFAULT_QUERY
        else:
            if reply.refused or not reply.text.strip():
                logger.info("oracle gave no keywords; using default query")
            else:
                query = parse_keywords(reply.text)

        formatted = format_keyword_query(query)
        logger.info("search query: %r", formatted)
        return formatted

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

ResponseShape = Literal["v2", "v3", "direct", "empty"]

REFUSAL_MARKERS: tuple[str, ...] = ("i'm sorry", "cannot assist", "can't assist")


@dataclass(frozen=True)
class OracleAnswer:
    """Chat payload reduced to the text the bot answered with."""

    shape: ResponseShape
    text: str


def _first_assistant(messages: list[Any], *, answers_only: bool) -> str:
    for m in messages:
        if not isinstance(m, dict) or m.get("role") != "assistant":
            continue
        if answers_only and m.get("type") != "answer":
            continue
        content = m.get("content")
        if isinstance(content, str):
            return content
    return ""


def normalize_response(payload: Any) -> OracleAnswer:
    """Map any of the chat API payload shapes onto one ``OracleAnswer``.

    - v2: ``{"messages": [...]}``; the first assistant ``answer`` message,
      else the first assistant message of any type.
    - v3: ``{"data": {"messages": [...]}}``; the first assistant message.
    - direct: ``{"answer": "..."}``.
    """
    if not isinstance(payload, dict):
        return OracleAnswer(shape="empty", text="")

    messages = payload.get("messages")
    if isinstance(messages, list):
        text = _first_assistant(messages, answers_only=True) or _first_assistant(
            messages, answers_only=False
        )
        return OracleAnswer(shape="v2", text=text)

    data = payload.get("data")
    if isinstance(data, dict) and isinstance(data.get("messages"), list):
        return OracleAnswer(shape="v3", text=_first_assistant(data["messages"], answers_only=False))

    answer = payload.get("answer")
    if isinstance(answer, str):
        return OracleAnswer(shape="direct", text=answer)

    return OracleAnswer(shape="empty", text="")


def is_refusal(text: str) -> bool:
    lowered = (text or "").lower()
    return any(marker in lowered for marker in REFUSAL_MARKERS)

from __future__ import annotations

from collections.abc import Callable

from methodmate.oracle.client import OracleReply

SUMMARY_MARKER = "Please provide a concise summary of the methodology."
EXTRACT_MARKER = "You are a research methodology expert."

FILLER_SENTENCE = "Lorem ipsum dolor sit amet, consectetur adipiscing elit. "


def filler(chars: int, tag: str = "") -> str:
    """Keyword-free prose of roughly ``chars`` characters."""
    body = (FILLER_SENTENCE * (chars // len(FILLER_SENTENCE) + 1))[:chars]
    return f"{tag} {body}" if tag else body


def is_summary(prompt: str) -> bool:
    return SUMMARY_MARKER in prompt


def is_extraction(prompt: str) -> bool:
    return EXTRACT_MARKER in prompt


class ScriptedOracle:
    """Oracle double: ``responder(prompt)`` returns a reply or an exception."""

    def __init__(self, responder: Callable[[str], OracleReply | Exception]):
        self._responder = responder
        self.prompts: list[str] = []
        self.conversation_ids: list[str | None] = []

    async def ask(self, prompt: str, conversation_id: str | None = None) -> OracleReply:
        self.prompts.append(prompt)
        self.conversation_ids.append(conversation_id)
        result = self._responder(prompt)
        if isinstance(result, Exception):
            raise result
        return result

    @property
    def extraction_calls(self) -> int:
        return sum(1 for p in self.prompts if is_extraction(p))

    @property
    def summary_calls(self) -> int:
        return sum(1 for p in self.prompts if is_summary(p))


def answer(text: str) -> OracleReply:
    return OracleReply(text=text)


def refusal() -> OracleReply:
    return OracleReply(text="I'm sorry, but I cannot assist with that request.", refused=True)

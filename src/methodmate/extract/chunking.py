from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from methodmate.util_text import PARAGRAPH_SEPARATOR, split_paragraphs

logger = logging.getLogger(__name__)

MAX_CHUNK_LENGTH = 8000


def _pack_paragraphs(paragraphs: Iterable[str], max_len: int) -> Iterator[str]:
    sep = len(PARAGRAPH_SEPARATOR)
    current: list[str] = []
    current_len = 0

    for para in paragraphs:
        # the separator is counted even for the first paragraph of a chunk
        if current_len + len(para) + sep <= max_len:
            current.append(para)
            current_len += len(para) + (sep if len(current) > 1 else 0)
            continue

        if current:
            yield PARAGRAPH_SEPARATOR.join(current)
        if len(para) > max_len:
            # known limit: a single paragraph is never split further
            logger.warning("paragraph of %d chars exceeds chunk bound %d", len(para), max_len)
        current = [para]
        current_len = len(para)

    if current:
        yield PARAGRAPH_SEPARATOR.join(current)


@dataclass(frozen=True)
class ChunkSequence:
    """Paragraph-aligned chunks of ``text``, each at most ``max_len`` chars.

    Iteration is lazy and restartable. A paragraph longer than ``max_len``
    on its own is passed through as one oversized chunk.
    """

    text: str
    max_len: int = MAX_CHUNK_LENGTH

    def __iter__(self) -> Iterator[str]:
        return _pack_paragraphs(split_paragraphs(self.text), self.max_len)


def split_into_chunks(text: str, max_len: int = MAX_CHUNK_LENGTH) -> ChunkSequence:
    if max_len <= 0:
        raise ValueError("max_len must be positive")
    return ChunkSequence(text=text or "", max_len=max_len)

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Union

Provenance = Literal[
    "direct",
    "section-direct",
    "chunked-merged",
    "summarized-fallback",
]


@dataclass(frozen=True)
class Section:
    """A located methodology section.

    ``start_offset``/``end_offset`` form a half-open range into the source
    text. For titled sections ``text`` is exactly that slice; for the
    keyword-paragraph fallback it is the matching paragraphs joined by a blank
    line and the range spans the first to the last of them.
    """

    start_offset: int
    end_offset: int
    matched_title: str | None
    source_length: int
    text: str

    def __post_init__(self) -> None:
        if not 0 <= self.start_offset < self.end_offset <= self.source_length:
            raise ValueError(
                f"invalid section range {self.start_offset}:{self.end_offset} "
                f"for source of length {self.source_length}"
            )

    def __len__(self) -> int:
        return len(self.text)


@dataclass(frozen=True)
class Found:
    text: str
    provenance: Provenance


@dataclass(frozen=True)
class NotFound:
    reason: str = "no_result"


ExtractionOutcome = Union[Found, NotFound]

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from methodmate.extract.types import Provenance


class Identifier(BaseModel):
    """Canonical identifiers. Prefer DOI when available."""

    doi: str | None = None
    s2_paper_id: str | None = None
    core_id: str | None = None


class Author(BaseModel):
    name: str
    author_id: str | None = None


class PaperRecord(BaseModel):
    ids: Identifier = Field(default_factory=Identifier)
    title: str
    abstract: str | None = None
    authors: list[Author] = Field(default_factory=list)
    venue: str | None = None
    year: int | None = None
    citation_count: int | None = None

    # URLs
    landing_page_url: str | None = None
    pdf_url: str | None = None

    # Raw provider payloads for audit/debug (optional)
    source_payloads: dict[str, Any] = Field(default_factory=dict)


class EnrichedPaper(BaseModel):
    """A candidate paper plus whatever could be derived from its full text."""

    paper: PaperRecord
    full_text: str | None = None
    research_method: str | None = None
    method_provenance: Provenance | None = None
    is_top_venue: bool = False
    canonical_venue: str | None = None
    error: str | None = None

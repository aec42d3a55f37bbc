from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from methodmate.util_text import normalize_text
from methodmate.venues.catalog import ABBREVIATIONS, TOP_VENUES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VenueMatch:
    matched: bool
    canonical_name: str | None = None


NO_MATCH = VenueMatch(matched=False)


def _exact(venue: str, entry: str) -> bool:
    return venue == entry


def _abbreviation(venue: str, entry: str) -> bool:
    full = ABBREVIATIONS.get(entry)
    if full is None:
        return False
    return venue == entry or full in venue


def _standalone_phrase(venue: str, entry: str) -> bool:
    # Space-delimited only: "Design Studies in Earth Science" still matches
    # "Design Studies". Tightening this changes recall for real proceedings
    # names, so it stays as is.
    return (
        venue == entry
        or f" {entry} " in venue
        or venue.startswith(f"{entry} ")
        or venue.endswith(f" {entry}")
    )


_RULES = (_exact, _abbreviation, _standalone_phrase)


def classify_venue(venue: str | None, canonical: Sequence[str] = TOP_VENUES) -> VenueMatch:
    """Match a free-text venue against the canonical top-venue list.

    Rules run in order of precision (exact, known abbreviations, standalone
    phrase); within a rule the list order decides. Case-insensitive.
    """
    v = normalize_text(venue or "").lower()
    if not v:
        return NO_MATCH

    lowered = [(entry, entry.lower()) for entry in canonical]
    for rule in _RULES:
        for entry, entry_lower in lowered:
            if rule(v, entry_lower):
                logger.debug("venue %r matched %r via %s", venue, entry, rule.__name__)
                return VenueMatch(matched=True, canonical_name=entry)
    return NO_MATCH


def is_top_venue(venue: str | None, canonical: Sequence[str] = TOP_VENUES) -> bool:
    return classify_venue(venue, canonical).matched

from __future__ import annotations

import re
from typing import Optional, Tuple

UNKNOWN_YEAR = "unknown"

# Captions: a year bounded by string edges or by . ( ) _ - and whitespace.
RELEASE_YEAR_PATTERN = re.compile(r"(?:^|[.\s()_-])(19\d{2}|20\d{2})(?=$|[.\s()_-])")
# Queries and external titles: plain word boundaries.
YEAR_PATTERN = re.compile(r"\b(?:19|20)\d{2}\b")
WHITESPACE_RE = re.compile(r"\s+")


def extract_release_year(caption: str) -> Optional[re.Match]:
    """Return the first separator-bounded year match in a release caption."""
    if not caption:
        return None
    return RELEASE_YEAR_PATTERN.search(caption)


def extract_query_year(query: str) -> Tuple[Optional[str], str]:
    """Split a search query into ``(year, text)``.

    Only the first year-like token is taken; the remaining text has its
    whitespace collapsed so ``"the 1999 matrix"`` compares as ``"the matrix"``.
    """
    text = (query or "").strip()
    match = YEAR_PATTERN.search(text)
    if not match:
        return None, text
    year = match.group(0)
    text = text[: match.start()] + text[match.end():]
    return year, WHITESPACE_RE.sub(" ", text).strip()


def _coerce_year(value: object) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, int):
        candidate = value
    else:
        text = str(value).strip()
        if not text or text == UNKNOWN_YEAR:
            return None
        if len(text) != 4 or not text.isdigit():
            match = YEAR_PATTERN.search(text)
            if match is None:
                return None
            text = match.group(0)
        candidate = int(text)
    if 1900 <= candidate <= 2099:
        return candidate
    return None


def year_from_date(raw: Optional[str]) -> Optional[str]:
    """Return the year part of an ISO date such as ``2016-07-15``."""
    coerced = _coerce_year((raw or "")[:4])
    return str(coerced) if coerced is not None else None


def is_year_match(
    target_year: str | int | None,
    candidate_year: str | int | None,
    *,
    tolerance: int = 0,
) -> bool:
    """Check whether a candidate year agrees with the requested year.

    An unknown target accepts everything; an unknown candidate never matches a
    known target.
    """
    normalized_target = _coerce_year(target_year)
    if normalized_target is None:
        return True
    normalized_candidate = _coerce_year(candidate_year)
    if normalized_candidate is None:
        return False
    return abs(normalized_candidate - normalized_target) <= tolerance

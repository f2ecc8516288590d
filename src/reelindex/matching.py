"""Fuzzy title matching for local catalog search and external metadata hydration."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from rapidfuzz.distance import Levenshtein

from .episodes import extract_season, is_episodic
from .normalize import DEFAULT_STRATEGY, NormalizeStrategy, drop_leading_article, normalize_title
from .year_filter import UNKNOWN_YEAR, extract_query_year, is_year_match, year_from_date

log = logging.getLogger("reelindex.matching")

# Score tiers, lower is better.
EXACT_SCORE = 0
PREFIX_SCORE = 1
WORD_SCORE = 2
FUZZY_OFFSET = 10
EXCLUDED = 999

# Edit-distance acceptance: queries longer than MIN_FUZZY_QUERY_LENGTH chars
# match titles within MAX_EDIT_DISTANCE - 1 edits.
MAX_EDIT_DISTANCE = 3
MIN_FUZZY_QUERY_LENGTH = 3

EXTERNAL_YEAR_TOLERANCE = 1
PREFERRED_QUALITIES = ("720p", "1080p")

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def edit_distance(a: str, b: str) -> int:
    """Case-insensitive Levenshtein distance (unit cost insert/delete/substitute)."""
    return Levenshtein.distance((a or "").lower(), (b or "").lower())


def _field(entry: Any, name: str, default: Any = None) -> Any:
    if isinstance(entry, Mapping):
        return entry.get(name, default)
    return getattr(entry, name, default)


def _contains_word(title: str, query: str) -> bool:
    return re.search(r"(?:^|\s)" + re.escape(query) + r"(?:\s|$)", title) is not None


def score_title(title: str, year: Optional[str], text_query: str, query_year: Optional[str] = None) -> int:
    """Score one catalog title against an already year-stripped query."""
    if query_year and year and year != UNKNOWN_YEAR and year != query_year:
        return EXCLUDED

    title = (title or "").lower()
    query = (text_query or "").lower()

    if title == query:
        return EXACT_SCORE
    if title.startswith(query):
        return PREFIX_SCORE
    if _contains_word(title, query):
        return WORD_SCORE
    if len(query) > MIN_FUZZY_QUERY_LENGTH:
        distance = edit_distance(query, title)
        if distance < MAX_EDIT_DISTANCE:
            return FUZZY_OFFSET + distance
    return EXCLUDED


@dataclass
class ScoredEntry:
    entry: Any
    score: int


def rank_catalog(entries: Iterable[Any], query: str) -> List[ScoredEntry]:
    """Score every entry for ``query`` and return the non-excluded ones, best first.

    Ties keep catalog order.
    """
    query_year, text_query = extract_query_year((query or "").lower())
    ranked = []
    for entry in entries:
        score = score_title(_field(entry, "title", ""), _field(entry, "year"), text_query, query_year)
        if score < EXCLUDED:
            ranked.append(ScoredEntry(entry, score))
    ranked.sort(key=lambda item: item.score)
    return ranked


def search_catalog(entries: Sequence[Any], query: str, limit: Optional[int] = None) -> List[Any]:
    """Local catalog search.

    A blank query returns the most recently indexed entries instead.
    """
    if not (query or "").strip():
        latest = sorted(entries, key=lambda entry: _field(entry, "indexed_at") or "", reverse=True)
        return latest[:limit] if limit else latest
    matches = [item.entry for item in rank_catalog(entries, query)]
    return matches[:limit] if limit else matches


# ---------------------------------------------------------------------
# External match selection (hydration)
# ---------------------------------------------------------------------


@dataclass
class ExternalMatch:
    candidate: Dict[str, Any]
    fallback: bool = False
    reasons: List[str] = field(default_factory=list)


def comparison_key(title: str, strategy: NormalizeStrategy | str = DEFAULT_STRATEGY, *, drop_article: bool = True) -> str:
    key = normalize_title(title, strategy)
    key = " ".join(_NON_ALNUM_RE.sub(" ", key).split())
    return drop_leading_article(key) if drop_article else key


def _candidate_title(candidate: Mapping[str, Any]) -> str:
    return candidate.get("title") or candidate.get("name") or candidate.get("original_title") or ""


def candidate_year(candidate: Mapping[str, Any]) -> Optional[str]:
    return year_from_date(candidate.get("release_date") or candidate.get("first_air_date"))


def titles_match(local_key: str, candidate_key: str) -> bool:
    if not local_key or not candidate_key:
        return False
    return local_key == candidate_key or local_key in candidate_key or candidate_key in local_key


def select_external_match(
    title: str,
    year: Optional[str],
    candidates: Sequence[Mapping[str, Any]],
    *,
    raw_title: Optional[str] = None,
    strategy: NormalizeStrategy | str = DEFAULT_STRATEGY,
    drop_article: bool = True,
) -> Optional[ExternalMatch]:
    """Pick the external record that best describes a local entry.

    Episodic entries (judged on ``raw_title`` when given, else ``title``) never
    match movie-typed candidates and prefer TV-typed ones. Other entries need
    a release year within one year of the local year, unless the local year is
    unknown. When nothing passes, the first TV-typed candidate (episodic) or
    the first candidate is returned with ``fallback=True``; only an empty
    candidate list yields ``None``.
    """
    if not candidates:
        return None

    episodic = is_episodic(raw_title or title)
    local_key = comparison_key(title, strategy, drop_article=drop_article)

    matched = []
    for candidate in candidates:
        media_type = candidate.get("media_type")
        if episodic and media_type == "movie":
            continue
        if not titles_match(local_key, comparison_key(_candidate_title(candidate), strategy, drop_article=drop_article)):
            continue
        if not episodic and not is_year_match(year, candidate_year(candidate), tolerance=EXTERNAL_YEAR_TOLERANCE):
            continue
        matched.append(candidate)

    if matched:
        if episodic:
            tv = [c for c in matched if c.get("media_type") == "tv"]
            return ExternalMatch(dict((tv or matched)[0]), reasons=["title", "tv"])
        return ExternalMatch(dict(matched[0]), reasons=["title", "year"])

    fallback = candidates[0]
    if episodic:
        fallback = next((c for c in candidates if c.get("media_type") == "tv"), candidates[0])
    log.debug("No external candidate passed filters for %r; falling back to id=%s", title, fallback.get("id"))
    return ExternalMatch(dict(fallback), fallback=True, reasons=["fallback"])


# ---------------------------------------------------------------------
# Download lookup
# ---------------------------------------------------------------------


def _alnum(text: str) -> str:
    return _NON_ALNUM_RE.sub("", (text or "").lower())


def find_downloads(entries: Iterable[Any], title: str) -> List[Dict[str, Any]]:
    """Entries filed under a display title, each tagged with its season."""
    wanted = _alnum(title)
    if not wanted:
        return []
    downloads = []
    for entry in entries:
        have = _alnum(_field(entry, "title", ""))
        if not have or not (wanted in have or have in wanted):
            continue
        record = entry.to_dict() if hasattr(entry, "to_dict") else dict(entry)
        record["season"] = extract_season(_field(entry, "title", ""))
        downloads.append(record)
    return downloads


def preferred_quality(qualities: Iterable[str]) -> Optional[str]:
    available = [q.lower() for q in qualities if q]
    for quality in PREFERRED_QUALITIES:
        if quality in available:
            return quality
    return available[0] if available else None

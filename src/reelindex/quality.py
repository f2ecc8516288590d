"""Resolution tag resolution for release captions.

Rules are evaluated in table order and the first hit wins:

1. an explicit resolution tag in the text,
2. a source keyword (DVD, WEB, BluRay families),
3. the file size, when one is known.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

UNKNOWN_QUALITY = "unknown"
QUALITY_TAGS = ("480p", "576p", "720p", "1080p", "2160p", "2k", "4k")

GIB = 1024 ** 3

EXPLICIT_QUALITY_RE = re.compile(r"(480p|576p|720p|1080p|2160p|2k|4k)", re.IGNORECASE)

# (pattern, tag) pairs, tested in order.
SOURCE_RULES: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r"(dvdrip|dvd|vcd)", re.IGNORECASE), "480p"),
    (re.compile(r"(web-dl|webdl|webrip|hdrip|hd-rip)", re.IGNORECASE), "720p"),
    (re.compile(r"(bluray|bdrip|brrip)", re.IGNORECASE), "1080p"),
)

# (predicate on size in GiB, tag) pairs, tested in order.
SIZE_RULES: Tuple[Tuple[Callable[[float], bool], str], ...] = (
    (lambda gib: gib > 2.5, "1080p"),
    (lambda gib: gib > 0.6, "720p"),
    (lambda gib: True, "480p"),
)


@dataclass(frozen=True)
class QualityResolution:
    quality: str
    # Literal text of an explicit tag, used to bound the title.
    matched_text: Optional[str] = None
    rule: str = "none"


def _explicit_rule(text: str, size_bytes: int) -> Optional[QualityResolution]:
    match = EXPLICIT_QUALITY_RE.search(text)
    if not match:
        return None
    return QualityResolution(match.group(0).lower(), match.group(0), "explicit")


def _source_rule(text: str, size_bytes: int) -> Optional[QualityResolution]:
    for pattern, tag in SOURCE_RULES:
        if pattern.search(text):
            return QualityResolution(tag, None, "source")
    return None


def _size_rule(text: str, size_bytes: int) -> Optional[QualityResolution]:
    if size_bytes <= 0:
        return None
    gib = size_bytes / GIB
    for predicate, tag in SIZE_RULES:
        if predicate(gib):
            return QualityResolution(tag, None, "size")
    return None


QUALITY_RULES: Tuple[Callable[[str, int], Optional[QualityResolution]], ...] = (
    _explicit_rule,
    _source_rule,
    _size_rule,
)


def resolve_quality(text: str, size_bytes: Optional[int] = 0) -> QualityResolution:
    """Resolve a quality tag, falling back to :data:`UNKNOWN_QUALITY`."""
    text = text or ""
    size = size_bytes or 0
    for rule in QUALITY_RULES:
        resolution = rule(text, size)
        if resolution is not None:
            return resolution
    return QualityResolution(UNKNOWN_QUALITY)

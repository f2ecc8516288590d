"""Search-key normalization for matching local titles against an external catalog.

Two strategies are available:

``strip``
    Remove years, season/episode markers, quality, scene/source tags and file
    extensions token by token; whatever else follows the series name (release
    group, ``web``, ``h264``...) survives.
``truncate``
    Cut the string at the first season/episode marker, then run the ``strip``
    passes over the remainder. This is the default: on scene names the text
    after the marker is release noise, and anything before it is still
    cleaned of quality and year tokens.

A marker at position 0 does not truncate (there would be nothing left).
"""

from __future__ import annotations

import enum
import re
from typing import Tuple

from .episodes import find_season_marker

# Token boundary that treats "_" and "." as separators, unlike \b.
_L = r"(?<![a-z0-9])"
_R = r"(?![a-z0-9])"

QUALITY_TOKENS = ("4k", "2160p", "1080p", "720p", "480p", "bluray", "web-dl", "webrip", "x264", "x265", "hevc", "aac", "ac3", "dts")
SCENE_TOKENS = ("internal", "proper", "repack", "remux", "hulu", "amzn", "nf", "netflix", "dsnp", "hbo", "max")
VIDEO_EXTENSIONS = ("mkv", "mp4", "avi", "mov", "flv", "wmv")

# Ordered removal passes; later passes see the output of earlier ones.
REMOVAL_PASSES: Tuple[re.Pattern, ...] = (
    re.compile(_L + r"(?:19|20)\d{2}" + _R),
    re.compile(_L + r"s\d+\s*e\d+" + _R),
    re.compile(_L + r"s\d+" + _R),
    re.compile(_L + r"\d+x\d+" + _R),
    re.compile(_L + r"season\s*\d+" + _R),
    re.compile(_L + r"episode\s*\d+" + _R),
    re.compile(_L + "(?:" + "|".join(re.escape(t) for t in QUALITY_TOKENS) + ")" + _R),
    re.compile(_L + "(?:" + "|".join(SCENE_TOKENS) + ")" + _R),
    re.compile(r"\.(?:" + "|".join(VIDEO_EXTENSIONS) + ")" + _R),
)

SEPARATOR_RE = re.compile(r"[.\-_]")
WHITESPACE_RE = re.compile(r"\s+")
LEADING_ARTICLE_RE = re.compile(r"^the\s+")


class NormalizeStrategy(str, enum.Enum):
    STRIP = "strip"
    TRUNCATE = "truncate"


DEFAULT_STRATEGY = NormalizeStrategy.TRUNCATE


def strip_tokens(title: str) -> str:
    cleaned = (title or "").lower()
    for pattern in REMOVAL_PASSES:
        cleaned = pattern.sub("", cleaned)
    cleaned = SEPARATOR_RE.sub(" ", cleaned)
    return WHITESPACE_RE.sub(" ", cleaned).strip()


def truncate_at_marker(title: str) -> str:
    text = title or ""
    match = find_season_marker(text)
    if match and match.start() > 0:
        return text[: match.start()]
    return text


def normalize_title(title: str, strategy: NormalizeStrategy | str = DEFAULT_STRATEGY) -> str:
    """Lower-cased search key for ``title``."""
    strategy = NormalizeStrategy(strategy)
    if strategy is NormalizeStrategy.TRUNCATE:
        return strip_tokens(truncate_at_marker(title))
    return strip_tokens(title)


def drop_leading_article(key: str) -> str:
    return LEADING_ARTICLE_RE.sub("", key)

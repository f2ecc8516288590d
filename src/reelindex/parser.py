"""Caption and filename parsing into structured release metadata."""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass
from typing import Dict, Optional, Protocol, Tuple

from .quality import resolve_quality
from .sizes import format_size
from .year_filter import UNKNOWN_YEAR, extract_release_year

log = logging.getLogger("reelindex.parser")

DEFAULT_LANGUAGE = "English"

CODEC_RE = re.compile(
    r"(x264|x265|hevc|h\.?264|h\.?265|av1|vp9|10bit|hdr|psa|pahe|yify|rarbg)",
    re.IGNORECASE,
)
TITLE_SEPARATOR_RE = re.compile(r"[.()_-]")
WHITESPACE_RE = re.compile(r"\s+")


class LanguageDetector(Protocol):
    def __call__(self, caption: str) -> str: ...


def default_language(caption: str) -> str:
    return DEFAULT_LANGUAGE


class KeywordLanguageDetector:
    """Best-effort audio language detection from release tags.

    Multi-audio tags win over single languages. Unknown captions fall back to
    ``default``.
    """

    KEYWORDS: Tuple[Tuple[str, str], ...] = (
        (r"dual[\s._-]?audio|multi[\s._-]?audio", "Multi"),
        (r"hindi", "Hindi"),
        (r"tamil", "Tamil"),
        (r"telugu", "Telugu"),
        (r"malayalam", "Malayalam"),
        (r"kannada", "Kannada"),
        (r"korean", "Korean"),
        (r"japanese", "Japanese"),
        (r"spanish|latino", "Spanish"),
        (r"french|truefrench", "French"),
        (r"english|\beng\b", "English"),
    )

    def __init__(self, default: str = DEFAULT_LANGUAGE) -> None:
        self.default = default
        self._rules = [(re.compile(pattern, re.IGNORECASE), name) for pattern, name in self.KEYWORDS]

    def __call__(self, caption: str) -> str:
        for pattern, name in self._rules:
            if pattern.search(caption):
                return name
        return self.default


@dataclass(frozen=True)
class ParsedRelease:
    title: str
    year: str
    quality: str
    codec: str
    size_label: str
    language: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def _bound_title(caption: str, year: str, quality_text: Optional[str]) -> str:
    if year != UNKNOWN_YEAR:
        return caption[: caption.find(year)]
    if quality_text:
        return caption[: caption.find(quality_text)]
    return caption


def clean_title(raw: str) -> str:
    """Turn separators into spaces and collapse whitespace."""
    return WHITESPACE_RE.sub(" ", TITLE_SEPARATOR_RE.sub(" ", raw)).strip()


def extract_codecs(caption: str) -> str:
    return " ".join(match.group(0) for match in CODEC_RE.finditer(caption)).upper()


def parse_caption(
    caption: Optional[str],
    size_bytes: Optional[int] = 0,
    language_detector: Optional[LanguageDetector] = None,
) -> ParsedRelease:
    """Parse a free-text caption (or filename) into a :class:`ParsedRelease`.

    Total over all strings: missing information becomes the field's sentinel
    rather than an error. Only a negative ``size_bytes`` is rejected.
    """
    caption = caption or ""
    size = size_bytes or 0
    if size < 0:
        raise ValueError(f"size_bytes must be non-negative, got {size}")

    quality = resolve_quality(caption, size)

    year_match = extract_release_year(caption)
    year = year_match.group(1) if year_match else UNKNOWN_YEAR

    raw_title = _bound_title(caption, year, quality.matched_text)
    detector = language_detector or default_language

    release = ParsedRelease(
        title=clean_title(raw_title),
        year=year,
        quality=quality.quality,
        codec=extract_codecs(caption),
        size_label=format_size(size),
        language=detector(caption),
    )
    log.debug("Parsed %r -> %s (quality via %s)", caption, release, quality.rule)
    return release

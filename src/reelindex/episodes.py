"""Season/episode marker detection for scene titles."""

from __future__ import annotations

import re
from typing import Optional

# Structural markers: S01, S01E02, Season 1, 1x02, Episode 3. Not anchored to
# either end of the string; the leading guard keeps audio tags such as
# "DTS5.1" from reading as a season.
_MARKERS = (
    r"(?<![a-z0-9])s\d{1,2}(?:e\d+)?"
    r"|season\s*\d+"
    r"|\d+x\d+"
    r"|episode\s*\d+"
)

SEASON_EPISODE_RE = re.compile(_MARKERS, re.IGNORECASE)
# Keywords are whole words with "_" and "." counting as separators.
TV_SIGNATURE_RE = re.compile(_MARKERS + r"|(?<![a-z0-9])(?:complete|ep)(?![a-z0-9])", re.IGNORECASE)

SEASON_RE = re.compile(r"(?:^|[_\s.\[(])(?:S|Season)\s*(\d{1,2})(?:[_\s.\])]|$|E)", re.IGNORECASE)


def find_season_marker(title: str) -> Optional[re.Match]:
    """First structural season/episode marker, ignoring bare keywords."""
    return SEASON_EPISODE_RE.search(title or "")


def is_episodic(title: str) -> bool:
    """True when the title carries a season/episode marker or a series keyword."""
    return TV_SIGNATURE_RE.search(title or "") is not None


def extract_season(title: str) -> Optional[int]:
    """Season number used to group downloads, or ``None`` for movies."""
    match = SEASON_RE.search(title or "")
    if not match:
        return None
    return int(match.group(1))

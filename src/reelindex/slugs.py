"""Slug derivation and collision resolution against an existing catalog."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from .parser import ParsedRelease

log = logging.getLogger("reelindex.slugs")

NON_SLUG_RE = re.compile(r"[^a-z0-9]+")


class SlugLookup(Protocol):
    """Read-only view of the catalog used while resolving collisions."""

    def exists(self, slug: str) -> bool: ...

    def find_by_slug(self, slug: str) -> Optional[Any]: ...


@dataclass(frozen=True)
class SlugResolution:
    slug: str
    is_new_entry: bool


def slugify(text: str) -> str:
    return NON_SLUG_RE.sub("_", (text or "").lower()).strip("_")


def base_slug(release: ParsedRelease) -> str:
    """``<title>_<year>_<quality>``; an empty title leaves a leading ``_``."""
    return f"{slugify(release.title)}_{release.year}_{release.quality}"


def _source_of(entry: Any) -> Optional[str]:
    if isinstance(entry, dict):
        return entry.get("source_id") or entry.get("file_id")
    return getattr(entry, "source_id", None)


def resolve_slug(release: ParsedRelease, source_id: str, lookup: SlugLookup) -> SlugResolution:
    """Pick a catalog-unique slug for ``release``.

    Walks ``base``, ``base_v2``, ``base_v3``... until a free slot is found or
    the slot already holds ``source_id`` (a re-observed file, to be updated in
    place).
    """
    if not source_id:
        raise ValueError("source_id is required to resolve a slug")

    base = base_slug(release)
    final_slug = base
    counter = 1
    while lookup.exists(final_slug):
        if _source_of(lookup.find_by_slug(final_slug)) == source_id:
            log.info("Matched existing source %s for %s; updating metadata", source_id, final_slug)
            break
        counter += 1
        final_slug = f"{base}_v{counter}"

    return SlugResolution(final_slug, not lookup.exists(final_slug))

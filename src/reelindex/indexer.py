"""Turn observed files into catalog entries."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from .catalog import Catalog, CatalogEntry
from .parser import LanguageDetector, parse_caption
from .sizes import parse_size_label
from .slugs import resolve_slug

log = logging.getLogger("reelindex.indexer")


@dataclass(frozen=True)
class IndexResult:
    entry: CatalogEntry
    is_new: bool


def index_file(
    catalog: Catalog,
    text: Optional[str],
    size_bytes: Optional[int],
    source_id: str,
    detector: Optional[LanguageDetector] = None,
) -> IndexResult:
    """Parse a caption (or filename) and store it under a collision-free slug.

    Re-observing a ``source_id`` updates its entry instead of adding one.
    """
    if size_bytes is not None and size_bytes < 0:
        raise ValueError(f"size_bytes must be non-negative, got {size_bytes}")
    if not source_id or not str(source_id).strip():
        raise ValueError("source_id is required")

    caption = text or ""
    release = parse_caption(caption, size_bytes or 0, detector)

    with catalog.transaction():
        resolution = resolve_slug(release, source_id, catalog)
        entry = CatalogEntry(
            slug=resolution.slug,
            title=release.title,
            year=release.year,
            quality=release.quality,
            size_label=release.size_label,
            codec=release.codec,
            language=release.language,
            source_id=source_id,
            raw_caption=caption,
        )
        catalog.upsert(entry)

    log.info(
        "Indexed: %s [%s] [%s]%s",
        entry.slug,
        entry.size_label,
        entry.language,
        f" ({entry.codec})" if entry.codec else "",
    )
    return IndexResult(entry, resolution.is_new_entry)


def reparse_catalog(catalog: Catalog) -> int:
    """Re-derive quality, size, codec and slug of every stored caption.

    Entries without a stored caption are skipped. The original byte count is
    not stored, so it is recovered from the size label. Titles and index
    times are left alone; slugs go through the same collision resolution as
    fresh ingestion.
    """
    updated = 0
    with catalog.transaction():
        for entry in catalog.entries():
            if not entry.raw_caption:
                continue
            release = parse_caption(entry.raw_caption, parse_size_label(entry.size_label))
            catalog.upsert(
                replace(
                    entry,
                    quality=release.quality,
                    size_label=release.size_label,
                    codec=release.codec,
                    slug=resolve_slug(release, entry.source_id, catalog).slug,
                ),
                touch=False,
            )
            log.info("Updated: %s -> %s", entry.title, release.quality)
            updated += 1
    return updated

"""In-memory catalog with debounced JSON persistence.

The engine only needs :class:`~reelindex.slugs.SlugLookup`; this module is the
store the service and the ingestion helpers run against. Writes land in memory
immediately and reach disk after ``flush_delay`` seconds of quiet, or on an
explicit :meth:`Catalog.flush`.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from .parser import DEFAULT_LANGUAGE
from .quality import UNKNOWN_QUALITY
from .sizes import UNKNOWN_SIZE
from .year_filter import UNKNOWN_YEAR

log = logging.getLogger("reelindex.catalog")

DEFAULT_FLUSH_DELAY = 2.0

# Attribute name -> key in the persisted JSON document.
_PERSISTED_KEYS = {
    "size_label": "size",
    "source_id": "file_id",
    "raw_caption": "caption",
}


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def stable_id(text: str) -> int:
    """Deterministic positive 31-bit id for a source identifier.

    Same value as the frontend's 32-bit ``(h << 5) - h + c`` string hash.
    """
    value = 0
    for char in text or "":
        value = ((value << 5) - value + ord(char)) & 0xFFFFFFFF
    if value & 0x80000000:
        value -= 0x100000000
    return abs(value) % 2147483647


@dataclass
class CatalogEntry:
    slug: str
    title: str
    source_id: str
    year: str = UNKNOWN_YEAR
    quality: str = UNKNOWN_QUALITY
    size_label: str = UNKNOWN_SIZE
    codec: str = ""
    language: str = DEFAULT_LANGUAGE
    raw_caption: str = ""
    indexed_at: str = field(default_factory=_utcnow)
    # Persisted keys this class does not model (poster paths, hydration data...).
    extra: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        extra = data.pop("extra")
        record = dict(extra)
        record.update({_PERSISTED_KEYS.get(key, key): value for key, value in data.items()})
        return record

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CatalogEntry":
        reverse = {persisted: attr for attr, persisted in _PERSISTED_KEYS.items()}
        known = {f.name for f in fields(cls)} - {"extra"}
        kwargs: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in data.items():
            attr = reverse.get(key, key)
            if attr in known:
                if value is not None:
                    kwargs[attr] = value
            else:
                extra[key] = value
        kwargs.setdefault("slug", "")
        kwargs.setdefault("title", "")
        kwargs.setdefault("source_id", "")
        return cls(extra=extra, **kwargs)

    def to_provider_record(self) -> Dict[str, Any]:
        """Present the entry in the external provider's record shape."""
        return {
            "id": stable_id(self.source_id),
            "title": self.title,
            "original_title": self.title,
            "overview": f"{self.quality} • {self.size_label or UNKNOWN_SIZE} • {self.codec or 'No Codec'}\n{self.raw_caption}",
            "poster_path": None,
            "backdrop_path": None,
            "release_date": f"{self.year}-01-01" if self.year != UNKNOWN_YEAR else "2000-01-01",
            "vote_average": 10,
            "media_type": "movie",
            "slug": self.slug,
        }


class Catalog:
    """Thread-safe write-back catalog keyed by slug and by source id."""

    def __init__(self, path: Optional[str | os.PathLike] = None, flush_delay: float = DEFAULT_FLUSH_DELAY) -> None:
        self.path = Path(path) if path else None
        self.flush_delay = flush_delay
        self._lock = threading.RLock()
        self._entries: List[CatalogEntry] = []
        # Top-level document keys other than "movies" (e.g. "meta" sync progress).
        self._document: Dict[str, Any] = {}
        self._timer: Optional[threading.Timer] = None
        self._dirty = False
        if self.path is not None:
            self.load()

    # -- persistence -------------------------------------------------

    def load(self) -> None:
        with self._lock:
            self._entries = []
            self._document = {}
            if self.path is None or not self.path.exists():
                return
            try:
                payload = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                log.error("Error loading catalog %s: %s", self.path, exc)
                return
            if not isinstance(payload, dict):
                log.error("Error loading catalog %s: expected a JSON object", self.path)
                return
            self._document = {key: value for key, value in payload.items() if key != "movies"}
            for raw in payload.get("movies", []):
                if isinstance(raw, dict):
                    self._entries.append(CatalogEntry.from_dict(raw))
            log.info("Loaded %d catalog entries from %s", len(self._entries), self.path)

    def _schedule_save(self) -> None:
        self._dirty = True
        if self.path is None:
            return
        if self._timer is not None:
            self._timer.cancel()
        self._timer = threading.Timer(self.flush_delay, self.flush)
        self._timer.daemon = True
        self._timer.start()

    def flush(self) -> bool:
        """Write pending changes now. Returns True if anything was written."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if self.path is None or not self._dirty:
                return False
            document = dict(self._document)
            document["movies"] = [entry.to_dict() for entry in self._entries]
            data = json.dumps(document, indent=2)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                tmp_path.write_text(data, encoding="utf-8")
                os.replace(tmp_path, self.path)
            except OSError as exc:
                log.error("Error saving catalog %s: %s", self.path, exc)
                return False
            self._dirty = False
            return True

    def close(self) -> None:
        self.flush()

    @property
    def pending(self) -> bool:
        return self._dirty

    # -- lookup ------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator["Catalog"]:
        with self._lock:
            yield self

    def exists(self, slug: str) -> bool:
        with self._lock:
            return any(entry.slug == slug for entry in self._entries)

    def find_by_slug(self, slug: str) -> Optional[CatalogEntry]:
        with self._lock:
            return next((entry for entry in self._entries if entry.slug == slug), None)

    def find_by_source(self, source_id: str) -> Optional[CatalogEntry]:
        with self._lock:
            return next((entry for entry in self._entries if entry.source_id == source_id), None)

    def entries(self) -> List[CatalogEntry]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # -- mutation ----------------------------------------------------

    def upsert(self, entry: CatalogEntry, touch: bool = True) -> bool:
        """Insert ``entry`` or refresh the one with the same source id in place.

        Unmodelled keys of the stored record survive unless ``entry`` sets
        them. With ``touch=False`` the stored ``indexed_at`` is kept.
        Returns True when a new entry was created.
        """
        if not entry.source_id:
            raise ValueError("catalog entries need a source_id")
        with self._lock:
            if touch:
                entry.indexed_at = _utcnow()
            for index, existing in enumerate(self._entries):
                if existing.source_id == entry.source_id:
                    entry.extra = {**existing.extra, **entry.extra}
                    if not touch:
                        entry.indexed_at = existing.indexed_at
                    self._entries[index] = entry
                    self._schedule_save()
                    return False
            self._entries.append(entry)
            self._schedule_save()
            return True

"""Release caption parsing, slugging and fuzzy title matching."""

from .catalog import Catalog, CatalogEntry
from .episodes import extract_season, is_episodic
from .indexer import IndexResult, index_file, reparse_catalog
from .matching import edit_distance, search_catalog, select_external_match
from .normalize import NormalizeStrategy, normalize_title
from .parser import ParsedRelease, parse_caption
from .quality import resolve_quality
from .sizes import format_size
from .slugs import SlugResolution, resolve_slug

__all__ = [
    "Catalog",
    "CatalogEntry",
    "IndexResult",
    "NormalizeStrategy",
    "ParsedRelease",
    "SlugResolution",
    "edit_distance",
    "extract_season",
    "format_size",
    "index_file",
    "is_episodic",
    "normalize_title",
    "parse_caption",
    "reparse_catalog",
    "resolve_quality",
    "resolve_slug",
    "search_catalog",
    "select_external_match",
]

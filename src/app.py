from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from reelindex.catalog import Catalog
from reelindex.indexer import index_file
from reelindex.matching import find_downloads, preferred_quality, search_catalog, select_external_match
from reelindex.parser import KeywordLanguageDetector, LanguageDetector
from reelindex.settings import settings

# ---------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------
logging.basicConfig(level=settings.log_level)
log = logging.getLogger("reelindex.app")
logging.getLogger("reelindex").setLevel(settings.log_level)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

catalog = Catalog(settings.catalog_path, flush_delay=settings.catalog_flush_delay)


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("Started with %d catalog entries", len(catalog))
    yield
    catalog.close()
    log.info("Shutdown")


app = FastAPI(lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


class IndexRequest(BaseModel):
    text: str = ""
    size_bytes: int = 0
    source_id: str = ""


class HydrateRequest(BaseModel):
    title: str
    year: Optional[str] = None
    raw_caption: Optional[str] = None
    candidates: List[Dict[str, Any]] = Field(default_factory=list)


def _language_detector() -> LanguageDetector:
    if settings.language_detector == "keywords":
        return KeywordLanguageDetector(default=settings.default_language)
    return lambda caption: settings.default_language


@app.get("/healthz")
async def healthz():
    return JSONResponse({"status": "ok", "entries": len(catalog)})


@app.get("/api/movies")
async def movies(
    q: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=1),
    provider: bool = Query(False),
    bot: bool = Query(False),
):
    """Local catalog search; a blank query lists the latest entries."""
    default_limit = settings.bot_search_max_results if bot else settings.search_max_results
    results = search_catalog(catalog.entries(), q or "", limit or default_limit)
    if provider:
        return JSONResponse({"results": [entry.to_provider_record() for entry in results]})
    return JSONResponse({"movies": [entry.to_dict() for entry in results]})


@app.get("/api/movies/{slug}")
async def movie_by_slug(slug: str):
    entry = catalog.find_by_slug(slug)
    if entry is None:
        raise HTTPException(status_code=404, detail="Unknown slug")
    return JSONResponse(entry.to_dict())


@app.post("/api/index")
async def index_route(body: IndexRequest):
    try:
        result = index_file(catalog, body.text, body.size_bytes, body.source_id, _language_detector())
    except ValueError as exc:
        log.warning("Rejected index request for source %r: %s", body.source_id, exc)
        raise HTTPException(status_code=400, detail=str(exc))
    return JSONResponse({"slug": result.entry.slug, "is_new": result.is_new, "entry": result.entry.to_dict()})


@app.post("/api/hydrate")
async def hydrate_route(body: HydrateRequest):
    match = select_external_match(
        body.title,
        body.year,
        body.candidates,
        raw_title=body.raw_caption,
        strategy=settings.normalize_strategy,
    )
    if match is None:
        return JSONResponse({"match": None, "fallback": False})
    if match.fallback:
        log.info("Hydration fell back to candidate %s for %r", match.candidate.get("id"), body.title)
    return JSONResponse({"match": match.candidate, "fallback": match.fallback})


@app.get("/api/downloads")
async def downloads_route(title: str = Query(..., min_length=1)):
    downloads = find_downloads(catalog.entries(), title)
    return JSONResponse({
        "downloads": downloads,
        "default_quality": preferred_quality(d.get("quality") or "unknown" for d in downloads),
    })

import pytest
from fastapi.testclient import TestClient

import app as app_module
from reelindex.catalog import Catalog


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(app_module, "catalog", Catalog())
    return TestClient(app_module.app)


def _index(client, text, source_id, size_bytes=0):
    resp = client.post("/api/index", json={"text": text, "size_bytes": size_bytes, "source_id": source_id})
    assert resp.status_code == 200
    return resp.json()


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "entries": 0}


def test_index_then_lookup(client):
    data = _index(client, "Interstellar.2014.1080p.BluRay.x264", "f1", 2_000_000_000)
    assert data["slug"] == "interstellar_2014_1080p"
    assert data["is_new"] is True
    assert data["entry"]["size"] == "1.86 GB"

    again = _index(client, "Interstellar.2014.1080p.BluRay.x264", "f1", 2_000_000_000)
    assert again["is_new"] is False

    resp = client.get("/api/movies/interstellar_2014_1080p")
    assert resp.status_code == 200
    assert resp.json()["file_id"] == "f1"


def test_unknown_slug_is_404(client):
    assert client.get("/api/movies/nope_unknown_unknown").status_code == 404


def test_index_rejects_missing_source(client):
    resp = client.post("/api/index", json={"text": "Heat.1995"})
    assert resp.status_code == 400

    resp = client.post("/api/index", json={"text": "Heat.1995", "size_bytes": -5, "source_id": "f1"})
    assert resp.status_code == 400


def test_search_and_provider_shape(client):
    _index(client, "The.Matrix.1999.1080p", "m1")
    _index(client, "The.Matrix.Reloaded.2003.720p", "m2")
    _index(client, "Heat.1995.DVDRip", "h1")

    movies = client.get("/api/movies", params={"q": "matrix 1999"}).json()["movies"]
    assert [m["title"] for m in movies] == ["The Matrix"]

    results = client.get("/api/movies", params={"q": "matrix", "provider": "true"}).json()["results"]
    assert {r["slug"] for r in results} == {"the_matrix_1999_1080p", "the_matrix_reloaded_2003_720p"}
    assert all(r["media_type"] == "movie" for r in results)

    latest = client.get("/api/movies", params={"limit": 2}).json()["movies"]
    assert len(latest) == 2


def test_search_limit_must_be_positive(client):
    assert client.get("/api/movies", params={"limit": 0}).status_code == 422


def test_hydrate_prefers_tv_for_series(client):
    body = {
        "title": "Stranger Things S02E06",
        "candidates": [
            {"id": 1, "title": "Stranger Things", "media_type": "movie"},
            {"id": 66732, "name": "Stranger Things", "media_type": "tv"},
        ],
    }
    data = client.post("/api/hydrate", json=body).json()
    assert data["match"]["id"] == 66732
    assert data["fallback"] is False

    data = client.post("/api/hydrate", json={"title": "Anything", "candidates": []}).json()
    assert data == {"match": None, "fallback": False}


def test_downloads_default_to_720p(client):
    _index(client, "Stranger.Things.S01E01.720p.WEB", "s1")
    _index(client, "Stranger.Things.S02E06.1080p", "s2")
    _index(client, "Heat.1995.DVDRip", "h1")

    data = client.get("/api/downloads", params={"title": "Stranger Things"}).json()
    assert [d["season"] for d in data["downloads"]] == [1, 2]
    assert data["default_quality"] == "720p"


def test_bot_surface_uses_smaller_cap(client, monkeypatch):
    monkeypatch.setattr(app_module.settings, "bot_search_max_results", 2)
    for n in range(4):
        _index(client, f"Saw.{2004 + n}.720p", f"saw{n}")

    assert len(client.get("/api/movies", params={"q": "saw"}).json()["movies"]) == 4
    assert len(client.get("/api/movies", params={"q": "saw", "bot": "true"}).json()["movies"]) == 2

"""FastAPI application — duplicate checks and movie catalog for the web app.

Endpoints:
    GET /health            — Health check (DB connectivity)
    GET /duplicates        — Existing discussions matching a movie title
    GET /movies/search     — TMDB search, each result flagged if already discussed
    GET /movies/upcoming   — Upcoming releases
    GET /movies/{movie_id} — Movie details with trailer
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import Depends, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hype_check.catalog import CatalogError, TMDBClient
from hype_check.config import settings
from hype_check.db import PostgresPostSearch, close_pool, get_pool
from hype_check.duplicates import DuplicateDetector, annotate_movies, best_match
from hype_check.text.normalize import normalize_title


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Pool is created lazily on first use; close it on shutdown."""
    yield
    await close_pool()


app = FastAPI(
    title="Hype Check API",
    description="Duplicate discussion checks and movie catalog for The Hype Check",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS — allow the Vite dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


def get_detector() -> DuplicateDetector:
    return DuplicateDetector(PostgresPostSearch(), max_distance=settings.duplicate_max_distance)


async def get_tmdb() -> AsyncIterator[TMDBClient]:
    async with TMDBClient() as tmdb:
        yield tmdb


def _catalog_error(e: CatalogError) -> JSONResponse:
    return JSONResponse(status_code=502, content={"error": "Movie catalog unavailable", "detail": str(e)})


@app.get("/health")
async def health():
    """Health check — verifies DB connectivity."""
    try:
        pool = await get_pool()
        result = await pool.fetchval("SELECT 1")
        return {"status": "ok", "db": result == 1}
    except Exception as e:
        return {"status": "error", "detail": str(e)}


@app.get("/duplicates")
async def duplicates(
    title: str = Query("", description="Proposed movie title"),
    detector: DuplicateDetector = Depends(get_detector),
):
    """Existing discussions for a movie title. ``warning`` is the closest one."""
    candidates = await detector.check(title)
    return {
        "title": title,
        "normalized": normalize_title(title),
        "duplicates": [c.model_dump(mode="json") for c in candidates],
        "warning": best_match(candidates).model_dump(mode="json") if candidates else None,
    }


@app.get("/movies/search")
async def search_movies(
    q: str = Query(..., description="Search query"),
    tmdb: TMDBClient = Depends(get_tmdb),
    detector: DuplicateDetector = Depends(get_detector),
):
    """TMDB search; ``duplicate`` is the closest existing discussion, if any."""
    try:
        movies = await tmdb.search_movies(q)
    except CatalogError as e:
        return _catalog_error(e)

    annotated = await annotate_movies(detector, movies)
    return {
        "query": q,
        "movies": [
            {
                **movie.model_dump(mode="json"),
                "duplicate": match.model_dump(mode="json") if match else None,
            }
            for movie, match in annotated
        ],
    }


@app.get("/movies/upcoming")
async def upcoming_movies(tmdb: TMDBClient = Depends(get_tmdb)):
    try:
        movies = await tmdb.get_upcoming_movies()
    except CatalogError as e:
        return _catalog_error(e)
    return {"movies": [m.model_dump(mode="json") for m in movies]}


@app.get("/movies/{movie_id}")
async def movie_details(movie_id: int, tmdb: TMDBClient = Depends(get_tmdb)):
    try:
        details = await tmdb.get_movie_details(movie_id)
    except CatalogError as e:
        return _catalog_error(e)
    return {**details.model_dump(mode="json"), "trailer_url": details.trailer_url}

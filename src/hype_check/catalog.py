"""TMDB movie catalog client.

Supplies candidate titles (search results, upcoming releases) and trailer
details for new discussions.
"""

from __future__ import annotations

import httpx

from hype_check.config import settings
from hype_check.models import Movie, MovieDetails, Video
from hype_check.utils.logging import RED, RESET, get_logger

log = get_logger()


class CatalogError(Exception):
    """TMDB request failed (transport error or non-2xx response)."""


def _is_bearer_token(api_key: str) -> bool:
    # v4 read access tokens are JWTs; v3 keys are plain hex strings
    return api_key.startswith("eyJ")


class TMDBClient:
    """Async TMDB client. Use as an async context manager::

        async with TMDBClient() as tmdb:
            movies = await tmdb.search_movies("dune")
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        language: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 15.0,
    ):
        api_key = settings.tmdb_api_key if api_key is None else api_key
        self.language = language or settings.tmdb_language

        headers = {"Accept": "application/json"}
        params = {}
        if _is_bearer_token(api_key):
            headers["Authorization"] = f"Bearer {api_key}"
        elif api_key:
            params["api_key"] = api_key

        self._client = httpx.AsyncClient(
            base_url=base_url or settings.tmdb_base_url,
            headers=headers,
            params=params,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> TMDBClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: dict) -> dict:
        try:
            response = await self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPError as e:
            log.error(f"  {RED}✗{RESET} TMDB {path} failed: {e}")
            raise CatalogError(f"TMDB request to {path} failed: {e}") from e
        return response.json()

    async def search_movies(self, query: str) -> list[Movie]:
        if not query or not query.strip():
            return []
        data = await self._get(
            "/search/movie",
            {"query": query.strip(), "include_adult": "false", "language": self.language, "page": 1},
        )
        return [Movie(**m) for m in data.get("results") or []]

    async def get_upcoming_movies(self) -> list[Movie]:
        data = await self._get("/movie/upcoming", {"language": self.language, "page": 1})
        return [Movie(**m) for m in data.get("results") or []]

    async def get_movie_details(self, movie_id: int) -> MovieDetails:
        data = await self._get(
            f"/movie/{movie_id}",
            {"language": self.language, "append_to_response": "videos"},
        )
        genres = [g["name"] for g in data.pop("genres", None) or []]
        videos = [Video(**v) for v in (data.pop("videos", None) or {}).get("results", [])]
        return MovieDetails(**data, genres=genres, videos=videos)

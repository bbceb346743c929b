"""Async PostgreSQL access to discussion posts using asyncpg.

Read-only: posts are created and edited by the web app. Only the columns the
duplicate checker and the search index need are selected.
"""

from __future__ import annotations

import asyncpg

from hype_check.config import settings
from hype_check.models import PostSummary

_pool: asyncpg.Pool | None = None

_POST_COLUMNS = "id, title, movie_title, trailer_url, image_url, created_at, upvotes"


async def get_pool(database_url: str | None = None) -> asyncpg.Pool:
    global _pool
    if _pool is None:
        url = database_url or settings.database_url
        _pool = await asyncpg.create_pool(url, min_size=1, max_size=5)
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool:
        await _pool.close()
        _pool = None


def _escape_like(text: str) -> str:
    """Escape LIKE wildcards so the query matches literally."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _to_summary(row: asyncpg.Record) -> PostSummary:
    data = dict(row)
    data["title"] = data.get("title") or ""
    data["movie_title"] = data.get("movie_title") or ""
    data["upvotes"] = data.get("upvotes") or 0
    return PostSummary(**data)


class PostgresPostSearch:
    """Substring search over post title, movie title and content, newest first.

    Without an explicit pool the shared pool is acquired per search, so a
    database that is down surfaces as a failed search rather than at wiring time.
    """

    def __init__(self, pool: asyncpg.Pool | None = None, limit: int | None = None):
        self._pool = pool
        self._limit = settings.duplicate_search_limit if limit is None else limit

    async def search_posts_by_text(self, query: str) -> list[PostSummary]:
        pool = self._pool if self._pool is not None else await get_pool()
        pattern = f"%{_escape_like(query)}%"
        rows = await pool.fetch(
            f"""
            SELECT {_POST_COLUMNS}
            FROM posts
            WHERE title ILIKE $1 OR movie_title ILIKE $1 OR content ILIKE $1
            ORDER BY created_at DESC
            LIMIT $2
            """,
            pattern,
            self._limit,
        )
        return [_to_summary(r) for r in rows]


async def count_posts(pool: asyncpg.Pool) -> int:
    return await pool.fetchval("SELECT COUNT(*) FROM posts")


async def fetch_post_documents(pool: asyncpg.Pool, limit: int, offset: int) -> list[dict]:
    """Page through posts for the search index, oldest first."""
    rows = await pool.fetch(
        f"""
        SELECT {_POST_COLUMNS}, content
        FROM posts
        ORDER BY created_at
        LIMIT $1 OFFSET $2
        """,
        limit,
        offset,
    )
    return [dict(r) for r in rows]

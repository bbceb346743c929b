"""Meilisearch integration for post search.

Syncs posts from PostgreSQL → Meilisearch index. The index is derived data and
can always be rebuilt from PostgreSQL.
"""

from __future__ import annotations

import asyncio

import meilisearch
from meilisearch.errors import MeilisearchApiError

from hype_check.config import settings
from hype_check.models import PostSummary
from hype_check.utils.logging import BOLD, GREEN, RESET, get_logger

log = get_logger()

INDEX_NAME = "posts"

SEARCHABLE_ATTRS = ["movie_title", "title", "content"]
SORTABLE_ATTRS = ["created_at", "upvotes"]
RETRIEVED_ATTRS = ["id", "title", "movie_title", "trailer_url", "image_url", "created_at", "upvotes"]


def get_client() -> meilisearch.Client:
    return meilisearch.Client(settings.meilisearch_url, settings.meilisearch_api_key)


def _configure_index(client: meilisearch.Client) -> None:
    try:
        client.get_index(INDEX_NAME)
    except MeilisearchApiError:
        client.create_index(INDEX_NAME, {"primaryKey": "id"})
        log.info(f"  {GREEN}✓{RESET} Created index '{INDEX_NAME}'")

    index = client.index(INDEX_NAME)
    index.update_searchable_attributes(SEARCHABLE_ATTRS)
    index.update_sortable_attributes(SORTABLE_ATTRS)


def _to_document(row: dict) -> dict:
    created_at = row.get("created_at")
    return {
        "id": str(row["id"]),
        "title": row.get("title") or "",
        "movie_title": row.get("movie_title") or "",
        "content": (row.get("content") or "")[:5000],
        "trailer_url": row.get("trailer_url"),
        "image_url": row.get("image_url"),
        "created_at": created_at.isoformat() if created_at else None,
        "upvotes": row.get("upvotes") or 0,
    }


async def sync_posts(batch_size: int = 500) -> dict:
    """Upsert every post into the index. Safe to run repeatedly.

    Returns {indexed, total}.
    """
    from hype_check.db import count_posts, fetch_post_documents, get_pool

    client = get_client()
    await asyncio.to_thread(_configure_index, client)
    index = client.index(INDEX_NAME)

    pool = await get_pool()
    total = await count_posts(pool)
    log.info(f"{BOLD}Syncing {total} posts → Meilisearch{RESET}")

    indexed = 0
    offset = 0
    while offset < total:
        rows = await fetch_post_documents(pool, batch_size, offset)
        docs = [_to_document(r) for r in rows]
        if docs:
            await asyncio.to_thread(index.add_documents, docs)
            indexed += len(docs)
        offset += batch_size
        log.info(f"  {GREEN}▸{RESET} {min(offset, total)}/{total}")

    log.info(f"  {GREEN}✓{RESET} Indexed {indexed} posts")
    return {"indexed": indexed, "total": total}


class MeilisearchPostSearch:
    """Full-text post search backed by the Meilisearch ``posts`` index.

    The client is blocking, so queries run in a worker thread.
    """

    def __init__(self, client: meilisearch.Client | None = None, limit: int | None = None):
        self._client = client or get_client()
        self._limit = settings.duplicate_search_limit if limit is None else limit

    def _search(self, query: str) -> list[PostSummary]:
        result = self._client.index(INDEX_NAME).search(
            query,
            {"limit": self._limit, "attributesToRetrieve": RETRIEVED_ATTRS},
        )
        return [PostSummary(**hit) for hit in result.get("hits", [])]

    async def search_posts_by_text(self, query: str) -> list[PostSummary]:
        return await asyncio.to_thread(self._search, query)

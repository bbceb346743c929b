import asyncio

import pytest

from hype_check.models import PostSummary


class FakePostSearch:
    """In-memory post search that records the queries it receives."""

    def __init__(self, posts=None, error: Exception | None = None, delay: float = 0.0):
        self.posts = posts or []
        self.error = error
        self.delay = delay
        self.queries: list[str] = []

    async def search_posts_by_text(self, query: str) -> list[PostSummary]:
        self.queries.append(query)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return list(self.posts)


@pytest.fixture
def fake_search():
    return FakePostSearch


@pytest.fixture
def dune_posts():
    return [
        PostSummary(id=1, title="Dune: Part Two - First Impressions", movie_title="Dune: Part Two"),
        PostSummary(id=2, title="Dune Part One - First Impressions", movie_title="Dune Part One"),
    ]

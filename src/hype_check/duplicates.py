"""Duplicate-discussion detection.

Before a new discussion is created, the proposed movie title is compared with
the movie titles of existing posts. The post search backend only does loose
substring/keyword matching, so its hits are re-filtered here by edit distance
between normalized titles.

Duplicate detection is advisory: a failing search backend yields "no
duplicates" instead of an error, so post creation is never blocked by it.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

from hype_check.models import DuplicateCandidate, Movie, PostSummary
from hype_check.text.normalize import normalize_title
from hype_check.text.similarity import levenshtein_distance
from hype_check.utils.logging import DIM, RESET, YELLOW, get_logger

log = get_logger()

# Up to two character edits: punctuation variants, typos, singular/plural
DEFAULT_MAX_DISTANCE = 2


class PostSearch(Protocol):
    """Loose text search over existing posts (title, movie title, body)."""

    async def search_posts_by_text(self, query: str) -> list[PostSummary]: ...


class DuplicateDetector:
    """Finds existing discussions whose movie title is close to a new one.

    Stateless between calls; every ``check`` issues at most one search.
    """

    def __init__(self, search: PostSearch, max_distance: int = DEFAULT_MAX_DISTANCE):
        self._search = search
        self.max_distance = max_distance

    async def check(self, candidate_title: str | None) -> list[DuplicateCandidate]:
        """Return existing posts matching ``candidate_title``, closest first.

        Exact matches (distance 0) come first, then ascending distance; ties
        keep the order the search backend returned them in.
        """
        if not candidate_title:
            return []

        normalized = normalize_title(candidate_title)
        if not normalized:
            return []

        try:
            posts = await self._search.search_posts_by_text(normalized)
        except Exception as e:
            log.warning(f"  {YELLOW}⚠{RESET} Duplicate check failed for '{normalized}': {e}")
            return []

        candidates: list[DuplicateCandidate] = []
        for post in posts:
            distance = levenshtein_distance(normalize_title(post.movie_title), normalized)
            if distance == 0 or distance <= self.max_distance:
                candidates.append(DuplicateCandidate(post=post, distance=distance))

        candidates.sort(key=lambda c: c.distance)
        log.debug(f"  {DIM}{len(candidates)}/{len(posts)} duplicate candidates for '{normalized}'{RESET}")
        return candidates


def best_match(candidates: list[DuplicateCandidate]) -> DuplicateCandidate | None:
    """The candidate to surface in a duplicate warning, if any."""
    return candidates[0] if candidates else None


class DuplicateCheck:
    """Caller-side duplicate warning for a title that is still being typed.

    Each ``warn`` call gets a token from an increasing counter. A call that
    resolves after a newer one was issued returns None, so a stale result can
    never replace the warning for the latest title. A timeout is treated like
    a failed search.
    """

    def __init__(
        self,
        detector: DuplicateDetector,
        min_length: int = 3,
        timeout: float | None = None,
    ):
        self._detector = detector
        self.min_length = min_length
        self.timeout = timeout
        self._latest_token = 0

    async def warn(self, title: str | None) -> DuplicateCandidate | None:
        self._latest_token += 1
        token = self._latest_token

        if not title or len(title.strip()) < self.min_length:
            return None

        try:
            if self.timeout is None:
                candidates = await self._detector.check(title)
            else:
                candidates = await asyncio.wait_for(self._detector.check(title), self.timeout)
        except asyncio.TimeoutError:
            log.warning(f"  {YELLOW}⚠{RESET} Duplicate check timed out after {self.timeout}s")
            candidates = []

        if token != self._latest_token:
            return None
        return best_match(candidates)


async def annotate_movies(
    detector: DuplicateDetector, movies: list[Movie]
) -> list[tuple[Movie, DuplicateCandidate | None]]:
    """Pair each catalog result with its closest existing discussion."""
    results = await asyncio.gather(*(detector.check(m.title) for m in movies))
    return [(movie, best_match(candidates)) for movie, candidates in zip(movies, results)]

import asyncio
import unicodedata

import pytest

from hype_check.duplicates import DuplicateCheck, DuplicateDetector, annotate_movies, best_match
from hype_check.models import Movie, PostSummary


def _ids(candidates):
    return [c.post.id for c in candidates]


def test_exact_match_after_normalization(fake_search, dune_posts):
    """'Dune Part Two' matches 'Dune: Part Two' but not 'Dune Part One' (distance 3)."""
    search = fake_search(dune_posts)
    result = asyncio.run(DuplicateDetector(search).check("Dune Part Two"))

    assert _ids(result) == [1]
    assert result[0].distance == 0
    assert result[0].post is dune_posts[0]


def test_search_receives_normalized_title(fake_search, dune_posts):
    search = fake_search(dune_posts)
    asyncio.run(DuplicateDetector(search).check("  Dune:  Part Two! "))
    assert search.queries == ["dune part two"]


@pytest.mark.parametrize("title", ["", None])
def test_empty_title_skips_search(fake_search, dune_posts, title):
    search = fake_search(dune_posts)
    assert asyncio.run(DuplicateDetector(search).check(title)) == []
    assert search.queries == []


def test_punctuation_only_title_skips_search(fake_search, dune_posts):
    search = fake_search(dune_posts)
    assert asyncio.run(DuplicateDetector(search).check("?!")) == []
    assert search.queries == []


def test_search_failure_fails_open(fake_search):
    """A network error from the backend yields no duplicates instead of raising."""
    search = fake_search(error=ConnectionError("backend unreachable"))
    assert asyncio.run(DuplicateDetector(search).check("Oppenheimer")) == []
    assert search.queries == ["oppenheimer"]


def test_distance_threshold_boundary(fake_search):
    """Distance 2 is still a duplicate, distance 3 is not."""
    posts = [
        PostSummary(id="two", movie_title="Catmen"),
        PostSummary(id="three", movie_title="Cotmen"),
    ]
    result = asyncio.run(DuplicateDetector(fake_search(posts)).check("Batman"))
    assert _ids(result) == ["two"]
    assert result[0].distance == 2


def test_ordering_exact_first_then_distance_stable(fake_search):
    posts = [
        PostSummary(id=1, movie_title="Bitmen"),
        PostSummary(id=2, movie_title="Batman"),
        PostSummary(id=3, movie_title="batmen"),
        PostSummary(id=4, movie_title="BATMAN!"),
        PostSummary(id=5, movie_title="The Batman"),
    ]
    result = asyncio.run(DuplicateDetector(fake_search(posts)).check("batman"))
    assert _ids(result) == [2, 4, 3, 1]
    assert [c.distance for c in result] == [0, 0, 1, 2]


def test_title_field_is_not_compared(fake_search):
    """Only the movie title is matched; the post's display title is ignored."""
    posts = [PostSummary(id=1, title="Oppenheimer", movie_title="Barbie")]
    assert asyncio.run(DuplicateDetector(fake_search(posts)).check("Oppenheimer")) == []


def test_custom_threshold(fake_search):
    posts = [PostSummary(id=1, movie_title="batmen"), PostSummary(id=2, movie_title="Batman")]
    result = asyncio.run(DuplicateDetector(fake_search(posts), max_distance=0).check("batman"))
    assert _ids(result) == [2]


def test_each_check_queries_again(fake_search, dune_posts):
    search = fake_search(dune_posts)
    detector = DuplicateDetector(search)

    async def run():
        await detector.check("Dune Part Two")
        await detector.check("Dune Part Two")

    asyncio.run(run())
    assert search.queries == ["dune part two", "dune part two"]


def test_concurrent_checks_are_independent(fake_search, dune_posts):
    detector = DuplicateDetector(fake_search(dune_posts))

    async def run():
        return await asyncio.gather(
            detector.check("Dune Part Two"),
            detector.check("Dune Part One"),
        )

    two, one = asyncio.run(run())
    assert _ids(two) == [1]
    assert _ids(one) == [2]


def test_best_match():
    assert best_match([]) is None


def test_warning_returns_closest(fake_search, dune_posts):
    check = DuplicateCheck(DuplicateDetector(fake_search(dune_posts)))
    warning = asyncio.run(check.warn("Dune: Part One"))
    assert warning.post.id == 2


def test_warning_ignores_short_titles(fake_search, dune_posts):
    search = fake_search(dune_posts)
    check = DuplicateCheck(DuplicateDetector(search), min_length=3)
    assert asyncio.run(check.warn("Du")) is None
    assert asyncio.run(check.warn(None)) is None
    assert search.queries == []


def test_warning_timeout_fails_open(fake_search, dune_posts):
    search = fake_search(dune_posts, delay=5.0)
    check = DuplicateCheck(DuplicateDetector(search), timeout=0.05)
    assert asyncio.run(check.warn("Dune Part Two")) is None


def test_stale_warning_is_discarded(dune_posts):
    """A check that resolves after a newer one was issued is dropped."""

    async def run():
        release = asyncio.Event()

        class GatedSearch:
            async def search_posts_by_text(self, query):
                if query == "dune part one":
                    await release.wait()
                return dune_posts

        check = DuplicateCheck(DuplicateDetector(GatedSearch()))
        first = asyncio.create_task(check.warn("Dune Part One"))
        await asyncio.sleep(0)
        second = await check.warn("Dune Part Two")
        release.set()
        return await first, second

    first, second = asyncio.run(run())
    assert first is None
    assert second.post.id == 1


def test_annotate_movies(fake_search, dune_posts):
    movies = [
        Movie(id=693134, title="Dune: Part Two"),
        Movie(id=872585, title="Oppenheimer"),
    ]
    annotated = asyncio.run(annotate_movies(DuplicateDetector(fake_search(dune_posts)), movies))

    assert [m.id for m, _ in annotated] == [693134, 872585]
    assert annotated[0][1].post.id == 1
    assert annotated[1][1] is None


def test_decomposed_movie_title_is_exact_match(fake_search):
    """A post stored with combining accents still matches the precomposed title."""
    posts = [PostSummary(id=1, movie_title=unicodedata.normalize("NFD", "Pokémon Détective Pikachu"))]
    result = asyncio.run(DuplicateDetector(fake_search(posts)).check("Pokémon: Détective Pikachu"))
    assert _ids(result) == [1]
    assert result[0].distance == 0

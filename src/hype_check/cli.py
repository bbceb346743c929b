"""Click CLI entry point.

Usage:
    hype-check duplicates "Dune: Part Two"
    hype-check duplicates "Oppenheimer" --timeout 2 --meili
    hype-check movies "spider-man"
    hype-check upcoming
    hype-check index
"""

from __future__ import annotations

import asyncio

import click

from hype_check.catalog import CatalogError
from hype_check.utils.logging import BOLD, DIM, GREEN, RESET, YELLOW, get_logger, set_level

log = get_logger()


@click.group()
@click.option("--log-level", default=None, help="Override LOG_LEVEL (debug, info, warning, error)")
def cli(log_level: str | None) -> None:
    """The Hype Check: movie trailer discussions."""
    if log_level:
        set_level(log_level)


def _make_detector(meili: bool):
    from hype_check.config import settings
    from hype_check.duplicates import DuplicateDetector

    if meili:
        from hype_check.search import MeilisearchPostSearch

        search = MeilisearchPostSearch()
    else:
        from hype_check.db import PostgresPostSearch

        search = PostgresPostSearch()
    return DuplicateDetector(search, max_distance=settings.duplicate_max_distance)


def _fmt_post(post) -> str:
    return f"{post.movie_title} {DIM}— \"{post.title}\" (id {post.id}){RESET}"


@cli.command()
@click.argument("title")
@click.option("--timeout", default=None, type=float, help="Give up on the search after N seconds")
@click.option("--meili", is_flag=True, help="Search posts via Meilisearch instead of PostgreSQL")
def duplicates(title: str, timeout: float | None, meili: bool) -> None:
    """List existing discussions that look like TITLE."""
    asyncio.run(_duplicates(title, timeout, meili))


async def _duplicates(title: str, timeout: float | None, meili: bool) -> None:
    from hype_check.db import close_pool
    from hype_check.text.normalize import normalize_title

    try:
        detector = _make_detector(meili)
        try:
            candidates = await asyncio.wait_for(detector.check(title), timeout)
        except asyncio.TimeoutError:
            log.warning(f"  {YELLOW}⚠{RESET} Search timed out after {timeout}s")
            candidates = []

        click.echo(f"\n{BOLD}Duplicate check{RESET} — '{normalize_title(title)}'\n")
        if not candidates:
            click.echo(f"  {GREEN}✓{RESET} No existing discussion found\n")
            return
        for c in candidates:
            label = "exact" if c.distance == 0 else f"distance {c.distance}"
            click.echo(f"  {YELLOW}▸{RESET} {_fmt_post(c.post)} {DIM}[{label}]{RESET}")
        click.echo("")
    finally:
        await close_pool()


@cli.command()
@click.argument("query")
@click.option("--meili", is_flag=True, help="Search posts via Meilisearch instead of PostgreSQL")
def movies(query: str, meili: bool) -> None:
    """Search TMDB and flag movies that already have a discussion."""
    asyncio.run(_movies(query, meili))


async def _movies(query: str, meili: bool) -> None:
    from hype_check.catalog import TMDBClient
    from hype_check.db import close_pool
    from hype_check.duplicates import annotate_movies

    try:
        async with TMDBClient() as tmdb:
            results = await tmdb.search_movies(query)
        detector = _make_detector(meili)
        annotated = await annotate_movies(detector, results)
    except CatalogError as e:
        click.echo(f"Error: {e}")
        raise SystemExit(1)
    finally:
        await close_pool()

    click.echo(f"\n{BOLD}TMDB results for '{query}'{RESET}\n")
    for movie, match in annotated:
        year = (movie.release_date or "")[:4] or "—"
        click.echo(f"  {movie.title} {DIM}({year}){RESET}")
        if match:
            click.echo(f"    {YELLOW}⚠ already discussed:{RESET} {_fmt_post(match.post)}")
    click.echo("")


@cli.command()
def upcoming() -> None:
    """Show upcoming releases from TMDB."""
    asyncio.run(_upcoming())


async def _upcoming() -> None:
    from hype_check.catalog import TMDBClient

    try:
        async with TMDBClient() as tmdb:
            results = await tmdb.get_upcoming_movies()
    except CatalogError as e:
        click.echo(f"Error: {e}")
        raise SystemExit(1)

    click.echo(f"\n{BOLD}Upcoming releases{RESET}\n")
    click.echo(f"  {'Release':<10}  {'Title'}")
    click.echo(f"  {'─' * 10}  {'─' * 30}")
    for movie in results:
        click.echo(f"  {movie.release_date or '—':<10}  {movie.title}")
    click.echo("")


@cli.command()
@click.option("--batch-size", default=500, help="Posts per Meilisearch batch")
def index(batch_size: int) -> None:
    """Sync posts from PostgreSQL into the Meilisearch index."""
    asyncio.run(_index(batch_size))


async def _index(batch_size: int) -> None:
    from hype_check.db import close_pool
    from hype_check.search import sync_posts

    try:
        await sync_posts(batch_size=batch_size)
    finally:
        await close_pool()


if __name__ == "__main__":
    cli()

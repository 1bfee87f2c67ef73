"""CLI entry point for Holocron."""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

import click
import httpx
from rich.console import Console
from rich.table import Table

from holocron import __version__
from holocron.catalog.client import FilmsClient
from holocron.catalog.models import MovieRecord, SortKey
from holocron.catalog.normalizer import format_release_date
from holocron.catalog.selectors import (
    filtered_items,
    grouped_by_era,
    movies_by_director,
    stats,
)
from holocron.catalog.state import CatalogState
from holocron.catalog.store import CatalogService, CatalogStore
from holocron.config import Config, ConfigError, load_config

T = TypeVar("T")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


async def _with_service(
    obj: dict, command: Callable[[CatalogService], Awaitable[T]],
) -> T:
    """Run ``command`` against a fresh store wired to the configured API.

    ``obj["transport"]`` may carry an ``httpx`` transport to talk to
    instead of the network.
    """
    config: Config = obj["config"]
    async with httpx.AsyncClient(
        transport=obj.get("transport"),
        timeout=httpx.Timeout(config.api.timeout_seconds),
        follow_redirects=True,
        headers={"User-Agent": config.api.user_agent, "Accept": "application/json"},
    ) as http:
        films = FilmsClient.from_config(config.api, client=http)
        service = CatalogService(CatalogStore(), films)
        return await command(service)


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="holocron")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to holocron.toml configuration file.",
)
@click.option("--base-url", default=None, help="Override the films API base URL.")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, base_url: str | None) -> None:
    """Holocron — browse the Star Wars film catalog."""
    ctx.ensure_object(dict)
    try:
        config = load_config(config_path)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    if base_url:
        config = config.with_base_url(base_url)
    _configure_logging(config.logging.level)
    ctx.obj["config"] = config


@cli.command()
@click.option(
    "--sort", "sort_key",
    type=click.Choice([k.value for k in SortKey]),
    default=SortKey.RELEASE_DATE.value,
    show_default=True,
    help="Field to order by.",
)
@click.option("--desc", is_flag=True, help="Sort descending.")
@click.option("--query", "-q", default="", help="Match title or director.")
@click.option("--director", default="", help="Match director only.")
@click.pass_context
def films(
    ctx: click.Context, sort_key: str, desc: bool, query: str, director: str,
) -> None:
    """List all films."""

    async def _load(service: CatalogService) -> CatalogState:
        await service.trigger_collection_fetch()
        service.store.set_sort(sort_key, not desc)
        return service.store.state

    state = asyncio.run(_with_service(ctx.obj, _load))
    if state.error:
        _fail(state.error)

    view = filtered_items(state, query)
    if director:
        keep = set(movies_by_director(state, director))
        view = [movie for movie in view if movie in keep]

    if not view:
        click.echo(f'No movies match "{query or director}".' if query or director
                   else "No movies available.")
        return

    table = Table(title=f"{len(view)} {'movie' if len(view) == 1 else 'movies'}")
    table.add_column("Ep", justify="right")
    table.add_column("Title", no_wrap=True)
    table.add_column("Director")
    table.add_column("Released")
    table.add_column("Characters", justify="right")
    for movie in view:
        table.add_row(
            str(movie.episode_id or "?"),
            movie.title,
            movie.director,
            format_release_date(movie.release_date),
            str(len(movie.characters)),
        )
    Console(highlight=False).print(table)


def _echo_film(movie: MovieRecord) -> None:
    click.echo(f"Episode {movie.episode_id}: {movie.title}")
    click.echo(f"Director: {movie.director}")
    click.echo(f"Producer: {movie.producer}")
    click.echo(f"Released: {format_release_date(movie.release_date)}")
    click.echo(
        f"Characters: {len(movie.characters)}  Planets: {len(movie.planets)}  "
        f"Starships: {len(movie.starships)}  Vehicles: {len(movie.vehicles)}  "
        f"Species: {len(movie.species)}"
    )
    if movie.opening_crawl:
        click.echo("")
        click.echo(movie.opening_crawl)


@cli.command()
@click.argument("film_id")
@click.pass_context
def film(ctx: click.Context, film_id: str) -> None:
    """Show one film by id."""

    async def _load(service: CatalogService) -> CatalogState:
        await service.trigger_item_fetch(film_id)
        return service.store.state

    state = asyncio.run(_with_service(ctx.obj, _load))
    if state.selected_error or state.selected_item is None:
        _fail(state.selected_error or f"Film not found: {film_id}")
    _echo_film(state.selected_item)


@cli.command()
@click.pass_context
def eras(ctx: click.Context) -> None:
    """Group films into original, prequel and sequel trilogies."""

    async def _load(service: CatalogService) -> CatalogState:
        await service.trigger_collection_fetch()
        return service.store.state

    state = asyncio.run(_with_service(ctx.obj, _load))
    if state.error:
        _fail(state.error)

    for era, movies in grouped_by_era(state).items():
        click.echo(f"{era.title()} ({len(movies)})")
        for movie in movies:
            click.echo(f"  {movie.episode_id}. {movie.title}")


@cli.command(name="stats")
@click.pass_context
def stats_command(ctx: click.Context) -> None:
    """Show aggregate counts over the catalog."""

    async def _load(service: CatalogService) -> CatalogState:
        await service.trigger_collection_fetch()
        return service.store.state

    state = asyncio.run(_with_service(ctx.obj, _load))
    if state.error:
        _fail(state.error)

    summary = stats(state)
    click.echo(f"Films:      {summary.total}")
    click.echo(f"Directors:  {summary.directors}")
    click.echo(f"Characters: {summary.characters}")
    click.echo(f"Planets:    {summary.planets}")
    click.echo(f"Starships:  {summary.starships}")
    click.echo(f"Vehicles:   {summary.vehicles}")
    click.echo(f"Species:    {summary.species}")
    click.echo(f"Fetched at: {summary.last_fetched_at}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()

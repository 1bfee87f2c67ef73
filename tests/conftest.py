"""Shared test fixtures for Holocron."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from holocron.catalog.models import MovieRecord
from holocron.config import BASE_URL_ENV


_CLASSICS = [
    (4, "A New Hope", "George Lucas", "1977-05-25"),
    (5, "The Empire Strikes Back", "Irvin Kershner", "1980-05-17"),
    (6, "Return of the Jedi", "Richard Marquand", "1983-05-25"),
    (1, "The Phantom Menace", "George Lucas", "1999-05-19"),
    (2, "Attack of the Clones", "George Lucas", "2002-05-16"),
    (3, "Revenge of the Sith", "George Lucas", "2005-05-19"),
]


def _raw_film(episode_id: int | None, title: str, director: str, release_date: str) -> dict:
    film: dict = {
        "title": title,
        "opening_crawl": "It is a period of civil war.\r\nRebel spaceships...",
        "director": director,
        "producer": "Gary Kurtz, Rick McCallum",
        "release_date": release_date,
        "characters": [f"https://films.test/api/people/{n}" for n in range(1, 4)],
        "planets": ["https://films.test/api/planets/1"],
        "starships": [
            "https://films.test/api/starships/2",
            "https://films.test/api/starships/3",
        ],
        "vehicles": [],
        "species": ["https://films.test/api/species/1"],
        "created": "2014-12-10T14:23:31.880000Z",
        "edited": "2014-12-20T19:49:45.256000Z",
        "url": f"https://films.test/api/films/{episode_id}",
    }
    if episode_id is not None:
        film["episode_id"] = episode_id
    return film


@pytest.fixture(autouse=True)
def _no_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(BASE_URL_ENV, raising=False)


@pytest.fixture
def films_payload() -> list[dict]:
    """Six films in SWAPI's own order (release order)."""
    return [_raw_film(*row) for row in _CLASSICS]


@pytest.fixture
def make_record() -> Callable[..., MovieRecord]:
    def _make(episode_id: int = 0, **fields) -> MovieRecord:
        fields.setdefault("uid", str(episode_id))
        fields.setdefault("title", f"Episode {episode_id}")
        return MovieRecord(episode_id=episode_id, **fields)

    return _make


def _json_client(
    routes: dict[str, object],
    *,
    status_code: int = 200,
) -> httpx.AsyncClient:
    """AsyncClient that answers each path in ``routes`` with its JSON body.

    Unknown paths get a 404.
    """

    async def _handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api")
        if path not in routes:
            return httpx.Response(404, json={"detail": "Not found"}, request=request)
        return httpx.Response(status_code, json=routes[path], request=request)

    return httpx.AsyncClient(transport=httpx.MockTransport(_handler))


@pytest.fixture
def raw_film() -> Callable[..., dict]:
    """Factory for one raw film object as the API returns it."""
    return _raw_film


@pytest.fixture
def json_client() -> Callable[..., httpx.AsyncClient]:
    return _json_client

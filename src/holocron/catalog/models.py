"""Canonical catalog data shapes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class SortKey(StrEnum):
    EPISODE_ID = "episode_id"
    TITLE = "title"
    DIRECTOR = "director"
    RELEASE_DATE = "release_date"


class LifecycleStatus(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


UNKNOWN = "Unknown"


@dataclass(frozen=True)
class MovieRecord:
    """One film, normalized. Every field is always populated.

    ``uid`` is a display key. It is the stringified episode number when
    the source provides one and a random token otherwise, so it is not
    stable across fetches for records without an episode number.
    """

    uid: str
    title: str = UNKNOWN
    episode_id: int = 0  # 0 = source gave no episode number
    opening_crawl: str = ""
    director: str = UNKNOWN
    producer: str = UNKNOWN
    release_date: str = ""
    characters: tuple[str, ...] = ()
    planets: tuple[str, ...] = ()
    starships: tuple[str, ...] = ()
    vehicles: tuple[str, ...] = ()
    species: tuple[str, ...] = ()
    created: str = ""
    edited: str = ""
    source_url: str = ""


@dataclass(frozen=True)
class CatalogStats:
    """Aggregate counts over the loaded collection."""

    total: int = 0
    characters: int = 0
    planets: int = 0
    starships: int = 0
    vehicles: int = 0
    species: int = 0
    directors: int = 0
    total_count: int = 0
    last_fetched_at: str | None = None

"""Read-only projections of a ``CatalogState`` snapshot.

Every selector is recomputed from the snapshot it is handed and never
mutates it. Two behaviors are kept on purpose:

* the sort comparator reports "no preference" when either side has no
  value for the active key, instead of pushing blanks to one end;
* ``grouped_by_era`` only knows episodes 1-9, other episode numbers
  appear in no bucket.
"""

from __future__ import annotations

import locale
import unicodedata
from datetime import date
from functools import cmp_to_key

from .models import UNKNOWN, CatalogStats, LifecycleStatus, MovieRecord, SortKey
from .state import CatalogState

ERAS: dict[str, frozenset[int]] = {
    "original": frozenset({4, 5, 6}),
    "prequel": frozenset({1, 2, 3}),
    "sequel": frozenset({7, 8, 9}),
}


def _sign(value: int | float) -> int:
    return (value > 0) - (value < 0)


def _parse_day(value: str) -> date | None:
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _fold(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def locale_compare(a: str, b: str) -> int:
    """Compare ignoring case and accents first, then exactly."""
    primary = locale.strcoll(_fold(a), _fold(b))
    if primary:
        return _sign(primary)
    return _sign(locale.strcoll(a, b))


def compare_movies(
    a: MovieRecord, b: MovieRecord, key: SortKey | str, ascending: bool = True,
) -> int:
    key = SortKey(key)
    val_a = getattr(a, key.value)
    val_b = getattr(b, key.value)

    # Blank (or 0 episode) on either side: no preference.
    if not val_a or not val_b:
        return 0

    if key is SortKey.EPISODE_ID:
        result = _sign(val_a - val_b)
    elif key is SortKey.RELEASE_DATE:
        day_a = _parse_day(val_a)
        day_b = _parse_day(val_b)
        if day_a is None or day_b is None:
            return 0
        result = _sign((day_a - day_b).days)
    else:
        result = locale_compare(val_a, val_b)

    return result if ascending else -result


def sort_movies(
    movies: list[MovieRecord] | tuple[MovieRecord, ...],
    key: SortKey | str,
    ascending: bool = True,
) -> list[MovieRecord]:
    """Stable sort of ``movies`` by ``key``; the input is left untouched."""
    key = SortKey(key)
    return sorted(
        movies,
        key=cmp_to_key(lambda a, b: compare_movies(a, b, key, ascending)),
    )


# --- Plain state reads ---


def sort_config(state: CatalogState) -> tuple[SortKey, bool]:
    return state.sort_key, state.sort_ascending


def collection_status(state: CatalogState) -> LifecycleStatus:
    if state.loading:
        return LifecycleStatus.LOADING
    if state.error is not None:
        return LifecycleStatus.FAILED
    if state.last_fetched_at is not None:
        return LifecycleStatus.SUCCEEDED
    return LifecycleStatus.IDLE


def selected_status(state: CatalogState) -> LifecycleStatus:
    if state.selected_loading:
        return LifecycleStatus.LOADING
    if state.selected_error is not None:
        return LifecycleStatus.FAILED
    if state.selected_item is not None:
        return LifecycleStatus.SUCCEEDED
    return LifecycleStatus.IDLE


# --- Derived views ---


def sorted_items(state: CatalogState) -> list[MovieRecord]:
    return sort_movies(state.items, state.sort_key, state.sort_ascending)


def filtered_items(state: CatalogState, query: str) -> list[MovieRecord]:
    """Sorted items whose title or director contains ``query``, any case."""
    ordered = sorted_items(state)
    if not query:
        return ordered
    needle = query.lower()
    return [
        movie for movie in ordered
        if needle in movie.title.lower() or needle in movie.director.lower()
    ]


def movies_by_director(state: CatalogState, director: str) -> list[MovieRecord]:
    needle = director.lower()
    return [movie for movie in state.items if needle in movie.director.lower()]


def movie_by_episode(state: CatalogState, episode_id: int | str) -> MovieRecord | None:
    try:
        wanted = int(episode_id)
    except (TypeError, ValueError):
        return None
    for movie in state.items:
        if movie.episode_id == wanted:
            return movie
    return None


def grouped_by_era(state: CatalogState) -> dict[str, list[MovieRecord]]:
    """Split items into original/prequel/sequel by episode number.

    Items keep response order inside each bucket. Episodes outside 1-9
    are dropped.
    """
    return {
        era: [movie for movie in state.items if movie.episode_id in episodes]
        for era, episodes in ERAS.items()
    }


def stats(state: CatalogState) -> CatalogStats:
    """Aggregate counts over ``state.items``.

    Films without a director (normalized to "Unknown") do not count
    towards ``directors``.
    """
    items = state.items
    return CatalogStats(
        total=len(items),
        characters=sum(len(m.characters) for m in items),
        planets=sum(len(m.planets) for m in items),
        starships=sum(len(m.starships) for m in items),
        vehicles=sum(len(m.vehicles) for m in items),
        species=sum(len(m.species) for m in items),
        directors=len({m.director for m in items if m.director != UNKNOWN}),
        total_count=state.total_count,
        last_fetched_at=state.last_fetched_at,
    )

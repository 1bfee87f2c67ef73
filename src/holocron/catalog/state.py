"""Catalog state snapshot and the transitions that replace it.

``CatalogState`` is immutable; ``reduce`` returns a new snapshot for each
action. Two lifecycles live side by side and never touch each other's
fields: the collection fetch (``loading``/``error``/``items``) and the
single-item fetch (``selected_*``).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import ClassVar

from holocron.events import types as ev

from .models import MovieRecord, SortKey

DEFAULT_COLLECTION_ERROR = "Failed to fetch movies"
DEFAULT_ITEM_ERROR = "Failed to fetch movie details"


@dataclass(frozen=True)
class CatalogState:
    # Collection fetch
    items: tuple[MovieRecord, ...] = ()
    loading: bool = False
    error: str | None = None

    # Single-item fetch
    selected_item: MovieRecord | None = None
    selected_loading: bool = False
    selected_error: str | None = None

    # UI
    sort_key: SortKey = SortKey.RELEASE_DATE
    sort_ascending: bool = True

    total_count: int = 0
    last_fetched_at: str | None = None


INITIAL_STATE = CatalogState()


# --- Actions ---


@dataclass(frozen=True)
class Action:
    event_type: ClassVar[str] = ""


@dataclass(frozen=True)
class CollectionFetchStarted(Action):
    event_type: ClassVar[str] = ev.COLLECTION_FETCH_STARTED


@dataclass(frozen=True)
class CollectionFetchSucceeded(Action):
    event_type: ClassVar[str] = ev.COLLECTION_FETCH_SUCCEEDED
    records: tuple[MovieRecord, ...] = ()


@dataclass(frozen=True)
class CollectionFetchFailed(Action):
    event_type: ClassVar[str] = ev.COLLECTION_FETCH_FAILED
    message: str = ""


@dataclass(frozen=True)
class ItemFetchStarted(Action):
    event_type: ClassVar[str] = ev.ITEM_FETCH_STARTED


@dataclass(frozen=True)
class ItemFetchSucceeded(Action):
    event_type: ClassVar[str] = ev.ITEM_FETCH_SUCCEEDED
    record: MovieRecord | None = None


@dataclass(frozen=True)
class ItemFetchFailed(Action):
    event_type: ClassVar[str] = ev.ITEM_FETCH_FAILED
    message: str = ""


@dataclass(frozen=True)
class SetSort(Action):
    event_type: ClassVar[str] = ev.SORT_CHANGED
    key: SortKey = SortKey.RELEASE_DATE
    ascending: bool = True


@dataclass(frozen=True)
class ClearErrors(Action):
    event_type: ClassVar[str] = ev.ERRORS_CLEARED


@dataclass(frozen=True)
class ClearSelected(Action):
    event_type: ClassVar[str] = ev.SELECTED_CLEARED


@dataclass(frozen=True)
class Reset(Action):
    event_type: ClassVar[str] = ev.CATALOG_RESET


def _utcnow() -> str:
    return datetime.now(UTC).isoformat()


def reduce(state: CatalogState, action: Action, *, now: str | None = None) -> CatalogState:
    """Apply one action and return the next state."""
    if isinstance(action, CollectionFetchStarted):
        return replace(state, loading=True, error=None)
    if isinstance(action, CollectionFetchSucceeded):
        records = tuple(action.records)
        return replace(
            state,
            loading=False,
            items=records,
            total_count=len(records),
            last_fetched_at=now or _utcnow(),
            error=None,
        )
    if isinstance(action, CollectionFetchFailed):
        # A failed re-fetch drops whatever was loaded before.
        return replace(
            state,
            loading=False,
            error=action.message or DEFAULT_COLLECTION_ERROR,
            items=(),
            total_count=0,
        )

    if isinstance(action, ItemFetchStarted):
        return replace(state, selected_loading=True, selected_error=None)
    if isinstance(action, ItemFetchSucceeded):
        return replace(
            state,
            selected_loading=False,
            selected_item=action.record,
            selected_error=None,
        )
    if isinstance(action, ItemFetchFailed):
        return replace(
            state,
            selected_loading=False,
            selected_error=action.message or DEFAULT_ITEM_ERROR,
            selected_item=None,
        )

    if isinstance(action, SetSort):
        return replace(state, sort_key=action.key, sort_ascending=action.ascending)
    if isinstance(action, ClearErrors):
        return replace(state, error=None, selected_error=None)
    if isinstance(action, ClearSelected):
        return replace(state, selected_item=None, selected_error=None)
    if isinstance(action, Reset):
        return INITIAL_STATE

    raise TypeError(f"Unknown catalog action: {type(action).__name__}")

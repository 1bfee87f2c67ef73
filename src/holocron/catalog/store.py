"""Process-wide catalog store and the async commands that feed it.

``CatalogStore`` owns the single ``CatalogState`` snapshot. The only way
to change it is ``dispatch``, which swaps in the reduced snapshot and
publishes an event. Everything runs on one event loop, so a dispatch is
atomic with respect to every other dispatch.

``CatalogService`` wraps the two remote reads as commands. A command
dispatches its "started" action, awaits the client, then dispatches
success or failure. Commands are not serialized: two collection fetches
in flight at once both apply, and whichever response arrives last is
what the store ends up holding.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol, TypeVar

from holocron.events.bus import ALL_EVENTS, Event, EventBus, EventHandler
from holocron.exceptions import RemoteError

from .models import MovieRecord, SortKey
from .state import (
    INITIAL_STATE,
    Action,
    CatalogState,
    ClearErrors,
    ClearSelected,
    CollectionFetchFailed,
    CollectionFetchStarted,
    CollectionFetchSucceeded,
    ItemFetchFailed,
    ItemFetchStarted,
    ItemFetchSucceeded,
    Reset,
    SetSort,
    reduce,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FilmsSource(Protocol):
    async def fetch_all(self) -> list[MovieRecord]: ...

    async def fetch_by_id(self, film_id: str | int) -> MovieRecord: ...


def _event_data(action: Action, state: CatalogState) -> dict[str, Any]:
    if isinstance(action, CollectionFetchSucceeded):
        return {"count": state.total_count, "last_fetched_at": state.last_fetched_at}
    if isinstance(action, CollectionFetchFailed):
        return {"error": state.error}
    if isinstance(action, ItemFetchSucceeded):
        uid = state.selected_item.uid if state.selected_item else None
        return {"uid": uid}
    if isinstance(action, ItemFetchFailed):
        return {"error": state.selected_error}
    if isinstance(action, SetSort):
        return {"key": str(state.sort_key), "ascending": state.sort_ascending}
    return {}


class CatalogStore:
    """Single owner of the catalog state."""

    def __init__(self, bus: EventBus | None = None) -> None:
        self._state = INITIAL_STATE
        self._bus = bus or EventBus()

    @property
    def state(self) -> CatalogState:
        return self._state

    @property
    def bus(self) -> EventBus:
        return self._bus

    def dispatch(self, action: Action) -> CatalogState:
        """Apply one transition and notify subscribers."""
        self._state = reduce(self._state, action)
        logger.debug("Applied %s", type(action).__name__)
        self._bus.emit(Event(
            event_type=action.event_type,
            data=_event_data(action, self._state),
        ))
        return self._state

    def subscribe(
        self, handler: EventHandler, event_type: str = ALL_EVENTS,
    ) -> Callable[[], None]:
        """Call ``handler`` after transitions of ``event_type`` (default: all).

        Returns an unsubscriber.
        """
        self._bus.subscribe(handler, event_type)
        return lambda: self._bus.unsubscribe(handler, event_type)

    def select(self, selector: Callable[..., T], *args: Any) -> T:
        """Evaluate a selector against the current snapshot."""
        return selector(self._state, *args)

    # --- UI transitions ---

    def set_sort(self, key: SortKey | str, ascending: bool = True) -> None:
        self.dispatch(SetSort(key=SortKey(key), ascending=bool(ascending)))

    def clear_errors(self) -> None:
        self.dispatch(ClearErrors())

    def clear_selected(self) -> None:
        self.dispatch(ClearSelected())

    def reset(self) -> None:
        self.dispatch(Reset())


class CatalogService:
    """Async commands that run a remote read and record its outcome.

    A command returns only after async subscribers to its transitions
    have finished.
    """

    def __init__(self, store: CatalogStore, client: FilmsSource) -> None:
        self._store = store
        self._client = client

    @property
    def store(self) -> CatalogStore:
        return self._store

    async def trigger_collection_fetch(self) -> list[MovieRecord] | None:
        """Load the whole collection. Returns the records, or None on failure."""
        self._store.dispatch(CollectionFetchStarted())
        try:
            records = await self._client.fetch_all()
        except RemoteError as e:
            logger.info("Collection fetch failed: %s", e)
            self._store.dispatch(CollectionFetchFailed(message=str(e)))
            await self._store.bus.drain()
            return None
        self._store.dispatch(CollectionFetchSucceeded(records=tuple(records)))
        await self._store.bus.drain()
        return records

    async def trigger_item_fetch(self, film_id: str | int) -> MovieRecord | None:
        """Load one film into ``selected_item``. Returns it, or None on failure."""
        self._store.dispatch(ItemFetchStarted())
        try:
            record = await self._client.fetch_by_id(film_id)
        except RemoteError as e:
            logger.info("Fetch of film %s failed: %s", film_id, e)
            self._store.dispatch(ItemFetchFailed(message=str(e)))
            await self._store.bus.drain()
            return None
        self._store.dispatch(ItemFetchSucceeded(record=record))
        await self._store.bus.drain()
        return record

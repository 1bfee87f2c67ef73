"""Tests for the catalog store and its async commands."""

from __future__ import annotations

import asyncio

import pytest

from holocron.catalog.client import FilmsClient
from holocron.catalog.models import MovieRecord, SortKey
from holocron.catalog.selectors import sorted_items
from holocron.catalog.state import CollectionFetchStarted
from holocron.catalog.store import CatalogService, CatalogStore
from holocron.events import types as ev
from holocron.events.bus import Event, EventBus
from holocron.exceptions import HolocronError, TransportError

BASE_URL = "https://films.test/api"


class GatedSource:
    """Films source whose responses the test releases by hand."""

    def __init__(self) -> None:
        self.collection_calls: list[asyncio.Future] = []
        self.item_calls: list[asyncio.Future] = []

    async def fetch_all(self) -> list[MovieRecord]:
        future = asyncio.get_running_loop().create_future()
        self.collection_calls.append(future)
        return await future

    async def fetch_by_id(self, film_id) -> MovieRecord:
        future = asyncio.get_running_loop().create_future()
        self.item_calls.append(future)
        return await future


async def _settle() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


class TestCatalogStore:
    def test_starts_with_defaults(self):
        store = CatalogStore()
        assert store.state.items == ()
        assert store.state.sort_key is SortKey.RELEASE_DATE

    def test_dispatch_emits_event(self):
        bus = EventBus()
        received: list[Event] = []
        bus.subscribe(received.append, ev.COLLECTION_FETCH_STARTED)
        store = CatalogStore(bus)
        store.dispatch(CollectionFetchStarted())
        assert [e.event_type for e in received] == [ev.COLLECTION_FETCH_STARTED]

    def test_subscribe_and_unsubscribe(self):
        store = CatalogStore()
        received: list[Event] = []
        unsubscribe = store.subscribe(received.append)
        store.set_sort("title", False)
        unsubscribe()
        store.clear_errors()
        assert len(received) == 1
        assert received[0].event_type == ev.SORT_CHANGED
        assert received[0].data == {"key": "title", "ascending": False}

    def test_subscribe_to_one_event_type(self):
        store = CatalogStore()
        received: list[Event] = []
        store.subscribe(received.append, ev.SORT_CHANGED)
        store.clear_errors()
        store.set_sort(SortKey.TITLE, True)
        store.reset()
        assert [e.event_type for e in received] == [ev.SORT_CHANGED]

    def test_failing_subscriber_does_not_break_dispatch(self):
        store = CatalogStore()

        def _boom(event: Event) -> None:
            raise RuntimeError("view crashed")

        store.subscribe(_boom)
        store.set_sort(SortKey.DIRECTOR, True)
        assert store.state.sort_key is SortKey.DIRECTOR

    def test_set_sort_rejects_unknown_key(self):
        store = CatalogStore()
        with pytest.raises(ValueError):
            store.set_sort("budget", True)

    def test_set_sort_then_reset(self):
        store = CatalogStore()
        store.set_sort(SortKey.EPISODE_ID, False)
        store.reset()
        assert store.state.sort_key is SortKey.RELEASE_DATE
        assert store.state.sort_ascending is True

    def test_select_runs_against_current_state(self):
        store = CatalogStore()
        assert store.select(sorted_items) == []


class TestCatalogService:
    async def test_collection_fetch_success(self, json_client, films_payload):
        store = CatalogStore()
        async with json_client({"/films": films_payload}) as http:
            service = CatalogService(store, FilmsClient(BASE_URL, client=http))
            records = await service.trigger_collection_fetch()
        assert records is not None and len(records) == 6
        assert store.state.loading is False
        assert store.state.total_count == 6
        assert store.state.last_fetched_at is not None
        assert [m.episode_id for m in store.state.items] == [4, 5, 6, 1, 2, 3]

    async def test_command_waits_for_async_subscribers(self, json_client, films_payload):
        store = CatalogStore()
        seen: list[int] = []

        async def on_loaded(event: Event) -> None:
            await asyncio.sleep(0)
            seen.append(event.data["count"])

        store.subscribe(on_loaded, ev.COLLECTION_FETCH_SUCCEEDED)
        async with json_client({"/films": films_payload}) as http:
            service = CatalogService(store, FilmsClient(BASE_URL, client=http))
            await service.trigger_collection_fetch()
        assert seen == [6]
        assert store.bus.pending == 0

    async def test_collection_fetch_failure_after_success_clears(
        self, json_client, films_payload,
    ):
        store = CatalogStore()
        async with json_client({"/films": films_payload}) as http:
            await CatalogService(store, FilmsClient(BASE_URL, client=http)).trigger_collection_fetch()
        assert store.state.total_count == 6

        async with json_client({"/films": []}, status_code=500) as http:
            result = await CatalogService(
                store, FilmsClient(BASE_URL, client=http),
            ).trigger_collection_fetch()
        assert result is None
        assert store.state.items == ()
        assert store.state.total_count == 0
        assert store.state.error == "Failed to fetch movies: HTTP error! status: 500"

    async def test_wrong_shape_body_is_a_failed_fetch(self, json_client):
        store = CatalogStore()
        async with json_client({"/films": {"detail": "Not found"}}) as http:
            service = CatalogService(store, FilmsClient(BASE_URL, client=http))
            assert await service.trigger_collection_fetch() is None
        assert store.state.error == "Failed to fetch movies: expected a list of films"
        assert store.state.last_fetched_at is None

    async def test_clear_then_retry(self, json_client, films_payload):
        store = CatalogStore()
        async with json_client({}) as http:
            await CatalogService(store, FilmsClient(BASE_URL, client=http)).trigger_collection_fetch()
        assert store.state.error is not None

        store.clear_errors()
        assert store.state.error is None
        async with json_client({"/films": films_payload}) as http:
            await CatalogService(store, FilmsClient(BASE_URL, client=http)).trigger_collection_fetch()
        assert store.state.error is None
        assert store.state.total_count == 6

    async def test_item_fetch(self, json_client, raw_film):
        store = CatalogStore()
        film = raw_film(4, "A New Hope", "George Lucas", "1977-05-25")
        async with json_client({"/films/1": {"result": film}}) as http:
            service = CatalogService(store, FilmsClient(BASE_URL, client=http))
            record = await service.trigger_item_fetch(1)
        assert record is not None
        assert store.state.selected_item == record
        assert store.state.selected_loading is False

    async def test_item_fetch_failure(self, json_client):
        store = CatalogStore()
        async with json_client({}) as http:
            service = CatalogService(store, FilmsClient(BASE_URL, client=http))
            assert await service.trigger_item_fetch(42) is None
        assert store.state.selected_item is None
        assert store.state.selected_error == "Failed to fetch movie: HTTP error! status: 404"
        assert store.state.error is None

    async def test_non_remote_errors_propagate(self):
        class Broken:
            async def fetch_all(self):
                raise KeyError("bug")

            async def fetch_by_id(self, film_id):
                raise KeyError("bug")

        service = CatalogService(CatalogStore(), Broken())
        with pytest.raises(KeyError):
            await service.trigger_collection_fetch()

    async def test_remote_errors_are_holocron_errors(self):
        assert issubclass(TransportError, HolocronError)


class TestConcurrency:
    async def test_last_applied_collection_fetch_wins(self, make_record):
        source = GatedSource()
        store = CatalogStore()
        service = CatalogService(store, source)

        payload_a = [make_record(1), make_record(2)]
        payload_b = [make_record(9)]

        task_a = asyncio.create_task(service.trigger_collection_fetch())
        await _settle()
        task_b = asyncio.create_task(service.trigger_collection_fetch())
        await _settle()
        assert len(source.collection_calls) == 2
        assert store.state.loading is True

        source.collection_calls[1].set_result(payload_b)
        await task_b
        assert list(store.state.items) == payload_b

        source.collection_calls[0].set_result(payload_a)
        await task_a
        assert list(store.state.items) == payload_a
        assert store.state.total_count == 2

    async def test_late_failure_overwrites_earlier_success(self, make_record):
        source = GatedSource()
        store = CatalogStore()
        service = CatalogService(store, source)

        task_a = asyncio.create_task(service.trigger_collection_fetch())
        task_b = asyncio.create_task(service.trigger_collection_fetch())
        await _settle()

        source.collection_calls[1].set_result([make_record(4)])
        await task_b
        source.collection_calls[0].set_exception(TransportError("down", status=503))
        await task_a
        assert store.state.items == ()
        assert store.state.error == "down"

    async def test_lifecycles_run_independently(self, make_record):
        source = GatedSource()
        store = CatalogStore()
        service = CatalogService(store, source)

        collection = asyncio.create_task(service.trigger_collection_fetch())
        item = asyncio.create_task(service.trigger_item_fetch(4))
        await _settle()
        assert store.state.loading is True
        assert store.state.selected_loading is True

        source.item_calls[0].set_exception(TransportError("missing", status=404))
        await item
        assert store.state.selected_error == "missing"
        assert store.state.loading is True
        assert store.state.error is None

        source.collection_calls[0].set_result([make_record(1)])
        await collection
        assert store.state.total_count == 1
        assert store.state.selected_error == "missing"

"""Change notifications for the catalog store.

The store emits one ``Event`` per applied transition. Subscribers listen
to one event type or to all of them. Sync subscribers run before
``emit`` returns; async subscribers are scheduled on the running loop
and can be awaited with ``drain``.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class Event:
    event_type: str
    data: dict = field(default_factory=dict)
    timestamp: str = ""

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()


EventHandler = Callable[[Event], Any]

# Key under which handlers for every event type are registered.
ALL_EVENTS = "*"


def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__name__", repr(handler))


def _is_async(handler: EventHandler) -> bool:
    return inspect.iscoroutinefunction(handler) or inspect.iscoroutinefunction(
        getattr(handler, "__call__", None)
    )


class EventBus:
    """Per-type and catch-all subscriptions for store events."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)
        self._pending: set[asyncio.Task[Any]] = set()

    def subscribe(self, handler: EventHandler, event_type: str = ALL_EVENTS) -> None:
        self._handlers[event_type].append(handler)

    def unsubscribe(self, handler: EventHandler, event_type: str = ALL_EVENTS) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: Event) -> None:
        """Deliver ``event``. Subscriber failures are logged, never raised."""
        targets = [*self._handlers.get(ALL_EVENTS, ()), *self._handlers.get(event.event_type, ())]
        for handler in targets:
            if _is_async(handler):
                self._schedule(handler, event)
                continue
            try:
                handler(event)
            except Exception as e:
                logger.warning(
                    "Subscriber %s failed on %s: %s",
                    _handler_name(handler), event.event_type, e,
                )

    def _schedule(self, handler: EventHandler, event: Event) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(
                "Skipped async subscriber %s: no running event loop",
                _handler_name(handler),
            )
            return
        task = loop.create_task(handler(event), name=f"{event.event_type}:{_handler_name(handler)}")
        self._pending.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning("Async subscriber %s failed: %s", task.get_name(), error)

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait until every scheduled async subscriber has finished."""
        if not self._pending:
            return
        try:
            await asyncio.wait_for(
                asyncio.gather(*self._pending, return_exceptions=True),
                timeout=timeout,
            )
        except TimeoutError:
            logger.warning("Timed out waiting for %d async subscriber(s)", self.pending)

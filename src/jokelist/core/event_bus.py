"""Joke list change notifications over an ``asyncio.Queue``.

The controller mutates state synchronously on the NiceGUI event loop and
announces each change with :meth:`EventBus.publish_nowait`.  A single
consumer task drains the queue and calls every handler registered for the
event type, so page re-renders never run inside a controller call.

* Handlers may be sync or async.
* A handler that raises is dropped after its failure is logged.
* The queue is bounded; on overflow the oldest event is discarded.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from jokelist.core.models.event import Event

_log = logging.getLogger(__name__)

Handler = Callable[[Event], Any]


class EventBus:
    """Queue-backed dispatcher for controller change events.

    Args:
        queue_size: Events held before the oldest is dropped.
    """

    def __init__(self, queue_size: int = 1000) -> None:
        self._queue_size = queue_size
        self._queue: asyncio.Queue[Event] | None = None
        self._handlers: dict[str, list[Handler]] = {}
        self._consumer_task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._consumer_task is not None

    async def start(self) -> None:
        """Create the queue and the consumer task on the running loop."""
        self._queue = asyncio.Queue(maxsize=self._queue_size)
        self._consumer_task = asyncio.create_task(self._consume(), name="event-bus-consumer")
        _log.info("Event bus started (queue_size=%d)", self._queue_size)

    async def stop(self) -> None:
        """Cancel the consumer and forget every handler."""
        if self._consumer_task is not None:
            self._consumer_task.cancel()
            try:
                await self._consumer_task
            except asyncio.CancelledError:
                pass
            self._consumer_task = None
        self._handlers.clear()
        _log.info("Event bus stopped")

    def subscribe(self, event_type: str, handler: Handler) -> None:
        """Call *handler* with every future *event_type* event."""
        self._handlers.setdefault(event_type, []).append(handler)

    def publish_nowait(self, event_type: str, payload: dict[str, Any] | None = None) -> None:
        """Queue an event without awaiting.  The bus must be started."""
        if self._queue is None:
            raise RuntimeError("EventBus.start() has not been called")
        event = Event(event_type=event_type, payload=payload or {})
        if self._queue.full():
            self._queue.get_nowait()
            _log.warning("Event bus queue overflow — dropped oldest event")
        self._queue.put_nowait(event)

    async def _consume(self) -> None:
        assert self._queue is not None
        while True:
            event = await self._queue.get()
            await self._dispatch(event)

    async def _dispatch(self, event: Event) -> None:
        handlers = self._handlers.get(event.event_type, [])
        for handler in list(handlers):
            try:
                result = handler(event)
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                _log.exception(
                    "Handler %s for '%s' raised — dropping it", handler, event.event_type
                )
                handlers.remove(handler)

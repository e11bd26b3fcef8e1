"""
Postbridge - Realtime channels.

PostgREST has no push transport. Code written against a realtime client
still calls .channel(...).on(...).subscribe(cb); UnsupportedRealtimeChannel
accepts those calls, reports SUBSCRIBED once, and never delivers an event.
Callers that need fresh data poll with a normal query.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

SUBSCRIBED = "SUBSCRIBED"

StatusCallback = Callable[[str], Any]
EventCallback = Callable[[dict], Any]


@runtime_checkable
class RealtimeChannel(Protocol):
    """Shape of a realtime channel as seen by callers."""

    name: str
    supports_live_events: bool

    def on(self, event: str, filter: dict | None, callback: EventCallback) -> "RealtimeChannel":
        ...

    def subscribe(self, callback: StatusCallback | None = None) -> "RealtimeChannel":
        ...

    def unsubscribe(self) -> None:
        ...


class UnsupportedRealtimeChannel:
    """
    Channel for a backend without realtime support.

    on() registers nothing, subscribe() schedules the status callback for
    the next event-loop turn with SUBSCRIBED, and no data event ever fires.
    """

    supports_live_events = False

    def __init__(self, name: str):
        self.name = name
        self._pending: set[asyncio.Task] = set()

    def __repr__(self) -> str:
        return f"<UnsupportedRealtimeChannel {self.name!r}>"

    def on(self, event: str, filter: dict | None, callback: EventCallback) -> "UnsupportedRealtimeChannel":
        return self

    def subscribe(self, callback: StatusCallback | None = None) -> "UnsupportedRealtimeChannel":
        """
        Report a successful subscription asynchronously.

        The callback may be a plain function or a coroutine function; a
        coroutine it returns is run as a task on the same loop.

        Raises:
            RuntimeError: If called outside a running event loop.
        """
        if callback is not None:
            loop = asyncio.get_running_loop()
            loop.call_soon(self._report_status, loop, callback, SUBSCRIBED)
        return self

    def _report_status(self, loop: asyncio.AbstractEventLoop, callback: StatusCallback, status: str) -> None:
        result = callback(status)
        if inspect.isawaitable(result):
            # The loop only keeps weak references to tasks
            task = loop.create_task(_await(result))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    def unsubscribe(self) -> None:
        logger.debug(f"Channel {self.name!r} unsubscribed (no-op)")


async def _await(awaitable: Awaitable[Any]) -> Any:
    return await awaitable

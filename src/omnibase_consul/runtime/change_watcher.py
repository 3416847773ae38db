# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Long-poll change watcher for a single KV key.

ChangeWatcher turns Consul blocking queries into a stream of entries for
exactly one consumer. Each watcher owns one background ``asyncio.Task``:

    STARTING -> POLLING -> DELIVERING -> POLLING -> ... -> CLOSED

Loop Semantics:
    - The wait-index is seeded from the IndexTracker; with nothing recorded
      the sentinel index ``1`` is used ("any change since the beginning").
    - POLLING issues one blocking fetch with that wait-index. The store
      returns when the key changes or its own wait duration elapses.
    - A store failure closes the stream with that error and ends the loop.
    - When the sentinel was used and the key does not exist, the loop polls
      again without delivering. There is no delay by default, so a store
      that answers sentinel queries instantly makes this a hot loop; set
      ``empty_poll_backoff_seconds`` to pace it.
    - Otherwise the tracker is updated with the response index and the
      entry (``found=False`` when the key does not exist) is handed to the
      consumer. The loop waits until the consumer has taken it before
      polling again.
    - The wait-index never goes below the last delivered index, so
      delivered indices are non-decreasing.

Cancellation:
    ``stop()`` sets the stop event, which is checked before every fetch, and
    cancels the task so an in-flight fetch or hand-off is abandoned. The
    executor thread running an abandoned fetch finishes on its own when the
    store's wait duration elapses; its result is discarded.

Concurrency Safety:
    The loop and the stream are coroutine-safe: state transitions and the
    single close happen on the event loop. The IndexTracker is thread-safe.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Final
from uuid import UUID, uuid4

from omnibase_consul.enums import EnumInfraTransportType, EnumWatchState
from omnibase_consul.errors import ModelInfraErrorContext, WatchClosedError
from omnibase_consul.models import ModelKVEntry
from omnibase_consul.runtime.index_tracker import IndexTracker
from omnibase_consul.utils.util_error_sanitization import sanitize_error_message

logger = logging.getLogger(__name__)

SENTINEL_WAIT_INDEX: Final[int] = 1

WatchFetcher = Callable[[str, int], Awaitable[ModelKVEntry]]


class _StreamClosed:
    """Marker queued once when a WatchStream closes."""


_STREAM_CLOSED: Final[_StreamClosed] = _StreamClosed()


class WatchStream:
    """Single-consumer delivery channel for one watched key.

    Entries are received with ``await stream.receive()`` or by iterating
    with ``async for``. Once the stream closes, ``receive()`` raises
    WatchClosedError on every call and iteration ends. Inspect ``error`` to
    tell a store failure (the original error) from an explicit stop
    (``None``).

    Example:
        >>> stream = handler.watch("service/feature_flag")
        >>> async for entry in stream:
        ...     print(entry.index, entry.value)
        >>> if stream.error is not None:
        ...     print("watch ended due to error")
    """

    def __init__(self, key: str, watcher: ChangeWatcher) -> None:
        self._key = key
        self._watcher = watcher
        self._queue: asyncio.Queue[ModelKVEntry | _StreamClosed] = asyncio.Queue()
        self._closed = False
        self._error: BaseException | None = None

    @property
    def key(self) -> str:
        """Return the watched key."""
        return self._key

    @property
    def closed(self) -> bool:
        """Return whether the stream has been closed."""
        return self._closed

    @property
    def error(self) -> BaseException | None:
        """Return the error that closed the stream, if any."""
        return self._error

    async def receive(self) -> ModelKVEntry:
        """Wait for and return the next entry.

        Raises:
            WatchClosedError: If the stream is closed; ``cause`` is the
                terminal store error or None after ``stop()``.
        """
        item = await self._queue.get()
        self._queue.task_done()
        if isinstance(item, _StreamClosed):
            # keep the marker queued so every later receive sees the closure
            self._queue.put_nowait(item)
            ctx = ModelInfraErrorContext(
                transport_type=EnumInfraTransportType.CONSUL,
                operation="watch",
                target_name=self._key,
                correlation_id=self._watcher.correlation_id,
            )
            raise WatchClosedError(self._key, self._error, context=ctx)
        return item

    async def stop(self) -> None:
        """Stop the underlying watcher and close the stream."""
        await self._watcher.stop()

    def __aiter__(self) -> WatchStream:
        return self

    async def __anext__(self) -> ModelKVEntry:
        try:
            return await self.receive()
        except WatchClosedError:
            raise StopAsyncIteration from None

    async def _deliver(self, entry: ModelKVEntry) -> None:
        """Hand ``entry`` to the consumer and wait until it has been taken."""
        await self._queue.put(entry)
        await self._queue.join()

    def _close(self, error: BaseException | None) -> bool:
        """Close the stream once. Returns False if it was already closed."""
        if self._closed:
            return False
        self._closed = True
        self._error = error
        # an entry still waiting for hand-off is dropped, not delivered late
        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()
        self._queue.put_nowait(_STREAM_CLOSED)
        return True


class ChangeWatcher:
    """Background long-poll loop delivering changes of one key.

    Attributes:
        key: The watched key
        state: Current EnumWatchState
        stream: The consumer-side WatchStream

    Example:
        >>> watcher = ChangeWatcher("app/flag", fetch, tracker)
        >>> stream = watcher.start()
        >>> entry = await stream.receive()
        >>> await watcher.stop()
    """

    def __init__(
        self,
        key: str,
        fetch: WatchFetcher,
        tracker: IndexTracker,
        *,
        empty_poll_backoff_seconds: float = 0.0,
        correlation_id: UUID | None = None,
    ) -> None:
        """Initialize the watcher without starting it.

        Args:
            key: KV key to watch
            fetch: Coroutine ``fetch(key, wait_index)`` performing one
                blocking query and returning the entry (``found=False`` when
                the key does not exist) with the response index
            tracker: Shared IndexTracker
            empty_poll_backoff_seconds: Delay before re-polling a key that
                does not exist yet under the sentinel index
            correlation_id: Correlation ID for logs and errors
        """
        self._key = key
        self._fetch = fetch
        self._tracker = tracker
        self._empty_poll_backoff = empty_poll_backoff_seconds
        self._correlation_id = correlation_id or uuid4()

        self._state = EnumWatchState.STARTING
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self._stream = WatchStream(key, self)
        self._last_delivered_index = 0
        self._delivered_count = 0

    @property
    def key(self) -> str:
        """Return the watched key."""
        return self._key

    @property
    def state(self) -> EnumWatchState:
        """Return the current loop state."""
        return self._state

    @property
    def stream(self) -> WatchStream:
        """Return the consumer-side stream."""
        return self._stream

    @property
    def correlation_id(self) -> UUID:
        """Return the watch correlation ID."""
        return self._correlation_id

    @property
    def task(self) -> asyncio.Task[None] | None:
        """Return the background task, or None before ``start()``."""
        return self._task

    @property
    def is_running(self) -> bool:
        """Return whether the background loop is still active."""
        return self._task is not None and not self._task.done()

    def start(self) -> WatchStream:
        """Spawn the background loop and return the stream.

        Must be called from a running event loop. Calling it again is a
        no-op that returns the same stream.
        """
        if self._task is not None or self._state is EnumWatchState.CLOSED:
            return self._stream

        self._task = asyncio.create_task(
            self._run(), name=f"consul-watch:{self._key}"
        )
        logger.debug(
            "Watch started",
            extra={"key": self._key, "correlation_id": str(self._correlation_id)},
        )
        return self._stream

    async def stop(self) -> None:
        """Stop the loop and close the stream.

        Idempotent. After ``stop()`` returns the stream is closed with no
        error and nothing more will be delivered.
        """
        self._stop_event.set()
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._close(None)

    def _next_wait_index(self) -> int:
        tracked = self._tracker.get(self._key) or 0
        return max(tracked, self._last_delivered_index) or SENTINEL_WAIT_INDEX

    async def _run(self) -> None:
        error: BaseException | None = None
        try:
            while not self._stop_event.is_set():
                wait_index = self._next_wait_index()
                self._state = EnumWatchState.POLLING
                try:
                    entry = await self._fetch(self._key, wait_index)
                except Exception as e:
                    error = e
                    logger.warning(
                        "Watch terminated by store error",
                        extra={
                            "key": self._key,
                            "wait_index": wait_index,
                            "error": sanitize_error_message(e),
                            "correlation_id": str(self._correlation_id),
                        },
                    )
                    return

                if self._stop_event.is_set():
                    return

                if wait_index == SENTINEL_WAIT_INDEX and not entry.found:
                    if self._empty_poll_backoff > 0:
                        await self._wait_for_stop(self._empty_poll_backoff)
                    continue

                self._tracker.set(self._key, entry.index)
                self._state = EnumWatchState.DELIVERING
                await self._stream._deliver(entry)
                self._last_delivered_index = max(
                    self._last_delivered_index, entry.index
                )
                self._delivered_count += 1
        finally:
            self._close(error)

    async def _wait_for_stop(self, timeout: float) -> None:
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=timeout)
        except TimeoutError:
            pass

    def _close(self, error: BaseException | None) -> None:
        if self._state is EnumWatchState.CLOSED:
            return
        self._state = EnumWatchState.CLOSED
        self._stream._close(error)
        logger.info(
            "Watch closed",
            extra={
                "key": self._key,
                "reason": "error" if error is not None else "stopped",
                "delivered_count": self._delivered_count,
                "last_index": self._last_delivered_index,
                "correlation_id": str(self._correlation_id),
            },
        )


__all__: list[str] = [
    "SENTINEL_WAIT_INDEX",
    "ChangeWatcher",
    "WatchFetcher",
    "WatchStream",
]

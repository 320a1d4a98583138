"""Observable in-memory reading store.

This is the only component allowed to replace the current
:class:`~irigasi.models.state.SyncState`.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field

from irigasi.exceptions import IrigasiError, IrigasiStoreClosedError
from irigasi.models.state import SyncState

_logger = logging.getLogger(__name__)

StateCallback = Callable[[SyncState], None]


@dataclass(slots=True, eq=False)
class Subscription:
    """Registration handle returned by :meth:`ReadingStore.subscribe`."""

    callback: StateCallback
    on_close: Callable[[], None] | None = None
    _store: ReadingStore | None = field(default=None, repr=False)

    @property
    def active(self) -> bool:
        return self._store is not None

    def cancel(self) -> None:
        """Detach the callback. Calling it again is a no-op."""
        store = self._store
        self._store = None
        if store is not None:
            store._remove(self)  # noqa: SLF001


class ReadingStore:
    """Holds the current readings and notifies subscribers on change.

    ``publish`` swaps the whole state object under a lock, so a reader
    sees either the previous or the new state, never a mix of both.
    Every active subscriber is called exactly once per publish with the
    new state. Nothing is queued: late subscribers only ever see the
    latest state.

    Usage::

        store = ReadingStore()
        handle = store.subscribe(render)
        store.publish(decode_snapshot(snapshot))
        handle.cancel()
        store.close()
    """

    def __init__(self, initial: SyncState | None = None) -> None:
        self._lock = threading.Lock()
        # Serializes publish/notify so subscribers observe states in order.
        self._publish_lock = threading.RLock()
        self._publishing = False
        self._state = initial if initial is not None else SyncState()
        self._version = 0
        self._subscribers: list[Subscription] = []
        self._closed = False

    @property
    def state(self) -> SyncState:
        """The most recently published state."""
        with self._lock:
            return self._state

    @property
    def version(self) -> int:
        """Number of completed publishes."""
        with self._lock:
            return self._version

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def snapshot(self) -> tuple[int, SyncState]:
        """Return ``(version, state)`` read atomically."""
        with self._lock:
            return self._version, self._state

    def publish(self, new_state: SyncState) -> int:
        """Replace the held state and notify subscribers.

        Returns the version number of the published state.
        """
        with self._publish_lock:
            if self._publishing:
                raise IrigasiError("publish() called from a subscriber callback")
            with self._lock:
                if self._closed:
                    raise IrigasiStoreClosedError("Reading store is closed")
                self._state = new_state
                self._version += 1
                version = self._version
                subscribers = list(self._subscribers)

            self._publishing = True
            try:
                for subscription in subscribers:
                    if subscription.active:
                        self._deliver(subscription, new_state)
            finally:
                self._publishing = False
        _logger.debug("Published state version=%s to %d subscriber(s)", version, len(subscribers))
        return version

    def subscribe(
        self,
        callback: StateCallback,
        *,
        emit_current: bool = False,
        on_close: Callable[[], None] | None = None,
    ) -> Subscription:
        """Register *callback* for every future publish.

        With ``emit_current=True`` the callback is invoked once right away
        with the latest state.
        """
        subscription = Subscription(callback=callback, on_close=on_close)
        with self._publish_lock:
            with self._lock:
                if self._closed:
                    raise IrigasiStoreClosedError("Reading store is closed")
                subscription._store = self  # noqa: SLF001
                self._subscribers.append(subscription)
                current = self._state
            if emit_current:
                self._deliver(subscription, current)
        return subscription

    async def watch(self) -> AsyncIterator[SyncState]:
        """Yield the current state, then the latest state after each change.

        Publishes arriving faster than the consumer iterates are collapsed
        into the most recent one. Iteration ends when the store is closed.
        """
        loop = asyncio.get_running_loop()
        changed = asyncio.Event()

        def _wake(*_args: object) -> None:
            if not loop.is_closed():
                loop.call_soon_threadsafe(changed.set)

        subscription = self.subscribe(_wake, on_close=_wake)
        try:
            last_version: int | None = None
            while True:
                version, state = self.snapshot()
                if version != last_version:
                    last_version = version
                    yield state
                    continue
                if self.closed:
                    return
                await changed.wait()
                changed.clear()
        finally:
            subscription.cancel()

    def close(self) -> None:
        """Dispose the store and detach every subscriber. Idempotent."""
        with self._publish_lock:
            with self._lock:
                if self._closed:
                    return
                self._closed = True
                subscribers = self._subscribers
                self._subscribers = []
            for subscription in subscribers:
                subscription._store = None  # noqa: SLF001
                if subscription.on_close is not None:
                    try:
                        subscription.on_close()
                    except Exception:
                        _logger.exception("Store close callback failed")
        _logger.debug("Reading store closed")

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            self._subscribers = [sub for sub in self._subscribers if sub is not subscription]

    @staticmethod
    def _deliver(subscription: Subscription, state: SyncState) -> None:
        try:
            subscription.callback(state)
        except Exception:
            _logger.exception("Reading store subscriber raised")

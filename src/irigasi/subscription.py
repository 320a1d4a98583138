"""Live listener lifecycle.

Connects a :class:`~irigasi.firebase.SnapshotSource` to a
:class:`~irigasi.state.store.ReadingStore`: every snapshot is decoded and
published, and listener failures are turned into non-fatal
:class:`~irigasi.state.events.SubscriptionProblem` signals.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from irigasi.exceptions import IrigasiError, IrigasiPermissionError
from irigasi.firebase import ListenerHandle, SnapshotSource
from irigasi.ingestion.snapshot import DEFAULT_ROOT_PATH, decode_snapshot
from irigasi.state.events import SubscriptionProblem, SubscriptionStatus
from irigasi.state.store import ReadingStore

_logger = logging.getLogger(__name__)


class TelemetrySubscription:
    """Keeps a reading store in sync with the remote tree.

    Status moves ``UNSUBSCRIBED -> SUBSCRIBING`` on :meth:`start`, to
    ``ACTIVE`` on the first snapshot, and to ``ERROR`` when the remote
    listener fails. Readings already in the store are kept on error.
    :meth:`cancel` returns to ``UNSUBSCRIBED`` and is idempotent.
    """

    def __init__(
        self,
        source: SnapshotSource,
        store: ReadingStore,
        *,
        path: str = "/",
        root_path: str = DEFAULT_ROOT_PATH,
        on_problem: Callable[[SubscriptionProblem], None] | None = None,
    ) -> None:
        self._source = source
        self._store = store
        self._path = path
        self._root_path = root_path
        self._on_problem = on_problem
        self._status = SubscriptionStatus.UNSUBSCRIBED
        self._handle: ListenerHandle | None = None
        self._generation = 0
        self._last_problem: SubscriptionProblem | None = None
        # Snapshot handling is not reentrant.
        self._lock = threading.RLock()
        self._handling = False

    @property
    def status(self) -> SubscriptionStatus:
        return self._status

    @property
    def last_problem(self) -> SubscriptionProblem | None:
        """The most recent listener failure, if any."""
        return self._last_problem

    @property
    def stale(self) -> bool:
        """Whether the store holds readings that are no longer being refreshed."""
        return self._status == SubscriptionStatus.ERROR

    def start(self) -> None:
        """Attach the listener. No-op while subscribing or active."""
        with self._lock:
            if self._status in (SubscriptionStatus.SUBSCRIBING, SubscriptionStatus.ACTIVE):
                return
            self._detach()
            self._generation += 1
            generation = self._generation
            self._set_status(SubscriptionStatus.SUBSCRIBING)

        def _on_snapshot(snapshot: Any) -> None:
            self._handle_snapshot(generation, snapshot)

        def _on_error(error: IrigasiError) -> None:
            self._handle_error(generation, error)

        handle = self._source.on_snapshot(self._path, _on_snapshot, _on_error)
        with self._lock:
            if generation == self._generation:
                self._handle = handle
                return
        # Cancelled while the source was attaching.
        handle.cancel()

    def cancel(self) -> None:
        """Detach the listener. Calling it again is a no-op."""
        with self._lock:
            if self._status == SubscriptionStatus.UNSUBSCRIBED and self._handle is None:
                return
            self._generation += 1
            self._detach()
            self._set_status(SubscriptionStatus.UNSUBSCRIBED)

    def __enter__(self) -> TelemetrySubscription:
        self.start()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.cancel()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _detach(self) -> None:
        handle = self._handle
        self._handle = None
        if handle is not None:
            handle.cancel()

    def _set_status(self, status: SubscriptionStatus) -> None:
        if status != self._status:
            _logger.debug("Subscription on %s: %s -> %s", self._path, self._status, status)
            self._status = status

    def _handle_snapshot(self, generation: int, snapshot: Any) -> None:
        with self._lock:
            if generation != self._generation:
                return
            if self._handling:
                raise IrigasiError("Snapshot delivered while the previous one is still being handled")
            self._handling = True
            try:
                state = decode_snapshot(snapshot, root_path=self._root_path)
                self._store.publish(state)
                self._set_status(SubscriptionStatus.ACTIVE)
            finally:
                self._handling = False

    def _handle_error(self, generation: int, error: IrigasiError) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._handle = None
            self._set_status(SubscriptionStatus.ERROR)
            problem = SubscriptionProblem(
                message=str(error),
                error=error,
                permission_denied=isinstance(error, IrigasiPermissionError),
            )
            self._last_problem = problem
        _logger.warning("Subscription on %s failed, keeping last readings: %s", self._path, error)
        if self._on_problem is not None:
            try:
                self._on_problem(problem)
            except Exception:
                _logger.exception("Subscription problem callback raised")

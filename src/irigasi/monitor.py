"""High-level async entry point wiring the stream, store and chart."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from irigasi.chart.geometry import ChartGeometry, compute_geometry
from irigasi.chart.series import Metric, SampleHistory
from irigasi.config import IrigasiConfig
from irigasi.exceptions import IrigasiError
from irigasi.firebase import FirebaseStreamClient, SnapshotSource
from irigasi.models.reading import NodeKey
from irigasi.screens import Screen, ScreenView, screen_view
from irigasi.state.events import SubscriptionProblem, SubscriptionStatus
from irigasi.state.store import ReadingStore, Subscription
from irigasi.subscription import TelemetrySubscription

_logger = logging.getLogger(__name__)


class TelemetryMonitor:
    """Keeps the dashboard readings and chart history live.

    Usage::

        async with TelemetryMonitor(IrigasiConfig.from_env()) as monitor:
            async for state in monitor.store.watch():
                print(monitor.view(Screen.HOME))

    A custom ``source`` replaces the Firebase stream, e.g. in tests.
    """

    def __init__(
        self,
        config: IrigasiConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        source: SnapshotSource | None = None,
        on_problem: Callable[[SubscriptionProblem], None] | None = None,
    ) -> None:
        self._config = config
        self._client: FirebaseStreamClient | None = None
        if source is None:
            self._client = FirebaseStreamClient(config, session=session)
            source = self._client
        self._source = source
        self._on_problem = on_problem
        self._store: ReadingStore | None = None
        self._history: SampleHistory | None = None
        self._history_subscription: Subscription | None = None
        self._subscription: TelemetrySubscription | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> TelemetryMonitor:
        if self._client is not None:
            await self._client.__aenter__()
        store = ReadingStore()
        history = SampleHistory(self._config.history_size)
        self._history_subscription = store.subscribe(history.record)
        self._subscription = TelemetrySubscription(
            self._source,
            store,
            path=self._config.listen_path,
            root_path=self._config.root_path,
            on_problem=self._on_problem,
        )
        self._store = store
        self._history = history
        self._subscription.start()
        _logger.debug("Telemetry monitor started on %s", self._config.listen_path)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
        if self._history_subscription is not None:
            self._history_subscription.cancel()
            self._history_subscription = None
        if self._store is not None:
            self._store.close()
        if self._client is not None:
            await self._client.close()
        _logger.debug("Telemetry monitor stopped")

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def _require_started(self) -> tuple[ReadingStore, SampleHistory, TelemetrySubscription]:
        if self._store is None or self._history is None or self._subscription is None:
            raise IrigasiError("Monitor not started. Use 'async with TelemetryMonitor(...) as monitor:'")
        return self._store, self._history, self._subscription

    @property
    def store(self) -> ReadingStore:
        return self._require_started()[0]

    @property
    def history(self) -> SampleHistory:
        return self._require_started()[1]

    @property
    def status(self) -> SubscriptionStatus:
        return self._require_started()[2].status

    @property
    def stale(self) -> bool:
        return self._require_started()[2].stale

    def view(self, screen: Screen) -> ScreenView:
        """Card view of *screen* built from the latest consistent state."""
        return screen_view(screen, self.store.state)

    def chart(
        self,
        width: float,
        height: float,
        *,
        key: NodeKey | str = NodeKey.AVERAGE,
        metric: Metric | str = Metric.LEVEL,
    ) -> ChartGeometry:
        """Chart geometry of recent *metric* samples from *key*."""
        return compute_geometry(
            self.history.samples(key, metric),
            width,
            height,
            self._config.chart_padding,
            grid_lines=self._config.grid_lines,
        )

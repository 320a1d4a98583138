"""Recent sample retention for charting.

Readings arrive as whole-state snapshots; each window keeps the last
``maxlen`` non-null values of one metric of one source.
"""

from __future__ import annotations

import threading
from collections import deque
from enum import StrEnum

from irigasi.models.reading import NodeKey, NodeReading
from irigasi.models.state import SyncState

#: Illustrative series charted before any history has been collected.
DEFAULT_SAMPLES: tuple[float, ...] = (0.0, 10.0, 50.0, 70.0, 65.0, 80.0, 120.0, 160.0, 170.0)


class Metric(StrEnum):
    FLOW = "flow"
    TEMPERATURE = "temperature"
    LEVEL = "level"


class SampleWindow:
    """Bounded, ordered window of one metric's recent values."""

    def __init__(self, metric: Metric | str, maxlen: int = 60) -> None:
        if maxlen < 2:
            raise ValueError(f"maxlen must be >= 2, got {maxlen}")
        self.metric = Metric(metric)
        self._values: deque[float] = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    @property
    def maxlen(self) -> int:
        return self._values.maxlen or 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)

    def record(self, reading: NodeReading) -> bool:
        """Append the metric from *reading*. Null values are skipped."""
        value: float | None = getattr(reading, self.metric.value)
        if value is None:
            return False
        with self._lock:
            self._values.append(value)
        return True

    def samples(self) -> tuple[float, ...]:
        with self._lock:
            return tuple(self._values)

    def clear(self) -> None:
        with self._lock:
            self._values.clear()


class SampleHistory:
    """One :class:`SampleWindow` per source and metric.

    Pass :meth:`record` to :meth:`ReadingStore.subscribe
    <irigasi.state.store.ReadingStore.subscribe>` to feed it.
    """

    def __init__(self, maxlen: int = 60) -> None:
        self._windows: dict[tuple[NodeKey, Metric], SampleWindow] = {
            (key, metric): SampleWindow(metric, maxlen) for key in NodeKey for metric in Metric
        }

    def record(self, state: SyncState) -> None:
        for key, reading in state.items():
            for metric in Metric:
                self._windows[(key, metric)].record(reading)

    def window(self, key: NodeKey | str, metric: Metric | str) -> SampleWindow:
        return self._windows[(NodeKey(key), Metric(metric))]

    def samples(self, key: NodeKey | str, metric: Metric | str) -> tuple[float, ...]:
        """Recent samples, or :data:`DEFAULT_SAMPLES` while fewer than two exist."""
        values = self.window(key, metric).samples()
        if len(values) < 2:
            return DEFAULT_SAMPLES
        return values

from __future__ import annotations

from typing import Any

import pytest

from irigasi.chart.geometry import Point
from irigasi.config import IrigasiConfig
from irigasi.exceptions import IrigasiError, IrigasiTransportError
from irigasi.monitor import TelemetryMonitor
from irigasi.screens import CardView, Screen
from irigasi.state.events import SubscriptionProblem, SubscriptionStatus


class _Handle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class _FakeSource:
    def __init__(self) -> None:
        self.path: str | None = None
        self.callback: Any = None
        self.on_error: Any = None
        self.handle = _Handle()

    def on_snapshot(self, path: str, callback: Any, on_error: Any) -> _Handle:
        self.path = path
        self.callback = callback
        self.on_error = on_error
        return self.handle


def _config() -> IrigasiConfig:
    return IrigasiConfig(database_url="https://db.example", history_size=5)


def _tree(level: float) -> dict:
    return {
        "data_mentah": {
            "node1": {"flow": 12.3, "temp": 25.6, "level": 7.8},
            "rata_rata": {"flow": 0.0, "temp": 27.4, "level": level},
        }
    }


@pytest.mark.asyncio
async def test_monitor_syncs_views_and_chart() -> None:
    source = _FakeSource()

    async with TelemetryMonitor(_config(), source=source) as monitor:
        assert monitor.status == SubscriptionStatus.SUBSCRIBING
        assert source.path == "/"
        for level in (0.0, 50.0, 100.0):
            source.callback(_tree(level))

        assert monitor.status == SubscriptionStatus.ACTIVE
        assert monitor.view(Screen.HOME).cards[2] == CardView("Level", "100.0")
        assert monitor.view(Screen.NODE2).cards[0] == CardView("Flow", "-")

        geometry = monitor.chart(300, 200)
        assert geometry.stroke_path == (Point(5, 195), Point(150, 100), Point(295, 5))
        store = monitor.store

    assert source.handle.cancelled
    assert store.closed


@pytest.mark.asyncio
async def test_monitor_chart_uses_illustrative_series_without_history() -> None:
    async with TelemetryMonitor(_config(), source=_FakeSource()) as monitor:
        geometry = monitor.chart(300, 200, key="node1", metric="flow")

    assert len(geometry.stroke_path) == 9
    assert geometry.stroke_path[-1] == Point(295, 5)


@pytest.mark.asyncio
async def test_monitor_reports_problem_and_keeps_readings() -> None:
    source = _FakeSource()
    problems: list[SubscriptionProblem] = []

    async with TelemetryMonitor(_config(), source=source, on_problem=problems.append) as monitor:
        source.callback(_tree(10.0))
        source.on_error(IrigasiTransportError("offline"))

        assert monitor.stale
        assert monitor.status == SubscriptionStatus.ERROR
        assert monitor.view(Screen.HOME).cards[2] == CardView("Level", "10.0")

    assert len(problems) == 1


def test_monitor_requires_context_manager() -> None:
    monitor = TelemetryMonitor(_config(), source=_FakeSource())

    with pytest.raises(IrigasiError):
        _ = monitor.store

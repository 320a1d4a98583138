"""Dashboard screens and their card views."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import NamedTuple

from irigasi.models.reading import NodeKey, NodeReading, format_value
from irigasi.models.state import SyncState


class CardView(NamedTuple):
    label: str
    value: str


class ScreenView(NamedTuple):
    heading: str
    cards: tuple[CardView, ...]


class Screen(Enum):
    """Navigation destinations, in tab order."""

    HOME = ("home", "Home", NodeKey.AVERAGE)
    NODE1 = ("node1", "Node 1", NodeKey.NODE1)
    NODE2 = ("node2", "Node 2", NodeKey.NODE2)

    def __init__(self, route: str, title: str, node_key: NodeKey) -> None:
        self.route = route
        self.title = title
        self.node_key = node_key

    @classmethod
    def from_route(cls, route: str) -> Screen:
        for screen in cls:
            if screen.route == route:
                return screen
        raise ValueError(f"Unknown screen route: {route!r}")


def _cards(reading: NodeReading) -> tuple[CardView, ...]:
    return (
        CardView("Flow", format_value(reading.flow)),
        CardView("Temp", format_value(reading.temperature)),
        CardView("Level", format_value(reading.level)),
    )


def _titled(heading: str) -> Callable[[NodeReading], ScreenView]:
    def _render(reading: NodeReading) -> ScreenView:
        return ScreenView(heading, _cards(reading))

    return _render


SCREEN_RENDERERS: dict[Screen, Callable[[NodeReading], ScreenView]] = {
    Screen.HOME: _titled("Average Data"),
    Screen.NODE1: _titled("Node 1 Data"),
    Screen.NODE2: _titled("Node 2 Data"),
}


def screen_view(screen: Screen, state: SyncState) -> ScreenView:
    """Build the view for *screen* from one consistent *state*."""
    return SCREEN_RENDERERS[screen](state.reading(screen.node_key))

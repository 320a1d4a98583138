"""Pixel-space geometry for a filled line chart.

Samples are scaled against their maximum so the largest value touches the
top inset and zero sits on the bottom inset. Screen coordinates grow
downwards, so the y axis is inverted.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import NamedTuple

#: Horizontal grid intervals drawn behind the chart.
DEFAULT_GRID_LINES = 5


class Point(NamedTuple):
    x: float
    y: float


class Segment(NamedTuple):
    start: Point
    end: Point


class ChartGeometry(NamedTuple):
    """Everything needed to draw one chart.

    ``stroke_path`` is an open polyline; ``fill_path`` is a closed polygon
    running along the bottom inset under the polyline.
    """

    grid_lines: tuple[Segment, ...] = ()
    stroke_path: tuple[Point, ...] = ()
    fill_path: tuple[Point, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.grid_lines and not self.stroke_path

    @property
    def has_line(self) -> bool:
        return bool(self.stroke_path)


def compute_geometry(
    samples: Sequence[float],
    width: float,
    height: float,
    padding: float,
    *,
    grid_lines: int = DEFAULT_GRID_LINES,
) -> ChartGeometry:
    """Compute grid, stroke and fill coordinates for *samples*.

    Fewer than two samples yield an empty geometry. A series whose maximum
    is exactly zero yields the grid only. A non-positive *grid_lines*
    draws no grid.
    """
    if len(samples) < 2:
        return ChartGeometry()

    plot_width = width - 2 * padding
    plot_height = height - 2 * padding
    step_x = plot_width / (len(samples) - 1)

    grid: tuple[Segment, ...] = ()
    if grid_lines > 0:
        step_y = plot_height / grid_lines
        grid = tuple(
            Segment(Point(padding, padding + i * step_y), Point(width - padding, padding + i * step_y))
            for i in range(grid_lines + 1)
        )

    max_value = float(max(samples))
    if max_value == 0:
        return ChartGeometry(grid_lines=grid)

    bottom = height - padding
    stroke = tuple(
        Point(padding + i * step_x, bottom - (value / max_value) * plot_height) for i, value in enumerate(samples)
    )
    fill = (Point(stroke[0].x, bottom), *stroke, Point(stroke[-1].x, bottom))
    return ChartGeometry(grid_lines=grid, stroke_path=stroke, fill_path=fill)

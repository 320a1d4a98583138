"""SVG rendering of a :class:`~irigasi.chart.geometry.ChartGeometry`."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable

from irigasi.chart.geometry import ChartGeometry, Point


@dataclasses.dataclass(frozen=True)
class ChartStyle:
    background: str = "#F8F8FF"
    corner_radius: float = 16.0
    grid_color: str = "#CCCCCC"
    grid_opacity: float = 0.3
    grid_width: float = 1.0
    line_color: str = "#8C7BFF"
    line_width: float = 6.0
    fill_opacity: float = 0.2


def _fmt(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def _points(points: Iterable[Point]) -> str:
    return " ".join(f"{_fmt(p.x)},{_fmt(p.y)}" for p in points)


def render_svg(
    geometry: ChartGeometry,
    width: float,
    height: float,
    style: ChartStyle | None = None,
) -> str:
    """Return a standalone SVG document drawing *geometry*."""
    style = style or ChartStyle()
    parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{_fmt(width)}" height="{_fmt(height)}" '
        f'viewBox="0 0 {_fmt(width)} {_fmt(height)}">',
        f'<rect width="{_fmt(width)}" height="{_fmt(height)}" rx="{_fmt(style.corner_radius)}" '
        f'fill="{style.background}"/>',
    ]
    for segment in geometry.grid_lines:
        parts.append(
            f'<line x1="{_fmt(segment.start.x)}" y1="{_fmt(segment.start.y)}" '
            f'x2="{_fmt(segment.end.x)}" y2="{_fmt(segment.end.y)}" stroke="{style.grid_color}" '
            f'stroke-opacity="{style.grid_opacity}" stroke-width="{_fmt(style.grid_width)}"/>'
        )
    if geometry.has_line:
        # Fill first so the stroke sits on top.
        parts.append(
            f'<polygon points="{_points(geometry.fill_path)}" fill="{style.line_color}" '
            f'fill-opacity="{style.fill_opacity}"/>'
        )
        parts.append(
            f'<polyline points="{_points(geometry.stroke_path)}" fill="none" stroke="{style.line_color}" '
            f'stroke-width="{_fmt(style.line_width)}" stroke-linecap="round" stroke-linejoin="round"/>'
        )
    parts.append("</svg>")
    return "\n".join(parts)

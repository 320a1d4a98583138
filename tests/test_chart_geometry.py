from __future__ import annotations

import pytest

from irigasi.chart.geometry import ChartGeometry, Point, compute_geometry

SAMPLES = [0, 10, 50, 70, 65, 80, 120, 160, 170]


def test_reference_series_endpoints() -> None:
    geometry = compute_geometry(SAMPLES, 300, 200, 5)

    assert geometry.stroke_path[0] == Point(5, 195)
    assert geometry.stroke_path[-1] == Point(295, 5)
    assert len(geometry.stroke_path) == len(SAMPLES)


def test_points_are_linearly_normalized_against_max() -> None:
    geometry = compute_geometry(SAMPLES, 300, 200, 5)
    step_x = 290 / 8

    for i, (value, point) in enumerate(zip(SAMPLES, geometry.stroke_path, strict=True)):
        assert point.x == pytest.approx(5 + i * step_x)
        assert point.y == pytest.approx(195 - (value / 170) * 190)


def test_grid_lines_span_the_inset_area() -> None:
    geometry = compute_geometry(SAMPLES, 300, 200, 5)

    assert len(geometry.grid_lines) == 6
    ys = [segment.start.y for segment in geometry.grid_lines]
    assert ys == pytest.approx([5, 43, 81, 119, 157, 195])
    for segment in geometry.grid_lines:
        assert segment.start.x == 5
        assert segment.end.x == 295
        assert segment.start.y == segment.end.y


def test_grid_line_count_is_configurable() -> None:
    geometry = compute_geometry([1, 2], 100, 100, 0, grid_lines=2)

    assert [segment.start.y for segment in geometry.grid_lines] == [0, 50, 100]


def test_fill_path_closes_down_to_the_bottom_inset() -> None:
    geometry = compute_geometry(SAMPLES, 300, 200, 5)

    assert geometry.fill_path[0] == Point(5, 195)
    assert geometry.fill_path[1:-1] == geometry.stroke_path
    assert geometry.fill_path[-1] == Point(295, 195)


def test_all_zero_series_has_grid_only() -> None:
    geometry = compute_geometry([0, 0, 0], 300, 200, 5)

    assert len(geometry.grid_lines) == 6
    assert geometry.stroke_path == ()
    assert geometry.fill_path == ()
    assert not geometry.has_line
    assert not geometry.is_empty


@pytest.mark.parametrize("grid_lines", [0, -3])
def test_non_positive_grid_line_count_draws_no_grid(grid_lines: int) -> None:
    geometry = compute_geometry([1, 2], 100, 100, 5, grid_lines=grid_lines)

    assert geometry.grid_lines == ()
    assert geometry.stroke_path == (Point(5, 50), Point(95, 5))


@pytest.mark.parametrize("samples", [[], [42]])
def test_fewer_than_two_samples_is_empty(samples: list[float]) -> None:
    geometry = compute_geometry(samples, 300, 200, 5)

    assert geometry == ChartGeometry()
    assert geometry.is_empty


def test_tiny_positive_max_is_not_degenerate() -> None:
    geometry = compute_geometry([0, 1e-12], 10, 10, 0)

    assert geometry.stroke_path[-1] == Point(10, 0)


def test_accepts_tuples_and_does_not_modify_input() -> None:
    samples = (3.0, 1.0)

    geometry = compute_geometry(samples, 20, 20, 0)

    assert samples == (3.0, 1.0)
    assert geometry.stroke_path == (Point(0, 0), Point(20, 20 - (1 / 3) * 20))

"""Line chart geometry and rendering."""

from irigasi.chart.geometry import ChartGeometry, Point, Segment, compute_geometry
from irigasi.chart.series import DEFAULT_SAMPLES, Metric, SampleHistory, SampleWindow
from irigasi.chart.svg import ChartStyle, render_svg

__all__ = [
    "DEFAULT_SAMPLES",
    "ChartGeometry",
    "ChartStyle",
    "Metric",
    "Point",
    "SampleHistory",
    "SampleWindow",
    "Segment",
    "compute_geometry",
    "render_svg",
]

"""irigasi - Live irrigation node telemetry for Firebase Realtime Database."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("irigasi")
except PackageNotFoundError:
    __version__ = "0+local"
from irigasi.chart import ChartGeometry, Metric, Point, Segment, compute_geometry, render_svg
from irigasi.config import IrigasiConfig
from irigasi.exceptions import (
    IrigasiConfigError,
    IrigasiError,
    IrigasiPermissionError,
    IrigasiStoreClosedError,
    IrigasiSubscriptionError,
    IrigasiTransportError,
)
from irigasi.firebase import FirebaseStreamClient, SnapshotSource
from irigasi.ingestion.snapshot import decode_snapshot
from irigasi.models import NodeKey, NodeReading, SyncState, format_value
from irigasi.monitor import TelemetryMonitor
from irigasi.screens import Screen, ScreenView, screen_view
from irigasi.state.events import SubscriptionProblem, SubscriptionStatus
from irigasi.state.store import ReadingStore, Subscription
from irigasi.subscription import TelemetrySubscription

__all__ = [
    "__version__",
    "ChartGeometry",
    "FirebaseStreamClient",
    "IrigasiConfig",
    "IrigasiConfigError",
    "IrigasiError",
    "IrigasiPermissionError",
    "IrigasiStoreClosedError",
    "IrigasiSubscriptionError",
    "IrigasiTransportError",
    "Metric",
    "NodeKey",
    "NodeReading",
    "Point",
    "ReadingStore",
    "Screen",
    "ScreenView",
    "Segment",
    "SnapshotSource",
    "Subscription",
    "SubscriptionProblem",
    "SubscriptionStatus",
    "SyncState",
    "TelemetryMonitor",
    "TelemetrySubscription",
    "compute_geometry",
    "decode_snapshot",
    "format_value",
    "render_svg",
    "screen_view",
]

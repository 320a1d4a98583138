"""Data models for node telemetry."""

from irigasi.models.reading import PLACEHOLDER, NodeKey, NodeReading, format_value
from irigasi.models.state import SyncState

__all__ = [
    "NodeKey",
    "NodeReading",
    "PLACEHOLDER",
    "SyncState",
    "format_value",
]

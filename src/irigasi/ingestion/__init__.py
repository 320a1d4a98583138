"""Ingestion layer.

This package turns raw snapshots delivered by the remote store into
normalized domain objects. Only the state/store layer keeps them.
"""

__all__: list[str] = []

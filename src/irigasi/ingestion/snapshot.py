"""Snapshot decoding.

A snapshot is the full database tree delivered on every change. Decoding
never raises: malformed leaves and missing sub-nodes become ``None``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from irigasi.ingestion.normalize import child_at
from irigasi.models.state import SyncState

_logger = logging.getLogger(__name__)

#: Child of the snapshot root holding the raw node records.
DEFAULT_ROOT_PATH = "data_mentah"


def decode_snapshot(snapshot: Any, *, root_path: str = DEFAULT_ROOT_PATH) -> SyncState:
    """Decode a full database snapshot into a :class:`SyncState`.

    Parameters
    ----------
    snapshot
        The tree as delivered by the remote store. Any shape is accepted.
    root_path
        Slash separated path from the snapshot root to the node records
        (``node1``, ``node2`` and ``rata_rata``).
    """
    subtree = child_at(snapshot, root_path)
    if not isinstance(subtree, Mapping):
        _logger.debug("Snapshot has no %r subtree; decoding all-null state", root_path)
        return SyncState()
    return SyncState.model_validate(dict(subtree))

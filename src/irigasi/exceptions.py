"""Custom exception hierarchy for irigasi."""

from __future__ import annotations


class IrigasiError(Exception):
    """Base exception for all irigasi errors."""


class IrigasiConfigError(IrigasiError):
    """Invalid or missing configuration."""


class IrigasiTransportError(IrigasiError):
    """HTTP-level failure (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        path: str = "",
    ) -> None:
        self.status_code = status_code
        self.path = path
        super().__init__(message)


class IrigasiSubscriptionError(IrigasiError):
    """The remote store ended a live listener."""

    def __init__(self, message: str, *, reason: str = "") -> None:
        self.reason = reason
        super().__init__(message)


class IrigasiPermissionError(IrigasiSubscriptionError):
    """Listener rejected by the database security rules.

    Raised for HTTP 401/403 on stream open and for a ``cancel`` event
    delivered on an already open stream.
    """


class IrigasiStoreClosedError(IrigasiError):
    """The reading store was disposed and no longer accepts calls."""

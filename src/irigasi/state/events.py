"""Subscription lifecycle events."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class SubscriptionStatus(StrEnum):
    UNSUBSCRIBED = "unsubscribed"
    SUBSCRIBING = "subscribing"
    ACTIVE = "active"
    ERROR = "error"


class SubscriptionProblem(BaseModel):
    """A non-fatal listener failure reported to the presentation layer.

    The readings held by the store are left untouched; consumers decide
    how to mark them as stale.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    message: str
    error: Exception
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    permission_denied: bool = False

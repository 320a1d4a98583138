"""Node reading models."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from irigasi.ingestion.normalize import safe_number

#: Placeholder shown for a field that is absent or malformed upstream.
PLACEHOLDER = "-"


def format_value(value: float | None) -> str:
    """Render a reading field as its decimal string, or ``"-"`` when null.

    Uses Python's shortest round-trip form, so very small or large values
    use exponent notation such as ``1e-05`` or ``1e+16``.
    """
    if value is None:
        return PLACEHOLDER
    return repr(value)


class NodeKey(StrEnum):
    """Logical sources shown by the dashboard."""

    NODE1 = "node1"
    NODE2 = "node2"
    AVERAGE = "average"


class NodeReading(BaseModel):
    """Flow, temperature and level reported by one logical source.

    Every field is independently ``None`` when the upstream leaf is
    missing or not a number.

    Parameters
    ----------
    flow : float or None
        Water flow rate.
    temperature : float or None
        Water temperature. Sent upstream as ``temp``.
    level : float or None
        Water level.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    flow: float | None = None
    temperature: float | None = Field(default=None, validation_alias=AliasChoices("temp", "temperature"))
    level: float | None = None

    @model_validator(mode="before")
    @classmethod
    def _require_mapping(cls, values: Any) -> Any:
        # A sub-node that is a bare scalar or list carries no fields.
        if isinstance(values, NodeReading):
            return values
        if isinstance(values, Mapping):
            return dict(values)
        return {}

    @field_validator("flow", "temperature", "level", mode="before")
    @classmethod
    def _coerce_numbers(cls, value: Any) -> float | None:
        return safe_number(value)

    @property
    def is_empty(self) -> bool:
        """Whether no field carries a value."""
        return self.flow is None and self.temperature is None and self.level is None

    def formatted(self) -> dict[str, str]:
        """Display strings keyed by field name."""
        return {
            "flow": format_value(self.flow),
            "temperature": format_value(self.temperature),
            "level": format_value(self.level),
        }

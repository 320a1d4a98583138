"""Synchronized dashboard state."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from irigasi.models.reading import NodeKey, NodeReading


class SyncState(BaseModel):
    """The currently known reading of every logical source.

    All three readings are always present; a source missing upstream is an
    all-``None`` :class:`NodeReading`. Instances are immutable and are
    replaced wholesale on every snapshot.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    node1: NodeReading = Field(default_factory=NodeReading)
    node2: NodeReading = Field(default_factory=NodeReading)
    average: NodeReading = Field(
        default_factory=NodeReading,
        validation_alias=AliasChoices("rata_rata", "average"),
    )

    @field_validator("node1", "node2", "average", mode="before")
    @classmethod
    def _coerce_reading(cls, value: Any) -> Any:
        if isinstance(value, NodeReading):
            return value
        if isinstance(value, Mapping):
            return dict(value)
        return NodeReading()

    def reading(self, key: NodeKey | str) -> NodeReading:
        """Return the reading for *key*."""
        reading: NodeReading = getattr(self, NodeKey(key).value)
        return reading

    def items(self) -> Iterator[tuple[NodeKey, NodeReading]]:
        for key in NodeKey:
            yield key, self.reading(key)

from __future__ import annotations

import pytest
from pydantic import ValidationError

from irigasi.models import NodeKey, NodeReading, SyncState, format_value


def test_node_reading_reads_upstream_temp_key() -> None:
    reading = NodeReading.model_validate({"flow": 12.3, "temp": 25.6, "level": 7.8})

    assert reading.flow == 12.3
    assert reading.temperature == 25.6
    assert reading.level == 7.8


def test_node_reading_accepts_field_names() -> None:
    reading = NodeReading(flow=1.0, temperature=2.0, level=3.0)

    assert reading.temperature == 2.0


def test_node_reading_non_numeric_leaves_become_none() -> None:
    reading = NodeReading.model_validate({"flow": "12.3", "temp": True, "level": {"v": 1}})

    assert reading.flow is None
    assert reading.temperature is None
    assert reading.level is None
    assert reading.is_empty


def test_node_reading_integers_are_floats() -> None:
    reading = NodeReading.model_validate({"flow": 12, "temp": 0, "level": -3})

    assert reading.flow == 12.0
    assert isinstance(reading.flow, float)
    assert reading.temperature == 0.0
    assert reading.level == -3.0


def test_node_reading_scalar_subtree_is_empty() -> None:
    assert NodeReading.model_validate(42).is_empty
    assert NodeReading.model_validate(["flow"]).is_empty


def test_node_reading_is_frozen() -> None:
    reading = NodeReading(flow=1.0)

    with pytest.raises(ValidationError):
        reading.flow = 2.0  # type: ignore[misc]


def test_format_value_placeholder_and_decimal() -> None:
    assert format_value(None) == "-"
    assert format_value(25.6) == "25.6"
    assert format_value(0.0) == "0.0"
    assert format_value(197.3) == "197.3"


def test_format_value_uses_python_exponent_form_at_extremes() -> None:
    assert format_value(1e-05) == "1e-05"
    assert format_value(1e16) == "1e+16"
    assert format_value(-2.5) == "-2.5"


def test_node_reading_formatted() -> None:
    reading = NodeReading(flow=15.0, level=8.5)

    assert reading.formatted() == {"flow": "15.0", "temperature": "-", "level": "8.5"}


def test_sync_state_defaults_to_all_null_readings() -> None:
    state = SyncState()

    for key, reading in state.items():
        assert key in NodeKey
        assert reading == NodeReading()


def test_sync_state_maps_rata_rata_to_average() -> None:
    state = SyncState.model_validate({"rata_rata": {"flow": 0.0, "temp": 27.4, "level": 197.3}})

    assert state.average.temperature == 27.4
    assert state.reading("average") is state.average
    assert state.reading(NodeKey.AVERAGE).level == 197.3


def test_sync_state_null_sub_node_is_empty_reading() -> None:
    state = SyncState.model_validate({"node1": None, "node2": "offline"})

    assert state.node1.is_empty
    assert state.node2.is_empty


def test_sync_state_equality_is_by_value() -> None:
    first = SyncState(node1=NodeReading(flow=1.0))
    second = SyncState(node1=NodeReading(flow=1.0))

    assert first == second

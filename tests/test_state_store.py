from __future__ import annotations

import asyncio
import threading

import pytest

from irigasi.exceptions import IrigasiError, IrigasiStoreClosedError
from irigasi.models import NodeReading, SyncState
from irigasi.state.store import ReadingStore


def _state(value: float) -> SyncState:
    reading = NodeReading(flow=value, temperature=value, level=value)
    return SyncState(node1=reading, node2=reading, average=reading)


def test_initial_state_is_all_null() -> None:
    store = ReadingStore()

    assert store.state == SyncState()
    assert store.version == 0


def test_publish_then_read_returns_published_state() -> None:
    store = ReadingStore()
    new_state = _state(1.0)

    version = store.publish(new_state)

    assert version == 1
    assert store.state is new_state
    assert store.snapshot() == (1, new_state)


def test_each_subscriber_notified_once_per_publish_with_full_state() -> None:
    store = ReadingStore()
    first: list[SyncState] = []
    second: list[SyncState] = []
    store.subscribe(first.append)
    store.subscribe(second.append)

    store.publish(_state(1.0))
    store.publish(_state(2.0))

    assert first == [_state(1.0), _state(2.0)]
    assert second == first


def test_late_subscriber_sees_only_latest_state() -> None:
    store = ReadingStore()
    store.publish(_state(1.0))
    store.publish(_state(2.0))
    received: list[SyncState] = []

    store.subscribe(received.append, emit_current=True)

    assert received == [_state(2.0)]


def test_cancelled_subscription_is_not_notified_and_cancel_is_idempotent() -> None:
    store = ReadingStore()
    received: list[SyncState] = []
    handle = store.subscribe(received.append)

    handle.cancel()
    handle.cancel()
    store.publish(_state(1.0))

    assert received == []
    assert not handle.active


def test_raising_subscriber_does_not_block_others() -> None:
    store = ReadingStore()
    received: list[SyncState] = []

    def _boom(_state: SyncState) -> None:
        raise RuntimeError("boom")

    store.subscribe(_boom)
    store.subscribe(received.append)
    store.publish(_state(1.0))

    assert received == [_state(1.0)]


def test_publish_from_subscriber_is_rejected() -> None:
    store = ReadingStore()
    errors: list[Exception] = []

    def _republish(_state: SyncState) -> None:
        try:
            store.publish(SyncState())
        except IrigasiError as exc:
            errors.append(exc)

    store.subscribe(_republish)
    store.publish(_state(1.0))

    assert len(errors) == 1
    assert store.state == _state(1.0)


def test_closed_store_rejects_calls_and_close_is_idempotent() -> None:
    store = ReadingStore()
    closed: list[bool] = []
    handle = store.subscribe(lambda _s: None, on_close=lambda: closed.append(True))

    store.close()
    store.close()

    assert closed == [True]
    assert not handle.active
    with pytest.raises(IrigasiStoreClosedError):
        store.publish(_state(1.0))
    with pytest.raises(IrigasiStoreClosedError):
        store.subscribe(lambda _s: None)


def test_concurrent_publishes_are_never_torn() -> None:
    store = ReadingStore()
    stop = threading.Event()
    torn: list[SyncState] = []

    def _writer(value: float) -> None:
        while not stop.is_set():
            store.publish(_state(value))

    def _reader() -> None:
        while not stop.is_set():
            state = store.state
            values = {
                state.node1.flow,
                state.node1.temperature,
                state.node1.level,
                state.node2.flow,
                state.average.level,
            }
            if len(values) != 1:
                torn.append(state)

    threads = [
        threading.Thread(target=_writer, args=(1.0,)),
        threading.Thread(target=_writer, args=(2.0,)),
        threading.Thread(target=_reader),
    ]
    store.publish(_state(0.0))
    for thread in threads:
        thread.start()
    stop.wait(0.2)
    stop.set()
    for thread in threads:
        thread.join()

    assert torn == []


def test_subscribers_observe_publishes_in_order_across_threads() -> None:
    store = ReadingStore()
    seen: list[int] = []
    store.subscribe(lambda _s: seen.append(store.version))

    threads = [threading.Thread(target=lambda: [store.publish(SyncState()) for _ in range(50)]) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert seen == sorted(seen)
    assert len(seen) == 200


@pytest.mark.asyncio
async def test_watch_yields_current_then_latest_and_ends_on_close() -> None:
    store = ReadingStore()
    store.publish(_state(1.0))
    received: list[SyncState] = []

    async def _consume() -> None:
        async for state in store.watch():
            received.append(state)

    task = asyncio.create_task(_consume())
    await asyncio.sleep(0)
    # Collapsed into the latest value.
    store.publish(_state(2.0))
    store.publish(_state(3.0))
    await asyncio.sleep(0.01)
    store.close()
    await asyncio.wait_for(task, 1.0)

    assert received[0] == _state(1.0)
    assert received[-1] == _state(3.0)
    assert _state(2.0) not in received

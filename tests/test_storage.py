"""Mini README: Tests for the in-memory document store and debounced writer.

Listeners must receive the current snapshot on subscribe and after every
change; the writer must keep only the latest payload per key.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, List, Tuple

import pytest

from roadledger.storage import DebouncedWriter, InMemoryDocumentStore


def test_put_get_and_copy_isolation() -> None:
    store = InMemoryDocumentStore(app_id="demo")
    document = {"amount": 5}
    store.put("u1", "transactions", "a", document)
    document["amount"] = 99

    assert store.get("u1", "transactions", "a") == {"amount": 5}
    assert store.get("u2", "transactions", "a") is None
    assert store.path("u1", "transactions", "a") == "artifacts/demo/users/u1/transactions/a"


def test_subscribe_replays_and_follows_changes() -> None:
    store = InMemoryDocumentStore()
    store.put("u1", "trips", "a", {"tripGross": 1})
    snapshots: List[Dict[str, Any]] = []

    unsubscribe = store.subscribe("u1", "trips", snapshots.append)
    store.put("u1", "trips", "b", {"tripGross": 2})
    store.delete("u1", "trips", "a")
    unsubscribe()
    store.put("u1", "trips", "c", {"tripGross": 3})

    assert [sorted(snapshot) for snapshot in snapshots] == [["a"], ["a", "b"], ["b"]]


def test_failing_listener_does_not_block_others() -> None:
    store = InMemoryDocumentStore()
    received: List[int] = []

    def broken(_: Dict[str, Any]) -> None:
        raise RuntimeError("boom")

    store.subscribe("u1", "trips", broken)
    store.subscribe("u1", "trips", lambda snapshot: received.append(len(snapshot)))
    store.put("u1", "trips", "a", {})
    assert received == [0, 1]


def test_delete_missing_document_raises() -> None:
    with pytest.raises(KeyError):
        InMemoryDocumentStore().delete("u1", "trips", "missing")


def test_debounced_writer_coalesces_until_flush() -> None:
    writes: List[Tuple[str, Any]] = []
    writer = DebouncedWriter(lambda key, payload: writes.append((key, payload)), quiet_period=60)

    writer.schedule("u1", {"v": 1})
    writer.schedule("u1", {"v": 2})
    writer.schedule("u2", {"v": 3})
    assert writer.pending() == ["u1", "u2"]
    assert writes == []

    assert writer.flush() == 2
    assert sorted(writes, key=lambda entry: entry[0]) == [("u1", {"v": 2}), ("u2", {"v": 3})]
    assert writer.pending() == []


def test_debounced_writer_fires_after_quiet_period() -> None:
    done = threading.Event()
    writes: List[Any] = []

    def write(key: str, payload: Any) -> None:
        writes.append(payload)
        done.set()

    writer = DebouncedWriter(write, quiet_period=0.2)
    writer.schedule("u1", "first")
    writer.schedule("u1", "latest")

    assert done.wait(timeout=2)
    assert writes == ["latest"]


def test_cancel_discards_pending_writes() -> None:
    writes: List[Any] = []
    writer = DebouncedWriter(lambda key, payload: writes.append(payload), quiet_period=60)
    writer.schedule("u1", "lost")
    writer.cancel()
    assert writer.flush() == 0
    assert writes == []


def test_negative_quiet_period_is_rejected() -> None:
    with pytest.raises(ValueError):
        DebouncedWriter(lambda key, payload: None, quiet_period=-1)


def test_flush_continues_past_a_failing_write() -> None:
    writes: List[Tuple[str, Any]] = []

    def write(key: str, payload: Any) -> None:
        if key == "a":
            raise RuntimeError("disk full")
        writes.append((key, payload))

    writer = DebouncedWriter(write, quiet_period=60)
    writer.schedule("a", "lost")
    writer.schedule("b", "kept")

    assert writer.flush() == 1
    assert writes == [("b", "kept")]
    assert writer.pending() == []


def test_flush_single_key_leaves_others_pending() -> None:
    writes: List[Tuple[str, Any]] = []
    writer = DebouncedWriter(lambda key, payload: writes.append((key, payload)), quiet_period=60)
    writer.schedule("a", 1)
    writer.schedule("b", 2)

    assert writer.flush("a") == 1
    assert writer.flush("missing") == 0
    assert writes == [("a", 1)]
    assert writer.pending() == ["b"]
    writer.cancel()

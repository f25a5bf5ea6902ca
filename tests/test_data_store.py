import time

import pytest

from core.data_store import BUCKET_SECS, DataStore, HistoryService


@pytest.fixture
def store(tmp_path) -> DataStore:
    return DataStore(str(tmp_path / "history.db"))


def test_recorded_entries_visible_after_flush(store) -> None:
    now = int(time.time())
    store.record("office", {"time": now - 10, "temp": 21.0, "humidity": 48.0})
    store.record("office", {"time": now - 5, "temp": 21.5, "humidity": 47.0, "dewpoint": 9.7})

    assert store.get_history("office", hours=1) == []
    store.flush()

    assert store.get_history("office", hours=1) == [
        {"time": now - 10, "temp": 21.0, "humidity": 48.0},
        {"time": now - 5, "temp": 21.5, "humidity": 47.0, "dewpoint": 9.7},
    ]


def test_history_is_per_accessory(store) -> None:
    now = int(time.time())
    HistoryService(store, "office").record({"time": now, "temp": 20.0, "humidity": 50.0})
    HistoryService(store, "cellar").record({"time": now, "temp": 12.0, "humidity": 70.0})
    store.flush()

    assert [e["temp"] for e in store.get_history("office", hours=1)] == [20.0]
    assert [e["temp"] for e in store.get_history("cellar", hours=1)] == [12.0]


def test_longer_ranges_are_bucket_averaged(store) -> None:
    now = int(time.time())
    bucket = now - now % BUCKET_SECS - BUCKET_SECS
    store.record("office", {"time": bucket + 10, "temp": 20.0, "humidity": 50.0})
    store.record("office", {"time": bucket + 20, "temp": 22.0, "humidity": 52.0})
    store.flush()

    assert store.get_history("office", hours=24) == [
        {"time": bucket + BUCKET_SECS // 2, "temp": 21.0, "humidity": 51.0},
    ]


def test_summary(store) -> None:
    now = int(time.time())
    history = HistoryService(store, "office")
    history.record({"time": now - 20, "temp": 20.0, "humidity": 50.0, "dewpoint": 9.2})
    history.record({"time": now - 10, "temp": 24.0, "humidity": 40.0, "dewpoint": 9.8})
    store.flush()

    summary = history.summary()

    assert summary["temp"] == {"avg": 22.0, "min": 20.0, "max": 24.0, "count": 2, "current": 24.0}
    assert summary["humidity"]["current"] == 40.0
    assert summary["dewpoint"]["count"] == 2
    assert store.get_summary("nobody") == {}


def test_cleanup_removes_old_entries(store) -> None:
    now = int(time.time())
    store.record("office", {"time": now - 8 * 86400, "temp": 18.0, "humidity": 55.0})
    store.record("office", {"time": now, "temp": 20.0, "humidity": 50.0})
    store.flush()

    assert store.cleanup(max_days=7) == 1
    assert [e["temp"] for e in store.get_history("office", hours=24 * 30)] == [20.0]


def test_stop_flushes_buffer(tmp_path) -> None:
    path = str(tmp_path / "history.db")
    store = DataStore(path, flush_interval=3600)
    store.start()
    store.record("office", {"time": int(time.time()), "temp": 20.0, "humidity": 50.0})
    store.stop()

    assert len(DataStore(path).get_history("office", hours=1)) == 1

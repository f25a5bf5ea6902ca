import dataclasses

import pytest

from core.calibration import Reading
from core.reading_cache import NoDataAvailable, ReadingCache


def test_latest_raises_before_first_update() -> None:
    cache = ReadingCache()

    assert cache.has_data is False
    with pytest.raises(NoDataAvailable, match="No data"):
        cache.latest()


def test_update_replaces_snapshot() -> None:
    cache = ReadingCache()

    cache.update(Reading(20.0, 50.0), None, 100.0)
    cache.update(Reading(21.0, 49.0), 9.5, 160.0)

    snapshot = cache.latest()
    assert snapshot.reading == Reading(21.0, 49.0)
    assert snapshot.dewpoint == 9.5
    assert snapshot.timestamp == 160.0


def test_timestamp_never_goes_backwards() -> None:
    cache = ReadingCache()

    cache.update(Reading(20.0, 50.0), None, 200.0)
    snapshot = cache.update(Reading(19.0, 51.0), None, 150.0)

    assert snapshot.timestamp == 200.0
    assert cache.latest().reading == Reading(19.0, 51.0)


def test_snapshot_is_immutable() -> None:
    cache = ReadingCache()
    snapshot = cache.update(Reading(20.0, 50.0), None, 100.0)

    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot.reading.temperature = 99.0  # type: ignore[misc]

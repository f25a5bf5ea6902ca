import threading
from typing import Dict, List, Optional

import pytest

from core.accessory_config import AccessoryConfig
from core.event_bus import EventBus
from sensors.base import BaseSensor


class FakeSensor(BaseSensor):
    """Scripted sensor: queued readings or exceptions, then the default reading."""

    MAX_RETRIES = 1
    RETRY_DELAY = 0.0

    def __init__(self, default: Optional[Dict[str, float]] = None):
        self.default = default or {"temperature": 20.0, "humidity": 50.0}
        self.queue: List[object] = []
        self.reads = 0
        self.gate: Optional[threading.Event] = None
        self.closed = False
        super().__init__({})

    def _init_hardware(self) -> None:
        self._hw_available = True

    def _read_hardware(self) -> Dict[str, float]:
        self.reads += 1
        if self.gate is not None:
            self.gate.wait(5)
        item = self.queue.pop(0) if self.queue else self.default
        if isinstance(item, Exception):
            raise item
        return dict(item)

    def _simulate(self) -> Dict[str, float]:
        return {"temperature": 22.0, "humidity": 40.0}

    def push(self, *items):
        self.queue.extend(items)

    def close(self) -> None:
        self.closed = True


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0, step: float = 60.0):
        self.now = start
        self.step = step

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        return value


class RecordingHistory:
    def __init__(self):
        self.entries: List[Dict] = []

    def record(self, entry: Dict):
        self.entries.append(entry)


@pytest.fixture
def sensor() -> FakeSensor:
    return FakeSensor()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def history() -> RecordingHistory:
    return RecordingHistory()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def make_config():
    def build(**overrides) -> AccessoryConfig:
        values = {"name": "office", "interval": 3600}
        values.update(overrides)
        return AccessoryConfig(**values)
    return build

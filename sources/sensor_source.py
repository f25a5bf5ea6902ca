"""Sensor sampling source -- the periodic half of an accessory.

Each tick reads the sensor, applies calibration, derives the dew point
when enabled, swaps the result into the ReadingCache, records one
history entry and publishes the payload on the EventBus.

A failed read is logged and otherwise ignored: the cached reading stays
as it was, nothing is recorded, and the next tick tries again.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, Optional

from core.accessory_config import AccessoryConfig
from core.calibration import calibrate, derive
from core.data_source import DataSource
from core.data_store import HistoryService
from core.event_bus import EventBus
from core.reading_cache import ReadingCache
from sensors.base import BaseSensor

logger = logging.getLogger(__name__)


class SensorSource(DataSource):
    """Samples one sensor on behalf of one accessory."""

    def __init__(
        self,
        source_id: str,
        bus: EventBus,
        config: AccessoryConfig,
        sensor: BaseSensor,
        cache: ReadingCache,
        history: Optional[HistoryService] = None,
        clock: Callable[[], float] = time.time,
    ):
        super().__init__(source_id, bus, {
            "interval": config.interval,
            "overlap": config.overlap,
        })
        self.settings = config
        self.demo_mode = config.demo
        self._sensor = sensor
        self._cache = cache
        self._history = history
        self._clock = clock
        # Serializes publish-then-record so history order matches cache order
        self._publish_lock = threading.Lock()

    def sample(self) -> Optional[Dict[str, Any]]:
        try:
            raw = self._sensor.read(demo=self.demo_mode)
        except Exception as exc:
            logger.error("%s: %s", self.source_id, exc)
            return None

        reading = calibrate(raw, self.settings)
        dewpoint = derive(reading, self.settings)

        with self._publish_lock:
            snapshot = self._cache.update(reading, dewpoint, self._clock())
            entry = {
                "time": int(snapshot.timestamp),
                "temp": reading.temperature,
                "humidity": reading.humidity,
            }
            if dewpoint is not None:
                entry["dewpoint"] = dewpoint
                logger.info(
                    "%s: Humidity: %.2f%%, Temperature: %.2f°C, Dewpoint: %.2f°C",
                    self.source_id, reading.humidity, reading.temperature, dewpoint,
                )
            else:
                logger.info(
                    "%s: Humidity: %.2f%%, Temperature: %.2f°C",
                    self.source_id, reading.humidity, reading.temperature,
                )
            if self._history is not None:
                self._history.record(entry)

        payload = {
            "temperature": reading.temperature,
            "humidity": reading.humidity,
            "timestamp": snapshot.timestamp,
            "_source": self.source_id,
            "_simulated": self.demo_mode or self._sensor.simulated,
        }
        if dewpoint is not None:
            payload["dewpoint"] = dewpoint
        return payload

    def close(self):
        super().close()
        self._sensor.close()

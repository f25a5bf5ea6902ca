"""SHT3x temperature / humidity accessory.

Wires one SHT3x sensor to a ReadingCache, a SensorSource that keeps the
cache fresh, and an optional history sink. The host layer asks for
values through get_current() / get_dew_point() and describes the
accessory with get_services(); nothing in here knows about HTTP.
"""

import logging
import socket
from typing import Any, Callable, Dict, List, Optional, TypeVar

from config import CHARACTERISTICS, MANUFACTURER, MODEL, __version__
from core.accessory_config import AccessoryConfig
from core.calibration import Reading, calculate_dewpoint, calibrate
from core.data_store import HistoryService
from core.event_bus import EventBus
from core.reading_cache import ReadingCache
from core.registry import register_accessory
from sensors.base import BaseSensor
from sensors.sht3x import SHT3xSensor
from sources.sensor_source import SensorSource

logger = logging.getLogger(__name__)

T = TypeVar("T")


@register_accessory("SHT3x")
class SHT3xAccessory:
    """One SHT3x sensor exposed as temperature, humidity and dew point."""

    category = "SENSOR"

    def __init__(
        self,
        config: AccessoryConfig,
        bus: EventBus,
        history: Optional[HistoryService] = None,
        sensor: Optional[BaseSensor] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.config = config
        self.display_name = config.name
        self.history = history

        logger.info(
            "Temperature calibration: %s, Humidity calibration: %s, dewpointEnabled: %s",
            config.temperature_calibration, config.humidity_calibration, config.dewpoint_enabled,
        )
        logger.info(
            "Expecting SHT3x I²C sensor at address 0x%x on bus %d", config.address, config.bus
        )
        if sensor is None:
            sensor = SHT3xSensor({"address": config.address, "bus": config.bus})
        self.sensor = sensor
        self.cache = ReadingCache()

        source_kwargs = {"clock": clock} if clock is not None else {}
        self.source = SensorSource(
            f"accessory.{config.name}", bus, config, self.sensor, self.cache, history,
            **source_kwargs,
        )
        self.getters: Dict[str, Callable[[], Any]] = {
            "temperature": lambda: self.get_current(lambda r: r.temperature),
            "humidity": lambda: self.get_current(lambda r: r.humidity),
        }
        if config.dewpoint_enabled:
            self.getters["dewpoint"] = lambda: self.get_dew_point(lambda d: d)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_current(self, extractor: Callable[[Reading], T]) -> T:
        """Answer from the cached reading. Raises NoDataAvailable before the first sample."""
        return extractor(self.cache.latest().reading)

    def get_dew_point(self, extractor: Callable[[float], T]) -> T:
        """Answer from a fresh sensor read. Raises SensorReadError if the read fails."""
        # Unlike get_current this bypasses the cache and costs an I2C
        # transaction per call. Existing clients rely on the fresh value.
        raw = self.sensor.read(demo=self.source.demo_mode)
        reading = calibrate(raw, self.config)
        return extractor(calculate_dewpoint(reading.temperature, reading.humidity))

    def get(self, characteristic: str) -> Any:
        """Value of a characteristic by API name. KeyError if not exposed."""
        return self.getters[characteristic]()

    # ------------------------------------------------------------------
    # Host description
    # ------------------------------------------------------------------

    def get_services(self) -> List[Dict[str, Any]]:
        information = {
            "type": "AccessoryInformation",
            "characteristics": {
                "Manufacturer": MANUFACTURER,
                "Model": MODEL,
                "SerialNumber": f"{socket.gethostname()}-{self.display_name}",
                "FirmwareRevision": __version__,
            },
        }
        temperature = _service("Temperature", "temperatureService", "temperature")
        humidity = _service("Humidity", "humidityService", "humidity")
        humidity["primary"] = True
        humidity["linked"] = ["temperatureService"]

        services = [information, temperature, humidity]
        if self.config.dewpoint_enabled:
            services.append(_service("Dew Point", "dewPointService", "dewpoint"))
        if self.history is not None:
            services.append({"type": "History", "subtype": "weather"})
        return services

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self):
        self.source.start()

    def close(self):
        self.source.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.display_name!r} {self.sensor!r}>"


def _service(name: str, subtype: str, key: str) -> Dict[str, Any]:
    char = CHARACTERISTICS[key]
    return {
        "type": char["service"],
        "name": name,
        "subtype": subtype,
        "characteristics": {
            char["characteristic"]: {
                "key": key,
                "unit": char["unit"],
                "props": dict(char["props"]),
            },
        },
    }

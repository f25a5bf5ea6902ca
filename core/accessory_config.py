"""Accessory configuration parsed from the YAML ``accessories`` list.

Keys follow the homebridge accessory config (camelCase), so existing
``config.json`` entries can be pasted into the YAML file unchanged:

    - accessory: SHT3x
      name: Living Room
      interval: 60
      address: "44"
      bus: 1
      temperatureCalibration: -0.5
      humidityCalibration: 2.0
      dewpointEnabled: true
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict

from config import (
    DEFAULT_ADDRESS,
    DEFAULT_BUS,
    DEFAULT_INTERVAL,
    DEFAULT_OVERLAP,
    OVERLAP_POLICIES,
)

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when an accessory entry cannot be turned into a config."""


@dataclass(frozen=True)
class AccessoryConfig:
    name: str
    interval: int = DEFAULT_INTERVAL
    address: int = DEFAULT_ADDRESS
    bus: int = DEFAULT_BUS
    history: Dict[str, Any] = field(default_factory=dict)
    temperature_calibration: float = 0.0
    humidity_calibration: float = 0.0
    dewpoint_enabled: bool = False
    overlap: str = DEFAULT_OVERLAP
    demo: bool = False

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "AccessoryConfig":
        name = raw.get("name")
        if not name:
            raise ConfigError("accessory entry is missing 'name'")

        interval = _parse_interval(raw.get("interval"))
        overlap = raw.get("overlap") or DEFAULT_OVERLAP
        if overlap not in OVERLAP_POLICIES:
            raise ConfigError(
                f"{name}: overlap must be one of {', '.join(OVERLAP_POLICIES)}, got {overlap!r}"
            )

        return cls(
            name=str(name),
            interval=interval,
            address=_parse_address(raw.get("address")),
            bus=_parse_number(name, "bus", raw.get("bus"), int, DEFAULT_BUS),
            history=dict(raw.get("history") or {}),
            temperature_calibration=_parse_number(
                name, "temperatureCalibration", raw.get("temperatureCalibration"), float, 0.0
            ),
            humidity_calibration=_parse_number(
                name, "humidityCalibration", raw.get("humidityCalibration"), float, 0.0
            ),
            dewpoint_enabled=_parse_bool(name, "dewpointEnabled", raw.get("dewpointEnabled")),
            overlap=overlap,
            demo=_parse_bool(name, "demo", raw.get("demo")),
        )


def _parse_interval(value: Any) -> int:
    # Missing or zero means "use the default", same as the homebridge plugin.
    if not value:
        return DEFAULT_INTERVAL
    try:
        interval = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"interval must be an integer number of seconds, got {value!r}")
    if interval < 0:
        raise ConfigError(f"interval must be positive, got {interval}")
    return interval or DEFAULT_INTERVAL


def _parse_address(value: Any) -> int:
    """Parse a hex address such as "44", "0x45" or an int. Falls back to 0x44."""
    if isinstance(value, int):
        return value or DEFAULT_ADDRESS
    if not value:
        return DEFAULT_ADDRESS
    try:
        return int(str(value), 16) or DEFAULT_ADDRESS
    except ValueError:
        logger.warning("Unparsable I2C address %r, using 0x%x", value, DEFAULT_ADDRESS)
        return DEFAULT_ADDRESS


def _parse_number(name: str, key: str, value: Any, kind: type, default: Any) -> Any:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise ConfigError(f"{name}: {key} must be a number, got {value!r}")
    try:
        return kind(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name}: {key} must be a number, got {value!r}")


_TRUE = {"true", "yes", "on", "1"}
_FALSE = {"false", "no", "off", "0", ""}


def _parse_bool(name: str, key: str, value: Any) -> bool:
    """YAML booleans, 0/1, or the usual on/off words. Anything else is an error."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in _TRUE | _FALSE:
        return value.strip().lower() in _TRUE
    raise ConfigError(f"{name}: {key} must be true or false, got {value!r}")

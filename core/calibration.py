"""Calibration offsets and dew point derivation.

Pure functions, no I/O. Offsets are additive and applied before anything
else, so the dew point is always derived from calibrated values.
"""

from dataclasses import dataclass
from typing import Mapping, Optional

from core.accessory_config import AccessoryConfig


@dataclass(frozen=True)
class Reading:
    """A calibrated temperature (°C) / relative humidity (%) pair."""

    temperature: float
    humidity: float


def calibrate(raw: Mapping[str, float], config: AccessoryConfig) -> Reading:
    """Apply the configured offsets to a raw driver reading."""
    return Reading(
        temperature=raw["temperature"] + config.temperature_calibration,
        humidity=raw["humidity"] + config.humidity_calibration,
    )


def calculate_dewpoint(temperature: float, humidity: float) -> float:
    # Magnus-family approximation. History consumers compare values
    # against earlier recordings, so the constants must not change.
    return (humidity / 100.0) ** 0.125 * (112.0 + 0.9 * temperature) + 0.1 * temperature - 112.0


def derive(reading: Reading, config: AccessoryConfig) -> Optional[float]:
    """Return the dew point for a calibrated reading, or None when disabled."""
    if not config.dewpoint_enabled:
        return None
    return calculate_dewpoint(reading.temperature, reading.humidity)

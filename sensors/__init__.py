"""Sensor drivers for SHT3x Bridge.

Each driver inherits from BaseSensor and implements:
    _init_hardware()  — attempt to initialise the physical sensor
    _read_hardware()  — return a dict of field→value from real hardware
    _simulate()       — return a dict of realistic fake data

The base class (sensors.base.BaseSensor) provides:
    read(demo)        — unified read with retry logic, raises SensorReadError
    simulated         — property indicating whether hardware is available
    reliability       — percentage of successful reads
    close()           — release hardware resources
"""

from sensors.base import BaseSensor, SensorReadError
from sensors.sht3x import SHT3xSensor

SENSOR_CLASSES = {
    "sht3x": SHT3xSensor,
}

__all__ = ["BaseSensor", "SensorReadError", "SHT3xSensor", "SENSOR_CLASSES"]

"""Data source implementations for SHT3x Bridge."""

from sources.sensor_source import SensorSource

__all__ = ["SensorSource"]

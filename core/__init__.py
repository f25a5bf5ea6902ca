"""Core framework for SHT3x Bridge.

Architecture:
    DataSource   -- fires sampling ticks on a fixed cadence, samples on a worker pool
    EventBus     -- thread-safe message bus with latest-value cache and SSE fan-out
    ReadingCache -- latest calibrated reading, swapped atomically
    DataStore    -- SQLite history of every successful sample
    Registry     -- accessory types by name
"""

from core.accessory_config import AccessoryConfig, ConfigError
from core.calibration import Reading, calibrate, calculate_dewpoint, derive
from core.data_source import DataSource
from core.data_store import DataStore, HistoryService
from core.event_bus import EventBus
from core.reading_cache import NoDataAvailable, ReadingCache, Snapshot
from core.registry import ACCESSORY_REGISTRY, get_accessory_class, register_accessory

__all__ = [
    "AccessoryConfig",
    "ConfigError",
    "Reading",
    "calibrate",
    "calculate_dewpoint",
    "derive",
    "DataSource",
    "DataStore",
    "HistoryService",
    "EventBus",
    "NoDataAvailable",
    "ReadingCache",
    "Snapshot",
    "ACCESSORY_REGISTRY",
    "get_accessory_class",
    "register_accessory",
]

"""SHT3x Bridge - Configuration constants

Defaults applied when an accessory entry in the YAML config leaves a key
out, plus the characteristic ranges advertised to the host.

SHT3x I2C addressing:
  ADDR pin low  = 0x44 (default)
  ADDR pin high = 0x45

On a Raspberry Pi the sensor normally sits on bus 1
(BCM 2/3 = SDA/SCL, Physical 3/5).
"""

__version__ = "1.2.0"

# ---------------------------------------------------------------------------
# Accessory defaults
# ---------------------------------------------------------------------------
DEFAULT_INTERVAL = 60           # seconds between samples
DEFAULT_ADDRESS = 0x44
DEFAULT_BUS = 1
DEFAULT_OVERLAP = "skip"        # "skip" or "allow"
OVERLAP_POLICIES = ("skip", "allow")
MAX_IN_FLIGHT = 4               # worker threads when overlap is allowed

# ---------------------------------------------------------------------------
# History store
# ---------------------------------------------------------------------------
HISTORY_DEFAULTS = {
    "path": "history.db",
    "flush_interval": 10.0,     # seconds between buffered writes
    "max_days": 7,              # raw entries older than this are deleted
}

# ---------------------------------------------------------------------------
# Accessory information
# ---------------------------------------------------------------------------
MANUFACTURER = "Sensirion"
MODEL = "SHT3x"

# ---------------------------------------------------------------------------
# Characteristic props, keyed by the name used in the HTTP API
# ---------------------------------------------------------------------------
CHARACTERISTICS = {
    "temperature": {
        "service": "TemperatureSensor",
        "characteristic": "CurrentTemperature",
        "unit": "°C",
        "props": {"minValue": -40, "maxValue": 125},
    },
    "humidity": {
        "service": "HumiditySensor",
        "characteristic": "CurrentRelativeHumidity",
        "unit": "%",
        "props": {"minValue": 0, "maxValue": 100},
    },
    "dewpoint": {
        "service": "TemperatureSensor",
        "characteristic": "CurrentTemperature",
        "unit": "°C",
        "props": {"minValue": -40, "maxValue": 125},
    },
}

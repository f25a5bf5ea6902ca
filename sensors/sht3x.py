"""Sensirion SHT3x temperature & humidity sensor (I2C).

Covers SHT30 / SHT31 / SHT35. Each read is a single-shot, high
repeatability measurement with clock stretching disabled:

  1. Write command 0x24 0x00
  2. Wait >= 15.5 ms for the conversion
  3. Read 6 bytes: temp MSB, temp LSB, temp CRC, hum MSB, hum LSB, hum CRC

Conversion (datasheet section 4.13):
  T  = -45 + 175 * raw / 65535   (°C)
  RH = 100 * raw / 65535         (%)

I2C Address: 0x44 (0x45 with ADDR pulled high)
"""

import random
import logging
import threading
import time
from typing import Dict, Sequence

from smbus2 import SMBus, i2c_msg

from config import DEFAULT_ADDRESS, DEFAULT_BUS
from sensors.base import BaseSensor

logger = logging.getLogger(__name__)

CMD_MEAS_HIGH = (0x24, 0x00)
CMD_SOFT_RESET = (0x30, 0xA2)

MEASUREMENT_DELAY = 0.016   # 15.5 ms max for high repeatability
RESET_DELAY = 0.002         # 1.5 ms


def crc8(data: Sequence[int]) -> int:
    """CRC-8, polynomial 0x31, init 0xFF."""
    crc = 0xFF
    for byte in data:
        crc ^= byte
        for _ in range(8):
            if crc & 0x80:
                crc = (crc << 1) ^ 0x31
            else:
                crc = crc << 1
            crc &= 0xFF
    return crc


def decode(data: Sequence[int]) -> Dict[str, float]:
    """Turn the 6-byte measurement frame into °C / %RH. Raises on CRC mismatch."""
    if len(data) != 6:
        raise ValueError(f"expected 6 bytes, got {len(data)}")
    if crc8(data[0:2]) != data[2]:
        raise ValueError("temperature CRC mismatch")
    if crc8(data[3:5]) != data[5]:
        raise ValueError("humidity CRC mismatch")

    raw_temp = (data[0] << 8) | data[1]
    raw_hum = (data[3] << 8) | data[4]
    return {
        "temperature": -45.0 + 175.0 * raw_temp / 65535.0,
        "humidity": 100.0 * raw_hum / 65535.0,
    }


class SHT3xSensor(BaseSensor):
    MAX_RETRIES = 1          # the sampling schedule is the retry

    def _init_hardware(self) -> None:
        self._bus = None
        self._lock = threading.Lock()
        self.address = self._cfg.get("address", DEFAULT_ADDRESS)
        self.bus_num = self._cfg.get("bus", DEFAULT_BUS)
        self._sim_temp = 21.0
        self._sim_hum = 45.0

        try:
            self._bus = SMBus(self.bus_num)
            self._bus.write_i2c_block_data(self.address, CMD_SOFT_RESET[0], [CMD_SOFT_RESET[1]])
            time.sleep(RESET_DELAY)
            self._hw_available = True
            logger.info("SHT3x: ready on I2C bus %d at 0x%02x", self.bus_num, self.address)
        except OSError as exc:
            logger.info("SHT3x: init failed on bus %d at 0x%02x — %s", self.bus_num, self.address, exc)
            self.close()

    def _read_hardware(self) -> Dict[str, float]:
        # Command, conversion wait and readout are one transaction. The sensor
        # NACKs a new command while it is still measuring.
        with self._lock:
            self._bus.write_i2c_block_data(self.address, CMD_MEAS_HIGH[0], [CMD_MEAS_HIGH[1]])
            time.sleep(MEASUREMENT_DELAY)
            msg = i2c_msg.read(self.address, 6)
            self._bus.i2c_rdwr(msg)
        return decode(list(msg))

    def _simulate(self) -> Dict[str, float]:
        # Random walk with mean reversion toward 21 C / 45 %
        self._sim_temp += random.gauss(0, 0.2)
        self._sim_temp = self._sim_temp * 0.97 + 21.0 * 0.03
        self._sim_hum += random.gauss(0, 0.8)
        self._sim_hum = self._sim_hum * 0.97 + 45.0 * 0.03
        self._sim_hum = max(0.0, min(100.0, self._sim_hum))
        return {"temperature": self._sim_temp, "humidity": self._sim_hum}

    def close(self) -> None:
        with self._lock:
            if self._bus is not None:
                try:
                    self._bus.close()
                except OSError:
                    pass
                self._bus = None

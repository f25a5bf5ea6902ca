"""Base sensor class for SHT3x Bridge.

All sensor drivers inherit from BaseSensor and implement the hardware
hooks. The base class provides shared retry and error-handling logic, so
read() either returns a complete reading or raises SensorReadError.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import time
import logging

logger = logging.getLogger(__name__)


class SensorReadError(Exception):
    """A sensor read failed after all retries."""


class BaseSensor(ABC):
    """Abstract base class for sensor drivers.

    Subclasses must implement:
        _init_hardware()  — attempt to initialise the physical sensor
        _read_hardware()  — return a dict of field→value from real hardware
        _simulate()       — return a dict of realistic fake data

    The base class provides:
        read(demo)        — unified read with retry logic, raises on failure
        simulated         — property indicating whether hardware is available
        close()           — release resources (override if needed)
    """

    # Subclasses can override these for sensor-specific tuning
    MAX_RETRIES: int = 2
    RETRY_DELAY: float = 0.1  # seconds between retries

    def __init__(self, cfg: Optional[Dict[str, Any]] = None):
        self._cfg = cfg or {}
        self._hw_available = False
        self._consecutive_failures = 0
        self._total_reads = 0
        self._failed_reads = 0

        try:
            self._init_hardware()
        except Exception as exc:
            logger.warning(
                "%s: hardware init failed — %s", self.__class__.__name__, exc,
            )
            self._hw_available = False

    # ------------------------------------------------------------------
    # Abstract methods — subclasses MUST implement
    # ------------------------------------------------------------------

    @abstractmethod
    def _init_hardware(self) -> None:
        """Attempt to initialise hardware. Set self._hw_available = True on success."""
        ...

    @abstractmethod
    def _read_hardware(self) -> Dict[str, float]:
        """Read from real hardware. Return dict of field→value or raise."""
        ...

    @abstractmethod
    def _simulate(self) -> Dict[str, float]:
        """Return realistic simulated data for demo mode."""
        ...

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    @property
    def simulated(self) -> bool:
        """True when hardware is not available."""
        return not self._hw_available

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    @property
    def reliability(self) -> float:
        """Percentage of successful reads (0.0–100.0)."""
        if self._total_reads == 0:
            return 100.0
        return ((self._total_reads - self._failed_reads) / self._total_reads) * 100.0

    def read(self, demo: bool = False) -> Dict[str, float]:
        """Read sensor data with retry logic.

        Args:
            demo: If True, return simulated data regardless of hardware state.

        Returns:
            Dict of field→value.

        Raises:
            SensorReadError: hardware missing, or every attempt failed.
        """
        if demo:
            return self._simulate()

        if not self._hw_available:
            raise SensorReadError(f"{self.__class__.__name__}: hardware not available")

        self._total_reads += 1

        last_exc = None
        for attempt in range(1, self.MAX_RETRIES + 1):
            try:
                result = self._read_hardware()
                self._consecutive_failures = 0
                return result
            except Exception as exc:
                last_exc = exc
                logger.debug(
                    "%s: attempt %d/%d failed — %s",
                    self.__class__.__name__, attempt, self.MAX_RETRIES, exc,
                )
                if attempt < self.MAX_RETRIES:
                    time.sleep(self.RETRY_DELAY)

        self._failed_reads += 1
        self._consecutive_failures += 1
        raise SensorReadError(f"{self.__class__.__name__}: {last_exc}") from last_exc

    def close(self) -> None:
        """Release hardware resources. Override in subclasses that hold a bus handle."""
        pass

    def __repr__(self) -> str:
        status = "live" if self._hw_available else "simulated"
        return f"<{self.__class__.__name__} {status}>"

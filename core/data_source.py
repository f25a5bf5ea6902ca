"""Periodic data source abstraction for SHT3x Bridge.

A DataSource samples something (a sensor, here) on a fixed wall-clock
cadence. A scheduler thread fires ticks; each tick runs one sample on a
worker pool and hands back a Future, so slow hardware never delays the
schedule itself.

Overlap policy:
    "skip"  -- a tick is dropped while the previous sample is still in flight
    "allow" -- every tick starts a sample, even if earlier ones are running
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Dict, Optional

from config import DEFAULT_OVERLAP, MAX_IN_FLIGHT, OVERLAP_POLICIES
from core.event_bus import EventBus

logger = logging.getLogger(__name__)


class DataSource(ABC):
    """Base class for periodically sampled providers.

    Subclasses implement sample(), which runs on a worker thread and
    returns the payload to publish (or None to publish nothing). A
    sample must handle its own errors; anything that escapes is logged.
    """

    def __init__(self, source_id: str, bus: EventBus, config: Dict):
        self.source_id = source_id
        self.bus = bus
        self.config = config
        self.topic = source_id  # subscribers use this to listen
        self.interval = config.get("interval", 5.0)  # seconds
        self.overlap = config.get("overlap", DEFAULT_OVERLAP)
        if self.overlap not in OVERLAP_POLICIES:
            raise ValueError(f"unknown overlap policy: {self.overlap!r}")

        workers = 1 if self.overlap == "skip" else config.get("max_in_flight", MAX_IN_FLIGHT)
        self._executor = ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix=f"sample-{source_id}"
        )
        self._in_flight = 0
        self._flight_lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self):
        """Start the scheduler thread. The first tick fires immediately."""
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, daemon=True, name=f"src-{self.source_id}"
        )
        self._thread.start()
        logger.info(
            "DataSource %s started (%ss interval, overlap=%s)",
            self.source_id, self.interval, self.overlap,
        )

    def stop(self):
        """Stop scheduling new ticks. Samples already in flight run to completion."""
        self._stop.set()
        self._executor.shutdown(wait=False)

    @property
    def in_flight(self) -> int:
        with self._flight_lock:
            return self._in_flight

    def _run(self):
        """Fire ticks on a fixed cadence, independent of how long samples take."""
        next_tick = time.monotonic()
        while not self._stop.is_set():
            self.tick()
            next_tick += self.interval
            self._stop.wait(max(0.0, next_tick - time.monotonic()))

    def tick(self) -> Optional[Future]:
        """Start one sample. Returns its Future, or None if the tick was skipped."""
        with self._flight_lock:
            if self.overlap == "skip" and self._in_flight:
                logger.debug("DataSource %s: sample still in flight, skipping tick", self.source_id)
                return None
            self._in_flight += 1
        try:
            return self._executor.submit(self._sample_and_publish)
        except RuntimeError:
            # Executor already shut down by stop()
            with self._flight_lock:
                self._in_flight -= 1
            return None

    def _sample_and_publish(self) -> Optional[Any]:
        try:
            data = self.sample()
            if data is not None:
                self.bus.publish(self.topic, data)
            return data
        except Exception as exc:
            logger.error("DataSource %s sample error: %s", self.source_id, exc)
            return None
        finally:
            with self._flight_lock:
                self._in_flight -= 1

    @abstractmethod
    def sample(self) -> Optional[Dict[str, Any]]:
        """Take one sample. Runs on a worker thread.

        Returns:
            Dict of field->value, or None to skip publishing.
        """
        ...

    def close(self):
        """Stop scheduling and wait for samples already in flight.

        Subclasses release their own resources after calling this, so nothing
        still sampling sees a closed device.
        """
        self.stop()
        self._executor.shutdown(wait=True)

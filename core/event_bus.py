"""Thread-safe event bus for SHT3x Bridge.

Sampling threads publish via publish(). The bus keeps the latest payload
per topic, calls direct subscribers on the publisher's thread, and fans
payloads out to SSE clients through bounded queues.
"""

import logging
import threading
from queue import Queue, Empty, Full
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class EventBus:
    """Event bus for the web host. No GUI dependency."""

    def __init__(self):
        self._latest: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._sse_clients: List[Queue] = []
        self._subscribers: Dict[str, List[Callable]] = {}

    def publish(self, topic: str, payload: Any):
        """Push data from any thread. Thread-safe."""
        with self._lock:
            self._latest[topic] = payload
            clients = list(self._sse_clients)
            subscribers = list(self._subscribers.get(topic, []))

        # Notify SSE clients (non-blocking); drop any that stopped draining
        for q in clients:
            try:
                q.put_nowait((topic, payload))
            except Full:
                self._remove_client(q)

        for cb in subscribers:
            try:
                cb(payload)
            except Exception as exc:
                logger.error("EventBus callback error [%s]: %s", topic, exc)

    def subscribe(self, topic: str, callback: Callable):
        """Register a callback for a topic."""
        with self._lock:
            self._subscribers.setdefault(topic, []).append(callback)

    def unsubscribe(self, topic: str, callback: Callable):
        """Remove a callback."""
        with self._lock:
            if topic in self._subscribers:
                self._subscribers[topic] = [
                    cb for cb in self._subscribers[topic] if cb != callback
                ]

    def get_latest(self, topic: Optional[str] = None) -> Any:
        """Get latest payload for a topic, or all topics."""
        with self._lock:
            if topic:
                return self._latest.get(topic)
            return dict(self._latest)

    def sse_stream(self, keepalive: float = 30.0):
        """Generator for SSE clients. Yields (topic, payload) tuples.

        Usage in Flask:
            def stream():
                for topic, payload in bus.sse_stream():
                    yield f"event: {topic}\\ndata: {json.dumps(payload)}\\n\\n"
        """
        q = Queue(maxsize=100)
        with self._lock:
            self._sse_clients.append(q)
        try:
            while True:
                try:
                    topic, payload = q.get(timeout=keepalive)
                    yield topic, payload
                except Empty:
                    yield "keepalive", None
        finally:
            self._remove_client(q)

    def _remove_client(self, q: Queue):
        with self._lock:
            try:
                self._sse_clients.remove(q)
            except ValueError:
                pass

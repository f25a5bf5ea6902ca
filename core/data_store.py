"""Lightweight SQLite history store for accessory samples.

Records one entry per successful sample: {time, temp, humidity, dewpoint?}.
Provides history queries with automatic resolution selection:
  - Last hour: raw entries (one per sampling interval)
  - Beyond an hour: 10-minute averages, the cadence Eve-style history uses

Uses WAL mode for concurrent reads/writes from Flask threads.
Writes are buffered and flushed by a background thread.
"""

import logging
import sqlite3
import threading
import time
from typing import Any, Dict, List, Optional, Tuple

from config import HISTORY_DEFAULTS

logger = logging.getLogger(__name__)

BUCKET_SECS = 600

_Row = Tuple[str, int, float, float, Optional[float]]


class DataStore:
    """SQLite-backed history store shared by any number of accessories."""

    def __init__(self, db_path: str = HISTORY_DEFAULTS["path"],
                 flush_interval: float = HISTORY_DEFAULTS["flush_interval"]):
        self._db_path = db_path
        self._local = threading.local()
        self._write_lock = threading.Lock()
        self._write_buffer: List[_Row] = []
        self._buffer_lock = threading.Lock()
        self._flush_interval = flush_interval
        self._stop = threading.Event()
        self._flush_thread: Optional[threading.Thread] = None

        conn = self._get_conn()
        self._init_tables(conn)

    @property
    def path(self) -> str:
        return self._db_path

    def _get_conn(self) -> sqlite3.Connection:
        """Get a thread-local connection (SQLite isn't thread-safe)."""
        if getattr(self._local, "conn", None) is None:
            self._local.conn = sqlite3.connect(self._db_path)
            self._local.conn.execute("PRAGMA journal_mode=WAL")
            self._local.conn.execute("PRAGMA synchronous=NORMAL")
        return self._local.conn

    def _init_tables(self, conn: sqlite3.Connection):
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS entries (
                accessory TEXT NOT NULL,
                time INTEGER NOT NULL,
                temp REAL NOT NULL,
                humidity REAL NOT NULL,
                dewpoint REAL
            );

            CREATE INDEX IF NOT EXISTS idx_entries_accessory_time
                ON entries(accessory, time);
        """)
        conn.commit()

    def start(self):
        """Start the background flush thread."""
        if self._flush_thread and self._flush_thread.is_alive():
            return
        self._stop.clear()
        self._flush_thread = threading.Thread(
            target=self._flush_loop, daemon=True, name="history-flush"
        )
        self._flush_thread.start()
        logger.info("DataStore started (db=%s)", self._db_path)

    def stop(self):
        """Stop the flush thread and write remaining buffer."""
        self._stop.set()
        self.flush()

    def record(self, accessory: str, entry: Dict[str, Any]):
        """Buffer one history entry for batch insert. Thread-safe."""
        row = (
            accessory,
            int(entry["time"]),
            float(entry["temp"]),
            float(entry["humidity"]),
            entry.get("dewpoint"),
        )
        with self._buffer_lock:
            self._write_buffer.append(row)

    def _flush_loop(self):
        while not self._stop.is_set():
            self._stop.wait(self._flush_interval)
            self.flush()

    def flush(self):
        """Write buffered entries to SQLite."""
        with self._buffer_lock:
            if not self._write_buffer:
                return
            batch = self._write_buffer[:]
            self._write_buffer.clear()

        try:
            conn = self._get_conn()
            with self._write_lock:
                conn.executemany(
                    "INSERT INTO entries (accessory, time, temp, humidity, dewpoint)"
                    " VALUES (?, ?, ?, ?, ?)",
                    batch,
                )
                conn.commit()
        except sqlite3.Error as exc:
            logger.error("DataStore flush error: %s", exc)

    def get_history(
        self, accessory: str, hours: float = 24, max_points: int = 300
    ) -> List[Dict]:
        """Get history for one accessory with auto-resolution.

        Returns a list of {time, temp, humidity[, dewpoint]} dicts sorted by time.
        """
        conn = self._get_conn()
        cutoff = time.time() - (hours * 3600)

        if hours <= 1:
            return self._raw_query(conn, accessory, cutoff, max_points)
        return self._averaged_query(conn, accessory, cutoff, BUCKET_SECS, max_points)

    def _raw_query(
        self, conn: sqlite3.Connection, accessory: str, cutoff: float, limit: int
    ) -> List[Dict]:
        rows = conn.execute("""
            SELECT time, temp, humidity, dewpoint FROM entries
            WHERE accessory = ? AND time >= ?
            ORDER BY time ASC, rowid ASC
            LIMIT ?
        """, (accessory, cutoff, limit)).fetchall()
        return [_entry(*r) for r in rows]

    def _averaged_query(
        self,
        conn: sqlite3.Connection,
        accessory: str,
        cutoff: float,
        bucket_secs: int,
        limit: int,
    ) -> List[Dict]:
        rows = conn.execute("""
            SELECT
                CAST(time / ? AS INTEGER) * ? as bucket_start,
                AVG(temp), AVG(humidity), AVG(dewpoint)
            FROM entries
            WHERE accessory = ? AND time >= ?
            GROUP BY bucket_start
            ORDER BY bucket_start ASC
            LIMIT ?
        """, (bucket_secs, bucket_secs, accessory, cutoff, limit)).fetchall()
        return [
            _entry(r[0] + bucket_secs // 2, round(r[1], 2), round(r[2], 2),
                   round(r[3], 2) if r[3] is not None else None)
            for r in rows
        ]

    def get_summary(self, accessory: str, hours: float = 24) -> Dict:
        """Get min/max/avg/current for each field over a time range."""
        conn = self._get_conn()
        cutoff = time.time() - (hours * 3600)

        latest = conn.execute("""
            SELECT temp, humidity, dewpoint FROM entries
            WHERE accessory = ? ORDER BY time DESC, rowid DESC LIMIT 1
        """, (accessory,)).fetchone()
        if latest is None:
            return {}

        summary = {}
        for index, column in enumerate(("temp", "humidity", "dewpoint")):
            avg, mn, mx, count = conn.execute(f"""
                SELECT AVG({column}), MIN({column}), MAX({column}), COUNT({column})
                FROM entries
                WHERE accessory = ? AND time >= ?
            """, (accessory, cutoff)).fetchone()
            if not count:
                continue
            summary[column] = {
                "avg": round(avg, 2),
                "min": round(mn, 2),
                "max": round(mx, 2),
                "count": count,
                "current": round(latest[index], 2) if latest[index] is not None else None,
            }
        return summary

    def cleanup(self, max_days: int = HISTORY_DEFAULTS["max_days"]) -> int:
        """Delete entries older than max_days. Returns the number removed."""
        try:
            conn = self._get_conn()
            cutoff = time.time() - (max_days * 86400)
            with self._write_lock:
                result = conn.execute("DELETE FROM entries WHERE time < ?", (cutoff,))
                conn.commit()
            if result.rowcount > 0:
                logger.info(
                    "DataStore cleanup: deleted %d entries older than %d days",
                    result.rowcount, max_days,
                )
            return result.rowcount
        except sqlite3.Error as exc:
            logger.error("DataStore cleanup error: %s", exc)
            return 0


def _entry(t, temp, humidity, dewpoint) -> Dict:
    entry = {"time": t, "temp": temp, "humidity": humidity}
    if dewpoint is not None:
        entry["dewpoint"] = dewpoint
    return entry


class HistoryService:
    """Per-accessory history sink: record(entry) is fire-and-forget."""

    def __init__(self, store: DataStore, accessory: str):
        self._store = store
        self.accessory = accessory

    def record(self, entry: Dict[str, Any]):
        self._store.record(self.accessory, entry)

    def history(self, hours: float = 24, max_points: int = 300) -> List[Dict]:
        return self._store.get_history(self.accessory, hours, max_points)

    def summary(self, hours: float = 24) -> Dict:
        return self._store.get_summary(self.accessory, hours)

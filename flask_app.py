#!/usr/bin/env python3
"""Flask host binding for SHT3x Bridge.

Exposes each configured accessory's characteristics over HTTP so a
home-automation bridge (or anything else) can poll them, plus history
and a Server-Sent Events stream of fresh samples.

Architecture:
- Builds accessories from the YAML config via the accessory registry
- Starts one sampling thread per accessory
- Answers characteristic reads from the accessory's query methods
- Serves SSE stream at /stream for real-time updates

No auth. Meant for the local network only.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from flask import Blueprint, Flask, Response, current_app, jsonify, request
from flask_cors import CORS

import accessories  # noqa: F401  (registers accessory types)
from config import CHARACTERISTICS, HISTORY_DEFAULTS, __version__
from core.accessory_config import AccessoryConfig, ConfigError
from core.data_store import DataStore, HistoryService
from core.event_bus import EventBus
from core.reading_cache import NoDataAvailable
from core.registry import get_accessory_class
from sensors.base import SensorReadError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path("config.yaml")


class Bridge:
    """Everything the HTTP layer needs: accessories, their stores and the bus."""

    def __init__(self, bus: EventBus, accessories: Optional[Dict[str, Any]] = None,
                 stores: Optional[Dict[str, DataStore]] = None,
                 max_days: int = HISTORY_DEFAULTS["max_days"]):
        self.bus = bus
        self.accessories: Dict[str, Any] = accessories or {}
        self.stores: Dict[str, DataStore] = stores or {}
        self.max_days = max_days

    def start(self):
        for store in self.stores.values():
            store.cleanup(self.max_days)
            store.start()
        for accessory in self.accessories.values():
            accessory.start()
        logger.info("Started %d accessories", len(self.accessories))

    def stop(self):
        for accessory in self.accessories.values():
            accessory.close()
        for store in self.stores.values():
            store.stop()


def load_config(path: Path) -> dict:
    """Load the bridge YAML configuration."""
    if not path.exists():
        logger.error("Config file not found: %s", path)
        return {"accessories": []}

    with open(path) as f:
        return yaml.safe_load(f) or {"accessories": []}


def build_bridge(config: dict, bus: Optional[EventBus] = None, demo: bool = False) -> Bridge:
    """Instantiate every accessory named in the config.

    Entries with an unknown type or a bad config are logged and skipped.
    """
    bus = bus or EventBus()
    history_cfg = {**HISTORY_DEFAULTS, **(config.get("history") or {})}
    bridge = Bridge(bus, max_days=history_cfg["max_days"])

    def store_for(path: str) -> DataStore:
        if path not in bridge.stores:
            bridge.stores[path] = DataStore(path, history_cfg["flush_interval"])
        return bridge.stores[path]

    for entry in config.get("accessories") or []:
        kind = entry.get("accessory")
        cls = get_accessory_class(kind)
        if cls is None:
            logger.warning("Unknown accessory type: %s for %s", kind, entry.get("name"))
            continue

        try:
            if demo:
                entry = {**entry, "demo": True}
            acc_config = AccessoryConfig.from_dict(entry)
        except ConfigError as exc:
            logger.error("Skipping accessory: %s", exc)
            continue

        if acc_config.name in bridge.accessories:
            logger.error("Skipping accessory: duplicate name %r", acc_config.name)
            continue

        store = store_for(acc_config.history.get("path", history_cfg["path"]))
        history = HistoryService(store, acc_config.name)
        bridge.accessories[acc_config.name] = cls(acc_config, bus, history)
        logger.info("Configured accessory: %s (%s)", acc_config.name, kind)

    return bridge


# Routes

api = Blueprint("api", __name__)


def _bridge() -> Bridge:
    return current_app.extensions["bridge"]


def _accessory(name: str):
    return _bridge().accessories.get(name)


@api.errorhandler(NoDataAvailable)
def _no_data(exc):
    return jsonify({"error": str(exc)}), 503


@api.errorhandler(SensorReadError)
def _sensor_failed(exc):
    logger.error("Characteristic read failed: %s", exc)
    return jsonify({"error": str(exc)}), 503


@api.route("/health")
def health():
    """Health check endpoint."""
    bridge = _bridge()
    return jsonify({
        "status": "ok",
        "version": __version__,
        "accessories": {
            name: {
                "has_data": acc.cache.has_data,
                "simulated": acc.source.demo_mode or acc.sensor.simulated,
                "reliability": round(acc.sensor.reliability, 1),
                "consecutive_failures": acc.sensor.consecutive_failures,
            }
            for name, acc in bridge.accessories.items()
        },
    })


@api.route("/api/accessories")
def list_accessories():
    """Names and exposed characteristics of every accessory."""
    return jsonify([
        {"name": name, "characteristics": sorted(acc.getters)}
        for name, acc in _bridge().accessories.items()
    ])


@api.route("/api/accessories/<name>")
def get_accessory(name: str):
    """Service description for one accessory."""
    accessory = _accessory(name)
    if accessory is None:
        return jsonify({"error": "Accessory not found"}), 404
    return jsonify({"name": name, "services": accessory.get_services()})


@api.route("/api/accessories/<name>/history")
def get_accessory_history(name: str):
    """History entries for graphing."""
    accessory = _accessory(name)
    if accessory is None or accessory.history is None:
        return jsonify({"error": "History not found"}), 404
    hours = request.args.get("hours", 24.0, type=float)
    limit = request.args.get("limit", 300, type=int)
    entries = accessory.history.history(hours, limit)
    return jsonify({
        "name": name,
        "count": len(entries),
        "data": entries,
        "summary": accessory.history.summary(hours),
    })


@api.route("/api/accessories/<name>/<characteristic>")
def get_characteristic(name: str, characteristic: str):
    """Current value of one characteristic."""
    accessory = _accessory(name)
    if accessory is None:
        return jsonify({"error": "Accessory not found"}), 404
    if characteristic not in accessory.getters:
        return jsonify({"error": "Characteristic not found"}), 404

    value = accessory.get(characteristic)
    return jsonify({
        "name": name,
        "characteristic": characteristic,
        "value": value,
        "unit": CHARACTERISTICS[characteristic]["unit"],
    })


@api.route("/stream")
def stream():
    """Server-Sent Events stream of samples.

    Format:
        event: accessory.Living Room
        data: {"temperature": 21.3, "humidity": 48.1, ...}
    """
    bus = _bridge().bus

    def event_stream():
        for topic, payload in bus.sse_stream():
            if payload is None:
                yield ": keepalive\n\n"
                continue
            yield f"event: {topic}\n"
            yield f"data: {json.dumps(payload)}\n\n"

    return Response(
        event_stream(),
        mimetype="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
        },
    )


def create_app(bridge: Bridge) -> Flask:
    app = Flask(__name__)
    CORS(app)
    app.extensions["bridge"] = bridge
    app.register_blueprint(api)
    return app


# Startup

def run(config_path: Path = DEFAULT_CONFIG_FILE, host: str = "0.0.0.0",
        port: Optional[int] = None, demo: bool = False):
    """Build the bridge from config, start sampling and serve HTTP until interrupted."""
    bridge = build_bridge(load_config(config_path), demo=demo)
    if not bridge.accessories:
        logger.warning("No accessories configured in %s", config_path)
    bridge.start()

    app = create_app(bridge)
    port = port or int(os.environ.get("PORT", 5000))
    try:
        app.run(host=host, port=port, debug=False, threaded=True)
    finally:
        bridge.stop()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    run()

#!/usr/bin/env python3
"""SHT3x Bridge — Entry point.

Polls one or more SHT3x sensors and serves their readings over HTTP.

Usage:
    python3 main.py                          # Read real hardware, config.yaml
    python3 main.py --config bridge.yaml     # Alternate config file
    python3 main.py --demo                   # Simulated readings, no I2C needed
    python3 main.py --log-level DEBUG        # Verbose logging
"""

import argparse
import logging
from pathlib import Path

from config import __version__


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="SHT3x Bridge — I2C humidity/temperature accessory bridge",
    )
    parser.add_argument(
        "--config", default="config.yaml", type=Path,
        help="Path to bridge YAML config (default: config.yaml)",
    )
    parser.add_argument(
        "--demo", action="store_true",
        help="Use simulated readings for every accessory",
    )
    parser.add_argument(
        "--host", default="0.0.0.0",
        help="Interface to listen on (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port", type=int, default=None,
        help="HTTP port (default: $PORT or 5000)",
    )
    parser.add_argument(
        "--log-level", default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set the logging verbosity (default: INFO)",
    )
    parser.add_argument(
        "--version", action="version",
        version=f"SHT3x Bridge {__version__}",
    )
    return parser.parse_args(argv)


def setup_logging(level_name: str) -> None:
    """Configure root logger with a consistent format."""
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-7s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.log_level)

    logger = logging.getLogger(__name__)
    logger.info("SHT3x Bridge v%s starting", __version__)

    import flask_app
    try:
        flask_app.run(args.config, host=args.host, port=args.port, demo=args.demo)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        logger.info("Shutdown complete")


if __name__ == "__main__":
    main()

"""Accessory type registry for SHT3x Bridge.

Accessory classes register under the type name used in the YAML
``accessories`` list, the same way a homebridge plugin registers with
``registerAccessory``. The host looks classes up here when it builds
accessories from config.

Usage:
    @register_accessory("SHT3x")
    class SHT3xAccessory:
        ...
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)

ACCESSORY_REGISTRY = {}


def register_accessory(name):
    """Decorator to register an accessory class by type name."""
    def decorator(cls):
        ACCESSORY_REGISTRY[name] = cls
        logger.debug("Registered accessory type: %s -> %s", name, cls.__name__)
        return cls
    return decorator


def get_accessory_class(name: str) -> Optional[type]:
    """Look up a registered accessory class, or None if unknown."""
    return ACCESSORY_REGISTRY.get(name)

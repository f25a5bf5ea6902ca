"""Accessory implementations for SHT3x Bridge.

Importing this package registers all built-in accessory types.
"""

from accessories.sht3x import SHT3xAccessory

__all__ = ["SHT3xAccessory"]

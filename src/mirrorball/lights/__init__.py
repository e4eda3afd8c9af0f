"""Light sources.

Components:
    bulb: Point bulb with angular falloff, stored in Taichi fields
"""

from .bulb import (
    MAX_BULBS,
    Bulb,
    add_bulb,
    bulb_power,
    clear_bulbs,
    get_bulb,
    get_bulb_count,
)

__all__ = [
    "Bulb",
    "bulb_power",
    "add_bulb",
    "clear_bulbs",
    "get_bulb",
    "get_bulb_count",
    "MAX_BULBS",
]

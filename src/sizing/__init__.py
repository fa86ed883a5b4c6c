"""Floor sizing assistant - tonnage and furnace BTU recommendations."""
from .engine import SizingEngine, adjust_cooling_sqft, adjust_heating_sqft, size_floors
from .session import SizingSession
from .tables import COOLING_TABLES, HEATING_RANGES, STANDARD_FURNACE_SIZES, MAX_FLOORS

__all__ = [
    "SizingEngine",
    "adjust_cooling_sqft",
    "adjust_heating_sqft",
    "size_floors",
    "SizingSession",
    "COOLING_TABLES",
    "HEATING_RANGES",
    "STANDARD_FURNACE_SIZES",
    "MAX_FLOORS",
]

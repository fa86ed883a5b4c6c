"""Square footage to tonnage / furnace BTU lookup.

This is a pre-Manual-J approximation: each floor's area is adjusted by a
floor-type factor and matched against static per-zone tables.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from schemas.enums import ClimateZone, FloorType
from schemas.sizing import FloorInput, FloorResult

from .tables import (
    COOLING_FLOOR_FACTORS,
    COOLING_TABLES,
    HEATING_FLOOR_FACTORS,
    HEATING_RANGES,
    STANDARD_FURNACE_SIZES,
    SqftBand,
)

logger = logging.getLogger(__name__)


def _round_int(value: float) -> int:
    """Round half away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def adjust_cooling_sqft(sqft: float, floor_type: FloorType) -> float:
    return sqft * COOLING_FLOOR_FACTORS[floor_type]


def adjust_heating_sqft(sqft: float, floor_type: FloorType) -> float:
    return sqft * HEATING_FLOOR_FACTORS[floor_type]


@dataclass
class SizingEngine:
    """Table-driven sizing. Tables default to the built-in ones."""
    cooling_tables: Dict[ClimateZone, Dict[float, SqftBand]] = field(
        default_factory=lambda: COOLING_TABLES
    )
    heating_ranges: Dict[ClimateZone, Tuple[int, int]] = field(
        default_factory=lambda: HEATING_RANGES
    )
    furnace_sizes: List[int] = field(default_factory=lambda: STANDARD_FURNACE_SIZES)

    def find_cooling_tonnage(
        self, zone: ClimateZone, adjusted_sqft: float
    ) -> Optional[Tuple[float, str]]:
        """
        Find the tonnage whose band contains the adjusted area.

        Bands are checked in ascending tonnage order and are inclusive on both
        ends. When no band matches, the band with the closest midpoint wins
        (ties go to the lower tonnage).

        Returns:
            (tonnage, explanation), or None if the zone has no cooling table
        """
        table = self.cooling_tables.get(zone)
        if not table:
            logger.debug(f"No cooling table for zone {zone}")
            return None

        zone_number = int(zone)
        shown_sqft = _round_int(adjusted_sqft)
        best: Optional[Tuple[float, SqftBand]] = None
        best_distance = math.inf

        for ton in sorted(table):
            low, high = table[ton]
            if low <= adjusted_sqft <= high:
                explanation = (
                    f"Adjusted {shown_sqft} sq ft falls in the {ton:.1f}-ton range "
                    f"({low}–{high} sq ft) for Zone {zone_number}."
                )
                return ton, explanation
            distance = abs(adjusted_sqft - (low + high) / 2.0)
            if distance < best_distance:
                best_distance = distance
                best = (ton, (low, high))

        ton, (low, high) = best
        explanation = (
            f"Adjusted {shown_sqft} sq ft is outside standard ranges; closest is "
            f"{ton:.1f} tons ({low}–{high} sq ft) for Zone {zone_number}."
        )
        return ton, explanation

    def find_heating_btu(
        self, zone: ClimateZone, sqft: float, floor_type: FloorType
    ) -> Optional[Tuple[int, str]]:
        """
        Pick the smallest standard furnace covering the low end of the heat loss.

        The load range is adjusted sq ft times the zone's BTU/sq ft range. If
        the load exceeds every standard size, the largest size is returned.

        Returns:
            (furnace_btu, explanation), or None if the zone has no heating range
        """
        heating_range = self.heating_ranges.get(zone)
        if heating_range is None or not self.furnace_sizes:
            logger.debug(f"No heating range for zone {zone}")
            return None

        adjusted = adjust_heating_sqft(sqft, floor_type)
        min_btu = adjusted * heating_range[0]
        max_btu = adjusted * heating_range[1]

        chosen = next(
            (size for size in self.furnace_sizes if size >= min_btu),
            self.furnace_sizes[-1],
        )

        explanation = (
            f"Estimated heat loss for Zone {int(zone)}: "
            f"{_round_int(min_btu):,}–{_round_int(max_btu):,} BTU "
            f"(adjusted for {floor_type.title.lower()} floor). "
            f"Selected {chosen:,} BTU as the nearest standard furnace size."
        )
        return chosen, explanation

    def size_floors(self, zone: ClimateZone, floors: List[FloorInput]) -> List[FloorResult]:
        """Size every floor that requests cooling and/or heating."""
        results: List[FloorResult] = []
        for floor in floors:
            if not (floor.needs_cooling or floor.needs_heating):
                continue

            explanation_parts: List[str] = []
            tonnage: Optional[float] = None
            furnace: Optional[int] = None

            if floor.needs_cooling:
                adjusted = adjust_cooling_sqft(floor.square_footage, floor.floor_type)
                cooling = self.find_cooling_tonnage(zone, adjusted)
                if cooling:
                    tonnage, text = cooling
                    explanation_parts.append(text)

            if floor.needs_heating:
                heating = self.find_heating_btu(zone, floor.square_footage, floor.floor_type)
                if heating:
                    furnace, text = heating
                    explanation_parts.append(text)

            results.append(FloorResult(
                floor_name=floor.name,
                floor_type=floor.floor_type,
                recommended_tonnage=tonnage,
                recommended_furnace_btu=furnace,
                explanation=" ".join(explanation_parts),
            ))
        return results


def size_floors(zone: ClimateZone, floors: List[FloorInput]) -> List[FloorResult]:
    """Convenience function using the built-in tables."""
    return SizingEngine().size_floors(zone, floors)

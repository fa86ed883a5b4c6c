"""Stateful floor list for an interactive sizing run."""
import logging
from typing import List, Optional
from uuid import UUID

from schemas.enums import ClimateZone, FloorType
from schemas.sizing import FloorInput, FloorResult

from .engine import SizingEngine
from .tables import MAX_FLOORS

logger = logging.getLogger(__name__)

# Default name/type for the 1st, 2nd and 3rd floor added
DEFAULT_FLOORS = (
    ("Main Level", FloorType.MAIN),
    ("Upstairs", FloorType.UPPER),
    ("Downstairs", FloorType.BASEMENT),
)
DEFAULT_SQUARE_FOOTAGE = 1000.0


class SizingSession:
    """Holds the zone, up to three floors and the latest results."""

    def __init__(self, engine: Optional[SizingEngine] = None):
        self.engine = engine or SizingEngine()
        self.selected_climate_zone: Optional[ClimateZone] = ClimateZone.ZONE_1
        self.zip_code: str = ""
        self.floors: List[FloorInput] = []
        self.results: List[FloorResult] = []

    def add_floor(self) -> Optional[FloorInput]:
        """Append a floor with positional defaults. No-op once three floors exist."""
        if len(self.floors) >= MAX_FLOORS:
            logger.debug("Floor limit reached; not adding another floor")
            return None
        name, floor_type = DEFAULT_FLOORS[len(self.floors)]
        floor = FloorInput(
            name=name,
            floor_type=floor_type,
            square_footage=DEFAULT_SQUARE_FOOTAGE,
            needs_cooling=True,
            needs_heating=True,
            has_separate_system=True,
        )
        self.floors.append(floor)
        return floor

    def update_floor(self, floor_id: UUID, **changes) -> Optional[FloorInput]:
        """Replace a floor with a validated copy carrying ``changes``."""
        for i, floor in enumerate(self.floors):
            if floor.id == floor_id:
                updated = FloorInput.model_validate({**floor.model_dump(), **changes})
                self.floors[i] = updated
                return updated
        return None

    def remove_floor(self, floor_id: UUID) -> None:
        self.floors = [f for f in self.floors if f.id != floor_id]

    def calculate_sizing(self) -> List[FloorResult]:
        if self.selected_climate_zone is None:
            return self.results
        self.results = self.engine.size_floors(self.selected_climate_zone, self.floors)
        return self.results

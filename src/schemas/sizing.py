"""Pydantic models for the floor-by-floor sizing assistant."""
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from .enums import FloorType


class FloorInput(BaseModel):
    """A named floor area to size."""
    id: UUID = Field(default_factory=uuid4)
    name: str = Field(description="Display name, e.g. 'Main Level'")
    floor_type: FloorType = Field(description="Selects the area adjustment multipliers")
    square_footage: float = Field(gt=0, description="Conditioned floor area in sq ft")
    needs_cooling: bool = Field(default=True, description="Recommend a cooling tonnage")
    needs_heating: bool = Field(default=True, description="Recommend a furnace size")
    has_separate_system: bool = Field(default=True, description="Floor is served by its own system")


class FloorResult(BaseModel):
    """Sizing output for one floor. Regenerated on every sizing run."""
    id: UUID = Field(default_factory=uuid4)
    floor_name: str
    floor_type: FloorType
    recommended_tonnage: Optional[float] = Field(default=None, description="Cooling tonnage, if requested")
    recommended_furnace_btu: Optional[int] = Field(default=None, description="Standard furnace size, if requested")
    explanation: str = Field(default="", description="Plain-language reasoning for the recommendation")

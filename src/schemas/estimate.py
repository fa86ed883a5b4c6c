"""Estimate schema: systems, tier options, add-ons and derived totals.

An Estimate is the aggregate root persisted per customer job. Systems carry
up to one SystemOption per tier; the three totals are derived fields that are
recomputed after every mutation (see estimator.totals).
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import EquipmentType, EstimateStatus, ModelSlot, Tier


# ============================================================================
# Tier options
# ============================================================================

class SystemOption(BaseModel):
    """One tier's purchasable configuration for a system."""
    id: UUID = Field(default_factory=uuid4)
    tier: Tier
    show_to_customer: bool = Field(default=True, description="Visible on the customer proposal")
    is_selected_by_customer: bool = Field(default=False, description="Counts toward the systems subtotal")
    seer: float = Field(default=0.0, ge=0, description="SEER rating; 0 where not applicable")
    stage: str = Field(default="", description="Single, Two-Stage, Variable Speed")
    tonnage: float = Field(default=0.0, ge=0, description="Capacity shown to the customer")
    price: float = Field(default=0.0, description="Installed price in dollars")
    image_name: Optional[str] = None

    outdoor_model: Optional[str] = Field(default=None, description="Condenser / heat pump model code")
    indoor_model: Optional[str] = Field(default=None, description="Coil / air handler model code")
    furnace_model: Optional[str] = Field(default=None, description="Furnace model code")
    warranty_text: Optional[str] = None
    advantages: List[str] = Field(default_factory=list)

    def model_code(self, slot: ModelSlot) -> Optional[str]:
        return {
            ModelSlot.OUTDOOR: self.outdoor_model,
            ModelSlot.INDOOR: self.indoor_model,
            ModelSlot.FURNACE: self.furnace_model,
        }[slot]

    def restricted_to(self, equipment_type: EquipmentType) -> "SystemOption":
        """Copy with every model code the equipment type does not own cleared."""
        slots = equipment_type.model_slots
        return self.model_copy(update={
            "outdoor_model": self.outdoor_model if ModelSlot.OUTDOOR in slots else None,
            "indoor_model": self.indoor_model if ModelSlot.INDOOR in slots else None,
            "furnace_model": self.furnace_model if ModelSlot.FURNACE in slots else None,
        })


# ============================================================================
# Systems
# ============================================================================

class ExistingSystem(BaseModel):
    """Informational notes about the equipment being replaced."""
    brand: Optional[str] = None
    model: Optional[str] = None
    age_years: Optional[int] = Field(default=None, ge=0)
    location: Optional[str] = None
    notes: Optional[str] = None


class EstimateSystem(BaseModel):
    """One piece of customer equipment, or a catalog template.

    ``tonnage`` holds BTU instead of tons when the equipment type is
    furnace-only. ``furnace_btu`` is an override used only by furnace
    composites.
    """
    id: UUID = Field(default_factory=uuid4)
    enabled: bool = True
    name: str
    tonnage: float = Field(ge=0, description="Tons, or BTU for furnace-only systems")
    furnace_btu: Optional[float] = Field(default=None, ge=0, description="Explicit furnace size for furnace composites")
    equipment_type: EquipmentType
    existing: Optional[ExistingSystem] = None
    options: List[SystemOption] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_options(self) -> "EstimateSystem":
        tiers = [o.tier for o in self.options]
        if len(tiers) != len(set(tiers)):
            raise ValueError(f"System '{self.name}' has more than one option per tier")
        slots = self.equipment_type.model_slots
        for option in self.options:
            for slot in ModelSlot:
                if slot not in slots and option.model_code(slot):
                    raise ValueError(
                        f"{self.equipment_type.value} has no {slot.value} model slot "
                        f"(option {option.tier.value})"
                    )
        return self

    def option_for(self, tier: Tier) -> Optional[SystemOption]:
        return next((o for o in self.options if o.tier == tier), None)

    def find_option(self, option_id: UUID) -> Optional[SystemOption]:
        return next((o for o in self.options if o.id == option_id), None)

    @property
    def selected_option(self) -> Optional[SystemOption]:
        """First selected option in tier order; this is the one that is billed."""
        return next((o for o in self.options if o.is_selected_by_customer), None)


# ============================================================================
# Add-ons
# ============================================================================

class AddOnTemplate(BaseModel):
    """Reusable add-on catalog entry."""
    id: UUID = Field(default_factory=uuid4)
    name: str
    description: str = ""
    default_price: float = Field(default=0.0, ge=0)
    enabled: bool = Field(default=True, description="Default enablement for new add-on instances")
    free_when_tier_is_best: bool = Field(default=False, description="Price drops to 0 when any Best tier is selected")


class AddOn(BaseModel):
    """An AddOnTemplate attached to a system (or, for legacy estimates, to the whole estimate)."""
    id: UUID = Field(default_factory=uuid4)
    template_id: Optional[UUID] = None
    system_id: Optional[UUID] = Field(default=None, description="None for estimate-wide add-ons")
    name: str
    description: str = ""
    enabled: bool = True
    price: float = 0.0


# ============================================================================
# Estimate (aggregate root)
# ============================================================================

class Estimate(BaseModel):
    """Customer estimate with derived totals."""
    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    id: UUID = Field(default_factory=uuid4)

    # Meta
    estimate_date: datetime = Field(default_factory=datetime.now)
    estimate_number: str = ""
    status: EstimateStatus = EstimateStatus.PENDING

    customer_name: str = ""
    address: str = ""
    email: str = ""
    phone: str = ""

    systems: List[EstimateSystem] = Field(default_factory=list)
    add_ons: List[AddOn] = Field(default_factory=list)

    # Derived
    systems_subtotal: float = 0.0
    add_ons_subtotal: float = 0.0
    grand_total: float = 0.0

    customer_signature_image_data: Optional[bytes] = Field(default=None, description="Opaque signature image")

    def find_system(self, system_id: UUID) -> Optional[EstimateSystem]:
        return next((s for s in self.systems if s.id == system_id), None)

    def system_index(self, system_id: UUID) -> Optional[int]:
        return next((i for i, s in enumerate(self.systems) if s.id == system_id), None)

    @property
    def enabled_systems(self) -> List[EstimateSystem]:
        return [s for s in self.systems if s.enabled]

    def add_ons_for_system(self, system_id: UUID) -> List[AddOn]:
        """Enabled add-ons attached to one system."""
        return [a for a in self.add_ons if a.enabled and a.system_id == system_id]

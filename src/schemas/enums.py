"""Shared enums used across sizing, catalog and estimate schemas."""
from enum import Enum, IntEnum
from typing import FrozenSet, Tuple


class ClimateZone(IntEnum):
    """Climate zone selecting a cooling table and a heating BTU range."""
    ZONE_1 = 1
    ZONE_2 = 2
    ZONE_3 = 3
    ZONE_4 = 4
    ZONE_5 = 5

    @property
    def title(self) -> str:
        return f"Zone {self.value}"


class FloorType(str, Enum):
    BASEMENT = "basement"
    MAIN = "main"
    UPPER = "upper"

    @property
    def title(self) -> str:
        return {
            FloorType.BASEMENT: "Downstairs",
            FloorType.MAIN: "Main Level",
            FloorType.UPPER: "Upstairs",
        }[self]


class Tier(str, Enum):
    """Purchase grade offered per system. Declaration order is the tier order."""
    GOOD = "Good"
    BETTER = "Better"
    BEST = "Best"

    @property
    def rank(self) -> int:
        return TIER_ORDER.index(self)


TIER_ORDER: Tuple[Tier, ...] = (Tier.GOOD, Tier.BETTER, Tier.BEST)


class ModelSlot(str, Enum):
    """Model-code slots a SystemOption can carry."""
    OUTDOOR = "outdoor"
    INDOOR = "indoor"
    FURNACE = "furnace"


class EquipmentType(str, Enum):
    """Purchasable equipment configurations.

    Single-part types are priced by their own templates. Composite types have
    no pricing source of their own; they are merged from their parts at the
    same capacity.
    """
    AC_CONDENSER_ONLY = "AC Condenser Only"
    COIL_ONLY = "Coil Only"
    HEAT_PUMP_ONLY = "Heat Pump Only"
    AIR_HANDLER_ONLY = "Air Handler Only"
    FURNACE_ONLY = "Furnace Only"
    AC_CONDENSER_COIL = "AC Condenser + Coil"
    AC_CONDENSER_COIL_FURNACE = "AC Condenser + Coil + Furnace"
    AC_FURNACE = "AC + Furnace"
    HEAT_PUMP_AIR_HANDLER = "Heat Pump + Air Handler"

    @property
    def parts(self) -> Tuple["EquipmentType", ...]:
        """Single-part constituents, in merge order. A single part is its own part."""
        return _PARTS.get(self, (self,))

    @property
    def is_composite(self) -> bool:
        return self in _PARTS

    @property
    def includes_furnace(self) -> bool:
        return EquipmentType.FURNACE_ONLY in self.parts

    @property
    def owned_slots(self) -> FrozenSet[ModelSlot]:
        """Slots this type fills when it is merged into a composite."""
        return _OWNED_SLOTS.get(self, frozenset())

    @property
    def model_slots(self) -> FrozenSet[ModelSlot]:
        """Slots that exist on options of this equipment type."""
        if self is EquipmentType.HEAT_PUMP_ONLY:
            return frozenset({ModelSlot.OUTDOOR, ModelSlot.INDOOR})
        slots: FrozenSet[ModelSlot] = frozenset()
        for part in self.parts:
            slots = slots | part.owned_slots
        return slots


_PARTS = {
    EquipmentType.AC_CONDENSER_COIL: (
        EquipmentType.AC_CONDENSER_ONLY,
        EquipmentType.COIL_ONLY,
    ),
    EquipmentType.AC_CONDENSER_COIL_FURNACE: (
        EquipmentType.AC_CONDENSER_ONLY,
        EquipmentType.COIL_ONLY,
        EquipmentType.FURNACE_ONLY,
    ),
    EquipmentType.AC_FURNACE: (
        EquipmentType.AC_CONDENSER_ONLY,
        EquipmentType.COIL_ONLY,
        EquipmentType.FURNACE_ONLY,
    ),
    EquipmentType.HEAT_PUMP_AIR_HANDLER: (
        EquipmentType.HEAT_PUMP_ONLY,
        EquipmentType.AIR_HANDLER_ONLY,
    ),
}

# Inside a composite the heat pump is the outdoor unit; the air handler
# supplies the indoor model.
_OWNED_SLOTS = {
    EquipmentType.AC_CONDENSER_ONLY: frozenset({ModelSlot.OUTDOOR}),
    EquipmentType.COIL_ONLY: frozenset({ModelSlot.INDOOR}),
    EquipmentType.HEAT_PUMP_ONLY: frozenset({ModelSlot.OUTDOOR}),
    EquipmentType.AIR_HANDLER_ONLY: frozenset({ModelSlot.INDOOR}),
    EquipmentType.FURNACE_ONLY: frozenset({ModelSlot.FURNACE}),
}

SINGLE_PART_TYPES: Tuple[EquipmentType, ...] = tuple(
    t for t in EquipmentType if not t.is_composite
)


class EstimateStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"


class PaymentOption(str, Enum):
    CASH_CHECK_ZELLE = "cash_check_zelle"
    CREDIT_CARD = "credit_card"
    FINANCE = "finance"

    @property
    def display_name(self) -> str:
        return {
            PaymentOption.CASH_CHECK_ZELLE: "Cash/Check/Zelle Transfer",
            PaymentOption.CREDIT_CARD: "Credit Card (3.5% Fee)",
            PaymentOption.FINANCE: "Finance",
        }[self]

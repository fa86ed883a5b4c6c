"""Display formatting for capacities and prices."""
from schemas.enums import EquipmentType


def format_tonnage(value: float) -> str:
    """2.0 -> '2 Ton', 2.5 -> '2.5 Ton'."""
    if value == int(value):
        return f"{int(value)} Ton"
    return f"{value:g} Ton"


def format_btu(value: float) -> str:
    return f"{int(round(value)):,} BTU"


def format_capacity(value: float, equipment_type: EquipmentType) -> str:
    """Furnace-only systems store BTU in the capacity field."""
    if equipment_type is EquipmentType.FURNACE_ONLY:
        return format_btu(value)
    return format_tonnage(value)


def format_currency(value: float) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"

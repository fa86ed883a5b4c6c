"""Default template catalog.

The seed matrix covers every single-part equipment type across the standard
capacity steps. Prices scale linearly from a per-type base at a reference
capacity and are rounded to the nearest $50. Model codes are placeholders
derived deterministically from the type, capacity and tier so that a reseed
always produces the same codes.
"""
import logging
import math
from typing import Dict, List, Tuple

from schemas.catalog import TemplateCatalog
from schemas.enums import TIER_ORDER, EquipmentType, ModelSlot, Tier
from schemas.estimate import AddOnTemplate, EstimateSystem, SystemOption

from .formatting import format_btu, format_tonnage

logger = logging.getLogger(__name__)

TONNAGES: List[float] = [1.5, 2.0, 2.5, 3.0, 3.5, 4.0, 5.0]
FURNACE_BTUS: List[float] = [40000, 45000, 60000, 70000, 80000, 90000, 100000, 110000]

# type -> (reference capacity, good/better/best price at that capacity)
PRICE_BASES: Dict[EquipmentType, Tuple[float, Tuple[float, float, float]]] = {
    EquipmentType.AC_CONDENSER_ONLY: (2.5, (4200, 5200, 6400)),
    EquipmentType.COIL_ONLY: (2.5, (900, 1100, 1400)),
    EquipmentType.HEAT_PUMP_ONLY: (2.5, (5200, 6800, 8200)),
    EquipmentType.AIR_HANDLER_ONLY: (2.5, (1200, 1500, 1900)),
    EquipmentType.FURNACE_ONLY: (80000.0, (1900, 2400, 2900)),
}

SEER_RATINGS: Dict[EquipmentType, Tuple[float, float, float]] = {
    EquipmentType.AC_CONDENSER_ONLY: (14, 16, 18),
    EquipmentType.COIL_ONLY: (14, 16, 18),
    EquipmentType.HEAT_PUMP_ONLY: (15, 17, 19),
    EquipmentType.AIR_HANDLER_ONLY: (0, 0, 0),
    EquipmentType.FURNACE_ONLY: (0, 0, 0),
}

STAGES: Tuple[str, str, str] = ("Single", "Two-Stage", "Variable Speed")

WARRANTY_TEXT = "WARRANTY: 10 years manufacturer warranty, 1 year labor warranty"

# Seed order and display suffix per type
SEED_TYPES: List[Tuple[EquipmentType, str]] = [
    (EquipmentType.COIL_ONLY, "AC Coil"),
    (EquipmentType.AC_CONDENSER_ONLY, "AC Condenser"),
    (EquipmentType.HEAT_PUMP_ONLY, "Heat Pump"),
    (EquipmentType.AIR_HANDLER_ONLY, "Air Handler"),
    (EquipmentType.FURNACE_ONLY, "Furnace"),
]

# slot -> model code prefix, per type
MODEL_PREFIXES: Dict[EquipmentType, Dict[ModelSlot, str]] = {
    EquipmentType.AC_CONDENSER_ONLY: {ModelSlot.OUTDOOR: "COND"},
    EquipmentType.COIL_ONLY: {ModelSlot.INDOOR: "INDR"},
    EquipmentType.AIR_HANDLER_ONLY: {ModelSlot.INDOOR: "INDR"},
    EquipmentType.HEAT_PUMP_ONLY: {ModelSlot.OUTDOOR: "HPOD", ModelSlot.INDOOR: "HPIN"},
    EquipmentType.FURNACE_ONLY: {ModelSlot.FURNACE: "FURN"},
}

_LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_FNV_OFFSET = 0xCBF29CE484222325
_FNV_PRIME = 0x100000001B3


def round_to_50(value: float) -> float:
    """Nearest multiple of 50, halves rounded up."""
    return math.floor(value / 50.0 + 0.5) * 50.0


def _fnv1a(text: str) -> int:
    h = _FNV_OFFSET
    for byte in text.encode("utf-8"):
        h ^= byte
        h = (h * _FNV_PRIME) & 0xFFFFFFFFFFFFFFFF
    return h


def letter_code(seed: str, length: int = 5) -> str:
    """Reproducible letters-only code for a seed string."""
    h = _fnv1a(seed)
    letters = []
    for _ in range(length):
        letters.append(_LETTERS[h % len(_LETTERS)])
        h //= 3 + (h % 7)
    return "".join(letters)


def numeric_tag(equipment_type: EquipmentType, capacity: float) -> str:
    """
    Capacity tag embedded in model codes.

    Tonnage types: 1.5 -> 18, each further 0.5 ton adds 6 (2.0 -> 24, 2.5 -> 30).
    Furnaces: BTU / 1000 (80000 -> 80).
    """
    if equipment_type is EquipmentType.FURNACE_ONLY:
        return str(int(round(capacity / 1000.0)))
    steps = int(round((capacity - 1.5) / 0.5))
    return str(18 + steps * 6)


def model_code(prefix: str, equipment_type: EquipmentType, capacity: float, tier: Tier) -> str:
    seed = f"{prefix}-{equipment_type.value}-{float(capacity)}-{tier.value}"
    return f"{letter_code(seed)}-{numeric_tag(equipment_type, capacity)}"


def make_options(equipment_type: EquipmentType, capacity: float) -> List[SystemOption]:
    """Synthesize the good/better/best options for one single-part template."""
    reference, prices = PRICE_BASES[equipment_type]
    seers = SEER_RATINGS[equipment_type]
    scale = capacity / reference
    prefixes = MODEL_PREFIXES[equipment_type]

    options = []
    for tier in TIER_ORDER:
        i = tier.rank
        models = {
            slot: model_code(prefix, equipment_type, capacity, tier)
            for slot, prefix in prefixes.items()
        }
        options.append(SystemOption(
            tier=tier,
            seer=seers[i],
            stage=STAGES[i],
            tonnage=capacity,
            price=round_to_50(prices[i] * scale),
            outdoor_model=models.get(ModelSlot.OUTDOOR),
            indoor_model=models.get(ModelSlot.INDOOR),
            furnace_model=models.get(ModelSlot.FURNACE),
            warranty_text=WARRANTY_TEXT,
        ))
    return options


def default_system_templates() -> List[EstimateSystem]:
    """Full single-part template matrix in seed order."""
    templates = []
    for equipment_type, label in SEED_TYPES:
        if equipment_type is EquipmentType.FURNACE_ONLY:
            for btu in FURNACE_BTUS:
                templates.append(EstimateSystem(
                    name=f"{format_btu(btu)} {label}",
                    tonnage=btu,
                    equipment_type=equipment_type,
                    options=make_options(equipment_type, btu),
                ))
        else:
            for tonnage in TONNAGES:
                templates.append(EstimateSystem(
                    name=f"{format_tonnage(tonnage)} {label}",
                    tonnage=tonnage,
                    equipment_type=equipment_type,
                    options=make_options(equipment_type, tonnage),
                ))
    return templates


def default_add_on_templates() -> List[AddOnTemplate]:
    return [
        AddOnTemplate(
            name="WiFi Thermostat",
            description="Smart thermostat install",
            default_price=350,
            enabled=True,
            free_when_tier_is_best=True,
        ),
        AddOnTemplate(name="Surge Protector", description="Outdoor unit protection", default_price=225),
        AddOnTemplate(name="Duct Sealing", description="Seal supply/return leaks", default_price=600),
    ]


def default_catalog() -> TemplateCatalog:
    return TemplateCatalog(
        system_templates=default_system_templates(),
        add_on_templates=default_add_on_templates(),
    )


def seed_missing_templates(templates: List[EstimateSystem]) -> Tuple[List[EstimateSystem], int]:
    """
    Append any baseline (type, capacity) template missing from ``templates``.

    Existing templates are never modified, so user price edits survive.

    Returns:
        Tuple of (updated template list, number of templates added)
    """
    present = {(t.equipment_type, t.tonnage) for t in templates}
    updated = list(templates)
    for baseline in default_system_templates():
        if (baseline.equipment_type, baseline.tonnage) not in present:
            updated.append(baseline)
    added = len(updated) - len(templates)
    if added:
        logger.info(f"Seeded {added} missing baseline templates")
    return updated, added

"""Composite equipment builders.

Composite equipment types have no pricing of their own. Each tier is merged
from the single-part templates looked up at the requested capacity:

- price: sum of the parts
- seer: max of the parts
- stage: first part's stage
- show_to_customer: all parts visible
- model codes: from the part that owns each slot
- warranty: first part that has one
- advantages: union, first-seen order

A tier that any part lacks is left out of the composite.
"""
import logging
from typing import FrozenSet, List, Optional, Sequence, Tuple

from schemas.enums import TIER_ORDER, EquipmentType, ModelSlot, Tier
from schemas.estimate import EstimateSystem, SystemOption

from .formatting import format_btu, format_tonnage
from .lookup import template_for

logger = logging.getLogger(__name__)

Contribution = Tuple[FrozenSet[ModelSlot], SystemOption]

# Shown in the furnace slot when the furnace template has no model code
FURNACE_MODEL_PLACEHOLDER = "Furnace"


def furnace_btu_for_tonnage(tonnage: float) -> float:
    """Typical furnace size paired with an AC tonnage."""
    if tonnage < 2.0:
        return 40000.0
    if tonnage < 2.5:
        return 60000.0
    if tonnage < 3.5:
        return 80000.0
    if tonnage < 4.5:
        return 100000.0
    return 110000.0


def _contributed_slots(equipment_type: EquipmentType) -> FrozenSet[ModelSlot]:
    if equipment_type.is_composite:
        return equipment_type.model_slots
    return equipment_type.owned_slots


def merge_options(tier: Tier, contributions: Sequence[Contribution], tonnage: float) -> SystemOption:
    """Merge one tier's options from several parts into a single option."""
    price = 0.0
    seer = 0.0
    stage = ""
    image_name: Optional[str] = None
    warranty: Optional[str] = None
    show = True
    advantages: List[str] = []
    models = {slot: None for slot in ModelSlot}

    for slots, option in contributions:
        price += option.price
        seer = max(seer, option.seer)
        if not stage:
            stage = option.stage
        if image_name is None:
            image_name = option.image_name
        if warranty is None:
            warranty = option.warranty_text
        show = show and option.show_to_customer
        for slot in slots:
            if models[slot] is None:
                models[slot] = option.model_code(slot)
        for advantage in option.advantages:
            if advantage not in advantages:
                advantages.append(advantage)

    return SystemOption(
        tier=tier,
        show_to_customer=show,
        is_selected_by_customer=False,
        seer=seer,
        stage=stage,
        tonnage=tonnage,
        price=price,
        image_name=image_name,
        outdoor_model=models[ModelSlot.OUTDOOR],
        indoor_model=models[ModelSlot.INDOOR],
        furnace_model=models[ModelSlot.FURNACE],
        warranty_text=warranty,
        advantages=advantages,
    )


def merge_templates(
    parts: Sequence[EstimateSystem],
    equipment_type: EquipmentType,
    tonnage: float,
    name: str,
    furnace_btu: Optional[float] = None,
) -> EstimateSystem:
    """Merge part templates tier by tier; tiers missing from any part are skipped."""
    merged: List[SystemOption] = []
    for tier in TIER_ORDER:
        contributions: List[Contribution] = []
        for part in parts:
            option = part.option_for(tier)
            if option is None:
                break
            contributions.append((_contributed_slots(part.equipment_type), option))
        else:
            merged.append(merge_options(tier, contributions, tonnage))
            continue
        logger.debug(f"{name}: no {tier.value} option in every part, tier omitted")

    return EstimateSystem(
        name=name,
        tonnage=tonnage,
        furnace_btu=furnace_btu,
        equipment_type=equipment_type,
        options=merged,
    )


def build_condenser_coil(templates: List[EstimateSystem], tonnage: float) -> Optional[EstimateSystem]:
    condenser = template_for(templates, tonnage, EquipmentType.AC_CONDENSER_ONLY)
    coil = template_for(templates, tonnage, EquipmentType.COIL_ONLY)
    if condenser is None or coil is None:
        return None
    return merge_templates(
        [condenser, coil],
        EquipmentType.AC_CONDENSER_COIL,
        tonnage,
        name=f"{EquipmentType.AC_CONDENSER_COIL.value} {format_tonnage(tonnage)}",
    )


def _merge_with_furnace(
    templates: List[EstimateSystem],
    base: EstimateSystem,
    equipment_type: EquipmentType,
    tonnage: float,
    target_btu: float,
    name: str,
) -> Optional[EstimateSystem]:
    furnace = template_for(templates, target_btu, EquipmentType.FURNACE_ONLY)
    if furnace is None:
        return None
    merged = merge_templates([base, furnace], equipment_type, tonnage, name=name, furnace_btu=target_btu)
    for option in merged.options:
        if option.furnace_model is None:
            option.furnace_model = FURNACE_MODEL_PLACEHOLDER
    return merged


def build_condenser_coil_furnace(
    templates: List[EstimateSystem],
    tonnage: float,
    furnace_btu: Optional[float] = None,
) -> Optional[EstimateSystem]:
    """Condenser + coil merged with the furnace nearest ``furnace_btu``.

    Without a positive override the furnace size comes from the tonnage.
    """
    base = build_condenser_coil(templates, tonnage)
    if base is None:
        return None
    target = furnace_btu if furnace_btu and furnace_btu > 0 else furnace_btu_for_tonnage(tonnage)
    return _merge_with_furnace(
        templates,
        base,
        EquipmentType.AC_CONDENSER_COIL_FURNACE,
        tonnage,
        target,
        name=(
            f"{EquipmentType.AC_CONDENSER_COIL_FURNACE.value} "
            f"{format_tonnage(tonnage)} / {format_btu(target)}"
        ),
    )


def build_ac_furnace(templates: List[EstimateSystem], tonnage: float) -> Optional[EstimateSystem]:
    """Condenser + coil merged with the furnace typical for the tonnage."""
    base = build_condenser_coil(templates, tonnage)
    if base is None:
        return None
    return _merge_with_furnace(
        templates,
        base,
        EquipmentType.AC_FURNACE,
        tonnage,
        furnace_btu_for_tonnage(tonnage),
        name=f"{EquipmentType.AC_FURNACE.value} {format_tonnage(tonnage)}",
    )


def build_heat_pump_air_handler(templates: List[EstimateSystem], tonnage: float) -> Optional[EstimateSystem]:
    heat_pump = template_for(templates, tonnage, EquipmentType.HEAT_PUMP_ONLY)
    air_handler = template_for(templates, tonnage, EquipmentType.AIR_HANDLER_ONLY)
    if heat_pump is None or air_handler is None:
        return None
    return merge_templates(
        [heat_pump, air_handler],
        EquipmentType.HEAT_PUMP_AIR_HANDLER,
        tonnage,
        name=f"{EquipmentType.HEAT_PUMP_AIR_HANDLER.value} {format_tonnage(tonnage)}",
    )


def build_composite(
    templates: List[EstimateSystem],
    equipment_type: EquipmentType,
    tonnage: float,
    furnace_btu: Optional[float] = None,
) -> Optional[EstimateSystem]:
    """Dispatch to the builder for a composite equipment type."""
    if equipment_type is EquipmentType.AC_CONDENSER_COIL:
        return build_condenser_coil(templates, tonnage)
    if equipment_type is EquipmentType.AC_CONDENSER_COIL_FURNACE:
        return build_condenser_coil_furnace(templates, tonnage, furnace_btu)
    if equipment_type is EquipmentType.AC_FURNACE:
        return build_ac_furnace(templates, tonnage)
    if equipment_type is EquipmentType.HEAT_PUMP_AIR_HANDLER:
        return build_heat_pump_air_handler(templates, tonnage)
    raise ValueError(f"{equipment_type.value} is not a composite equipment type")

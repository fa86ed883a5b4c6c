"""Keep each system's tier options consistent with the template catalog.

Every function here is pure: it takes the current estimate and the catalog
snapshot and returns a new estimate with totals recalculated. Callers
persist the result once.
"""
import logging
import math
from typing import Callable, Dict, List, Optional
from uuid import UUID, uuid4

from catalog.composites import build_composite
from catalog.lookup import template_for
from schemas.catalog import TemplateCatalog
from schemas.enums import TIER_ORDER, EquipmentType, Tier
from schemas.estimate import Estimate, EstimateSystem, SystemOption

from .addons import attach_templates
from .totals import recalculate_totals

logger = logging.getLogger(__name__)

# Price multiplier for a synthesized tier, by the missing tier's rank
BACKFILL_MARKUP = (1.0, 1.12, 1.25)

DEFAULT_SYSTEM_TONNAGE = 3.0
DEFAULT_SYSTEM_TYPE = EquipmentType.AC_FURNACE


def _round_dollars(value: float) -> float:
    return float(math.floor(value + 0.5))


# ============================================================================
# Cloning
# ============================================================================

def clone_option(option: SystemOption) -> SystemOption:
    """Copy with a fresh id and the customer selection cleared."""
    return option.model_copy(deep=True, update={"id": uuid4(), "is_selected_by_customer": False})


def clone_system(template: EstimateSystem, name: Optional[str] = None) -> EstimateSystem:
    """Instantiate a template as a new, enabled system with fresh ids."""
    return EstimateSystem(
        enabled=True,
        name=name or template.name,
        tonnage=template.tonnage,
        furnace_btu=template.furnace_btu,
        equipment_type=template.equipment_type,
        options=[clone_option(o) for o in template.options],
    )


# ============================================================================
# Option building
# ============================================================================

def ensure_all_tiers(options: List[SystemOption], tonnage: float) -> List[SystemOption]:
    """
    Fill in missing tiers so a system always offers good, better and best.

    A missing tier is cloned from the first available tier (in tier order)
    and marked up by BACKFILL_MARKUP for its rank. With no options at all
    there is nothing to clone and the list stays empty.

    Returns:
        Options in canonical tier order
    """
    by_tier: Dict[Tier, SystemOption] = {}
    for option in options:
        by_tier.setdefault(option.tier, option)

    base = next((by_tier[t] for t in TIER_ORDER if t in by_tier), None)
    if base is None:
        return []

    for tier in TIER_ORDER:
        if tier in by_tier:
            continue
        markup = BACKFILL_MARKUP[tier.rank]
        price = base.price if markup == 1.0 else _round_dollars(base.price * markup)
        by_tier[tier] = base.model_copy(deep=True, update={
            "id": uuid4(),
            "tier": tier,
            "show_to_customer": True,
            "is_selected_by_customer": False,
            "tonnage": tonnage,
            "price": price,
        })
        logger.debug(f"Backfilled {tier.value} tier from {base.tier.value} at ${price:,.0f}")

    return [by_tier[t] for t in TIER_ORDER]


def build_options(system: EstimateSystem, catalog: TemplateCatalog) -> List[SystemOption]:
    """
    Build a system's options from the catalog.

    Single-part types copy the nearest template; composite types merge their
    parts. Missing tiers are backfilled, and every option's tonnage is set
    to the system's own capacity.
    """
    equipment_type = system.equipment_type
    templates = catalog.system_templates

    if equipment_type.is_composite:
        source = build_composite(templates, equipment_type, system.tonnage, system.furnace_btu)
    else:
        source = template_for(templates, system.tonnage, equipment_type)

    if source is None:
        logger.warning(f"No templates to build {equipment_type.value} at {system.tonnage:g}")
        return []

    options = [clone_option(o).restricted_to(equipment_type) for o in source.options]
    options = ensure_all_tiers(options, system.tonnage)
    return [o.model_copy(update={"tonnage": system.tonnage}) for o in options]


def _with_system(
    estimate: Estimate,
    system_id: UUID,
    catalog: TemplateCatalog,
    change: Callable[[EstimateSystem], None],
) -> Estimate:
    """Apply an in-place change to a copy of one system, then recalculate."""
    result = estimate.model_copy(deep=True)
    system = result.find_system(system_id)
    if system is None:
        logger.debug(f"System {system_id} not found")
    else:
        change(system)
    return recalculate_totals(result, catalog.add_on_templates)


def replace_options_for_system(estimate: Estimate, system_id: UUID, catalog: TemplateCatalog) -> Estimate:
    """Rebuild one system's options from scratch; any selection is cleared."""
    def change(system: EstimateSystem) -> None:
        system.options = build_options(system, catalog)

    return _with_system(estimate, system_id, catalog, change)


def sync_systems_with_templates(estimate: Estimate, catalog: TemplateCatalog) -> Estimate:
    """
    Re-derive every system's options after the catalog changed.

    Per tier, the rebuilt option keeps the existing option's id,
    show_to_customer and is_selected_by_customer; every pricing and equipment field
    comes from the catalog. Systems the catalog cannot build keep their
    current options.
    """
    result = estimate.model_copy(deep=True)
    for system in result.systems:
        fresh = build_options(system, catalog)
        if not fresh:
            continue
        synced = []
        for option in fresh:
            existing = system.option_for(option.tier)
            if existing is not None:
                option = option.model_copy(update={
                    "id": existing.id,
                    "show_to_customer": existing.show_to_customer,
                    "is_selected_by_customer": existing.is_selected_by_customer,
                })
            synced.append(option)
        system.options = synced
    return recalculate_totals(result, catalog.add_on_templates)


# ============================================================================
# Selection and visibility
# ============================================================================

def select_option(estimate: Estimate, system_id: UUID, option_id: UUID, catalog: TemplateCatalog) -> Estimate:
    """Radio selection: the chosen option is selected, every other tier is cleared."""
    def change(system: EstimateSystem) -> None:
        for option in system.options:
            option.is_selected_by_customer = option.id == option_id

    return _with_system(estimate, system_id, catalog, change)


def toggle_option_selection(
    estimate: Estimate, system_id: UUID, option_id: UUID, catalog: TemplateCatalog
) -> Estimate:
    """Checkbox selection: flips one option, leaving the other tiers alone."""
    def change(system: EstimateSystem) -> None:
        option = system.find_option(option_id)
        if option is not None:
            option.is_selected_by_customer = not option.is_selected_by_customer

    return _with_system(estimate, system_id, catalog, change)


def set_option_visibility(
    estimate: Estimate,
    system_id: UUID,
    option_id: UUID,
    show_to_customer: bool,
    catalog: TemplateCatalog,
) -> Estimate:
    def change(system: EstimateSystem) -> None:
        option = system.find_option(option_id)
        if option is not None:
            option.show_to_customer = show_to_customer

    return _with_system(estimate, system_id, catalog, change)


def accept_proposal(estimate: Estimate, tier: Tier, catalog: TemplateCatalog) -> Estimate:
    """Select ``tier`` in every system."""
    result = estimate.model_copy(deep=True)
    for system in result.systems:
        for option in system.options:
            option.is_selected_by_customer = option.tier == tier
    return recalculate_totals(result, catalog.add_on_templates)


# ============================================================================
# System list
# ============================================================================

def new_system(name: str, catalog: TemplateCatalog,
               tonnage: float = DEFAULT_SYSTEM_TONNAGE,
               equipment_type: EquipmentType = DEFAULT_SYSTEM_TYPE) -> EstimateSystem:
    """A fresh system with options built from the catalog."""
    system = EstimateSystem(name=name, tonnage=tonnage, equipment_type=equipment_type)
    system.options = build_options(system, catalog)
    return system


def add_system(estimate: Estimate, template: EstimateSystem, catalog: TemplateCatalog) -> Estimate:
    result = estimate.model_copy(update={"systems": [*estimate.systems, clone_system(template)]})
    return recalculate_totals(result, catalog.add_on_templates)


def remove_system(estimate: Estimate, system_id: UUID, catalog: TemplateCatalog) -> Estimate:
    """Remove a system together with the add-ons attached to it."""
    result = estimate.model_copy(update={
        "systems": [s for s in estimate.systems if s.id != system_id],
        "add_ons": [a for a in estimate.add_ons if a.system_id != system_id],
    })
    return recalculate_totals(result, catalog.add_on_templates)


def set_system_enabled(estimate: Estimate, system_id: UUID, enabled: bool, catalog: TemplateCatalog) -> Estimate:
    def change(system: EstimateSystem) -> None:
        system.enabled = enabled

    return _with_system(estimate, system_id, catalog, change)


def update_system_meta(
    estimate: Estimate,
    system_id: UUID,
    catalog: TemplateCatalog,
    name: Optional[str] = None,
    tonnage: Optional[float] = None,
    equipment_type: Optional[EquipmentType] = None,
    furnace_btu: Optional[float] = None,
) -> Estimate:
    """
    Update a system's name and configuration.

    A change of capacity or equipment type rebuilds the system's options,
    which clears the customer's selection for it. A furnace size change
    rebuilds only systems whose price depends on it.
    """
    def change(system: EstimateSystem) -> None:
        rebuild = False
        if name is not None:
            system.name = name
        if tonnage is not None and tonnage != system.tonnage:
            system.tonnage = tonnage
            rebuild = True
        if equipment_type is not None and equipment_type != system.equipment_type:
            system.equipment_type = equipment_type
            rebuild = True
        if furnace_btu is not None and furnace_btu != system.furnace_btu:
            system.furnace_btu = furnace_btu
            # only the condenser + coil + furnace composite sizes its furnace from the override
            rebuild = rebuild or system.equipment_type is EquipmentType.AC_CONDENSER_COIL_FURNACE
        if rebuild:
            system.options = build_options(system, catalog)

    return _with_system(estimate, system_id, catalog, change)


def ensure_system_count(estimate: Estimate, count: int, catalog: TemplateCatalog) -> Estimate:
    """Grow with default systems ("System #n") or truncate to ``count`` systems."""
    if count < 0:
        raise ValueError(f"System count must be >= 0, got {count}")

    systems = list(estimate.systems)
    if len(systems) < count:
        for i in range(len(systems), count):
            systems.append(new_system(f"System #{i + 1}", catalog))
    else:
        systems = systems[:count]

    system_ids = {s.id for s in systems}
    add_ons = [a for a in estimate.add_ons if a.system_id is None or a.system_id in system_ids]
    result = estimate.model_copy(update={"systems": systems, "add_ons": add_ons})
    return recalculate_totals(result, catalog.add_on_templates)


def start_new_estimate(
    catalog: TemplateCatalog,
    system_templates: Optional[List[EstimateSystem]] = None,
    estimate_number: str = "",
) -> Estimate:
    """
    Create an estimate with one system cloned from each template.

    Without explicit templates the estimate starts with a single default
    system. Add-ons are attached per system from the add-on catalog.
    """
    if system_templates is None:
        systems = [new_system("Main System", catalog)]
    else:
        systems = [clone_system(t) for t in system_templates]
    estimate = Estimate(estimate_number=estimate_number, systems=systems)
    return attach_templates(estimate, catalog.add_on_templates)

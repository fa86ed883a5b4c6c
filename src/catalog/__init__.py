"""Template catalog - seed pricing matrix, capacity lookup and composite builders."""
from .composites import (
    build_ac_furnace,
    build_composite,
    build_condenser_coil,
    build_condenser_coil_furnace,
    build_heat_pump_air_handler,
    furnace_btu_for_tonnage,
    merge_options,
    merge_templates,
)
from .formatting import format_btu, format_capacity, format_currency, format_tonnage
from .lookup import template_for
from .seed import (
    default_add_on_templates,
    default_catalog,
    default_system_templates,
    make_options,
    round_to_50,
    seed_missing_templates,
)

__all__ = [
    "build_ac_furnace",
    "build_composite",
    "build_condenser_coil",
    "build_condenser_coil_furnace",
    "build_heat_pump_air_handler",
    "furnace_btu_for_tonnage",
    "merge_options",
    "merge_templates",
    "format_btu",
    "format_capacity",
    "format_currency",
    "format_tonnage",
    "template_for",
    "default_add_on_templates",
    "default_catalog",
    "default_system_templates",
    "make_options",
    "round_to_50",
    "seed_missing_templates",
]

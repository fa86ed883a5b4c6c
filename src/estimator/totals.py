"""Derived estimate totals.

systems_subtotal = sum of the selected option price over enabled systems
add_ons_subtotal = sum of enabled add-on prices
grand_total      = systems_subtotal + add_ons_subtotal
"""
from typing import List, Tuple

from schemas.enums import Tier
from schemas.estimate import AddOnTemplate, Estimate


def is_any_best_selected(estimate: Estimate) -> bool:
    """True if any system, enabled or not, has its Best option selected."""
    return any(
        option.tier == Tier.BEST and option.is_selected_by_customer
        for system in estimate.systems
        for option in system.options
    )


def compute_subtotals(estimate: Estimate) -> Tuple[float, float]:
    """
    Compute (systems_subtotal, add_ons_subtotal) without touching the estimate.

    A system with several selected options contributes only the first one in
    tier order; a system with none contributes nothing.
    """
    systems_subtotal = 0.0
    for system in estimate.enabled_systems:
        selected = system.selected_option
        if selected is not None:
            systems_subtotal += selected.price

    add_ons_subtotal = sum(a.price for a in estimate.add_ons if a.enabled)
    return systems_subtotal, add_ons_subtotal


def recalculate_totals(estimate: Estimate, add_on_templates: List[AddOnTemplate]) -> Estimate:
    """
    Return a copy of the estimate with prices and totals brought up to date.

    Add-ons whose template is free-when-best are zeroed while any Best tier
    is selected. All other add-on prices are left as they are, so manual
    price edits survive; only attach_templates refreshes prices from the
    catalog.
    """
    result = estimate.model_copy(deep=True)

    if is_any_best_selected(result):
        free_template_ids = {t.id for t in add_on_templates if t.free_when_tier_is_best}
        for add_on in result.add_ons:
            if add_on.template_id in free_template_ids:
                add_on.price = 0.0

    systems_subtotal, add_ons_subtotal = compute_subtotals(result)
    result.systems_subtotal = systems_subtotal
    result.add_ons_subtotal = add_ons_subtotal
    result.grand_total = systems_subtotal + add_ons_subtotal
    return result

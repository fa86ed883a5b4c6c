"""Per-system add-on instances mirrored from the add-on template catalog."""
import logging
from typing import Dict, List, Tuple
from uuid import UUID, uuid4

from schemas.estimate import AddOn, AddOnTemplate, Estimate

from .totals import is_any_best_selected, recalculate_totals

logger = logging.getLogger(__name__)


def attach_templates(estimate: Estimate, add_on_templates: List[AddOnTemplate]) -> Estimate:
    """
    Rebuild add-ons as the cross product of systems and add-on templates.

    For an existing (template, system) pair the add-on keeps its id and
    enabled flag; name, description and price are refreshed from the
    template. New pairs start with the template's own enabled flag. Add-ons
    outside the cross product, including legacy estimate-wide ones, are
    dropped. Totals are recalculated afterwards, which re-applies the
    free-when-best rule.
    """
    existing: Dict[Tuple[UUID, UUID], AddOn] = {
        (a.template_id, a.system_id): a
        for a in estimate.add_ons
        if a.template_id is not None and a.system_id is not None
    }

    rebuilt: List[AddOn] = []
    for system in estimate.systems:
        for template in add_on_templates:
            prior = existing.get((template.id, system.id))
            rebuilt.append(AddOn(
                id=prior.id if prior else uuid4(),
                template_id=template.id,
                system_id=system.id,
                name=template.name,
                description=template.description,
                enabled=prior.enabled if prior else template.enabled,
                price=template.default_price,
            ))

    kept_ids = {a.id for a in rebuilt}
    dropped = sum(1 for a in estimate.add_ons if a.id not in kept_ids)
    if dropped:
        logger.debug(f"Dropped {dropped} add-ons no longer backed by a system/template pair")

    result = estimate.model_copy(update={"add_ons": rebuilt})
    return recalculate_totals(result, add_on_templates)


def add_add_on(
    estimate: Estimate,
    template: AddOnTemplate,
    add_on_templates: List[AddOnTemplate],
) -> Estimate:
    """Attach a template to the whole estimate (not to a particular system)."""
    price = 0.0 if template.free_when_tier_is_best and is_any_best_selected(estimate) else template.default_price
    add_on = AddOn(
        template_id=template.id,
        name=template.name,
        description=template.description,
        enabled=True,
        price=price,
    )
    result = estimate.model_copy(update={"add_ons": [*estimate.add_ons, add_on]})
    return recalculate_totals(result, add_on_templates)


def remove_add_on(estimate: Estimate, add_on_id: UUID, add_on_templates: List[AddOnTemplate]) -> Estimate:
    result = estimate.model_copy(update={"add_ons": [a for a in estimate.add_ons if a.id != add_on_id]})
    return recalculate_totals(result, add_on_templates)


def _update_add_on(
    estimate: Estimate,
    add_on_id: UUID,
    add_on_templates: List[AddOnTemplate],
    **changes,
) -> Estimate:
    result = estimate.model_copy(deep=True)
    for add_on in result.add_ons:
        if add_on.id == add_on_id:
            for key, value in changes.items():
                setattr(add_on, key, value)
            break
    else:
        logger.debug(f"Add-on {add_on_id} not found")
    return recalculate_totals(result, add_on_templates)


def set_add_on_enabled(
    estimate: Estimate,
    add_on_id: UUID,
    enabled: bool,
    add_on_templates: List[AddOnTemplate],
) -> Estimate:
    return _update_add_on(estimate, add_on_id, add_on_templates, enabled=enabled)


def set_add_on_price(
    estimate: Estimate,
    add_on_id: UUID,
    price: float,
    add_on_templates: List[AddOnTemplate],
) -> Estimate:
    """Manual per-estimate price override; kept until the next attach_templates."""
    return _update_add_on(estimate, add_on_id, add_on_templates, price=float(price))

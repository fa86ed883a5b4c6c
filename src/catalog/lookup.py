"""Capacity lookup over the system template list."""
from typing import List, Optional

from schemas.enums import EquipmentType
from schemas.estimate import EstimateSystem


def template_for(
    templates: List[EstimateSystem],
    capacity: float,
    equipment_type: EquipmentType,
) -> Optional[EstimateSystem]:
    """
    Find the template for a capacity and equipment type.

    An exact capacity match wins (first in catalog order). Otherwise the
    template with the numerically closest capacity is returned; ties go to
    the first one in ascending capacity order.

    Returns:
        The matching template, or None if no template of that type exists
    """
    candidates = [t for t in templates if t.equipment_type == equipment_type]
    if not candidates:
        return None

    exact = next((t for t in candidates if t.tonnage == capacity), None)
    if exact is not None:
        return exact

    ascending = sorted(candidates, key=lambda t: t.tonnage)
    return min(ascending, key=lambda t: abs(t.tonnage - capacity))

"""HVAC Estimator Schemas - Pydantic models for sizing, catalog and estimates."""
from .enums import (
    ClimateZone,
    FloorType,
    Tier,
    TIER_ORDER,
    ModelSlot,
    EquipmentType,
    SINGLE_PART_TYPES,
    EstimateStatus,
    PaymentOption,
)
from .sizing import FloorInput, FloorResult
from .estimate import (
    SystemOption,
    ExistingSystem,
    EstimateSystem,
    AddOnTemplate,
    AddOn,
    Estimate,
)
from .catalog import TemplatesBundle, TemplateCatalog

__all__ = [
    # Enums
    "ClimateZone",
    "FloorType",
    "Tier",
    "TIER_ORDER",
    "ModelSlot",
    "EquipmentType",
    "SINGLE_PART_TYPES",
    "EstimateStatus",
    "PaymentOption",
    # Sizing
    "FloorInput",
    "FloorResult",
    # Estimate
    "SystemOption",
    "ExistingSystem",
    "EstimateSystem",
    "AddOnTemplate",
    "AddOn",
    "Estimate",
    # Catalog
    "TemplatesBundle",
    "TemplateCatalog",
]

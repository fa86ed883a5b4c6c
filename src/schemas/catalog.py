"""Template catalog and the import/export bundle."""
from typing import List

from pydantic import BaseModel, Field

from .enums import EquipmentType
from .estimate import AddOnTemplate, EstimateSystem


class TemplatesBundle(BaseModel):
    """Import/export document holding either or both template lists."""
    system_templates: List[EstimateSystem] = Field(default_factory=list)
    add_on_templates: List[AddOnTemplate] = Field(default_factory=list)


class TemplateCatalog(BaseModel):
    """Editable source data used to seed and re-sync estimates.

    Passed explicitly to every composer call; the composer never reads
    catalog state from anywhere else.
    """
    system_templates: List[EstimateSystem] = Field(default_factory=list)
    add_on_templates: List[AddOnTemplate] = Field(default_factory=list)

    def templates_of_type(self, equipment_type: EquipmentType) -> List[EstimateSystem]:
        return [t for t in self.system_templates if t.equipment_type == equipment_type]

    def enabled_add_on_templates(self) -> List[AddOnTemplate]:
        return [t for t in self.add_on_templates if t.enabled]

    def to_bundle(self) -> TemplatesBundle:
        return TemplatesBundle(
            system_templates=self.system_templates,
            add_on_templates=self.add_on_templates,
        )

    @classmethod
    def from_bundle(cls, bundle: TemplatesBundle) -> "TemplateCatalog":
        return cls(
            system_templates=bundle.system_templates,
            add_on_templates=bundle.add_on_templates,
        )

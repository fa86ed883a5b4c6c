"""JSON persistence for estimates and template catalogs."""
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

from pydantic import TypeAdapter, ValidationError

from schemas.catalog import TemplateCatalog, TemplatesBundle
from schemas.estimate import AddOnTemplate, Estimate, EstimateSystem

logger = logging.getLogger(__name__)

_ESTIMATE = TypeAdapter(Estimate)
_ESTIMATES = TypeAdapter(List[Estimate])
_SYSTEM_TEMPLATES = TypeAdapter(List[EstimateSystem])
_ADD_ON_TEMPLATES = TypeAdapter(List[AddOnTemplate])


class PersistenceError(Exception):
    """Raised when a document cannot be written to the data directory."""


@dataclass
class EstimateStore:
    """
    Stores the estimator documents as JSON files.

    Directory structure:
        {data_dir}/
            current_estimate.json
            estimates.json
            system_templates.json
            addon_templates.json
    """
    data_dir: Path

    CURRENT_ESTIMATE = "current_estimate.json"
    ESTIMATES = "estimates.json"
    SYSTEM_TEMPLATES = "system_templates.json"
    ADD_ON_TEMPLATES = "addon_templates.json"

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)

    def path_for(self, name: str) -> Path:
        return self.data_dir / name

    # ------------------------------------------------------------------
    # Low-level read/write
    # ------------------------------------------------------------------

    def _read(self, name: str, adapter: TypeAdapter) -> Optional[Any]:
        """
        Decode a document, or None when it is missing or unreadable.

        A corrupt file is logged and left in place; the next save
        overwrites it.
        """
        path = self.path_for(name)
        if not path.exists():
            return None
        try:
            return adapter.validate_json(path.read_bytes())
        except (OSError, ValidationError) as e:
            logger.warning(f"Could not load {path}: {e}")
            return None

    def _write(self, name: str, payload: bytes) -> Path:
        """Write via a temp file in the same directory, then replace."""
        path = self.path_for(name)
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(payload)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PersistenceError(f"Failed to save {path}: {e}") from e
        logger.debug(f"Saved {path}")
        return path

    # ------------------------------------------------------------------
    # Estimates
    # ------------------------------------------------------------------

    def load_current_estimate(self) -> Optional[Estimate]:
        return self._read(self.CURRENT_ESTIMATE, _ESTIMATE)

    def save_current_estimate(self, estimate: Estimate) -> Path:
        return self._write(self.CURRENT_ESTIMATE, estimate.model_dump_json(indent=2).encode())

    def load_estimates(self) -> Optional[List[Estimate]]:
        return self._read(self.ESTIMATES, _ESTIMATES)

    def save_estimates(self, estimates: List[Estimate]) -> Path:
        return self._write(self.ESTIMATES, _ESTIMATES.dump_json(estimates, indent=2))

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def load_system_templates(self) -> Optional[List[EstimateSystem]]:
        return self._read(self.SYSTEM_TEMPLATES, _SYSTEM_TEMPLATES)

    def save_system_templates(self, templates: List[EstimateSystem]) -> Path:
        return self._write(self.SYSTEM_TEMPLATES, _SYSTEM_TEMPLATES.dump_json(templates, indent=2))

    def load_add_on_templates(self) -> Optional[List[AddOnTemplate]]:
        return self._read(self.ADD_ON_TEMPLATES, _ADD_ON_TEMPLATES)

    def save_add_on_templates(self, templates: List[AddOnTemplate]) -> Path:
        return self._write(self.ADD_ON_TEMPLATES, _ADD_ON_TEMPLATES.dump_json(templates, indent=2))

    def save_catalog(self, catalog: TemplateCatalog) -> None:
        self.save_system_templates(catalog.system_templates)
        self.save_add_on_templates(catalog.add_on_templates)


# ============================================================================
# Templates bundle
# ============================================================================

def export_bundle(
    catalog: TemplateCatalog,
    include_systems: bool = True,
    include_add_ons: bool = True,
) -> str:
    """
    Serialize the catalog, or one half of it, as a templates bundle.

    Args:
        catalog: Catalog to export
        include_systems: Include the system templates
        include_add_ons: Include the add-on templates

    Returns:
        Pretty-printed JSON document
    """
    bundle = TemplatesBundle(
        system_templates=catalog.system_templates if include_systems else [],
        add_on_templates=catalog.add_on_templates if include_add_ons else [],
    )
    return bundle.model_dump_json(indent=2)


def import_bundle(text: str) -> TemplateCatalog:
    """
    Parse a templates bundle into a catalog.

    The whole document is validated before anything is returned, so a bad
    file never replaces just one of the two lists.

    Raises:
        ValueError: If the document is not a valid bundle
    """
    try:
        bundle = TemplatesBundle.model_validate_json(text)
    except ValidationError as e:
        raise ValueError(f"Invalid templates bundle: {e}") from e
    return TemplateCatalog.from_bundle(bundle)

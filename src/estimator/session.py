"""Stateful estimator session: current estimate, estimate list and catalog.

The session owns the in-memory state and persists it through an
EstimateStore. Every mutation runs one of the pure composer/add-on
functions and then commits the result once.
"""
import logging
import re
from typing import Iterable, List, Optional
from uuid import UUID

from catalog.seed import default_add_on_templates, default_system_templates, seed_missing_templates
from schemas.catalog import TemplateCatalog
from schemas.enums import EquipmentType, EstimateStatus, Tier
from schemas.estimate import AddOnTemplate, Estimate, EstimateSystem

from . import addons, composer
from .payments import payment_breakdown, tier_totals
from .settings import AppSettings
from .store import EstimateStore, PersistenceError, export_bundle, import_bundle
from .summary import text_summary

logger = logging.getLogger(__name__)


def load_catalog(store: EstimateStore) -> TemplateCatalog:
    """
    Load the template catalog, repairing it where needed.

    Missing or empty lists are replaced by the seed catalog, and baseline
    single-part templates absent from a saved list are added back. The
    repaired catalog is written back when anything changed.
    """
    system_templates = store.load_system_templates()
    add_on_templates = store.load_add_on_templates()
    changed = False

    if not system_templates:
        logger.info("No system templates found; seeding defaults")
        system_templates = default_system_templates()
        changed = True
    else:
        system_templates, added = seed_missing_templates(system_templates)
        changed = changed or added > 0

    if not add_on_templates:
        logger.info("No add-on templates found; seeding defaults")
        add_on_templates = default_add_on_templates()
        changed = True

    catalog = TemplateCatalog(system_templates=system_templates, add_on_templates=add_on_templates)
    if changed:
        try:
            store.save_catalog(catalog)
        except PersistenceError as e:
            logger.error(f"Could not save seeded catalog: {e}")
    return catalog


def next_estimate_number(estimates: Iterable[Estimate], prefix: str = "CS-") -> str:
    """One more than the highest ``{prefix}NNN`` number in use, zero-padded to 3 digits."""
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")
    numbers = []
    for estimate in estimates:
        match = pattern.match(estimate.estimate_number)
        if match:
            numbers.append(int(match.group(1)))
    return f"{prefix}{max(numbers, default=0) + 1:03d}"


class EstimateSession:
    """
    In-memory estimator state backed by an EstimateStore.

    A failed save never rolls back the in-memory state: the error is
    logged and kept on ``last_save_error`` until the next successful save.
    """

    def __init__(self, store: EstimateStore, settings: Optional[AppSettings] = None):
        self.store = store
        self.settings = settings or AppSettings()
        self.last_save_error: Optional[PersistenceError] = None

        self.catalog = load_catalog(store)
        self.estimates: List[Estimate] = store.load_estimates() or []

        loaded = store.load_current_estimate()
        if loaded is None:
            logger.info("No current estimate found; starting a default estimate")
            self.current = composer.start_new_estimate(self.catalog)
        else:
            self.current = addons.attach_templates(loaded, self.catalog.add_on_templates)
            for i, estimate in enumerate(self.estimates):
                if estimate.id == self.current.id:
                    self.estimates[i] = self.current
        self._persist((self.store.save_current_estimate, self.current))

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _persist(self, *saves) -> None:
        """
        Run each (save, value) pair of one operation, recording its first failure.

        Later saves still run after a failure.
        """
        self.last_save_error = None
        for save, value in saves:
            try:
                save(value)
            except PersistenceError as e:
                logger.error(str(e))
                if self.last_save_error is None:
                    self.last_save_error = e

    def _upsert_current(self) -> None:
        for i, estimate in enumerate(self.estimates):
            if estimate.id == self.current.id:
                self.estimates[i] = self.current
                break
        else:
            self.estimates.append(self.current)

    def _commit(self, estimate: Estimate, *saves) -> Estimate:
        """Make ``estimate`` current, upsert it into the list and persist both after ``saves``."""
        self.current = estimate
        self._upsert_current()
        self._persist(
            *saves,
            (self.store.save_current_estimate, self.current),
            (self.store.save_estimates, self.estimates),
        )
        return self.current

    def _resync(self, *saves) -> Estimate:
        synced = composer.sync_systems_with_templates(self.current, self.catalog)
        return self._commit(addons.attach_templates(synced, self.catalog.add_on_templates), *saves)

    # ------------------------------------------------------------------
    # Estimate list
    # ------------------------------------------------------------------

    def create_new_estimate(self) -> Estimate:
        number = next_estimate_number(self.estimates, self.settings.estimate_number_prefix)
        logger.info(f"Creating estimate {number}")
        return self._commit(composer.start_new_estimate(self.catalog, estimate_number=number))

    def load_estimate(self, estimate_id: UUID) -> Optional[Estimate]:
        """Make a saved estimate current. Returns None if the id is unknown."""
        for estimate in self.estimates:
            if estimate.id == estimate_id:
                self.current = estimate
                self._persist((self.store.save_current_estimate, self.current))
                return self.current
        logger.debug(f"Estimate {estimate_id} not found")
        return None

    def delete_estimate(self, estimate_id: UUID) -> None:
        """Remove an estimate; if it was current, the first remaining one becomes current."""
        self.estimates = [e for e in self.estimates if e.id != estimate_id]
        saves = [(self.store.save_estimates, self.estimates)]
        if self.current.id == estimate_id and self.estimates:
            self.current = self.estimates[0]
            saves.append((self.store.save_current_estimate, self.current))
        self._persist(*saves)

    def find_estimate(self, number_or_id: str) -> Optional[Estimate]:
        for estimate in self.estimates:
            if estimate.estimate_number == number_or_id or str(estimate.id) == number_or_id:
                return estimate
        return None

    def set_estimate_status(self, status: EstimateStatus) -> Estimate:
        return self._commit(self.current.model_copy(update={"status": status}))

    def approve_estimate(self) -> Estimate:
        return self.set_estimate_status(EstimateStatus.APPROVED)

    def update_customer(self, **fields) -> Estimate:
        """Set any of customer_name, address, email and phone."""
        allowed = {"customer_name", "address", "email", "phone"}
        unknown = set(fields) - allowed
        if unknown:
            raise ValueError(f"Unknown customer fields: {', '.join(sorted(unknown))}")
        return self._commit(self.current.model_copy(update=fields))

    def update_signature(self, data: Optional[bytes]) -> Estimate:
        return self._commit(self.current.model_copy(update={"customer_signature_image_data": data}))

    # ------------------------------------------------------------------
    # Systems and options
    # ------------------------------------------------------------------

    def add_system(self, template: EstimateSystem) -> Estimate:
        result = composer.add_system(self.current, template, self.catalog)
        return self._commit(addons.attach_templates(result, self.catalog.add_on_templates))

    def add_new_system(self, name: str, tonnage: float = composer.DEFAULT_SYSTEM_TONNAGE,
                       equipment_type: EquipmentType = composer.DEFAULT_SYSTEM_TYPE) -> Estimate:
        """Add a system built from the catalog for ``tonnage`` and ``equipment_type``."""
        system = composer.new_system(name, self.catalog, tonnage, equipment_type)
        return self.add_system(system)

    def remove_system(self, system_id: UUID) -> Estimate:
        return self._commit(composer.remove_system(self.current, system_id, self.catalog))

    def set_system_enabled(self, system_id: UUID, enabled: bool) -> Estimate:
        return self._commit(composer.set_system_enabled(self.current, system_id, enabled, self.catalog))

    def update_system_meta(self, system_id: UUID, name: Optional[str] = None,
                           tonnage: Optional[float] = None,
                           equipment_type: Optional[EquipmentType] = None,
                           furnace_btu: Optional[float] = None) -> Estimate:
        result = composer.update_system_meta(
            self.current, system_id, self.catalog,
            name=name, tonnage=tonnage, equipment_type=equipment_type, furnace_btu=furnace_btu,
        )
        return self._commit(result)

    def ensure_system_count(self, count: int) -> Estimate:
        result = composer.ensure_system_count(self.current, count, self.catalog)
        return self._commit(addons.attach_templates(result, self.catalog.add_on_templates))

    def replace_options_for_system(self, system_id: UUID) -> Estimate:
        return self._commit(composer.replace_options_for_system(self.current, system_id, self.catalog))

    def select_option(self, system_id: UUID, option_id: UUID) -> Estimate:
        return self._commit(composer.select_option(self.current, system_id, option_id, self.catalog))

    def toggle_option_selection(self, system_id: UUID, option_id: UUID) -> Estimate:
        return self._commit(composer.toggle_option_selection(self.current, system_id, option_id, self.catalog))

    def set_option_visibility(self, system_id: UUID, option_id: UUID, show_to_customer: bool) -> Estimate:
        result = composer.set_option_visibility(self.current, system_id, option_id, show_to_customer, self.catalog)
        return self._commit(result)

    def accept_proposal(self, tier: Tier) -> Estimate:
        return self._commit(composer.accept_proposal(self.current, tier, self.catalog))

    # ------------------------------------------------------------------
    # Add-ons
    # ------------------------------------------------------------------

    def attach_templates(self) -> Estimate:
        return self._commit(addons.attach_templates(self.current, self.catalog.add_on_templates))

    def add_add_on(self, template: AddOnTemplate) -> Estimate:
        return self._commit(addons.add_add_on(self.current, template, self.catalog.add_on_templates))

    def remove_add_on(self, add_on_id: UUID) -> Estimate:
        return self._commit(addons.remove_add_on(self.current, add_on_id, self.catalog.add_on_templates))

    def set_add_on_enabled(self, add_on_id: UUID, enabled: bool) -> Estimate:
        result = addons.set_add_on_enabled(self.current, add_on_id, enabled, self.catalog.add_on_templates)
        return self._commit(result)

    def set_add_on_price(self, add_on_id: UUID, price: float) -> Estimate:
        result = addons.set_add_on_price(self.current, add_on_id, price, self.catalog.add_on_templates)
        return self._commit(result)

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def update_system_templates(self, templates: List[EstimateSystem]) -> Estimate:
        """Replace the system templates and re-sync the current estimate."""
        self.catalog = self.catalog.model_copy(update={"system_templates": list(templates)})
        return self._resync((self.store.save_system_templates, self.catalog.system_templates))

    def update_add_on_templates(self, templates: List[AddOnTemplate]) -> Estimate:
        """Replace the add-on templates and re-attach them to the current estimate."""
        self.catalog = self.catalog.model_copy(update={"add_on_templates": list(templates)})
        return self._resync((self.store.save_add_on_templates, self.catalog.add_on_templates))

    def export_templates(self, include_systems: bool = True, include_add_ons: bool = True) -> str:
        return export_bundle(self.catalog, include_systems, include_add_ons)

    def import_templates(self, text: str) -> Estimate:
        """
        Replace both template lists from a bundle.

        Raises:
            ValueError: If the bundle is invalid; the catalog is left unchanged
        """
        self.catalog = import_bundle(text)
        logger.info(
            f"Imported {len(self.catalog.system_templates)} system templates, "
            f"{len(self.catalog.add_on_templates)} add-on templates"
        )
        return self._resync((self.store.save_catalog, self.catalog))

    def reset_templates(self) -> Estimate:
        """Restore the seed catalog."""
        self.catalog = TemplateCatalog(
            system_templates=default_system_templates(),
            add_on_templates=default_add_on_templates(),
        )
        return self._resync((self.store.save_catalog, self.catalog))

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def text_summary(self) -> str:
        return text_summary(self.current, self.settings.company_name, self.settings.company_contact())

    def tier_totals(self):
        return tier_totals(self.current)

    def payment_breakdown(self):
        return payment_breakdown(
            self.current.grand_total,
            self.settings.payment_option,
            self.settings.finance,
            self.settings.credit_card_fee_percent,
        )

"""Estimate composition - tier options, add-ons, totals and persistence."""
from .addons import add_add_on, attach_templates, remove_add_on, set_add_on_enabled, set_add_on_price
from .composer import (
    accept_proposal,
    add_system,
    build_options,
    ensure_all_tiers,
    ensure_system_count,
    new_system,
    remove_system,
    replace_options_for_system,
    select_option,
    set_option_visibility,
    set_system_enabled,
    start_new_estimate,
    sync_systems_with_templates,
    toggle_option_selection,
    update_system_meta,
)
from .payments import (
    FinanceSettings,
    credit_card_fee,
    credit_card_total,
    finance_total,
    monthly_payment,
    payment_breakdown,
    tier_totals,
)
from .session import EstimateSession, next_estimate_number
from .settings import AppSettings, load_settings
from .store import EstimateStore, PersistenceError, export_bundle, import_bundle
from .summary import text_summary
from .totals import compute_subtotals, is_any_best_selected, recalculate_totals

__all__ = [
    # Add-ons
    "add_add_on",
    "attach_templates",
    "remove_add_on",
    "set_add_on_enabled",
    "set_add_on_price",
    # Composer
    "accept_proposal",
    "add_system",
    "build_options",
    "ensure_all_tiers",
    "ensure_system_count",
    "new_system",
    "remove_system",
    "replace_options_for_system",
    "select_option",
    "set_option_visibility",
    "set_system_enabled",
    "start_new_estimate",
    "sync_systems_with_templates",
    "toggle_option_selection",
    "update_system_meta",
    # Payments
    "FinanceSettings",
    "credit_card_fee",
    "credit_card_total",
    "finance_total",
    "monthly_payment",
    "payment_breakdown",
    "tier_totals",
    # Session and persistence
    "EstimateSession",
    "next_estimate_number",
    "AppSettings",
    "load_settings",
    "EstimateStore",
    "PersistenceError",
    "export_bundle",
    "import_bundle",
    # Totals and summaries
    "text_summary",
    "compute_subtotals",
    "is_any_best_selected",
    "recalculate_totals",
]

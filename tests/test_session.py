"""Tests for the persistent estimator session."""
import json
from uuid import uuid4

import pytest

from catalog.seed import default_system_templates
from estimator.composer import start_new_estimate
from estimator.session import EstimateSession, load_catalog, next_estimate_number
from estimator.settings import AppSettings
from estimator.store import PersistenceError
from schemas.enums import EquipmentType, EstimateStatus, PaymentOption, Tier
from schemas.estimate import AddOnTemplate, Estimate


def reopen(store, data_dir):
    return EstimateSession(store, AppSettings(data_dir=data_dir))


class TestNextEstimateNumber:
    def test_first_number(self):
        assert next_estimate_number([]) == "CS-001"

    def test_max_plus_one(self):
        estimates = [Estimate(estimate_number=n) for n in ("CS-003", "CS-010", "XYZ", "CS-abc", "")]
        assert next_estimate_number(estimates) == "CS-011"

    def test_custom_prefix(self):
        assert next_estimate_number([Estimate(estimate_number="Q-7")], prefix="Q-") == "Q-008"


class TestLoadCatalog:
    def test_seeds_empty_store(self, store):
        catalog = load_catalog(store)
        assert len(catalog.system_templates) == 36
        assert len(catalog.add_on_templates) == 3
        assert store.load_system_templates() is not None

    def test_reseeds_empty_lists(self, store):
        store.save_system_templates([])
        store.save_add_on_templates([])
        catalog = load_catalog(store)
        assert len(catalog.system_templates) == 36
        assert len(catalog.add_on_templates) == 3

    def test_adds_missing_baselines_and_keeps_edits(self, store):
        templates = default_system_templates()
        templates[0].options[0].price = 777
        store.save_system_templates(templates[:-1])
        catalog = load_catalog(store)
        assert len(catalog.system_templates) == 36
        assert catalog.system_templates[0].options[0].price == 777


class TestSessionStartup:
    def test_default_estimate_persisted(self, session, store):
        assert session.current.systems[0].name == "Main System"
        assert store.load_current_estimate().id == session.current.id

    def test_reload_restores_state(self, session, store, data_dir):
        session.update_customer(customer_name="Dana Reyes")
        reopened = reopen(store, data_dir)
        assert reopened.current.customer_name == "Dana Reyes"
        assert [e.id for e in reopened.estimates] == [session.current.id]

    def test_loaded_estimate_is_reattached_and_recalculated(self, store, data_dir, catalog):
        stale = start_new_estimate(catalog).model_copy(update={
            "add_ons": [],
            "add_ons_subtotal": 999.0,
            "grand_total": 999.0,
        })
        store.save_current_estimate(stale)
        session = reopen(store, data_dir)
        assert session.current.id == stale.id
        assert len(session.current.add_ons) == 3
        assert session.current.add_ons_subtotal == 1175
        assert session.current.grand_total == 1175
        assert store.load_current_estimate().grand_total == 1175


class TestSessionMutations:
    def test_commit_upserts_into_list(self, session, store):
        session.accept_proposal(Tier.GOOD)
        session.accept_proposal(Tier.BETTER)
        assert len(session.estimates) == 1
        assert session.estimates[0].systems_subtotal == 9950
        saved = store.load_estimates()
        assert saved[0].systems_subtotal == 9950

    def test_add_new_system_attaches_add_ons(self, session):
        session.add_new_system("Upstairs", 2.0, EquipmentType.HEAT_PUMP_AIR_HANDLER)
        upstairs = session.current.systems[-1]
        assert upstairs.equipment_type == EquipmentType.HEAT_PUMP_AIR_HANDLER
        assert len(session.current.add_ons_for_system(upstairs.id)) == 3

    def test_ensure_system_count(self, session):
        session.ensure_system_count(2)
        assert len(session.current.systems) == 2
        assert len(session.current.add_ons) == 6

    def test_select_and_toggle(self, session):
        system = session.current.systems[0]
        session.select_option(system.id, system.option_for(Tier.BEST).id)
        assert session.current.systems_subtotal == 12300
        session.toggle_option_selection(system.id, system.option_for(Tier.BEST).id)
        assert session.current.systems_subtotal == 0

    def test_update_system_meta(self, session):
        system = session.current.systems[0]
        session.update_system_meta(system.id, name="Basement", tonnage=2.0)
        updated = session.current.systems[0]
        assert updated.name == "Basement"
        assert all(o.tonnage == 2.0 for o in updated.options)

    def test_remove_system(self, session):
        session.remove_system(session.current.systems[0].id)
        assert session.current.systems == []
        assert session.current.add_ons == []

    def test_add_on_edits(self, session):
        duct = next(a for a in session.current.add_ons if a.name == "Duct Sealing")
        session.set_add_on_price(duct.id, 650)
        assert session.current.add_ons_subtotal == 1225
        session.set_add_on_enabled(duct.id, False)
        assert session.current.add_ons_subtotal == 575
        session.remove_add_on(duct.id)
        assert len(session.current.add_ons) == 2

    def test_update_customer_rejects_unknown_fields(self, session):
        with pytest.raises(ValueError):
            session.update_customer(grand_total=0)

    def test_signature(self, session, store):
        session.update_signature(b"sig")
        assert store.load_current_estimate().customer_signature_image_data == b"sig"
        session.update_signature(None)
        assert session.current.customer_signature_image_data is None


class TestEstimateList:
    def test_create_new_estimates_are_numbered(self, session):
        first = session.create_new_estimate()
        second = session.create_new_estimate()
        assert first.estimate_number == "CS-001"
        assert second.estimate_number == "CS-002"
        assert session.current.id == second.id
        assert len(second.systems) == 1

    def test_load_estimate(self, session):
        first = session.create_new_estimate()
        session.create_new_estimate()
        assert session.load_estimate(first.id).id == first.id
        assert session.current.estimate_number == "CS-001"

    def test_load_unknown_estimate(self, session):
        current = session.current
        assert session.load_estimate(uuid4()) is None
        assert session.current is current

    def test_delete_current_switches_to_first(self, session, store):
        first = session.create_new_estimate()
        second = session.create_new_estimate()
        session.delete_estimate(second.id)
        assert [e.id for e in store.load_estimates()] == [first.id]
        assert session.current.id == first.id

    def test_find_estimate(self, session):
        created = session.create_new_estimate()
        assert session.find_estimate("CS-001").id == created.id
        assert session.find_estimate(str(created.id)).id == created.id
        assert session.find_estimate("CS-999") is None

    def test_approve(self, session, store):
        session.create_new_estimate()
        session.approve_estimate()
        assert session.current.status == EstimateStatus.APPROVED
        assert store.load_estimates()[0].status == EstimateStatus.APPROVED
        session.set_estimate_status(EstimateStatus.PENDING)
        assert session.current.status == EstimateStatus.PENDING


class TestCatalogEdits:
    def test_update_system_templates_resyncs(self, session, store):
        templates = [t.model_copy(deep=True) for t in session.catalog.system_templates]
        for template in templates:
            if template.equipment_type == EquipmentType.FURNACE_ONLY:
                for option in template.options:
                    option.price += 100
        session.update_system_templates(templates)
        system = session.current.systems[0]
        assert [o.price for o in system.options] == [8150, 10050, 12400]
        assert store.load_system_templates()[-1].options[0].price == templates[-1].options[0].price

    def test_update_add_on_templates_reattaches(self, session, store):
        templates = [*session.catalog.add_on_templates, AddOnTemplate(name="UV Light", default_price=400)]
        session.update_add_on_templates(templates)
        assert len(session.current.add_ons) == 4
        assert session.current.add_ons_subtotal == 1575
        assert len(store.load_add_on_templates()) == 4

    def test_export_import(self, session):
        exported = session.export_templates(include_systems=False)
        session.import_templates(exported)
        assert session.catalog.system_templates == []
        assert len(session.catalog.add_on_templates) == 3
        # Nothing to rebuild from; existing options are kept
        assert len(session.current.systems[0].options) == 3

    def test_invalid_import_leaves_catalog(self, session):
        before = session.catalog
        with pytest.raises(ValueError):
            session.import_templates(json.dumps({"add_on_templates": [{"price": "x"}]}))
        assert session.catalog is before

    def test_reset_templates(self, session):
        session.update_add_on_templates([])
        assert session.current.add_ons == []
        session.reset_templates()
        assert len(session.catalog.add_on_templates) == 3
        assert len(session.current.add_ons) == 3


class TestSaveFailures:
    def test_failed_save_keeps_memory_state(self, session, monkeypatch):
        def broken(_):
            raise PersistenceError("disk full")

        monkeypatch.setattr(session.store, "save_current_estimate", broken)
        session.update_customer(customer_name="Dana Reyes")
        assert session.current.customer_name == "Dana Reyes"
        assert isinstance(session.last_save_error, PersistenceError)

        monkeypatch.undo()
        session.update_customer(customer_name="Dana R.")
        assert session.last_save_error is None

    def test_failed_template_save_survives_resync(self, session, monkeypatch):
        def broken(_):
            raise PersistenceError("disk full")

        monkeypatch.setattr(session.store, "save_system_templates", broken)
        templates = session.catalog.system_templates[:-1]
        session.update_system_templates(templates)
        assert session.catalog.system_templates == templates
        assert isinstance(session.last_save_error, PersistenceError)
        assert "disk full" in str(session.last_save_error)

    def test_failed_catalog_save_survives_import(self, session, monkeypatch):
        def broken(_):
            raise PersistenceError("disk full")

        monkeypatch.setattr(session.store, "save_catalog", broken)
        session.import_templates(session.export_templates())
        assert isinstance(session.last_save_error, PersistenceError)

        session.reset_templates()
        assert isinstance(session.last_save_error, PersistenceError)

    def test_first_failure_is_kept(self, session, monkeypatch):
        def broken(message):
            def save(_):
                raise PersistenceError(message)
            return save

        monkeypatch.setattr(session.store, "save_add_on_templates", broken("templates"))
        monkeypatch.setattr(session.store, "save_estimates", broken("estimates"))
        session.update_add_on_templates([])
        assert str(session.last_save_error) == "templates"

    def test_failed_delete_save_is_reported(self, session, monkeypatch):
        first = session.create_new_estimate()
        session.create_new_estimate()

        def broken(_):
            raise PersistenceError("disk full")

        monkeypatch.setattr(session.store, "save_current_estimate", broken)
        session.delete_estimate(session.current.id)
        assert session.current.id == first.id
        assert isinstance(session.last_save_error, PersistenceError)


class TestSessionViews:
    def test_summary_uses_company_name(self, store, data_dir):
        session = EstimateSession(store, AppSettings(data_dir=data_dir, company_name="Acme Air"))
        assert session.text_summary().startswith("Acme Air Estimate")

    def test_summary_header_has_company_contact(self, store, data_dir):
        settings = AppSettings(
            data_dir=data_dir,
            company_name="Acme Air",
            company_address="12 Main St, Springfield",
            company_phone="555-0100",
            company_license="C20-998877",
        )
        lines = EstimateSession(store, settings).text_summary().splitlines()
        assert lines[:4] == [
            "Acme Air Estimate",
            "12 Main St, Springfield",
            "Phone: 555-0100",
            "License #C20-998877",
        ]
        assert lines[4].startswith("Customer:")

    def test_payment_breakdown_uses_settings(self, store, data_dir):
        settings = AppSettings(data_dir=data_dir, payment_option=PaymentOption.CREDIT_CARD)
        session = EstimateSession(store, settings)
        assert session.payment_breakdown()["amount_due"] == pytest.approx(1175 * 1.035)

    def test_tier_totals(self, session):
        assert session.tier_totals()[Tier.GOOD] == 9225
"""Tests for the hvac-estimator CLI and settings loading."""
import json

import pytest
import yaml
from click.testing import CliRunner

from estimator.cli import cli, parse_floor
from estimator.settings import load_settings
from schemas.enums import FloorType, PaymentOption


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, data_dir):
    def run(*args):
        return runner.invoke(cli, ["--data-dir", str(data_dir), *args])
    return run


class TestSettings:
    def test_packaged_defaults(self):
        settings = load_settings()
        assert settings.company_name == "CoolSeason HVAC"
        assert settings.estimate_number_prefix == "CS-"
        assert settings.payment_option == PaymentOption.CASH_CHECK_ZELLE
        assert settings.credit_card_fee_percent == 3.5
        assert settings.finance.term_months == 12

    def test_user_file_overrides_key_by_key(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("company_name: Acme Air\nfinance:\n  rate_percent: 7.9\n")
        settings = load_settings(path)
        assert settings.company_name == "Acme Air"
        assert settings.finance.rate_percent == 7.9
        assert settings.finance.term_months == 12

    def test_non_mapping_file_rejected(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError):
            load_settings(path)

    def test_company_contact_skips_empty_fields(self):
        assert load_settings().company_contact() == []
        settings = load_settings().model_copy(update={
            "company_email": "office@acme.test",
            "company_website": "WWW.Acme.test",
        })
        assert settings.company_contact() == ["Email: office@acme.test", "www.acme.test"]


class TestParseFloor:
    def test_type_and_area(self):
        assert parse_floor("main:1600") == (FloorType.MAIN, 1600.0, None)

    def test_with_name(self):
        assert parse_floor("UPPER:900:Bonus Room") == (FloorType.UPPER, 900.0, "Bonus Room")

    @pytest.mark.parametrize("spec", ["main", "attic:900", "main:lots", "main:-5"])
    def test_invalid(self, spec):
        with pytest.raises(Exception):
            parse_floor(spec)


class TestSizeCommand:
    def test_sizes_each_floor(self, runner):
        result = runner.invoke(cli, [
            "size", "--zone", "3", "--floor", "main:1600", "--floor", "upper:1600:Bonus Room",
        ])
        assert result.exit_code == 0, result.output
        assert "Zone 3" in result.output
        assert "Main Level (Main Level)" in result.output
        assert "Bonus Room (Upstairs)" in result.output
        assert "Cooling: 2.5 Ton" in result.output
        assert "Furnace: 70,000 BTU" in result.output
        assert "Cooling: 3 Ton" in result.output
        assert "Furnace: 80,000 BTU" in result.output

    def test_cooling_only(self, runner):
        result = runner.invoke(cli, ["size", "-z", "1", "-f", "main:1000", "--no-heating"])
        assert result.exit_code == 0
        assert "Furnace:" not in result.output

    def test_invalid_floor(self, runner):
        result = runner.invoke(cli, ["size", "--zone", "3", "--floor", "attic:900"])
        assert result.exit_code == 1
        assert "Unknown floor type" in result.output

    def test_too_many_floors(self, runner):
        args = ["size", "--zone", "3"]
        for spec in ("main:1000", "upper:900", "basement:800", "main:700"):
            args += ["--floor", spec]
        result = runner.invoke(cli, args)
        assert result.exit_code == 1

    def test_zone_out_of_range(self, runner):
        result = runner.invoke(cli, ["size", "--zone", "6", "--floor", "main:1000"])
        assert result.exit_code != 0


class TestCatalogCommands:
    def test_show(self, invoke):
        result = invoke("catalog", "show")
        assert result.exit_code == 0, result.output
        assert "System templates (36)" in result.output
        assert "WiFi Thermostat" in result.output
        assert "free with Best" in result.output

    def test_show_by_type(self, invoke):
        result = invoke("catalog", "show", "--type", "furnace_only")
        assert "System templates (8)" in result.output
        assert "80,000 BTU Furnace" in result.output

    def test_export_and_import(self, invoke, tmp_path):
        bundle = tmp_path / "bundle.json"
        result = invoke("catalog", "export", "--add-ons-only", "-o", str(bundle))
        assert result.exit_code == 0, result.output
        data = json.loads(bundle.read_text())
        assert data["system_templates"] == []

        result = invoke("catalog", "import", str(bundle))
        assert result.exit_code == 0, result.output
        assert "Imported 0 system templates and 3 add-on templates" in result.output

    def test_export_flags_exclusive(self, invoke):
        result = invoke("catalog", "export", "--systems-only", "--add-ons-only")
        assert result.exit_code == 1

    def test_import_invalid(self, invoke, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("not json")
        result = invoke("catalog", "import", str(bad))
        assert result.exit_code == 1
        assert "Invalid templates bundle" in result.output

    def test_reset(self, invoke):
        result = invoke("catalog", "reset", "--yes")
        assert result.exit_code == 0
        assert "Templates reset to defaults" in result.output


class TestEstimateCommands:
    def test_new_estimate(self, invoke):
        result = invoke("estimate", "new", "--customer", "Dana Reyes")
        assert result.exit_code == 0, result.output
        assert "Estimate CS-001 [Pending]" in result.output
        assert "1. Main System - AC + Furnace, 3 Ton" in result.output

    def test_add_select_and_summary(self, invoke):
        invoke("estimate", "new")
        result = invoke("estimate", "add-system", "--name", "Upstairs", "--tonnage", "2", "--type", "ac_condenser_coil")
        assert result.exit_code == 0, result.output
        assert "2. Upstairs - AC Condenser + Coil, 2 Ton" in result.output

        result = invoke("estimate", "select", "1", "best")
        assert result.exit_code == 0, result.output
        assert "[*] Best" in result.output

        result = invoke("estimate", "summary", "--tiers")
        assert result.exit_code == 0, result.output
        assert "Main System | AC + Furnace | 3 Ton | Best" in result.output
        assert "By tier:" in result.output
        assert "Amount due:" in result.output

    def test_select_by_name(self, invoke):
        invoke("estimate", "new")
        result = invoke("estimate", "select", "main system", "Good")
        assert result.exit_code == 0, result.output
        assert "Systems: $8,050.00" in result.output

    def test_select_unknown_system(self, invoke):
        invoke("estimate", "new")
        result = invoke("estimate", "select", "Garage", "good")
        assert result.exit_code == 1
        assert "No system 'Garage'" in result.output

    def test_accept(self, invoke):
        invoke("estimate", "new")
        result = invoke("estimate", "accept", "better")
        assert result.exit_code == 0
        assert "Systems: $9,950.00" in result.output

    def test_list_open_and_approve(self, invoke):
        invoke("estimate", "new", "--customer", "Dana Reyes")
        invoke("estimate", "new", "--customer", "Lee Park")

        result = invoke("estimate", "list")
        assert "CS-001" in result.output
        assert "* CS-002" in result.output

        result = invoke("estimate", "open", "CS-001")
        assert result.exit_code == 0, result.output
        result = invoke("estimate", "approve")
        assert "Estimate CS-001 approved" in result.output

        result = invoke("estimate", "list")
        assert "Approved" in result.output

    def test_open_unknown(self, invoke):
        result = invoke("estimate", "open", "CS-404")
        assert result.exit_code == 1

    def test_list_empty(self, invoke):
        result = invoke("estimate", "list")
        assert "No saved estimates" in result.output

    def test_config_file(self, runner, data_dir, tmp_path):
        config = tmp_path / "settings.yaml"
        config.write_text("company_name: Acme Air\npayment_option: credit_card\n")
        base = ["--config", str(config), "--data-dir", str(data_dir)]
        runner.invoke(cli, [*base, "estimate", "new"])
        result = runner.invoke(cli, [*base, "estimate", "summary"])
        assert result.exit_code == 0, result.output
        assert result.output.startswith("Acme Air Estimate")
        assert "Credit Card (3.5% Fee)" in result.output
        assert "Fee:" in result.output

    def test_malformed_config_file(self, runner, data_dir, tmp_path):
        config = tmp_path / "settings.yaml"
        config.write_text("finance: [unclosed\n")
        result = runner.invoke(cli, ["--config", str(config), "--data-dir", str(data_dir), "estimate", "list"])
        assert result.exit_code == 1
        assert "Could not load settings" in result.output
        assert not isinstance(result.exception, yaml.YAMLError)

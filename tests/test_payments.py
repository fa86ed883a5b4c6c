"""Tests for payment options, tier comparison totals and the text summary."""
import pytest
from pydantic import ValidationError

from estimator.composer import accept_proposal, set_system_enabled
from estimator.payments import (
    FinanceSettings, credit_card_fee, credit_card_total, finance_total, monthly_payment,
    payment_breakdown, tier_totals,
)
from estimator.summary import text_summary
from schemas.enums import PaymentOption, Tier


class TestCreditCard:
    def test_fee(self):
        assert credit_card_fee(1000) == pytest.approx(35)
        assert credit_card_total(1000) == pytest.approx(1035)

    def test_custom_fee(self):
        assert credit_card_total(200, fee_percent=3.0) == pytest.approx(206)


class TestFinance:
    def test_zero_rate_divides_evenly(self):
        assert monthly_payment(1200, 0, 12) == pytest.approx(100)

    def test_amortized_payment(self):
        # 1% monthly over 12 months
        assert monthly_payment(1200, 12, 12) == pytest.approx(106.62, abs=0.01)

    def test_non_positive_inputs(self):
        assert monthly_payment(0, 5, 12) is None
        assert monthly_payment(1000, 5, 0) is None

    def test_markup(self):
        assert finance_total(1000, FinanceSettings(markup_percent=10)) == pytest.approx(1100)

    def test_default_term(self):
        assert FinanceSettings().term_months == 12
        with pytest.raises(ValidationError):
            FinanceSettings(term_months=0)


class TestPaymentBreakdown:
    def test_cash(self):
        breakdown = payment_breakdown(1000, PaymentOption.CASH_CHECK_ZELLE)
        assert breakdown == {"total": 1000, "fee": 0.0, "amount_due": 1000, "monthly_payment": None}

    def test_credit_card(self):
        breakdown = payment_breakdown(1000, PaymentOption.CREDIT_CARD)
        assert breakdown["fee"] == pytest.approx(35)
        assert breakdown["amount_due"] == pytest.approx(1035)

    def test_finance(self):
        finance = FinanceSettings(markup_percent=10, rate_percent=0, term_months=10)
        breakdown = payment_breakdown(1000, PaymentOption.FINANCE, finance)
        assert breakdown["amount_due"] == pytest.approx(1100)
        assert breakdown["fee"] == pytest.approx(100)
        assert breakdown["monthly_payment"] == pytest.approx(110)


class TestTierTotals:
    def test_per_tier_with_add_ons(self, estimate):
        totals = tier_totals(estimate)
        assert totals == {Tier.GOOD: 9225, Tier.BETTER: 11125, Tier.BEST: 13475}

    def test_disabled_systems_excluded(self, estimate, catalog):
        disabled = set_system_enabled(estimate, estimate.systems[0].id, False, catalog)
        assert tier_totals(disabled) == {Tier.GOOD: 0, Tier.BETTER: 0, Tier.BEST: 0}


class TestTextSummary:
    def test_unselected_system(self, estimate):
        summary = text_summary(estimate)
        lines = summary.splitlines()
        assert lines[0] == "CoolSeason HVAC Estimate"
        assert "- Main System | AC + Furnace | 3 Ton | No selection" in lines
        assert "- WiFi Thermostat: $350.00" in lines
        assert lines[-1] == "- Total: $1,175.00"

    def test_selected_system(self, estimate, catalog):
        best = accept_proposal(estimate, Tier.BEST, catalog)
        summary = text_summary(best, company_name="Acme Air")
        assert summary.startswith("Acme Air Estimate")
        assert "- Main System | AC + Furnace | 3 Ton | Best 18 SEER Variable Speed | $12,300.00" in summary
        assert "- WiFi Thermostat: $0.00" in summary
        assert "- Total: $13,125.00" in summary

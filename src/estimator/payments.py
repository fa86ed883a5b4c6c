"""Payment option totals: credit card fee, finance markup and monthly payment."""
from typing import Dict, Optional

from pydantic import BaseModel, Field

from schemas.enums import TIER_ORDER, PaymentOption, Tier
from schemas.estimate import Estimate

CREDIT_CARD_FEE_PERCENT = 3.5


class FinanceSettings(BaseModel):
    """Financing plan offered on the printed proposal."""
    markup_percent: float = Field(default=0.0, ge=0, description="Added to the total before financing")
    rate_percent: float = Field(default=0.0, ge=0, description="Annual interest rate")
    term_months: int = Field(default=12, ge=1, description="Number of monthly payments")


def credit_card_fee(total: float, fee_percent: float = CREDIT_CARD_FEE_PERCENT) -> float:
    return total * (fee_percent / 100.0)


def credit_card_total(total: float, fee_percent: float = CREDIT_CARD_FEE_PERCENT) -> float:
    return total + credit_card_fee(total, fee_percent)


def finance_total(total: float, finance: FinanceSettings) -> float:
    return total * (1 + finance.markup_percent / 100.0)


def monthly_payment(total: float, rate_percent: float, term_months: int) -> Optional[float]:
    """
    Level monthly payment for an amortized loan.

    A zero rate divides the total evenly. Returns None when the total or the
    term is not positive.
    """
    if total <= 0 or term_months <= 0:
        return None
    n = float(term_months)
    monthly_rate = rate_percent / 100.0 / 12.0
    if monthly_rate <= 0:
        return total / n
    denominator = 1 - (1 + monthly_rate) ** -n
    if denominator == 0:
        return None
    return total * monthly_rate / denominator


def payment_breakdown(
    total: float,
    option: PaymentOption,
    finance: Optional[FinanceSettings] = None,
    fee_percent: float = CREDIT_CARD_FEE_PERCENT,
) -> Dict[str, Optional[float]]:
    """
    Amounts shown under the proposal total for the chosen payment option.

    Returns:
        Dict with total, fee, amount_due and monthly_payment (None unless financing)
    """
    finance = finance or FinanceSettings()
    if option is PaymentOption.CREDIT_CARD:
        fee = credit_card_fee(total, fee_percent)
        return {"total": total, "fee": fee, "amount_due": credit_card_total(total, fee_percent), "monthly_payment": None}
    if option is PaymentOption.FINANCE:
        financed = finance_total(total, finance)
        return {
            "total": total,
            "fee": financed - total,
            "amount_due": financed,
            "monthly_payment": monthly_payment(financed, finance.rate_percent, finance.term_months),
        }
    return {"total": total, "fee": 0.0, "amount_due": total, "monthly_payment": None}


def tier_totals(estimate: Estimate) -> Dict[Tier, float]:
    """
    What the estimate would cost if every enabled system took a given tier.

    Each system contributes its option price for the tier (0 if it has none)
    plus its own enabled add-ons.
    """
    totals = {}
    for tier in TIER_ORDER:
        total = 0.0
        for system in estimate.enabled_systems:
            option = system.option_for(tier)
            total += option.price if option else 0.0
            total += sum(a.price for a in estimate.add_ons_for_system(system.id))
        totals[tier] = total
    return totals

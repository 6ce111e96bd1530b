"""
schemas.py — Tax engine Pydantic v2 data contracts (AY 2025-26, new regime).

Defines:
  - Money / Amount          (Decimal amount serialised as a JSON number; Amount is
                              the bounded input form)
  - DetailedIncomeProfile   (normalised income snapshot — engine input)
  - TaxComputationResult    (full breakdown — engine output)
  - CalculationResponse     (POST /api/calculate response body)

All amounts are INR held as Decimal. No rounding happens inside the engine;
display rounding belongs to taxplanner.formatting.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Annotated, List

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

# Exact fixed-point inside Python, plain number on the wire
Money = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]

ZERO = Decimal("0")

# Largest magnitude accepted for any input amount (₹1,000 lakh crore). Every
# derived figure then stays exact within the default 28-digit Decimal context.
MAX_AMOUNT = Decimal("1e15")

# Input amount: Money bounded to ±MAX_AMOUNT
Amount = Annotated[Money, Field(ge=-MAX_AMOUNT, le=MAX_AMOUNT)]


# ---------------------------------------------------------------------------
# DetailedIncomeProfile — engine input
# ---------------------------------------------------------------------------

class DetailedIncomeProfile(BaseModel):
    """
    Aggregated annual income for one taxpayer.

    The caller has already reduced per-category records to these totals
    (see taxplanner.income.aggregator). rental_income is net of property tax
    and the 30% house-property deduction.

    stcg may be negative (short-term capital loss). Other amounts are
    expected to be >= 0 but the model does not enforce it; range checks live
    in taxplanner.income.validator. NaN / Infinity and amounts beyond
    ±MAX_AMOUNT are rejected here.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    salary: Amount = Field(default=ZERO, description="Gross salary / pension income.")
    rental_income: Amount = Field(
        default=ZERO,
        description="Net rental income after property tax and the 30% standard deduction.",
    )
    fd_income: Amount = Field(default=ZERO, description="Fixed deposit interest.")
    bond_income: Amount = Field(default=ZERO, description="Bond interest.")
    dividend_income: Amount = Field(default=ZERO, description="Dividends across all sources.")
    stcg: Amount = Field(
        default=ZERO,
        description="Short-term capital gains. Negative for a short-term capital loss.",
    )
    ltcg: Amount = Field(default=ZERO, description="Long-term capital gains.")
    is_salaried: bool = Field(
        default=False,
        description="Eligible for the flat standard deduction against slab income.",
    )


# ---------------------------------------------------------------------------
# TaxComputationResult — engine output
# ---------------------------------------------------------------------------

class TaxComputationResult(BaseModel):
    """
    Complete tax computation for one DetailedIncomeProfile.

    Computation sequence (order matters):
      1. gross_slab_income → standard_deduction → net_taxable_slab_income
      2. is_rebate_applicable (87A, all-or-nothing at ₹12L)
      3. slab tax from NEW_REGIME_SLABS (zero when the rebate applies)
      4. STCL set-off against LTCG
      5. capital gains tax (LTCG after ₹1.25L exemption @12.5%, STCG @20%)
      6. surcharge on total income > ₹50L → cess 4% → total_tax_payable
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    # --- Echoes ---
    gross_slab_income: Money
    original_stcg: Money
    original_ltcg: Money

    # --- Slab side ---
    standard_deduction: Money
    net_taxable_slab_income: Money
    is_rebate_applicable: bool
    slab_tax_before_rebate: Money    # Slab tax carried into the total; 0 when 87A applies
    rebate: Money                    # Bracket tax cancelled by 87A; 0 when it does not apply

    # --- Capital gains side ---
    stcl_set_off: Money
    post_set_off_stcg: Money         # May stay negative (unabsorbed STCL)
    post_set_off_ltcg: Money
    stcg_for_tax: Money
    ltcg_for_tax: Money
    ltcg_exemption: Money
    taxable_ltcg: Money
    ltcg_tax: Money
    stcg_tax: Money
    total_capital_gains_tax: Money

    # --- Combined ---
    total_income_for_surcharge: Money
    total_tax_before_surcharge: Money
    surcharge: Money
    tax_before_cess: Money
    cess: Money
    total_tax_payable: Money


class CalculationResponse(BaseModel):
    """Response body for POST /api/calculate and POST /api/income/calculate."""
    model_config = ConfigDict(extra="forbid")

    profile: DetailedIncomeProfile
    result: TaxComputationResult
    statement: List[str] = Field(default_factory=list)


__all__ = [
    "Money",
    "Amount",
    "MAX_AMOUNT",
    "ZERO",
    "DetailedIncomeProfile",
    "TaxComputationResult",
    "CalculationResponse",
]

"""
schemas.py — Planning helper Pydantic v2 data contracts.

Defines:
  - AdvanceTaxRequest / AdvanceTaxInstalment / AdvanceTaxSchedule  (Section 208–211)
  - Section54FRequest / Section54FResult                           (Section 54F)
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from taxplanner.engine.schemas import ZERO, Amount, DetailedIncomeProfile, Money


# ---------------------------------------------------------------------------
# Advance tax
# ---------------------------------------------------------------------------

class AdvanceTaxRequest(BaseModel):
    """
    Either a full profile (tax is computed by the engine) or a precomputed
    total_tax — never both.
    """
    model_config = ConfigDict(extra="forbid")

    profile: Optional[DetailedIncomeProfile] = None
    total_tax: Optional[Amount] = Field(default=None, ge=0)
    tds: Amount = Field(
        default=ZERO, ge=0,
        description="TDS already deducted or expected to be deducted for the year.",
    )

    @model_validator(mode="after")
    def validate_exactly_one_source(self) -> "AdvanceTaxRequest":
        if (self.profile is None) == (self.total_tax is None):
            raise ValueError("Provide exactly one of 'profile' or 'total_tax'")
        return self


class AdvanceTaxInstalment(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    due_by: str                      # e.g. "15 June 2024"
    cumulative_percentage: int       # 15 / 45 / 75 / 100
    amount: Money                    # This instalment, whole rupees
    cumulative_amount: Money


class AdvanceTaxSchedule(BaseModel):
    """
    net_tax_liability is reported as 0 when it falls below the ₹10,000
    threshold — no advance tax is due and instalments is empty.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    total_tax: Money
    tds: Money
    net_tax_liability: Money
    is_advance_tax_due: bool
    instalments: List[AdvanceTaxInstalment] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Section 54F
# ---------------------------------------------------------------------------

class Section54FRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    sale_consideration: Amount = Field(..., ge=0)
    transfer_expenses: Amount = Field(default=ZERO, ge=0)
    cost_of_new_house: Amount = Field(default=ZERO, ge=0)
    capital_gains: Amount = Field(..., description="Long-term capital gain on the original asset.")


class Section54FResult(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    net_consideration: Money
    exemption: Money
    taxable_gains: Money
    is_fully_exempt: bool


__all__ = [
    "AdvanceTaxRequest",
    "AdvanceTaxInstalment",
    "AdvanceTaxSchedule",
    "Section54FRequest",
    "Section54FResult",
]

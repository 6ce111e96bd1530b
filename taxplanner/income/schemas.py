"""
schemas.py — Income record Pydantic v2 data contracts.

Defines:
  - RentalProperty, FixedDeposit, Bond, DividendEntry, CapitalGainsItem
        (one row of a per-category income table, as stored by the planner UI)
  - DividendSource enum   (pms / broker1 / broker2)
  - IncomeLedger          (every category for one taxpayer — aggregator input)
  - RentalPropertyIncome, RentalIncomeSummary, IncomeSummary  (aggregator output)
  - ErrorDetail, ErrorBody, ErrorResponse  (cross-cutting error envelope)

Stored rows come from form tables that start with blank lines, so amount
fields accept "" / None and read them as 0. Anything else that is not a
finite number is a validation error naming the field.
"""
from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from taxplanner.engine.schemas import ZERO, Amount, Money


def _blank_to_zero(value: Any) -> Any:
    """Untouched form cells are stored as "" — treat them as 0."""
    if value is None:
        return ZERO
    if isinstance(value, str) and not value.strip():
        return ZERO
    return value


# Amount column of a stored form row
FormAmount = Annotated[Amount, BeforeValidator(_blank_to_zero)]


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class DividendSource(str, Enum):
    pms = "pms"
    broker1 = "broker1"
    broker2 = "broker2"


# ---------------------------------------------------------------------------
# Stored income rows
# ---------------------------------------------------------------------------

class _IncomeRow(BaseModel):
    # Stored rows use camelCase keys (monthlyRent, bankName); older UI versions
    # may carry extra keys
    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class RentalProperty(_IncomeRow):
    """One let-out property. monthly_rent × months_rented gives the gross annual value."""

    monthly_rent: FormAmount = Field(default=ZERO, ge=0)
    months_rented: FormAmount = Field(default=ZERO, ge=0, le=12)
    property_tax: FormAmount = Field(default=ZERO, ge=0, description="Municipal tax actually paid.")
    interest_on_loan: FormAmount = Field(
        default=ZERO, ge=0,
        description="Home loan interest on this property — shown per property, not fed to the engine.",
    )


class FixedDeposit(_IncomeRow):
    bank_name: str = ""
    account_no: str = ""
    interest: FormAmount = Field(default=ZERO, ge=0)


class Bond(_IncomeRow):
    name: str = ""
    isin: str = ""
    income: FormAmount = Field(default=ZERO, ge=0)


class DividendEntry(_IncomeRow):
    date: str = ""
    particulars: str = ""
    amount: FormAmount = Field(default=ZERO, ge=0)


class CapitalGainsItem(_IncomeRow):
    """Realised gains for one demat account or mutual fund folio. Losses are negative."""

    name: str = ""
    stcg: FormAmount = ZERO
    ltcg: FormAmount = ZERO


# ---------------------------------------------------------------------------
# IncomeLedger — all categories for one taxpayer
# ---------------------------------------------------------------------------

class IncomeLedger(BaseModel):
    """
    Every income record the planner holds for one taxpayer.

    is_salaried=None means "infer it": any salary > 0 earns the standard deduction.
    """
    model_config = ConfigDict(extra="forbid")

    salary: FormAmount = Field(default=ZERO, ge=0)
    is_salaried: Optional[bool] = None
    rental_properties: List[RentalProperty] = Field(default_factory=list)
    fixed_deposits: List[FixedDeposit] = Field(default_factory=list)
    bonds: List[Bond] = Field(default_factory=list)
    dividends: Dict[DividendSource, List[DividendEntry]] = Field(default_factory=dict)
    demat_accounts: List[CapitalGainsItem] = Field(default_factory=list)
    mutual_funds: List[CapitalGainsItem] = Field(default_factory=list)


class StorageSnapshotRequest(BaseModel):
    """Raw JSON strings exactly as the planner UI stored them, keyed by storage key."""
    model_config = ConfigDict(extra="forbid")

    snapshot: Dict[str, str] = Field(default_factory=dict)
    is_salaried: Optional[bool] = None


# ---------------------------------------------------------------------------
# Aggregator outputs
# ---------------------------------------------------------------------------

class RentalPropertyIncome(BaseModel):
    """
    House-property computation for one property.

      gross_annual_value = monthly_rent × months_rented
      net_annual_value   = gross_annual_value − property_tax
      standard_deduction = 30% of net_annual_value (only when positive)
      net_income         = net_annual_value − standard_deduction   ← fed to the engine
      taxable_income     = net_income − interest_on_loan           ← display only
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    gross_annual_value: Money
    property_tax: Money
    net_annual_value: Money
    standard_deduction: Money
    net_income: Money
    interest_on_loan: Money
    taxable_income: Money


class RentalIncomeSummary(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    properties: List[RentalPropertyIncome] = Field(default_factory=list)
    total_gross_annual_value: Money = ZERO
    total_property_tax: Money = ZERO
    total_net_annual_value: Money = ZERO
    total_standard_deduction: Money = ZERO
    total_net_income: Money = ZERO
    total_interest_on_loan: Money = ZERO
    total_taxable_income: Money = ZERO


class IncomeSummary(BaseModel):
    """Per-category totals, as shown on the income overview."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    salary: Money
    rental: RentalIncomeSummary
    fd_income: Money
    bond_income: Money
    dividend_income: Money
    dividends_by_source: Dict[DividendSource, Money] = Field(default_factory=dict)
    total_slab_income: Money          # salary + net rental + FD + bonds + dividends
    total_stcg: Money
    total_ltcg: Money


# ---------------------------------------------------------------------------
# Error response models — used by main.py exception handlers (cross-cutting)
# ---------------------------------------------------------------------------

class ErrorDetail(BaseModel):
    """Single field-level validation or business-rule error."""
    model_config = ConfigDict(extra="forbid")

    field: Optional[str] = None   # Dot-notation field path, e.g. "rental_properties.0.months_rented"
    issue: str                     # Human-readable description of the problem


class ErrorBody(BaseModel):
    """Error envelope body."""
    model_config = ConfigDict(extra="forbid")

    code: str                                      # VALIDATION_ERROR, NOT_FOUND, etc.
    message: str                                   # High-level error description
    details: List[ErrorDetail] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """
    Standard error response format for all taxplanner endpoints.

    Structure: {"error": {"code": "...", "message": "...", "details": [...]}}
    """
    model_config = ConfigDict(extra="forbid")

    error: ErrorBody


__all__ = [
    "DividendSource",
    "RentalProperty",
    "FixedDeposit",
    "Bond",
    "DividendEntry",
    "CapitalGainsItem",
    "IncomeLedger",
    "StorageSnapshotRequest",
    "RentalPropertyIncome",
    "RentalIncomeSummary",
    "IncomeSummary",
    "ErrorDetail",
    "ErrorBody",
    "ErrorResponse",
]

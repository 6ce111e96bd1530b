"""
Income aggregation — reduces per-category income records to the flat
DetailedIncomeProfile the tax engine consumes.
Pure functions. No I/O.

House property (per property):
  GAV = monthly_rent × months_rented
  NAV = GAV − property_tax
  30% standard deduction on NAV, only when NAV > 0
  net_income = NAV − 30%          ← summed into profile.rental_income
  interest_on_loan is reported per property but NOT deducted for the engine.

Capital gains from demat accounts and mutual funds are summed with their
sign, so a loss in one account nets against a gain in another before the
engine applies its own STCL set-off.
"""
from __future__ import annotations

import json
import logging
from decimal import Decimal
from typing import Annotated, Any, Iterable, Mapping

from pydantic import Field, TypeAdapter, ValidationError

from taxplanner.engine.schemas import ZERO, DetailedIncomeProfile
from taxplanner.income.schemas import (
    Bond,
    CapitalGainsItem,
    DividendEntry,
    DividendSource,
    FixedDeposit,
    FormAmount,
    IncomeLedger,
    IncomeSummary,
    RentalIncomeSummary,
    RentalProperty,
    RentalPropertyIncome,
)

logger = logging.getLogger(__name__)

HOUSE_PROPERTY_DEDUCTION_RATE = Decimal("0.30")   # Section 24(a)

# ---------------------------------------------------------------------------
# Storage keys the planner UI writes its tables under
# ---------------------------------------------------------------------------

SALARY_KEY = "dyad-salary-income"
RENTAL_KEY = "dyad-rental-income"
FD_KEY = "dyad-fd-income"
BONDS_KEY = "dyad-bonds-income"
DEMAT_KEY = "dyad-demat-gains"
MF_KEY = "dyad-mutual-fund-gains"
DIVIDEND_KEYS: dict[DividendSource, str] = {
    DividendSource.pms: "dyad-pms-dividends",
    DividendSource.broker1: "dyad-broker1-dividends",
    DividendSource.broker2: "dyad-broker2-dividends",
}

_SALARY = TypeAdapter(Annotated[FormAmount, Field(ge=0)])
_RENTAL_ROWS = TypeAdapter(list[RentalProperty])
_FD_ROWS = TypeAdapter(list[FixedDeposit])
_BOND_ROWS = TypeAdapter(list[Bond])
_DIVIDEND_ROWS = TypeAdapter(list[DividendEntry])
_GAINS_ROWS = TypeAdapter(list[CapitalGainsItem])


class IncomeImportError(ValueError):
    """
    A stored payload failed schema validation.

    The message is a JSON string containing a list of {"field": str, "issue": str}
    dicts (field is prefixed with the storage key), so it flows through the
    same 422 handling as profile business-rule violations.
    """

    def __init__(self, key: str, violations: list[dict[str, Any]]) -> None:
        self.key = key
        self.violations = violations
        super().__init__(json.dumps(violations))


# ===========================================================================
# HOUSE PROPERTY
# ===========================================================================

def rental_property_income(prop: RentalProperty) -> RentalPropertyIncome:
    """Income from house property for a single let-out property."""
    gav = prop.monthly_rent * prop.months_rented
    nav = gav - prop.property_tax
    standard_deduction = nav * HOUSE_PROPERTY_DEDUCTION_RATE if nav > ZERO else ZERO
    net_income = nav - standard_deduction
    return RentalPropertyIncome(
        gross_annual_value=gav,
        property_tax=prop.property_tax,
        net_annual_value=nav,
        standard_deduction=standard_deduction,
        net_income=net_income,
        interest_on_loan=prop.interest_on_loan,
        taxable_income=net_income - prop.interest_on_loan,
    )


def summarise_rental(properties: Iterable[RentalProperty]) -> RentalIncomeSummary:
    """Per-property breakdown plus column totals."""
    rows = [rental_property_income(p) for p in properties]
    return RentalIncomeSummary(
        properties=rows,
        total_gross_annual_value=sum((r.gross_annual_value for r in rows), ZERO),
        total_property_tax=sum((r.property_tax for r in rows), ZERO),
        total_net_annual_value=sum((r.net_annual_value for r in rows), ZERO),
        total_standard_deduction=sum((r.standard_deduction for r in rows), ZERO),
        total_net_income=sum((r.net_income for r in rows), ZERO),
        total_interest_on_loan=sum((r.interest_on_loan for r in rows), ZERO),
        total_taxable_income=sum((r.taxable_income for r in rows), ZERO),
    )


# ===========================================================================
# CATEGORY TOTALS
# ===========================================================================

def _capital_gains_totals(ledger: IncomeLedger) -> tuple[Decimal, Decimal]:
    items = [*ledger.demat_accounts, *ledger.mutual_funds]
    stcg = sum((i.stcg for i in items), ZERO)
    ltcg = sum((i.ltcg for i in items), ZERO)
    return stcg, ltcg


def _dividends_by_source(ledger: IncomeLedger) -> dict[DividendSource, Decimal]:
    return {
        source: sum((d.amount for d in entries), ZERO)
        for source, entries in ledger.dividends.items()
    }


def summarise_income(ledger: IncomeLedger) -> IncomeSummary:
    """Category totals for the income overview."""
    rental = summarise_rental(ledger.rental_properties)
    fd_income = sum((fd.interest for fd in ledger.fixed_deposits), ZERO)
    bond_income = sum((b.income for b in ledger.bonds), ZERO)
    by_source = _dividends_by_source(ledger)
    dividend_income = sum(by_source.values(), ZERO)
    stcg, ltcg = _capital_gains_totals(ledger)

    return IncomeSummary(
        salary=ledger.salary,
        rental=rental,
        fd_income=fd_income,
        bond_income=bond_income,
        dividend_income=dividend_income,
        dividends_by_source=by_source,
        total_slab_income=(
            ledger.salary + rental.total_net_income + fd_income + bond_income + dividend_income
        ),
        total_stcg=stcg,
        total_ltcg=ltcg,
    )


def build_profile(ledger: IncomeLedger) -> DetailedIncomeProfile:
    """
    Reduce a ledger to the engine's input.

    is_salaried falls back to "salary > 0" when the ledger leaves it unset.
    """
    summary = summarise_income(ledger)
    is_salaried = ledger.is_salaried if ledger.is_salaried is not None else ledger.salary > ZERO
    return DetailedIncomeProfile(
        salary=summary.salary,
        rental_income=summary.rental.total_net_income,
        fd_income=summary.fd_income,
        bond_income=summary.bond_income,
        dividend_income=summary.dividend_income,
        stcg=summary.total_stcg,
        ltcg=summary.total_ltcg,
        is_salaried=is_salaried,
    )


# ===========================================================================
# STORAGE SNAPSHOT → LEDGER
# ===========================================================================

def _violations(key: str, exc: ValidationError) -> list[dict[str, Any]]:
    violations = []
    for error in exc.errors():
        path = ".".join(str(loc) for loc in error["loc"])
        violations.append({
            "field": f"{key}.{path}" if path else key,
            "issue": error["msg"],
        })
    return violations


def _load(
    snapshot: Mapping[str, str],
    key: str,
    adapter: TypeAdapter,
    default: Any,
) -> Any:
    raw = snapshot.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return adapter.validate_json(raw)
    except ValidationError as exc:
        violations = _violations(key, exc)
        logger.info("Stored payload rejected key=%s violations=%d", key, len(violations))
        raise IncomeImportError(key, violations) from exc


def ledger_from_storage(
    snapshot: Mapping[str, str],
    is_salaried: bool | None = None,
) -> IncomeLedger:
    """
    Build an IncomeLedger from raw JSON strings keyed by storage key.

    Missing keys read as empty tables (salary 0). Any malformed payload
    raises IncomeImportError naming the key and every invalid field.
    """
    dividends = {
        source: _load(snapshot, key, _DIVIDEND_ROWS, [])
        for source, key in DIVIDEND_KEYS.items()
    }
    ledger = IncomeLedger(
        salary=_load(snapshot, SALARY_KEY, _SALARY, ZERO),
        is_salaried=is_salaried,
        rental_properties=_load(snapshot, RENTAL_KEY, _RENTAL_ROWS, []),
        fixed_deposits=_load(snapshot, FD_KEY, _FD_ROWS, []),
        bonds=_load(snapshot, BONDS_KEY, _BOND_ROWS, []),
        dividends=dividends,
        demat_accounts=_load(snapshot, DEMAT_KEY, _GAINS_ROWS, []),
        mutual_funds=_load(snapshot, MF_KEY, _GAINS_ROWS, []),
    )
    logger.debug("Ledger loaded from storage keys=%d", len(snapshot))
    return ledger

"""
formatting.py — Indian Rupee display helpers.

format_inr() groups digits the Indian way (last three, then pairs):
    1234567.891 → "₹12,34,567.89"
Rounding is half-up and happens here only — never inside the engine.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Union

from taxplanner.engine.schemas import DetailedIncomeProfile, TaxComputationResult

Number = Union[Decimal, int, float]

RUPEE = "₹"


def _group_indian(digits: str) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs) + "," + tail


def format_inr(amount: Number, decimals: int = 2, symbol: bool = True) -> str:
    """Format an amount with Indian digit grouping, e.g. ₹1,20,250.00."""
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    exponent = Decimal(1).scaleb(-decimals)
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the decimals
        ctx.prec = max(ctx.prec, value.adjusted() + decimals + 2)
        value = value.quantize(exponent, rounding=ROUND_HALF_UP)
    if value == 0:
        value = value.copy_abs()   # no "-₹0.00"

    sign = "-" if value < 0 else ""
    text = f"{value.copy_abs():f}"
    whole, _, frac = text.partition(".")
    grouped = _group_indian(whole)
    if frac:
        grouped = f"{grouped}.{frac}"
    return f"{sign}{RUPEE if symbol else ''}{grouped}"


def computation_statement(
    profile: DetailedIncomeProfile,
    result: TaxComputationResult,
) -> list[str]:
    """
    Plain-text "Tax Computation (New Regime)" statement, one line per row:
    income, slab tax, capital gains, final liability.
    """
    f = format_inr
    lines = [
        "1. Income Calculation",
        f"Salary Income: {f(profile.salary)}",
        f"Rental Income: {f(profile.rental_income)}",
        f"FD & Bond Interest: {f(profile.fd_income + profile.bond_income)}",
        f"Dividend Income: {f(profile.dividend_income)}",
        f"Gross Total Income: {f(result.gross_slab_income)}",
        f"Less: Standard Deduction: - {f(result.standard_deduction)}",
        f"Net Taxable Income: {f(result.net_taxable_slab_income)}",
        "2. Income Tax Calculation",
    ]
    if result.is_rebate_applicable:
        lines.append(
            "Rebate under Section 87A applicable: net taxable income is "
            "₹12,00,000 or less, so slab tax is zero "
            f"(rebate {f(result.rebate)})."
        )
    lines += [
        f"Tax on Income (as per slabs): {f(result.slab_tax_before_rebate)}",
        "3. Capital Gains",
        f"Short-Term Capital Gains: {f(result.original_stcg)}",
        f"Long-Term Capital Gains: {f(result.original_ltcg)}",
    ]
    if result.stcl_set_off > 0:
        lines.append(f"Less: STCL set off against LTCG: {f(result.stcl_set_off)}")
    lines += [
        f"LTCG Exemption: - {f(result.ltcg_exemption)}",
        f"Taxable LTCG: {f(result.taxable_ltcg)}",
        f"LTCG Tax (12.5%): {f(result.ltcg_tax)}",
        f"STCG Tax (20%): {f(result.stcg_tax)}",
        f"Total Capital Gains Tax: {f(result.total_capital_gains_tax)}",
        "4. Final Tax Liability",
        f"Tax Before Surcharge: {f(result.total_tax_before_surcharge)}",
        f"Surcharge: + {f(result.surcharge)}",
        f"Tax Before Cess: {f(result.tax_before_cess)}",
        f"Health & Education Cess (4%): + {f(result.cess)}",
        f"Total Tax Payable: {f(result.total_tax_payable)}",
    ]
    return lines

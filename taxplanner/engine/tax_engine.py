"""
taxplanner Tax Engine — AY 2025-26 (Budget 2025, new regime)
Pure Python, Decimal arithmetic, deterministic. Same input → same output.

One canonical rule set only. Superseded variants seen in earlier versions of
the planner (₹7L rebate ceiling, ₹50K standard deduction, ₹1L / ₹1.5L LTCG
exemption, 10% / 15% capital gains rates) must NOT be mixed back in.

Known simplifications, kept on purpose:
  - 87A rebate is all-or-nothing at ₹12L — no marginal relief above it.
  - Only STCL → LTCG set-off; no LTCL handling, no carry-forward.
  - Flat 10% surcharge above ₹50L total income — no higher slabs, no marginal relief.
"""
from __future__ import annotations

import logging
from decimal import Decimal

from taxplanner.engine.schemas import (
    ZERO,
    DetailedIncomeProfile,
    TaxComputationResult,
)

logger = logging.getLogger(__name__)

# ===========================================================================
# ASSESSMENT YEAR CONSTANT
# ===========================================================================

ASSESSMENT_YEAR = "AY2025-26"

# ===========================================================================
# NEW REGIME SLAB BREAKPOINTS — Budget 2025
# AY 2024-25 breakpoints were 3L/6L/9L/12L/15L — do NOT use those.
# ===========================================================================

NEW_SLAB_4L  = Decimal("400000")
NEW_SLAB_8L  = Decimal("800000")
NEW_SLAB_12L = Decimal("1200000")
NEW_SLAB_16L = Decimal("1600000")
NEW_SLAB_20L = Decimal("2000000")
NEW_SLAB_24L = Decimal("2400000")

# ===========================================================================
# DEDUCTION / REBATE / CAPITAL GAINS / LEVY CONSTANTS
# ===========================================================================

STANDARD_DEDUCTION   = Decimal("75000")      # Salaried only
REBATE_87A_CEILING   = Decimal("1200000")    # Net taxable slab income <= 12L → slab tax 0

LTCG_EXEMPTION       = Decimal("125000")     # Budget 2024 onwards; 1.5L variant superseded
LTCG_RATE            = Decimal("0.125")
STCG_RATE            = Decimal("0.20")

SURCHARGE_THRESHOLD  = Decimal("5000000")    # Tested against slab income + taxed gains
SURCHARGE_RATE       = Decimal("0.10")
CESS_RATE            = Decimal("0.04")       # Health & Education Cess

# ===========================================================================
# SLAB TABLE — list[tuple[ceiling, rate]]
# ===========================================================================

NEW_REGIME_SLABS: list[tuple[Decimal, Decimal]] = [
    (NEW_SLAB_4L,           Decimal("0.00")),   # 0–4L: 0%
    (NEW_SLAB_8L,           Decimal("0.05")),   # 4–8L: 5%
    (NEW_SLAB_12L,          Decimal("0.10")),   # 8–12L: 10%
    (NEW_SLAB_16L,          Decimal("0.15")),   # 12–16L: 15%
    (NEW_SLAB_20L,          Decimal("0.20")),   # 16–20L: 20%
    (NEW_SLAB_24L,          Decimal("0.25")),   # 20–24L: 25%
    (Decimal("Infinity"),   Decimal("0.30")),   # >24L: 30%
]


# ===========================================================================
# INTERNAL HELPERS (pure functions — no side effects, no I/O)
# ===========================================================================

def calculate_slab_tax(
    taxable_income: Decimal,
    slabs: list[tuple[Decimal, Decimal]] = NEW_REGIME_SLABS,
) -> Decimal:
    """
    Apply progressive slab tax to taxable_income using a bracket-list pattern.
    Accumulates tax on each bracket, stops when taxable_income <= previous ceiling.
    Does NOT apply the 87A rebate.
    """
    tax = ZERO
    prev_ceiling = ZERO
    for ceiling, rate in slabs:
        if taxable_income <= prev_ceiling:
            break
        slab_income = min(taxable_income, ceiling) - prev_ceiling
        tax += slab_income * rate
        prev_ceiling = ceiling
    return tax


def apply_loss_set_off(stcg: Decimal, ltcg: Decimal) -> tuple[Decimal, Decimal, Decimal]:
    """
    Set a short-term capital loss off against long-term gains.

    Only fires when stcg < 0 and ltcg > 0. The set-off is capped at the
    smaller magnitude, so an unabsorbed loss stays on the STCG side.

    Returns:
        (set_off, post_set_off_stcg, post_set_off_ltcg)
    """
    if stcg < ZERO and ltcg > ZERO:
        set_off = min(abs(stcg), ltcg)
        return set_off, stcg + set_off, ltcg - set_off
    return ZERO, stcg, ltcg


# ===========================================================================
# PUBLIC API
# ===========================================================================

def compute_tax(profile: DetailedIncomeProfile) -> TaxComputationResult:
    """
    Compute the full AY 2025-26 new-regime tax breakdown for a profile.

    Total for any finite input: negative non-capital-gains amounts are not
    rejected here and flow through the arithmetic. Range checks are the
    caller's job (taxplanner.income.validator.validate_profile_inputs).
    """
    # Step 1: Slab income and standard deduction
    gross_slab_income = (
        profile.salary
        + profile.rental_income
        + profile.fd_income
        + profile.bond_income
        + profile.dividend_income
    )
    standard_deduction = STANDARD_DEDUCTION if profile.is_salaried else ZERO
    net_taxable_slab_income = max(ZERO, gross_slab_income - standard_deduction)

    # Step 2: 87A rebate — all or nothing
    is_rebate_applicable = net_taxable_slab_income <= REBATE_87A_CEILING

    # Step 3: Slab tax
    bracket_tax = calculate_slab_tax(net_taxable_slab_income)
    if is_rebate_applicable:
        slab_tax = ZERO
        rebate = bracket_tax
    else:
        slab_tax = bracket_tax
        rebate = ZERO

    # Step 4: STCL set-off against LTCG
    set_off, post_stcg, post_ltcg = apply_loss_set_off(profile.stcg, profile.ltcg)

    # Step 5: Capital gains tax
    stcg_for_tax = max(ZERO, post_stcg)
    ltcg_for_tax = max(ZERO, post_ltcg)
    taxable_ltcg = max(ZERO, ltcg_for_tax - LTCG_EXEMPTION)
    ltcg_tax = taxable_ltcg * LTCG_RATE
    stcg_tax = stcg_for_tax * STCG_RATE
    total_capital_gains_tax = ltcg_tax + stcg_tax

    # Step 6: Surcharge (on total income, not slab income alone), cess, total
    total_tax_before_surcharge = slab_tax + total_capital_gains_tax
    total_income_for_surcharge = net_taxable_slab_income + stcg_for_tax + ltcg_for_tax
    if total_income_for_surcharge > SURCHARGE_THRESHOLD:
        surcharge = total_tax_before_surcharge * SURCHARGE_RATE
    else:
        surcharge = ZERO
    tax_before_cess = total_tax_before_surcharge + surcharge
    cess = tax_before_cess * CESS_RATE
    total_tax_payable = tax_before_cess + cess

    logger.debug(
        "Tax computed rebate=%s surcharge_applies=%s total=%s",
        is_rebate_applicable,
        surcharge > ZERO,
        total_tax_payable,
    )

    return TaxComputationResult(
        gross_slab_income=gross_slab_income,
        original_stcg=profile.stcg,
        original_ltcg=profile.ltcg,
        standard_deduction=standard_deduction,
        net_taxable_slab_income=net_taxable_slab_income,
        is_rebate_applicable=is_rebate_applicable,
        slab_tax_before_rebate=slab_tax,
        rebate=rebate,
        stcl_set_off=set_off,
        post_set_off_stcg=post_stcg,
        post_set_off_ltcg=post_ltcg,
        stcg_for_tax=stcg_for_tax,
        ltcg_for_tax=ltcg_for_tax,
        ltcg_exemption=LTCG_EXEMPTION,
        taxable_ltcg=taxable_ltcg,
        ltcg_tax=ltcg_tax,
        stcg_tax=stcg_tax,
        total_capital_gains_tax=total_capital_gains_tax,
        total_income_for_surcharge=total_income_for_surcharge,
        total_tax_before_surcharge=total_tax_before_surcharge,
        surcharge=surcharge,
        tax_before_cess=tax_before_cess,
        cess=cess,
        total_tax_payable=total_tax_payable,
    )

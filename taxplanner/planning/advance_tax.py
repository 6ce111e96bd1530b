"""
Advance tax instalment schedule — Sections 208/211, FY 2024-25 (AY 2025-26).
Pure functions. No I/O.

Advance tax is due only when the liability left after TDS is ₹10,000 or more.
Instalments are fixed cumulative percentages of that liability:
  15 June 15% · 15 September 45% · 15 December 75% · 15 March 100%
"""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, localcontext

from taxplanner.engine.schemas import ZERO
from taxplanner.planning.schemas import AdvanceTaxInstalment, AdvanceTaxSchedule

logger = logging.getLogger(__name__)

ADVANCE_TAX_THRESHOLD = Decimal("10000")

# (due_by, cumulative %) for FY 2024-25
INSTALMENTS: list[tuple[str, int]] = [
    ("15 June 2024",      15),
    ("15 September 2024", 45),
    ("15 December 2024",  75),
    ("15 March 2025",     100),
]

_RUPEE = Decimal("1")


def _to_rupee(amount: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + 2)
        return amount.quantize(_RUPEE, rounding=ROUND_HALF_UP)


def advance_tax_schedule(total_tax: Decimal, tds: Decimal = ZERO) -> AdvanceTaxSchedule:
    """
    Split the post-TDS liability into the four statutory instalments.

    Each instalment is the difference of rounded cumulative amounts, so the
    instalments always add up to the liability rounded to the rupee.
    """
    net_liability = max(ZERO, total_tax - tds)

    if net_liability < ADVANCE_TAX_THRESHOLD:
        logger.debug("No advance tax due — net liability below threshold")
        return AdvanceTaxSchedule(
            total_tax=total_tax,
            tds=tds,
            net_tax_liability=ZERO,
            is_advance_tax_due=False,
        )

    instalments: list[AdvanceTaxInstalment] = []
    paid_so_far = ZERO
    for due_by, cumulative_pct in INSTALMENTS:
        cumulative = _to_rupee(net_liability * cumulative_pct / 100)
        instalments.append(AdvanceTaxInstalment(
            due_by=due_by,
            cumulative_percentage=cumulative_pct,
            amount=cumulative - paid_so_far,
            cumulative_amount=cumulative,
        ))
        paid_so_far = cumulative

    return AdvanceTaxSchedule(
        total_tax=total_tax,
        tds=tds,
        net_tax_liability=net_liability,
        is_advance_tax_due=True,
        instalments=instalments,
    )

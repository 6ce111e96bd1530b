"""
Section 54F exemption — long-term gain on any asset other than a residential
house, reinvested in a new residential house.

  net_consideration = sale_consideration − transfer_expenses
  cost >= net_consideration → whole gain exempt
  otherwise               → gain × cost / net_consideration

No exemption when net_consideration or the gain is not positive.
The ₹10 crore reinvestment cap and the one-house ownership condition are
not modelled.
"""
from __future__ import annotations

from decimal import Decimal

from taxplanner.engine.schemas import ZERO
from taxplanner.planning.schemas import Section54FResult


def section_54f_exemption(
    sale_consideration: Decimal,
    transfer_expenses: Decimal,
    cost_of_new_house: Decimal,
    capital_gains: Decimal,
) -> Section54FResult:
    net_consideration = sale_consideration - transfer_expenses

    if net_consideration <= ZERO or capital_gains <= ZERO:
        exemption = ZERO
    elif cost_of_new_house >= net_consideration:
        exemption = capital_gains
    else:
        exemption = min(capital_gains, capital_gains * cost_of_new_house / net_consideration)

    taxable_gains = max(ZERO, capital_gains - exemption)
    return Section54FResult(
        net_consideration=net_consideration,
        exemption=exemption,
        taxable_gains=taxable_gains,
        is_fully_exempt=capital_gains > ZERO and taxable_gains == ZERO,
    )

"""
Profile business-rule validator — AY 2025-26

Validates a DetailedIncomeProfile at the request boundary AFTER Pydantic
structural validation has already passed (so every amount is a finite
Decimal). Collects all violations in a single pass and raises ValueError
with a JSON-encoded list of {field, issue} dicts so the route or the global
ValueError handler can build the standard error envelope.

Rules enforced:
  1. salary, fd_income, bond_income, dividend_income >= 0

stcg / ltcg (capital losses) and rental_income (loss from house property,
when property tax exceeds the rent) are signed and never rejected here.
The tax engine itself stays total: it never calls this module.
"""
from __future__ import annotations

import json
import logging
from typing import Any

from taxplanner.engine.schemas import ZERO, DetailedIncomeProfile

logger = logging.getLogger(__name__)

_NON_NEGATIVE_FIELDS: dict[str, str] = {
    "salary":          "Salary / pension income",
    "fd_income":       "Fixed deposit interest",
    "bond_income":     "Bond interest",
    "dividend_income": "Dividend income",
}


def validate_profile_inputs(profile: DetailedIncomeProfile) -> None:
    """
    Reject negative salary, interest and dividend income.

    Collects every violation before raising, so callers receive all errors in
    one response rather than discovering them one at a time.

    Raises:
        ValueError: If any rule is violated. The message is a JSON string
            containing a list of {"field": str, "issue": str} dicts.
    """
    violations: list[dict[str, Any]] = []

    for field, label in _NON_NEGATIVE_FIELDS.items():
        value = getattr(profile, field)
        if value < ZERO:
            violations.append({
                "field": field,
                "issue": (
                    f"{label} cannot be negative (got {value}). "
                    "Only capital gains and house property may carry a loss."
                ),
            })

    if violations:
        # Count only — no income values in logs
        logger.info("Profile validation failed: %d violation(s)", len(violations))
        raise ValueError(json.dumps(violations))

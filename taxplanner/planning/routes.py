"""
Planning HTTP routes — POST /api/planning/advance-tax,
                       POST /api/planning/section-54f
"""
from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from taxplanner.engine.tax_engine import compute_tax
from taxplanner.income.validator import validate_profile_inputs
from taxplanner.planning.advance_tax import advance_tax_schedule
from taxplanner.planning.schemas import AdvanceTaxRequest, Section54FRequest
from taxplanner.planning.section_54f import section_54f_exemption
from taxplanner.responses import make_validation_error_response

router = APIRouter(prefix="/api/planning", tags=["planning"])
logger = logging.getLogger(__name__)


@router.post("/advance-tax")
async def advance_tax(request_body: AdvanceTaxRequest) -> JSONResponse:
    """
    Advance tax instalments for the year.

    With a profile, the total comes from the canonical engine; otherwise the
    caller's total_tax is used as-is.
    """
    if request_body.profile is not None:
        try:
            validate_profile_inputs(request_body.profile)
        except ValueError as exc:
            return make_validation_error_response(str(exc))
        total_tax = compute_tax(request_body.profile).total_tax_payable
    else:
        total_tax = request_body.total_tax

    schedule = advance_tax_schedule(total_tax, request_body.tds)
    logger.info("Advance tax schedule due=%s", schedule.is_advance_tax_due)
    return JSONResponse(status_code=200, content=schedule.model_dump(mode="json"))


@router.post("/section-54f")
async def section_54f(request_body: Section54FRequest) -> JSONResponse:
    """Exemption on a long-term gain reinvested in a residential house."""
    result = section_54f_exemption(
        request_body.sale_consideration,
        request_body.transfer_expenses,
        request_body.cost_of_new_house,
        request_body.capital_gains,
    )
    return JSONResponse(status_code=200, content=result.model_dump(mode="json"))

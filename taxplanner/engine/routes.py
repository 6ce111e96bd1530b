"""
Tax engine HTTP routes — POST /api/calculate

Thin request/response wrapper around the pure compute_tax(): boundary
validation, computation, statement lines. No state, no persistence.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from taxplanner.engine.schemas import CalculationResponse, DetailedIncomeProfile
from taxplanner.engine.tax_engine import compute_tax
from taxplanner.formatting import computation_statement
from taxplanner.income.validator import validate_profile_inputs
from taxplanner.responses import make_validation_error_response

router = APIRouter(prefix="/api", tags=["tax_engine"])
logger = logging.getLogger(__name__)


def calculate_response(profile: DetailedIncomeProfile) -> CalculationResponse:
    """Validate, compute and render one profile. Raises ValueError on rule violations."""
    validate_profile_inputs(profile)
    result = compute_tax(profile)
    return CalculationResponse(
        profile=profile,
        result=result,
        statement=computation_statement(profile, result),
    )


@router.post("/calculate")
async def calculate_tax(profile: DetailedIncomeProfile) -> JSONResponse:
    """
    Compute the AY 2025-26 new-regime tax for an aggregated income profile.

    Returns:
        200: {profile, result: TaxComputationResult, statement: [lines]}
        422: Standard error envelope (non-finite or negative non-capital-gains amounts).
    """
    try:
        response = calculate_response(profile)
    except ValueError as exc:
        return make_validation_error_response(str(exc))

    logger.info(
        "Tax calculated rebate=%s surcharge=%s",
        response.result.is_rebate_applicable,
        response.result.surcharge > 0,
    )
    return JSONResponse(status_code=200, content=response.model_dump(mode="json"))

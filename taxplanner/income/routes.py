"""
Income HTTP routes — POST /api/income/summary,
                     POST /api/income/calculate,
                     POST /api/income/storage/calculate

The caller hands over its income records (typed ledger or the raw JSON it
kept in browser storage); the server aggregates them and runs the engine.
Nothing is stored server-side.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from taxplanner.engine.routes import calculate_response
from taxplanner.income.aggregator import (
    IncomeImportError,
    build_profile,
    ledger_from_storage,
    summarise_income,
)
from taxplanner.income.schemas import IncomeLedger, StorageSnapshotRequest
from taxplanner.responses import make_validation_error_response

router = APIRouter(prefix="/api/income", tags=["income"])
logger = logging.getLogger(__name__)


@router.post("/summary")
async def income_summary(ledger: IncomeLedger) -> JSONResponse:
    """Per-category totals, including the per-property house-property breakdown."""
    summary = summarise_income(ledger)
    return JSONResponse(status_code=200, content=summary.model_dump(mode="json"))


@router.post("/calculate")
async def calculate_from_ledger(ledger: IncomeLedger) -> JSONResponse:
    """Aggregate a typed ledger into a profile and compute its tax."""
    profile = build_profile(ledger)
    try:
        response = calculate_response(profile)
    except ValueError as exc:
        return make_validation_error_response(str(exc))
    return JSONResponse(status_code=200, content=response.model_dump(mode="json"))


@router.post("/storage/calculate")
async def calculate_from_storage(request_body: StorageSnapshotRequest) -> JSONResponse:
    """
    Parse a browser-storage snapshot, aggregate it and compute its tax.

    Returns:
        200: {profile, result, statement}
        422: Every invalid stored field, prefixed with its storage key.
    """
    try:
        ledger = ledger_from_storage(request_body.snapshot, request_body.is_salaried)
    except IncomeImportError as exc:
        return make_validation_error_response(str(exc), message="Stored income data is invalid")

    profile = build_profile(ledger)
    try:
        response = calculate_response(profile)
    except ValueError as exc:
        return make_validation_error_response(str(exc))

    logger.info("Storage snapshot calculated keys=%d", len(request_body.snapshot))
    return JSONResponse(status_code=200, content=response.model_dump(mode="json"))

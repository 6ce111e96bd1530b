"""
responses.py — standard {error: {code, message, details}} envelope builders,
shared by main.py exception handlers and the routers.
"""
from __future__ import annotations

import json
from typing import Any

from fastapi.responses import JSONResponse

from taxplanner.income.schemas import ErrorBody, ErrorDetail, ErrorResponse


def make_error_response(
    code: str,
    message: str,
    details: list[dict[str, Any]] | None = None,
    status_code: int = 500,
) -> JSONResponse:
    """Build a standard {error: {code, message, details}} response."""
    body = ErrorResponse(
        error=ErrorBody(
            code=code,
            message=message,
            details=[ErrorDetail(**d) for d in details or []],
        )
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


def make_validation_error_response(
    violations_json: str,
    message: str = "Profile validation failed",
) -> JSONResponse:
    """Parse JSON-encoded violations and return standard 422 error envelope."""
    try:
        violations: list[dict[str, Any]] = json.loads(violations_json)
    except (json.JSONDecodeError, ValueError):
        # Plain-text ValueError (e.g. from a model_validator)
        violations = [{"field": None, "issue": violations_json}]
    if not isinstance(violations, list):
        violations = [{"field": None, "issue": violations_json}]
    details = [{"field": v.get("field"), "issue": v["issue"]} for v in violations]
    return make_error_response(
        code="VALIDATION_ERROR",
        message=message,
        details=details,
        status_code=422,
    )

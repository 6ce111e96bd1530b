"""
main.py — taxplanner FastAPI application entry point.

Start with: uvicorn taxplanner.main:app --reload --port 8000
(run from the project root)
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taxplanner.config import settings
from taxplanner.engine.tax_engine import ASSESSMENT_YEAR
from taxplanner.responses import make_error_response

# ---------------------------------------------------------------------------
# Logging — configured before anything else
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.DEBUG if settings.debug else settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan — startup & shutdown hooks
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """No external resources: the engine is pure, so startup only logs."""
    logger.info("taxplanner v%s starting up (%s rules)", settings.app_version, ASSESSMENT_YEAR)
    yield
    logger.info("taxplanner shutting down")


# ---------------------------------------------------------------------------
# FastAPI application instance
# ---------------------------------------------------------------------------
app = FastAPI(
    title="taxplanner API",
    version=settings.app_version,
    description=(
        "Personal income-tax planning calculator for Indian residents (AY 2025-26, new regime). "
        "Aggregates salary, rental, interest, dividend and capital-gains income and computes "
        "slab tax, 87A rebate, capital gains tax with STCL set-off, surcharge and cess."
    ),
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

# ---------------------------------------------------------------------------
# CORS middleware — restricted to frontend origins from settings
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error envelope — every failure leaves as {"error": {...}}
# ---------------------------------------------------------------------------
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Malformed amounts, unknown fields and bad JSON bodies. Every offending
    field is listed, keyed by its path inside the request body.
    """
    details = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        details.append({"field": field or None, "issue": error["msg"]})
    return make_error_response(
        code="VALIDATION_ERROR",
        message="Request validation failed",
        details=details,
        status_code=422,
    )


# Routing is the only source of HTTP errors here; routes never raise them.
_ROUTING_CODES = {
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Unknown path or wrong method."""
    return make_error_response(
        code=_ROUTING_CODES.get(exc.status_code, f"HTTP_{exc.status_code}"),
        message=str(exc.detail),
        status_code=exc.status_code,
    )


@app.exception_handler(ValueError)
async def value_error_handler(
    request: Request, exc: ValueError
) -> JSONResponse:
    """An income or tax rule broken somewhere below the routes' own checks."""
    return make_error_response(
        code="VALIDATION_ERROR",
        message=str(exc),
        status_code=422,
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """
    Anything else is a bug in the calculator. The traceback goes to the log;
    the client sees the exception text only while settings.debug is on.
    """
    logger.error(
        "Unhandled exception on %s %s",
        request.method,
        request.url.path,
        exc_info=True,
    )
    details = [{"issue": f"{type(exc).__name__}: {exc}"}] if settings.debug else []
    return make_error_response(
        code="INTERNAL_ERROR",
        message="Tax calculation failed unexpectedly",
        details=details,
        status_code=500,
    )


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------
@app.get("/api/health", tags=["System"])
async def health_check() -> dict:
    """Returns service health status."""
    return {
        "status": "ok",
        "version": settings.app_version,
        "assessment_year": ASSESSMENT_YEAR,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from taxplanner.engine.routes import router as tax_engine_router
from taxplanner.income.routes import router as income_router
from taxplanner.planning.routes import router as planning_router

app.include_router(tax_engine_router)
app.include_router(income_router)
app.include_router(planning_router)

"""
Crowdsale API - Main Application.

FastAPI application exposing the sale's call surface. Rejected operations are
mapped from the sale error taxonomy to HTTP status codes.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import __version__
from api.models import ErrorResponse
from domain.errors import (
    AccessDenied,
    GoalNotReached,
    SaleClosedViolation,
    SaleError,
    SalePaused,
    TimeWindowViolation,
    TransferFailed,
)

logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Crowdsale API",
    description="REST API for contributing to and settling a time-boxed token sale",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS - Allow all origins for development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_CONFLICT_ERRORS = (TimeWindowViolation, SaleClosedViolation, SalePaused, GoalNotReached)


def status_for(error: SaleError) -> int:
    if isinstance(error, AccessDenied):
        return 403
    if isinstance(error, _CONFLICT_ERRORS):
        return 409
    return 400


def _error_response(error: Exception, status_code: int) -> JSONResponse:
    body = ErrorResponse(error=type(error).__name__, detail=str(error), status_code=status_code)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(SaleError)
def handle_sale_error(request: Request, exc: SaleError) -> JSONResponse:
    return _error_response(exc, status_for(exc))


@app.exception_handler(TransferFailed)
def handle_transfer_failed(request: Request, exc: TransferFailed) -> JSONResponse:
    logger.warning(
        f"Transfer failed during {request.method} {request.url.path}: {exc}",
        extra={"path": request.url.path},
    )
    return _error_response(exc, 502)


@app.exception_handler(OverflowError)
def handle_overflow(request: Request, exc: OverflowError) -> JSONResponse:
    return _error_response(exc, 400)


@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint.

    Returns the API status and version.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "service": "crowdsale-api"
    }


@app.get("/", tags=["Root"])
def root():
    """
    Root endpoint with API information.
    """
    return {
        "message": "Crowdsale API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


# Import and include routers
from api.routers import admin, contributions, sale

app.include_router(sale.router, prefix="/api/v1", tags=["Sale"])
app.include_router(contributions.router, prefix="/api/v1", tags=["Contributions"])
app.include_router(admin.router, prefix="/api/v1", tags=["Admin"])

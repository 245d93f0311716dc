"""Catalog API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalog_module.api.associations import router as associations_router
from catalog_module.api.health import router as health_router
from catalog_module.api.middleware import setup_middleware
from catalog_module.api.products import router as products_router
from catalog_module.domain.exceptions import (
    CatalogPersistenceError,
    DomainError,
    InvalidResponseGroupError,
    ProductNotFoundError,
)
from catalog_module.infrastructure.cache import get_cache_manager
from catalog_module.infrastructure.config import settings
from catalog_module.infrastructure.logging_config import configure_logging

logger = structlog.get_logger()

# HTTP status for each domain error; anything else is a 400
DOMAIN_ERROR_STATUS = {
    ProductNotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidResponseGroupError: status.HTTP_400_BAD_REQUEST,
    CatalogPersistenceError: status.HTTP_409_CONFLICT,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    configure_logging(level=settings.log_level, json=settings.log_json)
    logger.info(
        "Starting catalog API",
        version=settings.api_version,
        debug=settings.debug,
        cache_enabled=settings.cache_enabled,
    )

    yield

    get_cache_manager().reset()
    logger.info("Shutting down catalog API")


app = FastAPI(
    title="Catalog API",
    description="Catalog products, variations and associations",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware (must be added before custom middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware (request ID, API key auth, error handling)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(products_router)
app.include_router(associations_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


def _error_response(
    request: Request, status_code: int, error_code: str, message: str, details=None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details if details is not None else [],
            "request_id": getattr(request.state, "request_id", None),
        },
    )


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    """Map domain errors to their HTTP status."""
    status_code = next(
        (code for cls, code in DOMAIN_ERROR_STATUS.items() if isinstance(exc, cls)),
        status.HTTP_400_BAD_REQUEST,
    )
    logger.warning(
        "Domain error",
        error_code=exc.error_code,
        error=exc.message,
        path=request.url.path,
    )
    return _error_response(
        request, status_code, exc.error_code, exc.message, _domain_details(exc.details)
    )


def _domain_details(details: dict) -> list[dict]:
    """Flatten domain error context into field/message pairs."""
    return [
        {
            "field": field,
            "message": ", ".join(map(str, value)) if isinstance(value, list) else str(value),
        }
        for field, value in details.items()
    ]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report request validation errors in the standard error format."""
    details = [
        {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
        for error in exc.errors()
    ]
    return _error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Request validation failed",
        details,
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with consistent format."""
    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", [])
    else:
        error_code = "ERROR"
        message = str(detail)
        details = []

    return _error_response(request, exc.status_code, error_code, message, details)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions with consistent format."""
    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "An internal error occurred",
    )

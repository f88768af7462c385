"""
Main FastAPI Application

Entry point for the fencemark estimation API.
Configures middleware, routes, error handlers, and startup/shutdown events.
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
import time
import uuid
from contextlib import asynccontextmanager

from fencemark import __version__
from fencemark.config import get_settings
from fencemark.database import engine, init_db_with_retry, DatabaseUnavailableError
from fencemark.middleware.rate_limit import RateLimitMiddleware
from fencemark.utils.logging import setup_logging, get_logger, bind_request_id, reset_request_id
from fencemark.core.exceptions import (
    AuthenticationError,
    InvalidInputError,
    TenantIsolationError,
)

# Import routers
from fencemark.api.endpoints import (
    auth,
    components,
    discounts,
    drawings,
    fence_segments,
    fences,
    gate_positions,
    gates,
    jobs,
    organizations,
    parcels,
    pricing_configs,
    quotes,
    tax_regions,
)

settings = get_settings()

# Setup logging
setup_logging(
    log_level=settings.LOG_LEVEL,
    json_format=(settings.ENVIRONMENT == "production")
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Creates missing tables on startup, retrying while the database comes
    up. If it never does, startup fails and the process exits.
    """
    logger.info(f"Starting application in {settings.ENVIRONMENT} mode")

    try:
        init_db_with_retry()
    except DatabaseUnavailableError:
        logger.critical("Database unavailable, aborting startup")
        raise

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application")
    engine.dispose()
    logger.info("Application shutdown complete")


app = FastAPI(
    title="Fencemark API",
    description="Multi-tenant fence estimating: jobs, site drawings, catalogs, pricing and quotes",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)


# ============================================================================
# MIDDLEWARE CONFIGURATION
# ============================================================================

# SECURITY: In production, restrict allowed_origins to specific domains
allowed_origins = [
    "http://localhost:3000",
    "http://localhost:8000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins if settings.ENVIRONMENT == "production" else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_request_headers(request: Request, call_next):
    """Tag every response with a request id and its duration."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id
    token = bind_request_id(request_id)

    start_time = time.time()
    try:
        response = await call_next(request)
    finally:
        reset_request_id(token)
    process_time = time.time() - start_time

    response.headers["X-Request-ID"] = request_id
    response.headers["X-Process-Time"] = str(process_time)

    logger.info(
        f"{request.method} {request.url.path} {response.status_code}",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "status_code": response.status_code,
        }
    )
    return response


app.add_middleware(RateLimitMiddleware)


# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================

@app.exception_handler(InvalidInputError)
async def invalid_input_error_handler(request: Request, exc: InvalidInputError):
    """Business validation failures: 400 with {"error": message}."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are rendered like business validation errors."""
    return JSONResponse(
        status_code=400,
        content={
            "error": "Validation failed",
            "details": jsonable_encoder(exc.errors()),
        }
    )


@app.exception_handler(TenantIsolationError)
async def tenant_isolation_error_handler(request: Request, exc: TenantIsolationError):
    """
    Handle cross-organization access attempts.

    CRITICAL: These should be logged and alerted on immediately.
    """
    logger.error(
        f"TENANT ISOLATION VIOLATION: {exc.detail}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "organization_id": getattr(request.state, "organization_id", None),
            "user_id": getattr(request.state, "user_id", None),
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail, "type": "tenant_isolation_error"}
    )


@app.exception_handler(AuthenticationError)
async def authentication_error_handler(request: Request, exc: AuthenticationError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail, "type": "authentication_error"},
        headers=exc.headers or {}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch-all exception handler.

    SECURITY: Don't expose internal errors in production.
    Log full details but return generic error to client.
    """
    logger.error(
        f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
        exc_info=True,
        extra={
            "path": request.url.path,
            "method": request.method,
            "organization_id": getattr(request.state, "organization_id", None)
        }
    )

    if settings.DEBUG:
        return JSONResponse(
            status_code=500,
            content={"error": str(exc), "type": type(exc).__name__}
        )
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "type": "internal_error"}
    )


# ============================================================================
# ROUTES
# ============================================================================

@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint for load balancers."""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "version": __version__
    }


@app.get("/", tags=["root"])
async def root():
    return {
        "message": "Fencemark API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


# All resource routes live under /api
for module in (
    auth,
    organizations,
    jobs,
    parcels,
    components,
    fences,
    gates,
    fence_segments,
    gate_positions,
    drawings,
    discounts,
    pricing_configs,
    tax_regions,
    quotes,
):
    app.include_router(module.router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    logger.info("=" * 80)
    logger.info("Fencemark API")
    logger.info("=" * 80)
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug: {settings.DEBUG}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[1] if '@' in settings.DATABASE_URL else 'configured'}")
    logger.info("=" * 80)

    uvicorn.run(
        "fencemark.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )

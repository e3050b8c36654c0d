# pyright: reportMissingTypeStubs=false
"""
Agenda Backend API

A FastAPI application providing the scheduling core for multi-tenant
appointment booking.

Features:
- Appointment booking with schedule, vacation and duplicate checks
- Single-use confirmation links for clients
- Waitlist reassignment of freed appointments
- Client book, service catalog and employee roster management
- PostgreSQL database with SQLAlchemy ORM
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api import appointments, confirmations, waitlist, schedules, clients, catalog, employees
from core.constants import CORS_ORIGINS
from core.exceptions import SchedulingError
from services.notification_service import webhook_notifier

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()],
)

logger = logging.getLogger(__name__)
logger.info("Agenda API starting...")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    logger.info("Starting Agenda Backend API")

    yield

    # Pending webhook deliveries are abandoned, not awaited
    webhook_notifier.shutdown(wait=False)
    logger.info("Shutting down Agenda Backend API")


# Create FastAPI application
app = FastAPI(
    title="Agenda Backend",
    description="Scheduling core for multi-tenant appointment booking",
    version="1.0.0",
    docs_url="/docs",  # Swagger UI
    redoc_url="/redoc",  # ReDoc
    lifespan=lifespan,
)

# CORS middleware for frontend integration
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(
    appointments.router,
    prefix="/api/appointments",
    tags=["appointments"],
    responses={
        400: {"description": "Invalid input"},
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Resource not found"},
        409: {"description": "Conflict or locked"},
        500: {"description": "Internal server error"},
    },
)
app.include_router(
    confirmations.router,
    prefix="/api",
    tags=["confirmations"],
    responses={
        400: {"description": "Invalid input"},
        404: {"description": "Token not found"},
        409: {"description": "Token used or appointment locked"},
        410: {"description": "Token expired"},
        500: {"description": "Internal server error"},
    },
)
app.include_router(
    waitlist.router,
    prefix="/api/waitlist",
    tags=["waitlist"],
    responses={
        400: {"description": "Invalid input"},
        401: {"description": "Unauthorized"},
        404: {"description": "Resource not found"},
        409: {"description": "Appointment no longer available"},
        500: {"description": "Internal server error"},
    },
)
app.include_router(
    schedules.router,
    prefix="/api/employees",
    tags=["schedules"],
    responses={
        400: {"description": "Invalid input"},
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Resource not found"},
        500: {"description": "Internal server error"},
    },
)
app.include_router(
    employees.router,
    prefix="/api/employees",
    tags=["employees"],
    responses={
        400: {"description": "Invalid input"},
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Resource not found"},
        409: {"description": "Identity already linked"},
        500: {"description": "Internal server error"},
    },
)
app.include_router(
    clients.router,
    prefix="/api/clients",
    tags=["clients"],
    responses={
        400: {"description": "Invalid input"},
        401: {"description": "Unauthorized"},
        404: {"description": "Resource not found"},
        500: {"description": "Internal server error"},
    },
)
app.include_router(
    catalog.router,
    prefix="/api/services",
    tags=["services"],
    responses={
        400: {"description": "Invalid input"},
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Resource not found"},
        500: {"description": "Internal server error"},
    },
)


@app.get(
    "/",
    summary="Root endpoint",
    description="Returns basic API information",
)
async def root() -> dict[str, str]:
    """Get API information."""
    return {
        "message": "Agenda Backend API",
        "version": "1.0.0",
        "status": "running"
    }


@app.get(
    "/health",
    summary="Health check",
    description="Returns the health status of the API",
)
async def health_check() -> dict[str, str]:
    """Check if the API is healthy and responding."""
    return {"status": "healthy"}


# Exception handlers
@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError):
    """Render scheduling errors as {status, message, details?}."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc!r} details={exc.details}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Keep framework-level errors (401, unknown routes) in the same body shape."""
    kind = {401: "unauthorized", 403: "forbidden", 404: "not_found"}.get(exc.status_code, "error")
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": kind, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Handle malformed request bodies and parameters."""
    logger.warning(f"Request validation failed for {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"status": "invalid", "message": "Solicitud no valida.", "details": str(exc.errors())},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions globally."""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={"status": "error", "message": "Ocurrio un error inesperado."},
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Handle ValueError exceptions."""
    logger.warning(f"ValueError: {exc}")
    return JSONResponse(
        status_code=400,
        content={"status": "invalid", "message": str(exc)},
    )

"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator
from uuid import uuid4
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from app.api.v1.router import api_router
from app.core.config import settings
from app.core.exceptions import AppError, ConfigurationError, DocumentStoreError, MalformedSnapshotError
from app.utils.logging import get_logger
from app.utils.responses import create_error_detail

LOGGER = get_logger(__name__, level=settings.log_level)


class RootResponse(BaseModel):
    """Root endpoint response payload."""

    message: str = Field(..., description="Service status message")
    version: str = Field(..., description="Running application version")
    docs: str = Field(..., description="Path to the interactive API docs")
    health: str = Field(..., description="Path to the health check endpoint")


def validate_configuration() -> None:
    """Refuse to start with settings the service cannot work with.

    Raises:
        ConfigurationError: If the JWT secret is missing or the timezone is unknown
    """
    if not settings.auth.jwt_secret:
        raise ConfigurationError("JWT_SECRET is missing")
    try:
        ZoneInfo(settings.engine.timezone)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(
            f"ENGINE_TIMEZONE is not a known timezone: {settings.engine.timezone}", original_error=e
        ) from e


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    LOGGER.info("Validating configuration...")
    validate_configuration()

    LOGGER.info(
        "Starting application",
        extra={
            "app_name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "document_store": settings.store.base_url,
        },
    )

    yield

    # Shutdown
    LOGGER.info("Shutting down application")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Signing workflow and payment reconciliation engine for financial documents",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)


# Correlation ID middleware
@app.middleware("http")
async def add_correlation_id(request: Request, call_next):
    correlation_id = request.headers.get("X-Correlation-ID", str(uuid4()))
    request.state.correlation_id = correlation_id
    response = await call_next(request)
    response.headers["X-Correlation-ID"] = correlation_id
    return response


# CORS middleware - added last to ensure it wraps all other middleware/responses
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Correlation-ID"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Exceptional failures: broken store, malformed snapshot, anything unexpected."""
    if isinstance(exc, DocumentStoreError):
        status_code, title = 502, "Document Store Error"
    elif isinstance(exc, MalformedSnapshotError):
        status_code, title = 502, "Malformed Document Snapshot"
    else:
        status_code, title = 500, "Internal Server Error"

    LOGGER.error(f"{title}: {str(exc)}", extra={"path": request.url.path})
    error_detail = create_error_detail(
        title=title,
        status=status_code,
        detail=str(exc),
        request=request,
    )
    return JSONResponse(status_code=status_code, content={"detail": error_detail.model_dump(mode="json")})


# Include routers
app.include_router(api_router, prefix=settings.api_v1_prefix)


# Root endpoint
@app.get(
    "/",
    response_model=RootResponse,
    tags=["Root"],
    summary="Root endpoint",
    description="Get basic information about the API",
    operation_id="get_public_root_metadata",
)
async def root() -> RootResponse:
    """Root endpoint.

    Returns:
        RootResponse: Basic API information
    """
    return RootResponse(
        message="Server is running",
        version=settings.app_version,
        docs="/docs",
        health=f"{settings.api_v1_prefix}/health",
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )

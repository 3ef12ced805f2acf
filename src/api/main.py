"""FastAPI application entry point for Site Watch.

This module creates and configures the FastAPI application with proper middleware,
routing, and lifecycle event handlers.

Features:
- Health check endpoint for container health monitoring
- CORS middleware for development
- Database connection lifecycle management
- Structured logging integration
- Error handling middleware
- API versioning with /api/v1 prefix

Usage:
    Development: uvicorn src.api.main:app --reload --host 0.0.0.0 --port 8000
    Production: uvicorn src.api.main:app --host 0.0.0.0 --port 8000 --workers 4
"""

import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import structlog

from src.shared.config import get_settings
from src.shared.exceptions import BaseAppException, DatabaseConnectionError
from src.shared.log_config import configure_logging
from src.database.connection import get_database_connection, close_database_connection
from src.api.routes.sources import router as sources_router
from src.api.routes.items import router as items_router
from src.api.routes.crawler import router as crawler_router

settings = get_settings()

configure_logging(settings.LOG_LEVEL)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle manager for startup and shutdown events."""
    logger.info("Starting Site Watch API",
                environment=settings.ENVIRONMENT,
                log_level=settings.LOG_LEVEL)

    try:
        db_connection = get_database_connection(settings)
        is_healthy = await db_connection.health_check()
        if not is_healthy:
            logger.error("Database health check failed during startup")
            raise DatabaseConnectionError("Database health check failed during startup")

        logger.info("Database health check passed")

    except Exception as e:
        logger.error("Failed to initialize database connection", error=str(e))
        raise

    yield

    logger.info("Shutting down Site Watch API")
    try:
        await close_database_connection()
    except Exception as e:
        logger.error("Error during database cleanup", error=str(e))


app = FastAPI(
    title="Site Watch API",
    description="REST API for managing monitored sources and browsing discovered items",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/api/v1/docs",
    redoc_url="/api/v1/redoc",
    openapi_url="/api/v1/openapi.json"
)

if settings.ENVIRONMENT == "development":
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
else:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[],
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add request processing time header and structured logging."""
    start_time = time.time()
    correlation_id = str(uuid.uuid4())

    request.state.correlation_id = correlation_id

    logger.info(
        "Request started",
        correlation_id=correlation_id,
        method=request.method,
        path=request.url.path,
        client_ip=request.client.host if request.client else None
    )

    response = await call_next(request)

    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    response.headers["X-Correlation-ID"] = correlation_id

    logger.info(
        "Request completed",
        correlation_id=correlation_id,
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        process_time=process_time
    )

    return response


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with structured logging."""
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')

    logger.warning(
        "HTTP exception",
        correlation_id=correlation_id,
        status_code=exc.status_code,
        detail=exc.detail,
        method=request.method,
        path=request.url.path
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "HTTP Exception",
            "detail": exc.detail,
            "status_code": exc.status_code,
            "correlation_id": correlation_id
        }
    )


@app.exception_handler(BaseAppException)
async def app_exception_handler(request: Request, exc: BaseAppException):
    """Render application errors with the status their class declares."""
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')

    logger.warning(
        "Application error",
        correlation_id=correlation_id,
        code=exc.code.value,
        detail=exc.message,
        method=request.method,
        path=request.url.path
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.code.value,
            "detail": exc.message,
            "details": exc.details,
            "correlation_id": correlation_id
        }
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors with detailed information."""
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')

    logger.warning(
        "Request validation error",
        correlation_id=correlation_id,
        errors=_jsonable_errors(exc),
        method=request.method,
        path=request.url.path
    )

    return JSONResponse(
        status_code=422,
        content={
            "error": "Validation Error",
            "detail": "Request validation failed",
            "validation_errors": _jsonable_errors(exc),
            "correlation_id": correlation_id
        }
    )


def _jsonable_errors(exc: RequestValidationError) -> list:
    # pydantic v2 puts the raw exception object under "ctx" for custom validators
    return [
        {key: (str(value) if key == "ctx" else value) for key, value in error.items()}
        for error in exc.errors()
    ]


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with proper logging."""
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')

    logger.error(
        "Unhandled exception",
        correlation_id=correlation_id,
        error=str(exc),
        error_type=type(exc).__name__,
        method=request.method,
        path=request.url.path,
        exc_info=True
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "detail": "An unexpected error occurred",
            "correlation_id": correlation_id
        }
    )


@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint reporting database connectivity."""
    db_connection = get_database_connection()
    db_healthy = await db_connection.health_check()

    if not db_healthy:
        logger.error("Health check failed - database connectivity issue")
        raise HTTPException(
            status_code=503,
            detail="Database connectivity failed"
        )

    return {
        "status": "healthy",
        "service": "site-watch",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT,
        "database": "connected",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@app.get("/", tags=["root"])
async def root():
    """Root endpoint with API information."""
    return {
        "service": "Site Watch API",
        "version": "1.0.0",
        "docs": "/api/v1/docs",
        "health": "/health"
    }


app.include_router(sources_router)
app.include_router(items_router)
app.include_router(crawler_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower()
    )

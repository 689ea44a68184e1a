"""Main FastAPI application."""

import structlog
import uvicorn
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from galant.config import settings
from galant.core.errors import (
    ElementNotFound,
    EmptySubmission,
    NavigationError,
    NotFoundError,
    PageOutOfRange,
    ScoreLoadError,
    ScoreNotReady,
    SelectionRequired,
    SubmissionRejected,
    ValidationFailure,
)
from galant.db.base import Base
from galant.db.session import engine
from galant.api.v1 import api_router

# Configure structured logging
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info("Starting Galant API server", environment=settings.ENVIRONMENT)

    # Verify database connection
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database connection verified")
    except Exception as e:
        logger.error("Failed to connect to database", error=str(e))
        raise

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down Galant API server")
    await engine.dispose()


# Create FastAPI app
app = FastAPI(
    title="Galant API",
    version="0.1.0",
    description="Community annotation of musical scores with Galant schemata",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Page", "X-Page-Count"],
)


# Request ID middleware
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID to logs and response headers."""
    import uuid

    request_id = str(uuid.uuid4())
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": message, **extra})


# Score session errors
@app.exception_handler(ScoreLoadError)
async def score_load_exception_handler(request: Request, exc: ScoreLoadError):
    """Unparseable score data; reported, not retried."""
    logger.warning("Score load error", path=request.url.path, error=str(exc))
    return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc), engine_log=exc.engine_log)


@app.exception_handler(ScoreNotReady)
async def score_not_ready_exception_handler(request: Request, exc: ScoreNotReady):
    return _error(status.HTTP_409_CONFLICT, str(exc))


@app.exception_handler(PageOutOfRange)
async def page_out_of_range_exception_handler(request: Request, exc: PageOutOfRange):
    return _error(status.HTTP_400_BAD_REQUEST, str(exc))


@app.exception_handler(NavigationError)
async def navigation_exception_handler(request: Request, exc: NavigationError):
    return _error(status.HTTP_404_NOT_FOUND, str(exc))


@app.exception_handler(ElementNotFound)
async def element_not_found_exception_handler(request: Request, exc: ElementNotFound):
    logger.info("Element not found", path=request.url.path, element_id=exc.element_id)
    return _error(status.HTTP_404_NOT_FOUND, str(exc))


@app.exception_handler(SelectionRequired)
async def selection_required_exception_handler(request: Request, exc: SelectionRequired):
    return _error(status.HTTP_409_CONFLICT, str(exc))


@app.exception_handler(EmptySubmission)
async def empty_submission_exception_handler(request: Request, exc: EmptySubmission):
    return _error(status.HTTP_409_CONFLICT, str(exc))


@app.exception_handler(SubmissionRejected)
async def submission_rejected_exception_handler(request: Request, exc: SubmissionRejected):
    """Persistence refused the submission; pending annotations are kept for a retry."""
    return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, exc.message)


# Persistence errors
@app.exception_handler(NotFoundError)
async def not_found_exception_handler(request: Request, exc: NotFoundError):
    return _error(status.HTTP_404_NOT_FOUND, str(exc))


@app.exception_handler(ValidationFailure)
async def validation_failure_exception_handler(request: Request, exc: ValidationFailure):
    logger.warning("Validation failure", path=request.url.path, error=str(exc))
    return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc))


# Global exception handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors."""
    logger.warning("Validation error", path=request.url.path, errors=exc.errors())
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Handle database errors."""
    logger.error("Database error", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Database error occurred"},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error("Unhandled exception", path=request.url.path, error=str(exc), exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# Include routers
app.include_router(api_router, prefix="/api/v1")


@app.get("/", status_code=status.HTTP_200_OK)
async def root():
    """Root endpoint."""
    return {
        "name": "Galant API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }


if __name__ == "__main__":
    uvicorn.run(
        "galant.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower(),
    )

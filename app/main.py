"""FastAPI application bootstrap."""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from app.config import settings
from app.api.routes import router, health_router
from app.database.connection import init_db, close_db
from app.exceptions import CVIngestionError, IntakeError
from app.utils.logging import setup_logging, get_logger

# Initialize logging
setup_logging()
logger = get_logger(__name__)

# Initialize Sentry if DSN provided
if settings.sentry_dsn:
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        integrations=[
            FastApiIntegration(),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,
        environment="production",
    )
    logger.info("Sentry initialized")

PIPELINE_ERROR_MESSAGE = "Error processing CVs"


# Startup/shutdown lifecycle
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting TalentTrack CV ingestion service")

    try:
        await init_db()
        logger.info("Application startup complete")
    except Exception as e:
        logger.error(f"Failed to start application: {e}", extra={"error": str(e)})
        raise

    yield

    logger.info("Shutting down TalentTrack CV ingestion service")
    await close_db()
    logger.info("Application shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="TalentTrack CV Ingestion API",
    description="Batch CV extraction and candidate screening",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(IntakeError)
async def intake_exception_handler(request: Request, exc: IntakeError):
    """Reject unusable uploads."""
    logger.warning(
        f"Upload rejected: {exc}",
        extra={"path": request.url.path, "code": exc.code}
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": str(exc), "code": exc.code}
    )


@app.exception_handler(CVIngestionError)
async def ingestion_exception_handler(request: Request, exc: CVIngestionError):
    """Pipeline failures reach the client as a generic message; details stay in the logs."""
    logger.error(
        f"CV ingestion failed: {exc}",
        extra={
            "error": str(exc),
            "code": exc.code,
            "path": request.url.path,
            "method": request.method
        },
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": PIPELINE_ERROR_MESSAGE, "code": exc.code}
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    """Strip non-serializable context (e.g. raw upload bytes) from validation errors."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


# Request validation error handler
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Validation error",
            "code": "VALIDATION_ERROR",
            "details": jsonable_errors(exc)
        }
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(
        f"Unhandled exception: {exc}",
        extra={
            "error": str(exc),
            "path": request.url.path,
            "method": request.method
        },
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": PIPELINE_ERROR_MESSAGE,
            "code": "INTERNAL_ERROR",
        }
    )


# Include routers
app.include_router(router, prefix="/api/aicv", tags=["CV ingestion"])
app.include_router(health_router, tags=["Health"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "TalentTrack CV Ingestion",
        "version": "1.0.0",
        "status": "running"
    }

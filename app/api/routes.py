"""API route definitions."""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers.cv_controller import CVController
from app.database.connection import get_db_session
from app.models.cv_models import ErrorResponse, IngestionResponse
from app.services.cv_ingestion_service import CVIngestionService
from app.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()
health_router = APIRouter()


# Dependency factories
async def get_cv_ingestion_service(
    session: AsyncSession = Depends(get_db_session)
) -> CVIngestionService:
    """Create CVIngestionService bound to the request session."""
    return CVIngestionService(session)


async def get_cv_controller(
    ingestion_service: CVIngestionService = Depends(get_cv_ingestion_service)
) -> CVController:
    """Create CVController with dependencies."""
    return CVController(ingestion_service)


@router.post(
    "/",
    response_model=IngestionResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def upload_cvs(
    files: Optional[List[UploadFile]] = File(None, alias="cv[]"),
    vacancy_id: int = Form(...),
    vacancy_title: str = Form("", alias="vacancyTitle"),
    vacancy_filter: str = Form(""),
    controller: CVController = Depends(get_cv_controller)
):
    """
    Upload CVs for a vacancy and store the extracted candidates.

    Accepts multipart/form-data with:
    - cv[]: Up to 50 PDF files
    - vacancy_id: Vacancy the CVs apply to
    - vacancyTitle: Vacancy title used when screening (optional)
    - vacancy_filter: Skills or requirements the vacancy asks for (optional)

    CVs are sent to the completion service in groups of five. Each extracted
    candidate is upserted by email and linked to the vacancy through an
    application carrying the screening status and reason.
    """
    return await controller.upload_cvs(files, vacancy_id, vacancy_title, vacancy_filter)


@health_router.get("/health")
async def health_check(session: AsyncSession = Depends(get_db_session)):
    """Health check endpoint with a database round trip."""
    health_status = {
        "status": "healthy",
        "service": "TalentTrack CV Ingestion",
        "checks": {
            "database": "ok",
        }
    }

    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check: database unreachable: {e}", extra={"error": str(e)})
        health_status["status"] = "unhealthy"
        health_status["checks"]["database"] = "error"

    return health_status

"""Persist extracted candidates and their applications."""
from typing import Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.constants.application_status import coerce_application_status
from app.database.models import Application, Candidate
from app.exceptions import ApplicationExistsError, PersistenceError
from app.models.cv_models import ApplicationOut, CandidateOut, CandidateRecord, IngestionItem
from app.repositories.application_repo import ApplicationRepository
from app.repositories.candidate_repo import CandidateRepository
from app.utils.logging import get_logger

logger = get_logger(__name__)


class CVPersistenceService:
    """
    Writes one CandidateRecord as a single unit of work.

    Per record: upsert the candidate by email, then create the application for
    (candidate, vacancy). If the application already exists the transaction
    is rolled back, the upsert replayed and the existing application reused,
    so a candidate is never committed without its application. Each record is
    committed on its own; earlier records stay stored if a later one fails.
    """

    def __init__(self, session: AsyncSession, update_existing_applications: Optional[bool] = None):
        self.session = session
        self.candidate_repo = CandidateRepository(session)
        self.application_repo = ApplicationRepository(session)
        if update_existing_applications is None:
            update_existing_applications = settings.cv_update_existing_applications
        self.update_existing_applications = update_existing_applications

    async def persist_record(self, record: CandidateRecord, vacancy_id: int) -> IngestionItem:
        """
        Store one record against a vacancy.

        Returns:
            Snapshot of the stored candidate and of the created or pre-existing
            application, taken right after commit. A later rollback expires
            ORM instances held by the session, so callers never get those.

        Raises:
            PersistenceError: If a database operation fails for any reason other
                than the application already existing
        """
        status = coerce_application_status(record.status)
        try:
            try:
                candidate, application = await self._create(record, vacancy_id, status)
            except ApplicationExistsError:
                await self.session.rollback()
                candidate, application = await self._reuse(record, vacancy_id, status)
            await self.session.commit()
        except (SQLAlchemyError, ApplicationExistsError) as e:
            await self.session.rollback()
            logger.error(
                f"Failed to persist candidate {record.email}: {e}",
                extra={"email": record.email, "vacancy_id": vacancy_id, "error": str(e)},
                exc_info=True
            )
            raise PersistenceError(f"Failed to persist candidate {record.email}: {e}") from e

        return IngestionItem(
            candidate=CandidateOut.model_validate(candidate),
            application=ApplicationOut.model_validate(application),
        )

    async def _create(self, record: CandidateRecord, vacancy_id: int, status: str) -> Tuple[Candidate, Application]:
        candidate_id = await self.candidate_repo.upsert_by_email(record.candidate_fields())
        application = await self.application_repo.create(
            candidate_id=candidate_id,
            vacancy_id=vacancy_id,
            status=status,
            ai_reason=record.ai_reason,
        )
        candidate = await self.candidate_repo.get_by_id(candidate_id)
        logger.info(
            f"Created application {application.application_id} for candidate {candidate_id}",
            extra={
                "candidate_id": candidate_id,
                "application_id": application.application_id,
                "vacancy_id": vacancy_id,
                "status": status,
            }
        )
        return candidate, application

    async def _reuse(self, record: CandidateRecord, vacancy_id: int, status: str) -> Tuple[Candidate, Application]:
        candidate_id = await self.candidate_repo.upsert_by_email(record.candidate_fields())
        application = await self.application_repo.find(candidate_id, vacancy_id)
        if application is None:
            # Unique violation but no row: the other writer rolled back
            application = await self.application_repo.create(
                candidate_id=candidate_id,
                vacancy_id=vacancy_id,
                status=status,
                ai_reason=record.ai_reason,
            )
        elif self.update_existing_applications:
            application = await self.application_repo.update_review(application, status, record.ai_reason)

        candidate = await self.candidate_repo.get_by_id(candidate_id)
        logger.info(
            f"Reusing application {application.application_id} for candidate {candidate_id}",
            extra={
                "candidate_id": candidate_id,
                "application_id": application.application_id,
                "vacancy_id": vacancy_id,
                "updated": self.update_existing_applications,
            }
        )
        return candidate, application

"""Repository for applications linking candidates to vacancies."""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.models import Application
from app.exceptions import ApplicationExistsError
from app.utils.logging import get_logger

logger = get_logger(__name__)

MYSQL_DUPLICATE_ENTRY = 1062


def is_unique_violation(error: IntegrityError) -> bool:
    """Tell a duplicate-key failure apart from other integrity errors (e.g. foreign keys)."""
    orig = getattr(error, "orig", None)
    args = getattr(orig, "args", ())
    if args and args[0] == MYSQL_DUPLICATE_ENTRY:
        return True
    message = str(orig if orig is not None else error)
    return "Duplicate entry" in message or "UNIQUE constraint failed" in message


class ApplicationRepository:
    """CRUD for applications; (candidate_id, vacancy_id) is unique."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        candidate_id: int,
        vacancy_id: int,
        status: str,
        ai_reason: str = "",
    ) -> Application:
        """
        Create an application.

        Raises:
            ApplicationExistsError: If the pair already has an application. The
                session must be rolled back before it is used again.
            IntegrityError: For any other constraint failure
        """
        application = Application(
            candidate_id=candidate_id,
            vacancy_id=vacancy_id,
            status=status,
            ai_reason=ai_reason,
        )
        self.session.add(application)
        try:
            await self.session.flush()
        except IntegrityError as e:
            if is_unique_violation(e):
                logger.info(
                    "Application already exists",
                    extra={"candidate_id": candidate_id, "vacancy_id": vacancy_id}
                )
                raise ApplicationExistsError(candidate_id, vacancy_id) from e
            raise

        # Load server defaults (application_date)
        await self.session.refresh(application)
        logger.debug(
            f"Created application {application.application_id}",
            extra={
                "application_id": application.application_id,
                "candidate_id": candidate_id,
                "vacancy_id": vacancy_id,
                "status": status,
            }
        )
        return application

    async def find(self, candidate_id: int, vacancy_id: int) -> Optional[Application]:
        """Find the application for a candidate/vacancy pair."""
        result = await self.session.execute(
            select(Application)
            .where(Application.candidate_id == candidate_id, Application.vacancy_id == vacancy_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def update_review(self, application: Application, status: str, ai_reason: str) -> Application:
        """Overwrite the screening outcome of an existing application."""
        application.status = status
        application.ai_reason = ai_reason
        await self.session.flush()
        return application

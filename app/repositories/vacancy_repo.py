"""Read access to vacancies."""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.models import Vacancy


class VacancyRepository:

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, vacancy_id: int) -> Optional[Vacancy]:
        result = await self.session.execute(
            select(Vacancy).where(Vacancy.vacancy_id == vacancy_id)
        )
        return result.scalar_one_or_none()

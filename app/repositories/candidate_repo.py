"""Repository for candidate records."""
from typing import Any, Dict, Optional

from sqlalchemy import select, Table
from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.models import Candidate
from app.utils.logging import get_logger

logger = get_logger(__name__)

# Columns an upsert may overwrite; notes belong to recruiters
UPSERT_COLUMNS = (
    "name", "phone", "date_of_birth", "occupation", "summary",
    "experience", "skills", "languages", "education",
)


class CandidateRepository:
    """
    Candidate persistence keyed by unique email.

    The upsert is a single INSERT ... ON DUPLICATE KEY UPDATE statement
    (ON CONFLICT on SQLite), so two concurrent uploads of the same email
    cannot create two rows.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.table: Table = Candidate.__table__

    def _upsert_statement(self, values: Dict[str, Any]):
        dialect = self.session.get_bind().dialect.name
        update_columns = [c for c in UPSERT_COLUMNS if c in values]

        if dialect == "mysql":
            stmt = mysql_insert(self.table).values(**values)
            return stmt.on_duplicate_key_update({c: stmt.inserted[c] for c in update_columns})
        if dialect == "sqlite":
            stmt = sqlite_insert(self.table).values(**values)
            return stmt.on_conflict_do_update(
                index_elements=[self.table.c.email],
                set_={c: stmt.excluded[c] for c in update_columns},
            )
        raise NotImplementedError(f"Candidate upsert is not supported on dialect {dialect!r}")

    async def upsert_by_email(self, fields: Dict[str, Any]) -> int:
        """
        Insert a candidate or merge the fields into the existing row with the same email.

        Returns:
            candidate_id of the created or updated row
        """
        email = fields.get("email")
        if not email:
            raise ValueError("Candidate upsert requires an email")

        await self.session.execute(self._upsert_statement(fields))

        result = await self.session.execute(
            select(self.table.c.candidate_id).where(self.table.c.email == email)
        )
        candidate_id = result.scalar_one()
        logger.debug(
            f"Upserted candidate {candidate_id}",
            extra={"candidate_id": candidate_id, "email": email}
        )
        return candidate_id

    async def get_by_id(self, candidate_id: int) -> Optional[Candidate]:
        """Get a candidate by ID, reloading attributes changed by an upsert."""
        result = await self.session.execute(
            select(Candidate)
            .where(Candidate.candidate_id == candidate_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

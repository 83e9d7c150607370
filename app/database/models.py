"""SQLAlchemy database models."""
from sqlalchemy import (
    Column, Integer, String, Text, Date, TIMESTAMP, DECIMAL, Enum, ForeignKey, JSON, UniqueConstraint
)
from sqlalchemy.sql import func

from app.database.connection import Base
from app.constants.application_status import APPLICATION_STATUSES, STATUS_REJECTED

VACANCY_STATUSES = ("open", "closed", "paused")


class Vacancy(Base):
    """Job posting that candidates are matched against."""
    __tablename__ = "vacancies"

    vacancy_id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    salary = Column(DECIMAL(10, 2), nullable=True)
    status = Column(Enum(*VACANCY_STATUSES, name="vacancy_status"), server_default="closed")
    creation_date = Column(TIMESTAMP, nullable=True, server_default=func.current_timestamp())

    def __repr__(self) -> str:
        return f"<Vacancy(vacancy_id={self.vacancy_id}, title={self.title}, status={self.status})>"


class Candidate(Base):
    """Candidate profile, unique by email and merged on every new sighting."""
    __tablename__ = "candidates"

    candidate_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(150), nullable=True)
    email = Column(String(255), nullable=True, unique=True)
    phone = Column(String(30), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    occupation = Column(String(100), nullable=True)
    summary = Column(Text, nullable=True)
    experience = Column(JSON, nullable=True)
    skills = Column(JSON, nullable=True)
    languages = Column(JSON, nullable=True)
    education = Column(JSON, nullable=True)
    notes = Column(Text, nullable=True)  # Recruiter notes, never written by ingestion

    def __repr__(self) -> str:
        return f"<Candidate(candidate_id={self.candidate_id}, name={self.name}, email={self.email})>"


class Application(Base):
    """Link between one candidate and one vacancy, carrying the review status."""
    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("candidate_id", "vacancy_id", name="uq_applications_candidate_vacancy"),
    )

    application_id = Column(Integer, primary_key=True, autoincrement=True)
    application_date = Column(TIMESTAMP, nullable=True, server_default=func.current_timestamp())
    status = Column(
        Enum(*APPLICATION_STATUSES, name="application_status"),
        nullable=True,
        server_default=STATUS_REJECTED,
    )
    ai_reason = Column(Text, nullable=True)
    candidate_id = Column(Integer, ForeignKey("candidates.candidate_id", ondelete="SET NULL"), nullable=True)
    vacancy_id = Column(Integer, ForeignKey("vacancies.vacancy_id", ondelete="SET NULL"), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<Application(application_id={self.application_id}, candidate_id={self.candidate_id}, "
            f"vacancy_id={self.vacancy_id}, status={self.status})>"
        )

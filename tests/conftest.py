"""
Shared fixtures.

The MySQL settings are required at import time, so placeholder values are
set before anything under ``app`` is imported. Database tests run against a
throwaway SQLite file through aiosqlite; nothing here talks to MySQL or to a
real completion service.
"""
import os

os.environ.setdefault("MYSQL_HOST", "localhost")
os.environ.setdefault("MYSQL_USER", "talenttrack")
os.environ.setdefault("MYSQL_PASSWORD", "talenttrack")
os.environ.setdefault("MYSQL_DATABASE", "talenttrack_test")
os.environ.setdefault("COMPLETION_API_KEY", "test-key")

from typing import Iterable  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from app.database.connection import Base  # noqa: E402
from app.database.models import Vacancy  # noqa: E402
from app.services.cv_text_extractor import CVTextExtractor  # noqa: E402


def _pdf_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def build_pdf(lines: Iterable[str]) -> bytes:
    """Minimal single-page PDF with one Helvetica text line per entry."""
    ops = ["BT", "/F1 12 Tf", "72 720 Td", "14 TL"]
    for line in lines:
        ops.append(f"({_pdf_escape(line)}) Tj T*")
    ops.append("ET")
    stream = "\n".join(ops).encode("latin-1")

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length " + str(len(stream)).encode() + b" >>\nstream\n" + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, 1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n".encode() + body + b"\nendobj\n"

    xref_offset = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode()
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()
    out += f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref_offset}\n%%EOF\n".encode()
    return bytes(out)


@pytest.fixture
def make_pdf():
    """Factory fixture building a text PDF from lines."""
    return lambda *lines: build_pdf(lines)


@pytest.fixture
async def engine(tmp_path):
    db_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'talenttrack.db'}")
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield db_engine
    await db_engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_maker):
    async with session_maker() as db_session:
        yield db_session


@pytest.fixture
async def vacancy(session_maker) -> int:
    """A stored vacancy; returns its id."""
    async with session_maker() as db_session:
        row = Vacancy(title="Backend Developer", description="APIs and data", status="open")
        db_session.add(row)
        await db_session.commit()
        return row.vacancy_id


@pytest.fixture
def text_extractor():
    """Extractor stub that treats file bytes as the CV text."""
    extractor = MagicMock(spec=CVTextExtractor)
    extractor.extract_text = AsyncMock(
        side_effect=lambda content, filename="cv.pdf": content.decode("utf-8")
    )
    return extractor


@pytest.fixture
def completion_client():
    """Completion client stub; set ``complete_json.side_effect`` per test."""
    client = MagicMock()
    client.complete_json = AsyncMock()
    return client


def raw_candidate(name: str, email: str, status: str = "approved", **extra) -> dict:
    """Raw completion object as the model would return it."""
    record = {
        "name": name,
        "email": email,
        "date_of_birth": "1990-05-14",
        "phone": "+57 3001234567",
        "occupation": "Software Engineer",
        "summary": f"{name} builds backend services.",
        "experience": [{"company": "Acme", "position": "Developer", "description": "APIs", "years": "2018-2023"}],
        "skills": ["Python", "SQL"],
        "languages": [{"language": "English", "level": "Advanced"}],
        "education": [{"degree": "BSc", "institution": "UdeM", "years": "2010-2014"}],
        "references": [],
        "general_experience": 5,
        "status": status,
        "ai_reason": f"{name} matches the vacancy.",
    }
    record.update(extra)
    return record


@pytest.fixture
def candidate_factory():
    return raw_candidate

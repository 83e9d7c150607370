"""Tests for the HTTP interface."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app.api.routes import get_cv_ingestion_service
from app.config import settings
from app.database.connection import get_db_session
from app.exceptions import CompletionServiceError, PersistenceError
from app.main import app
from app.models.cv_models import (
    ApplicationOut,
    BatchFailure,
    CandidateOut,
    IngestionItem,
    IngestionResult,
)
from app.services.cv_ingestion_service import CVIngestionService


def pdf_files(count: int):
    return [("cv[]", (f"cv{i}.pdf", b"%PDF-1.4 fake", "application/pdf")) for i in range(count)]


def ingestion_result() -> IngestionResult:
    item = IngestionItem(
        candidate=CandidateOut(candidate_id=1, name="Ada Lovelace", email="ada@example.com"),
        application=ApplicationOut(
            application_id=10, status="pending", ai_reason="fits", candidate_id=1, vacancy_id=3
        ),
    )
    return IngestionResult(items=[item], files_received=1, batches=1)


@pytest.fixture
def ingestion_service():
    service = MagicMock(spec=CVIngestionService)
    service.ingest = AsyncMock(return_value=ingestion_result())
    return service


@pytest.fixture
def client(ingestion_service):
    app.dependency_overrides[get_cv_ingestion_service] = lambda: ingestion_service
    # No context manager: the lifespan would try to reach MySQL
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


class TestUploadCvs:

    def test_upload_returns_created(self, client, ingestion_service):
        response = client.post(
            "/api/aicv/",
            files=pdf_files(1),
            data={"vacancy_id": "3", "vacancyTitle": "Backend Developer", "vacancy_filter": "Python"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"]
        assert body["errors"] == []
        assert body["data"][0]["candidate"]["email"] == "ada@example.com"
        assert body["data"][0]["application"]["status"] == "pending"

        upload = ingestion_service.ingest.await_args.args[0]
        assert upload.vacancy_id == 3
        assert upload.vacancy_title == "Backend Developer"
        assert upload.vacancy_filter == "Python"
        assert [f.filename for f in upload.files] == ["cv0.pdf"]
        assert upload.files[0].content == b"%PDF-1.4 fake"

    def test_partial_failures_are_listed(self, client, ingestion_service):
        result = ingestion_result()
        result.failures.append(BatchFailure(
            batch_index=1, first_file=5, last_file=9, code="COMPLETION_SERVICE_ERROR", error="bad JSON"
        ))
        ingestion_service.ingest.return_value = result

        response = client.post("/api/aicv/", files=pdf_files(6), data={"vacancy_id": "3"})

        assert response.status_code == 201
        assert response.json()["errors"][0]["batch_index"] == 1

    def test_no_files_is_bad_request(self, client, ingestion_service):
        response = client.post("/api/aicv/", data={"vacancy_id": "3"})

        assert response.status_code == 400
        assert "error" in response.json()
        ingestion_service.ingest.assert_not_awaited()

    def test_too_many_files_is_bad_request(self, client, ingestion_service, monkeypatch):
        monkeypatch.setattr(settings, "cv_max_files", 2)

        response = client.post("/api/aicv/", files=pdf_files(3), data={"vacancy_id": "3"})

        assert response.status_code == 400
        ingestion_service.ingest.assert_not_awaited()

    def test_oversized_file_is_bad_request(self, client, ingestion_service, monkeypatch):
        monkeypatch.setattr(settings, "max_file_size_mb", 1)
        big = [("cv[]", ("big.pdf", b"0" * (1024 * 1024 + 1), "application/pdf"))]

        response = client.post("/api/aicv/", files=big, data={"vacancy_id": "3"})

        assert response.status_code == 400
        assert "big.pdf" in response.json()["error"]

    def test_missing_vacancy_id_is_validation_error(self, client):
        response = client.post("/api/aicv/", files=pdf_files(1))

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"

    @pytest.mark.parametrize("error", [
        CompletionServiceError("Completion response is not valid JSON: secret detail"),
        PersistenceError("Failed to persist candidate ada@example.com: secret detail"),
    ])
    def test_pipeline_failure_is_generic_server_error(self, client, ingestion_service, error):
        ingestion_service.ingest.side_effect = error

        response = client.post("/api/aicv/", files=pdf_files(1), data={"vacancy_id": "3"})

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Error processing CVs"
        assert "secret detail" not in response.text

    def test_unexpected_failure_is_server_error(self, client, ingestion_service):
        ingestion_service.ingest.side_effect = RuntimeError("boom")

        response = client.post("/api/aicv/", files=pdf_files(1), data={"vacancy_id": "3"})

        assert response.status_code == 500
        assert "boom" not in response.text


class TestServiceEndpoints:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_health(self, client):
        db_session = MagicMock()
        db_session.execute = AsyncMock()

        async def fake_session():
            yield db_session

        app.dependency_overrides[get_db_session] = fake_session
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["checks"]["database"] == "ok"

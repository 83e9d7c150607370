"""Service layer for business logic."""
from app.services.batcher import chunk_texts, DEFAULT_BATCH_SIZE
from app.services.cv_text_extractor import CVTextExtractor
from app.services.cv_persistence_service import CVPersistenceService
from app.services.cv_ingestion_service import CVIngestionService

__all__ = [
    "chunk_texts",
    "DEFAULT_BATCH_SIZE",
    "CVTextExtractor",
    "CVPersistenceService",
    "CVIngestionService",
]

"""
Script to ingest every CV in a directory against one vacancy.

Runs the same pipeline as the upload endpoint (extract, batch, complete,
normalize, persist) and prints a summary at the end.

Usage:
    python ingest_cv_folder.py --vacancy-id 3 --title "Backend Developer" --filter "Python, SQL" ./cvs
"""
import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from app.config import settings
from app.database.connection import async_session_maker, close_db
from app.extraction.completion_client import CompletionClient
from app.exceptions import CVIngestionError
from app.models.cv_models import IngestionResult, UploadBatch, UploadedFile
from app.services.cv_ingestion_service import CVIngestionService
from app.utils.cleaning import sanitize_filename
from app.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

ALLOWED_EXTENSIONS = {'.pdf'}


def find_cv_files(directory: Path) -> List[Path]:
    """PDF files directly inside a directory, sorted by name."""
    cv_files = [
        path for path in directory.iterdir()
        if path.is_file() and path.suffix.lower() in ALLOWED_EXTENSIONS
    ]
    return sorted(cv_files)


def load_upload(
    cv_files: List[Path],
    vacancy_id: int,
    vacancy_title: str = "",
    vacancy_filter: str = "",
) -> UploadBatch:
    """Read files into an UploadBatch, leaving out files above the size limit."""
    uploaded = []
    for path in cv_files:
        content = path.read_bytes()
        if len(content) > settings.max_file_size_bytes:
            print(f"   ⚠️  Skipping {path.name}: larger than {settings.max_file_size_mb}MB")
            logger.warning(
                f"Skipping oversized CV {path.name}",
                extra={"file_name": path.name, "file_size": len(content)}
            )
            continue
        uploaded.append(UploadedFile(filename=sanitize_filename(path.name), content=content))

    return UploadBatch(
        files=uploaded,
        vacancy_id=vacancy_id,
        vacancy_title=vacancy_title,
        vacancy_filter=vacancy_filter,
    )


async def ingest_folder(
    directory: Path,
    vacancy_id: int,
    vacancy_title: str = "",
    vacancy_filter: str = "",
    session_maker=async_session_maker,
    completion_client: Optional[CompletionClient] = None,
) -> Optional[IngestionResult]:
    """Ingest a directory of CVs. Returns None when there is nothing to ingest."""
    cv_files = find_cv_files(directory)
    if not cv_files:
        print(f"\n⚠️  No PDF files found in: {directory}")
        return None

    print(f"\n📁 Found {len(cv_files)} CV file(s):")
    for i, path in enumerate(cv_files, 1):
        print(f"   {i}. {path.name}")

    upload = load_upload(cv_files, vacancy_id, vacancy_title, vacancy_filter)
    if not upload.files:
        print("\n⚠️  Every CV was above the size limit, nothing to ingest")
        return None

    async with session_maker() as session:
        service = CVIngestionService(session, completion_client=completion_client)
        return await service.ingest(upload)


def print_summary(result: IngestionResult) -> None:
    print(f"\n{'='*80}")
    print("INGESTION SUMMARY")
    print(f"{'='*80}\n")
    print(f"Files received: {result.files_received}")
    print(f"Batches: {result.batches}")
    print(f"✅ Candidates stored: {len(result.items)}")
    if result.files_skipped:
        print(f"⚠️  Unreadable files skipped: {', '.join(result.files_skipped)}")
    if result.failures:
        print(f"❌ Failed batches: {len(result.failures)}")

    for i, item in enumerate(result.items, 1):
        print(f"{i}. {item.candidate.name} <{item.candidate.email}>")
        print(f"   Candidate ID: {item.candidate.candidate_id}")
        print(f"   Application ID: {item.application.application_id} ({item.application.status})")

    for failure in result.failures:
        print(
            f"❌ Batch {failure.batch_index + 1} (files {failure.first_file + 1}-{failure.last_file + 1}): "
            f"{failure.code}: {failure.error}"
        )


async def run(args: argparse.Namespace) -> int:
    directory = Path(args.directory)
    if not directory.is_dir():
        print(f"\n❌ ERROR: Directory not found: {directory}")
        return 1

    print("=" * 80)
    print("CV FOLDER INGESTION")
    print("=" * 80)
    print(f"Directory: {directory}")
    print(f"Vacancy ID: {args.vacancy_id}")
    if args.title:
        print(f"Vacancy title: {args.title}")
    if args.filter:
        print(f"Vacancy filter: {args.filter}")

    try:
        result = await ingest_folder(directory, args.vacancy_id, args.title, args.filter)
    except CVIngestionError as e:
        print(f"\n❌ Ingestion failed: {e}")
        logger.error(f"Folder ingestion failed: {e}", extra={"error_type": type(e).__name__}, exc_info=True)
        return 1
    finally:
        await close_db()

    if result is None:
        return 0
    print_summary(result)
    return 1 if result.failures else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Ingest a folder of PDF CVs for one vacancy")
    parser.add_argument("directory", help="Directory containing the PDF CVs")
    parser.add_argument("--vacancy-id", type=int, required=True, help="Vacancy the CVs apply to")
    parser.add_argument("--title", type=str, default="", help="Vacancy title used when screening")
    parser.add_argument("--filter", type=str, default="", help="Skills or requirements the vacancy asks for")
    parser.add_argument("--log-level", type=str, default=None, help="Override LOG_LEVEL, e.g. DEBUG")
    return parser


if __name__ == "__main__":
    args = build_parser().parse_args()
    setup_logging(args.log_level)
    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        print("\n\n⚠️  Ingestion interrupted by user")
        sys.exit(130)

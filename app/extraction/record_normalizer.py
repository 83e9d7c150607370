"""Validation and de-duplication of records returned by the completion service."""
from typing import Any, Iterable, List, Set, Tuple

from app.models.cv_models import CandidateRecord
from app.utils.logging import get_logger

logger = get_logger(__name__)


def normalize_records(raw_records: Iterable[Any]) -> List[CandidateRecord]:
    """Coerce raw completion objects into CandidateRecords, dropping any without name or email."""
    raw_records = list(raw_records)
    records = []
    for raw in raw_records:
        record = CandidateRecord.from_raw(raw)
        if record is not None:
            records.append(record)

    dropped = len(raw_records) - len(records)
    if dropped:
        logger.warning(
            f"Dropped {dropped} of {len(raw_records)} extracted record(s) missing name or email",
            extra={"dropped": dropped, "received": len(raw_records)}
        )
    return records


class SeenPairs:
    """Tracks (email, vacancy_id) pairs already emitted; first occurrence wins."""

    def __init__(self):
        self._seen: Set[Tuple[str, int]] = set()

    def add(self, email: str, vacancy_id: int) -> bool:
        """Record a pair, returning False if it had already been seen."""
        key = (email.lower(), vacancy_id)
        if key in self._seen:
            return False
        self._seen.add(key)
        return True

    def __contains__(self, key: Tuple[str, int]) -> bool:
        email, vacancy_id = key
        return (email.lower(), vacancy_id) in self._seen

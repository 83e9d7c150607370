"""Constants for application review status."""
from typing import Optional

# Status values stored on applications
STATUS_PENDING = "pending"
STATUS_INTERVIEW = "interview"
STATUS_OFFERED = "offered"
STATUS_ACCEPTED = "accepted"
STATUS_REJECTED = "rejected"

APPLICATION_STATUSES = (
    STATUS_PENDING,
    STATUS_INTERVIEW,
    STATUS_OFFERED,
    STATUS_ACCEPTED,
    STATUS_REJECTED,
)

# Screening verdicts returned by the completion service
VERDICT_APPROVED = "approved"
VERDICT_REJECTED = "rejected"

# An approved CV still needs a recruiter to move it forward
VERDICT_TO_STATUS = {
    VERDICT_APPROVED: STATUS_PENDING,
    VERDICT_REJECTED: STATUS_REJECTED,
}


def coerce_application_status(value: Optional[str]) -> str:
    """Map a screening verdict (or raw status) onto a stored application status.

    Unknown or missing values fall back to pending.
    """
    if not isinstance(value, str):
        return STATUS_PENDING
    status = value.strip().lower()
    if status in VERDICT_TO_STATUS:
        return VERDICT_TO_STATUS[status]
    if status in APPLICATION_STATUSES:
        return status
    return STATUS_PENDING

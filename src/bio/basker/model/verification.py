"""Employment verification request records.

A verification request is a user's claim of working at a company, waiting for
an admin to confirm or reject it. Status moves from ``pending`` to either
``approved`` or ``rejected``.
"""

from enum import Enum
from typing import List, Optional

from ulid import ULID

from bio.basker.model.base import Record, utc_timestamp


class VerificationStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


REVIEW_STATUSES = (VerificationStatus.approved, VerificationStatus.rejected)


def generate_request_id() -> str:
    """Timestamp-prefixed random identifier.

    ULIDs sort by creation time and carry 80 random bits, which makes
    collisions vanishingly unlikely but not impossible.
    """
    return f"req_{ULID()}"


class VerificationRequest(Record):
    id: str
    user_id: str
    company_id: str
    evidence: str
    documents: Optional[List[str]] = None
    status: VerificationStatus = VerificationStatus.pending
    submitted_at: str
    admin_notes: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[str] = None

    @classmethod
    def new(
        cls,
        user_id: str,
        company_id: str,
        evidence: str,
        documents: Optional[List[str]] = None,
    ) -> "VerificationRequest":
        return cls(
            id=generate_request_id(),
            user_id=user_id,
            company_id=company_id,
            evidence=evidence,
            documents=documents,
            status=VerificationStatus.pending,
            submitted_at=utc_timestamp(),
        )


class SubmitVerificationRequest(Record):
    """Body of ``POST /api/verification-requests``."""

    user_id: Optional[str] = None
    company_id: Optional[str] = None
    evidence: Optional[str] = None
    documents: Optional[List[str]] = None


class ReviewVerificationRequest(Record):
    """Body of ``PUT /api/admin/verification-requests/{id}``."""

    status: Optional[str] = None
    admin_notes: Optional[str] = None

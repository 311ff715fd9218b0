"""In-memory registry of employment verification requests.

Requests are kept in insertion order for the lifetime of the registry. The
registry trusts its caller: submissions are validated and reviews are
authorized by the route layer before they reach it.
"""

import logging
from typing import List, Optional, Union

from bio.basker.errors import (
    ConflictException,
    NotFoundException,
    ValidationException,
)
from bio.basker.model.base import utc_timestamp
from bio.basker.model.verification import (
    REVIEW_STATUSES,
    VerificationRequest,
    VerificationStatus,
)

logger = logging.getLogger(__name__)


class VerificationRegistry:
    def __init__(self, allow_rereview: bool = True) -> None:
        """
        Args:
            allow_rereview: When true, a request that was already approved or rejected can be reviewed again
                (for example to correct a mistake). When false, only pending requests can be reviewed.
        """
        self._requests: List[VerificationRequest] = []
        self.allow_rereview = allow_rereview

    def __len__(self) -> int:
        return len(self._requests)

    def submit(
        self,
        user_id: str,
        company_id: str,
        evidence: str,
        documents: Optional[List[str]] = None,
    ) -> VerificationRequest:
        request = VerificationRequest.new(user_id, company_id, evidence, documents)
        self._requests.append(request)
        logger.info(
            "Verification request %s submitted by %s for %s",
            request.id,
            user_id,
            company_id,
        )
        return request

    def list(self) -> List[VerificationRequest]:
        return list(self._requests)

    def get(self, request_id: str) -> Optional[VerificationRequest]:
        return next((r for r in self._requests if r.id == request_id), None)

    def update(
        self,
        request_id: str,
        status: Union[VerificationStatus, str],
        admin_notes: Optional[str] = None,
        reviewed_by: Optional[str] = None,
    ) -> VerificationRequest:
        """
        Review a request, mutating the stored record in place.

        Raises:
            ValidationException: If status is not approved or rejected
            NotFoundException: If no request has the given id
            ConflictException: If re-review is disabled and the request is no longer pending
        """
        try:
            new_status = VerificationStatus(status)
        except ValueError:
            raise ValidationException("Valid status required") from None
        if new_status not in REVIEW_STATUSES:
            raise ValidationException("Valid status required")

        request = self.get(request_id)
        if request is None:
            raise NotFoundException.verification_request(request_id)

        if not self.allow_rereview and request.status != VerificationStatus.pending:
            raise ConflictException.already_reviewed(request_id, request.status.value)

        request.status = new_status
        request.admin_notes = admin_notes
        request.reviewed_by = reviewed_by
        request.reviewed_at = utc_timestamp()

        logger.info(
            "Verification request %s %s by %s", request_id, new_status.value, reviewed_by
        )
        return request

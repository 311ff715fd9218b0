"""
Unit tests for the verification request registry in bio.basker.admin.verification
"""

import pytest

from bio.basker.admin.verification import VerificationRegistry
from bio.basker.errors import (
    ConflictException,
    NotFoundException,
    ValidationException,
)
from bio.basker.model.verification import VerificationStatus

REVIEWER_DID = "did:plc:uw2cz5hnxy2i6jbmh6t2i7hi"


@pytest.fixture
def registry():
    return VerificationRegistry()


class TestSubmit:
    def test_submit_creates_pending_request(self, registry):
        request = registry.submit("did:plc:alice", "acme-co", "pay stub attached")

        assert request.status == VerificationStatus.pending
        assert request.user_id == "did:plc:alice"
        assert request.company_id == "acme-co"
        assert request.evidence == "pay stub attached"
        assert request.documents is None
        assert request.id.startswith("req_")
        assert request.submitted_at.endswith("Z")
        assert request.reviewed_at is None

    def test_submit_keeps_documents(self, registry):
        request = registry.submit(
            "did:plc:alice", "acme-co", "offer letter", ["at://doc/1", "at://doc/2"]
        )
        assert request.documents == ["at://doc/1", "at://doc/2"]

    def test_ids_are_distinct(self, registry):
        ids = {
            registry.submit("did:plc:alice", "acme-co", f"evidence {i}").id
            for i in range(200)
        }
        assert len(ids) == 200

    def test_list_in_insertion_order(self, registry):
        first = registry.submit("did:plc:alice", "acme-co", "one")
        second = registry.submit("did:plc:bob", "globex", "two")
        assert [r.id for r in registry.list()] == [first.id, second.id]

    def test_list_returns_stored_records(self, registry):
        request = registry.submit("did:plc:alice", "acme-co", "one")
        listed = registry.list()
        listed.clear()
        assert registry.list()[0] is request

    def test_wire_format_is_camel_case(self, registry):
        data = registry.submit("did:plc:alice", "acme-co", "one").to_json()
        assert data["userId"] == "did:plc:alice"
        assert data["companyId"] == "acme-co"
        assert data["status"] == "pending"
        assert "submittedAt" in data
        assert "reviewedAt" not in data


class TestUpdate:
    def test_approve_scenario(self, registry):
        request = registry.submit("did:plc:alice", "acme-co", "pay stub attached")

        updated = registry.update(
            request.id, "approved", "verified via LinkedIn", REVIEWER_DID
        )

        assert updated is request
        assert updated.status == VerificationStatus.approved
        assert updated.admin_notes == "verified via LinkedIn"
        assert updated.reviewed_by == REVIEWER_DID
        assert updated.reviewed_at is not None

        listed = registry.list()
        assert len(listed) == 1
        assert listed[0].status == VerificationStatus.approved
        assert listed[0].reviewed_by == REVIEWER_DID

    def test_reject(self, registry):
        request = registry.submit("did:plc:alice", "acme-co", "trust me")
        registry.update(request.id, VerificationStatus.rejected, None, REVIEWER_DID)
        assert registry.get(request.id).status == VerificationStatus.rejected
        assert registry.get(request.id).admin_notes is None

    def test_unknown_id_raises_not_found(self, registry):
        request = registry.submit("did:plc:alice", "acme-co", "one")

        with pytest.raises(NotFoundException):
            registry.update("req_missing", "approved", "notes", REVIEWER_DID)

        assert len(registry) == 1
        assert request.status == VerificationStatus.pending
        assert request.reviewed_at is None

    @pytest.mark.parametrize("status", ["pending", "approve", "", "APPROVED"])
    def test_invalid_status_rejected(self, registry, status):
        request = registry.submit("did:plc:alice", "acme-co", "one")
        with pytest.raises(ValidationException):
            registry.update(request.id, status)
        assert request.status == VerificationStatus.pending

    def test_rereview_allowed_by_default(self, registry):
        request = registry.submit("did:plc:alice", "acme-co", "one")
        registry.update(request.id, "approved", None, REVIEWER_DID)
        registry.update(request.id, "rejected", "mistake", REVIEWER_DID)
        assert request.status == VerificationStatus.rejected
        assert request.admin_notes == "mistake"

    def test_rereview_disabled(self):
        registry = VerificationRegistry(allow_rereview=False)
        request = registry.submit("did:plc:alice", "acme-co", "one")
        registry.update(request.id, "approved", "ok", REVIEWER_DID)
        reviewed_at = request.reviewed_at

        with pytest.raises(ConflictException):
            registry.update(request.id, "rejected", "changed my mind", REVIEWER_DID)

        assert request.status == VerificationStatus.approved
        assert request.admin_notes == "ok"
        assert request.reviewed_at == reviewed_at

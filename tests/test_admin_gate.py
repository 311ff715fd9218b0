"""
Unit tests for the admin capability gate in bio.basker.admin.gate
"""

import pytest

from bio.basker.admin.gate import VERIFY_WORK, AdminGate

BASKER_DID = "did:plc:uw2cz5hnxy2i6jbmh6t2i7hi"


@pytest.fixture
def gate():
    return AdminGate([BASKER_DID])


class TestAdminGate:
    @pytest.mark.parametrize(
        "did", ["did:plc:alice", "did:web:example.com", "", "basker.bio"]
    )
    def test_non_admins_have_no_permissions(self, gate, did):
        assert gate.is_admin(did) is False
        assert gate.get_permissions(did) == []
        assert gate.check_permission(did, VERIFY_WORK) is False

    def test_none_identifier(self, gate):
        assert gate.is_admin(None) is False
        assert gate.get_permissions(None) == []

    def test_admin_has_exactly_verify_work(self, gate):
        assert gate.is_admin(BASKER_DID) is True
        assert gate.get_permissions(BASKER_DID) == ["verify_work"]
        assert gate.check_permission(BASKER_DID, VERIFY_WORK) is True

    def test_admin_lacks_unknown_permission(self, gate):
        assert gate.check_permission(BASKER_DID, "manage_users") is False

    def test_permissions_are_a_copy(self, gate):
        permissions = gate.get_permissions(BASKER_DID)
        permissions.append("manage_users")
        assert gate.get_permissions(BASKER_DID) == ["verify_work"]

    def test_admin_set_is_immutable(self, gate):
        assert isinstance(gate.admin_dids, frozenset)
        with pytest.raises(AttributeError):
            gate.admin_dids.add("did:plc:alice")  # type: ignore[attr-defined]

    def test_blank_entries_are_ignored(self):
        gate = AdminGate(["", "  ", f" {BASKER_DID} "])
        assert gate.admin_dids == frozenset({BASKER_DID})

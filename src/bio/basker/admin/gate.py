import logging
from typing import FrozenSet, Iterable, List, Optional

logger = logging.getLogger(__name__)

VERIFY_WORK = "verify_work"

ADMIN_PERMISSIONS: List[str] = [VERIFY_WORK]


class AdminGate:
    """
    Answers "does this DID hold admin capability X".

    The set of admin DIDs is fixed when the gate is built, normally from the
    ADMIN_DIDS setting, and cannot be changed while the process runs. Every
    admin holds the same permissions; unknown or empty identifiers hold none.
    """

    def __init__(self, admin_dids: Iterable[str]) -> None:
        self._admin_dids: FrozenSet[str] = frozenset(
            did.strip() for did in admin_dids if did and did.strip()
        )
        logger.info("Admin gate configured with %d admin(s)", len(self._admin_dids))

    @property
    def admin_dids(self) -> FrozenSet[str]:
        return self._admin_dids

    def is_admin(self, did: Optional[str]) -> bool:
        return did is not None and did in self._admin_dids

    def get_permissions(self, did: Optional[str]) -> List[str]:
        if not self.is_admin(did):
            return []
        return list(ADMIN_PERMISSIONS)

    def check_permission(self, did: Optional[str], permission: str) -> bool:
        return permission in self.get_permissions(did)

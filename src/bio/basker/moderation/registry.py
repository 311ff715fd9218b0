import logging
from typing import Any, Dict, List, Optional

from bio.basker.errors import NotAuthorizedException
from bio.basker.model.base import utc_timestamp
from bio.basker.model.moderation import (
    ACTION_PERMISSIONS,
    CreateReport,
    Moderator,
    ModeratorPermissions,
    ReportQuery,
    Resolution,
    ResolveAction,
)
from bio.basker.moderation.backend import ReportBackend

logger = logging.getLogger(__name__)


class ModerationRegistry:
    """
    In-memory moderator records plus report handling.

    Gating who may add or remove moderators is the route layer's job. The
    registry only enforces the per-action capability check when a report is
    resolved.
    """

    def __init__(
        self,
        report_backend: ReportBackend,
        ozone_url: str = "https://ozone.bsky.app",
        service_url: str = "https://bsky.social",
    ) -> None:
        self._moderators: Dict[str, Moderator] = {}
        self._report_backend = report_backend
        self._ozone_url = ozone_url
        self._service_url = service_url

    def seed_default_moderator(self, did: str, handle: str) -> Moderator:
        return self.add_moderator(did, handle, ModeratorPermissions.all(), "system")

    def is_moderator(self, did: Optional[str]) -> bool:
        return did is not None and did in self._moderators

    def can_moderate(self, did: Optional[str]) -> bool:
        """A moderator record with an empty permission bundle authorizes nothing."""
        permissions = self.get_permissions(did)
        return permissions is not None and not permissions.is_empty()

    def get_permissions(self, did: Optional[str]) -> Optional[ModeratorPermissions]:
        if did is None:
            return None
        moderator = self._moderators.get(did)
        return moderator.permissions if moderator is not None else None

    def has_permission(self, did: Optional[str], permission: str) -> bool:
        permissions = self.get_permissions(did)
        return permissions is not None and permissions.has(permission)

    def add_moderator(
        self,
        did: str,
        handle: str,
        permissions: ModeratorPermissions,
        added_by: str,
    ) -> Moderator:
        moderator = Moderator(
            did=did,
            handle=handle,
            permissions=permissions,
            added_by=added_by,
            added_at=utc_timestamp(),
        )
        self._moderators[did] = moderator
        logger.info("Moderator %s (%s) added by %s", did, handle, added_by)
        return moderator

    def remove_moderator(self, did: str) -> bool:
        removed = self._moderators.pop(did, None) is not None
        if removed:
            logger.info("Moderator %s removed", did)
        return removed

    def list_moderators(self) -> List[Moderator]:
        return list(self._moderators.values())

    async def create_report(
        self, report: CreateReport, reported_by: str
    ) -> Dict[str, Any]:
        return await self._report_backend.create_report(report, reported_by)

    async def get_reports(
        self, query: Optional[ReportQuery] = None
    ) -> List[Dict[str, Any]]:
        return await self._report_backend.query_reports(query or ReportQuery())

    async def resolve_report(
        self,
        report_id: str,
        action: ResolveAction,
        moderator_did: str,
        note: Optional[str] = None,
    ) -> Resolution:
        """
        Authorize and record the resolution of a report.

        Raises:
            NotAuthorizedException: If the DID is not a moderator or holds no permissions, or its permission
                bundle lacks the capability the action needs
        """
        permissions = self.get_permissions(moderator_did)
        if permissions is None or permissions.is_empty():
            raise NotAuthorizedException.not_a_moderator()

        required = ACTION_PERMISSIONS.get(action)
        if required is not None:
            field, description = required
            if not permissions.has(field):
                raise NotAuthorizedException.action_denied(description)

        await self._report_backend.apply_resolution(
            report_id, action, note, moderator_did
        )

        return Resolution(
            success=True,
            report_id=report_id,
            action=action,
            resolved_by=moderator_did,
            resolved_at=utc_timestamp(),
        )

    def ozone_config(self) -> Dict[str, str]:
        return {"ozoneUrl": self._ozone_url, "serviceUrl": self._service_url}

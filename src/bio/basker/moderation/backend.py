"""
Report backends

A ReportBackend is where moderation reports go once the registry has accepted
them. The AT Protocol backend files reports through
com.atproto.moderation.createReport. Querying and acting on reports needs an
Ozone instance, which is not wired up yet, so those operations are explicit
no-ops with a documented contract.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from aiohttp import ClientSession
import sentry_sdk

from bio.basker.atproto.pds import create_report
from bio.basker.atproto.session import AdminCredentials
from bio.basker.errors import UpstreamException
from bio.basker.model.base import utc_timestamp
from bio.basker.model.moderation import CreateReport, ReportQuery, ResolveAction

logger = logging.getLogger(__name__)

STRONG_REF = "com.atproto.repo.strongRef"


class ReportBackend(ABC):
    """
    Interface between the moderation registry and a moderation service.

    Implementations must raise on failure rather than return an error value;
    the registry propagates whatever they raise to the caller.
    """

    @abstractmethod
    async def create_report(
        self, report: CreateReport, reported_by: str
    ) -> Dict[str, Any]:
        """
        File a report and return the service's acknowledgement.

        Args:
            report: Reason and subject of the report
            reported_by: DID of the reporting user
        """
        pass

    @abstractmethod
    async def query_reports(self, query: ReportQuery) -> List[Dict[str, Any]]:
        """
        Return reports matching the query, newest first.

        A real implementation queries the moderation service
        (tools.ozone.moderation.queryEvents) and honours subject, resolved
        and limit.
        """
        pass

    @abstractmethod
    async def apply_resolution(
        self,
        report_id: str,
        action: ResolveAction,
        note: Optional[str],
        moderator_did: str,
    ) -> None:
        """
        Carry out a resolution that the registry has already authorized.

        A real implementation emits the matching moderation event
        (acknowledge, takedown, label or account suspension).
        """
        pass

    async def close(self) -> None:
        pass


class AtprotoReportBackend(ReportBackend):
    def __init__(
        self,
        http_session: ClientSession,
        service_url: str,
        credentials: Optional[AdminCredentials] = None,
    ) -> None:
        self._http_session = http_session
        self._service_url = service_url
        self._credentials = credentials

    async def create_report(
        self, report: CreateReport, reported_by: str
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "reasonType": report.reason_type,
            "subject": {
                "$type": STRONG_REF,
                "uri": report.subject.uri,
                "cid": report.subject.cid,
            },
        }
        if report.reason is not None:
            payload["reason"] = report.reason

        access_token = None
        if self._credentials is not None:
            access_token = await self._credentials.access_token()

        try:
            return await create_report(
                self._http_session, self._service_url, payload, access_token
            )
        except UpstreamException as e:
            sentry_sdk.capture_exception(e)
            logger.error(
                "Failed to create moderation report for %s: %s", reported_by, e.message
            )
            if e.upstream_status == 401 and self._credentials is not None:
                self._credentials.invalidate()
            raise

    async def query_reports(self, query: ReportQuery) -> List[Dict[str, Any]]:
        # TODO: Query tools.ozone.moderation.queryEvents once an Ozone instance is configured.
        logger.info("Getting moderation reports with params: %s", query.to_json())
        return []

    async def apply_resolution(
        self,
        report_id: str,
        action: ResolveAction,
        note: Optional[str],
        moderator_did: str,
    ) -> None:
        # TODO: Emit tools.ozone.moderation.emitEvent once an Ozone instance is configured.
        logger.info(
            "Resolving report %s with action %s by %s", report_id, action, moderator_did
        )


class NoOpReportBackend(ReportBackend):
    """Backend that keeps reports to itself. Used in tests and when REPORT_BACKEND=none."""

    def __init__(self) -> None:
        self.created: List[Dict[str, Any]] = []
        self.resolutions: List[Dict[str, Any]] = []

    async def create_report(
        self, report: CreateReport, reported_by: str
    ) -> Dict[str, Any]:
        ack = {
            "id": len(self.created) + 1,
            "reasonType": report.reason_type,
            "reason": report.reason,
            "subject": {
                "$type": STRONG_REF,
                "uri": report.subject.uri,
                "cid": report.subject.cid,
            },
            "reportedBy": reported_by,
            "createdAt": utc_timestamp(),
        }
        self.created.append(ack)
        return ack

    async def query_reports(self, query: ReportQuery) -> List[Dict[str, Any]]:
        return []

    async def apply_resolution(
        self,
        report_id: str,
        action: ResolveAction,
        note: Optional[str],
        moderator_did: str,
    ) -> None:
        self.resolutions.append(
            {
                "reportId": report_id,
                "action": action,
                "note": note,
                "moderatorDid": moderator_did,
            }
        )

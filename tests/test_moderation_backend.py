"""
Unit tests for report backends in bio.basker.moderation.backend
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from bio.basker.errors import UpstreamException
from bio.basker.model.moderation import CreateReport, ReportQuery, ReportSubject
from bio.basker.moderation.backend import (
    AtprotoReportBackend,
    NoOpReportBackend,
    ReportBackend,
)


@pytest.fixture
def report():
    return CreateReport(
        reason_type="com.atproto.moderation.defs#reasonSpam",
        subject=ReportSubject(uri="at://did:plc:spammer/app.bsky.feed.post/1", cid="bafyrei"),
    )


def test_interface_is_abstract():
    with pytest.raises(TypeError):
        ReportBackend()


class TestAtprotoReportBackend:
    @pytest.mark.asyncio
    @patch("bio.basker.moderation.backend.create_report", new_callable=AsyncMock)
    async def test_payload_shape(self, mock_create_report, report):
        mock_create_report.return_value = {"id": 1}
        credentials = MagicMock()
        credentials.access_token = AsyncMock(return_value="token")
        http_session = MagicMock()
        backend = AtprotoReportBackend(http_session, "https://bsky.social", credentials)

        ack = await backend.create_report(report, "did:plc:alice")

        assert ack == {"id": 1}
        mock_create_report.assert_awaited_once_with(
            http_session,
            "https://bsky.social",
            {
                "reasonType": "com.atproto.moderation.defs#reasonSpam",
                "subject": {
                    "$type": "com.atproto.repo.strongRef",
                    "uri": "at://did:plc:spammer/app.bsky.feed.post/1",
                    "cid": "bafyrei",
                },
            },
            "token",
        )

    @pytest.mark.asyncio
    @patch("bio.basker.moderation.backend.create_report", new_callable=AsyncMock)
    async def test_reason_is_included(self, mock_create_report, report):
        mock_create_report.return_value = {"id": 1}
        report.reason = "spam links"
        backend = AtprotoReportBackend(MagicMock(), "https://bsky.social")

        await backend.create_report(report, "did:plc:alice")

        payload = mock_create_report.call_args.args[2]
        assert payload["reason"] == "spam links"
        assert mock_create_report.call_args.args[3] is None

    @pytest.mark.asyncio
    @patch("bio.basker.moderation.backend.sentry_sdk")
    @patch("bio.basker.moderation.backend.create_report", new_callable=AsyncMock)
    async def test_failure_propagates_and_drops_session(
        self, mock_create_report, mock_sentry, report
    ):
        mock_create_report.side_effect = UpstreamException(
            "Token has expired", upstream_status=401
        )
        credentials = MagicMock()
        credentials.access_token = AsyncMock(return_value="stale")
        backend = AtprotoReportBackend(MagicMock(), "https://bsky.social", credentials)

        with pytest.raises(UpstreamException, match="Token has expired"):
            await backend.create_report(report, "did:plc:alice")

        credentials.invalidate.assert_called_once()
        mock_sentry.capture_exception.assert_called_once()

    @pytest.mark.asyncio
    async def test_query_and_resolution_are_stubs(self):
        http_session = MagicMock()
        backend = AtprotoReportBackend(http_session, "https://bsky.social")

        assert await backend.query_reports(ReportQuery(resolved=True)) == []
        assert await backend.apply_resolution("1", "remove", None, "did:plc:mod") is None
        http_session.post.assert_not_called()
        http_session.get.assert_not_called()


class TestNoOpReportBackend:
    @pytest.mark.asyncio
    async def test_acknowledgements_are_numbered(self, report):
        backend = NoOpReportBackend()
        first = await backend.create_report(report, "did:plc:alice")
        second = await backend.create_report(report, "did:plc:bob")
        assert first["id"] == 1
        assert second["id"] == 2
        assert second["reportedBy"] == "did:plc:bob"
        assert second["subject"]["$type"] == "com.atproto.repo.strongRef"

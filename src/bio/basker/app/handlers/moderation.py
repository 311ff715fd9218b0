import logging
from typing import Optional

from aiohttp import web
from pydantic import ValidationError

from bio.basker.app.config import ModerationRegistryAppKey
from bio.basker.app.handlers.helpers import (
    actor_did,
    read_model,
    require_actor,
    require_moderator,
    require_moderator_permission,
)
from bio.basker.errors import NotFoundException, ValidationException
from bio.basker.model.moderation import (
    AddModerator,
    CreateReport,
    ModeratorPermissions,
    ReportQuery,
    ResolveReport,
)
from bio.basker.model.base import Record

logger = logging.getLogger(__name__)

REVIEW_REPORTS = "canReviewReports"


class CreateReportBody(Record):
    reason_type: Optional[str] = None
    reason: Optional[str] = None
    subject: Optional[dict] = None


async def handle_moderation_status(request: web.Request) -> web.Response:
    registry = request.app[ModerationRegistryAppKey]
    did = actor_did(request)
    if did is None:
        return web.json_response({"isModerator": False, "permissions": None})

    permissions = registry.get_permissions(did)
    return web.json_response(
        {
            "isModerator": registry.is_moderator(did),
            "permissions": permissions.to_json() if permissions is not None else None,
        }
    )


async def handle_ozone_config(request: web.Request) -> web.Response:
    require_moderator(request)
    return web.json_response(request.app[ModerationRegistryAppKey].ozone_config())


async def handle_list_reports(request: web.Request) -> web.Response:
    require_moderator_permission(request, REVIEW_REPORTS)
    registry = request.app[ModerationRegistryAppKey]

    limit: Optional[int] = None
    raw_limit = request.query.get("limit")
    if raw_limit:
        try:
            limit = int(raw_limit)
        except ValueError:
            raise ValidationException("limit must be an integer") from None

    query = ReportQuery(
        subject=request.query.get("subject"),
        resolved=request.query.get("resolved") == "true",
        limit=limit,
    )
    return web.json_response(await registry.get_reports(query))


async def handle_create_report(request: web.Request) -> web.Response:
    reported_by = require_actor(request)
    registry = request.app[ModerationRegistryAppKey]

    body = await read_model(request, CreateReportBody)
    if not body.reason_type or not body.subject:
        raise ValidationException.missing_fields("reasonType and subject required")

    try:
        report = CreateReport.model_validate(body.to_json())
    except ValidationError:
        raise ValidationException("subject requires uri and cid") from None

    ack = await registry.create_report(report, reported_by)
    logger.info("Report filed by %s against %s", reported_by, report.subject.uri)
    return web.json_response({"message": "Report created successfully", "report": ack})


async def handle_resolve_report(request: web.Request) -> web.Response:
    moderator_did = require_moderator_permission(request, REVIEW_REPORTS)
    registry = request.app[ModerationRegistryAppKey]

    body = await read_model(request, ResolveReport)
    if body.action is None:
        raise ValidationException.missing_fields("action required")

    resolution = await registry.resolve_report(
        request.match_info["report_id"], body.action, moderator_did, body.note
    )
    return web.json_response(
        {"message": "Report resolved successfully", "result": resolution.to_json()}
    )


async def handle_list_moderators(request: web.Request) -> web.Response:
    require_moderator(request)
    registry = request.app[ModerationRegistryAppKey]
    return web.json_response([m.to_json() for m in registry.list_moderators()])


async def handle_add_moderator(request: web.Request) -> web.Response:
    added_by = require_moderator(request)
    registry = request.app[ModerationRegistryAppKey]

    body = await read_model(request, AddModerator)
    if not body.did or not body.handle:
        raise ValidationException.missing_fields("did and handle required")

    registry.add_moderator(
        body.did, body.handle, body.permissions or ModeratorPermissions(), added_by
    )
    return web.json_response({"message": "Moderator added successfully"})


async def handle_remove_moderator(request: web.Request) -> web.Response:
    require_moderator(request)
    registry = request.app[ModerationRegistryAppKey]

    if not registry.remove_moderator(request.match_info["did"]):
        raise NotFoundException.moderator()
    return web.json_response({"message": "Moderator removed successfully"})

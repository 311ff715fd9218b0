import logging

from aiohttp import web

from bio.basker.admin.gate import VERIFY_WORK
from bio.basker.app.config import (
    AdminGateAppKey,
    VerificationRegistryAppKey,
)
from bio.basker.app.handlers.helpers import (
    actor_did,
    read_model,
    require_admin_permission,
)
from bio.basker.errors import ValidationException
from bio.basker.model.verification import (
    REVIEW_STATUSES,
    ReviewVerificationRequest,
    SubmitVerificationRequest,
)

logger = logging.getLogger(__name__)


async def handle_admin_status(request: web.Request) -> web.Response:
    admin_gate = request.app[AdminGateAppKey]
    did = actor_did(request)
    if did is None:
        return web.json_response({"isAdmin": False, "permissions": []})
    return web.json_response(
        {
            "isAdmin": admin_gate.is_admin(did),
            "permissions": admin_gate.get_permissions(did),
        }
    )


async def handle_list_verification_requests(request: web.Request) -> web.Response:
    require_admin_permission(request, VERIFY_WORK)
    registry = request.app[VerificationRegistryAppKey]
    return web.json_response([r.to_json() for r in registry.list()])


async def handle_review_verification_request(request: web.Request) -> web.Response:
    reviewed_by = require_admin_permission(request, VERIFY_WORK)
    registry = request.app[VerificationRegistryAppKey]

    body = await read_model(request, ReviewVerificationRequest)
    if body.status not in {s.value for s in REVIEW_STATUSES}:
        raise ValidationException("Valid status required")

    verification_request = registry.update(
        request.match_info["id"], body.status, body.admin_notes, reviewed_by
    )
    return web.json_response(
        {
            "message": "Verification request updated successfully",
            "request": verification_request.to_json(),
        }
    )


async def handle_submit_verification_request(request: web.Request) -> web.Response:
    registry = request.app[VerificationRegistryAppKey]

    # TODO: Require the submitter's DID to match userId once X-User-DID is verified.
    body = await read_model(request, SubmitVerificationRequest)
    if not body.user_id or not body.company_id or not body.evidence:
        raise ValidationException.missing_fields(
            "User ID, company ID, and evidence are required"
        )

    verification_request = registry.submit(
        body.user_id, body.company_id, body.evidence, body.documents
    )
    return web.json_response(
        {
            "message": "Verification request submitted successfully",
            "request": verification_request.to_json(),
        }
    )

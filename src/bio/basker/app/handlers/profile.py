import logging

from aiohttp import web

from bio.basker.app.config import SessionAppKey, SettingsAppKey
from bio.basker.atproto.pds import get_profile, normalize_handle, resolve_handle
from bio.basker.errors import ValidationException

logger = logging.getLogger(__name__)


async def handle_public_profile(request: web.Request) -> web.Response:
    """
    Public profile lookup for visitors who are not signed in.

    Resolves the handle through the PDS, then returns the AppView profile for
    the resulting DID unchanged.
    """
    settings = request.app[SettingsAppKey]
    http_session = request.app[SessionAppKey]

    handle = normalize_handle(request.match_info["handle"])
    if not handle:
        raise ValidationException("handle required")

    did = await resolve_handle(http_session, settings.pds_url, handle)
    profile = await get_profile(http_session, settings.appview_url, did)
    return web.json_response(profile)

import logging
from typing import Any, Dict, Optional

from aiohttp import ClientSession
from pydantic import BaseModel

from bio.basker.errors import UpstreamException

logger = logging.getLogger(__name__)


class AdminSession(BaseModel):
    """Tokens returned by com.atproto.server.createSession."""

    did: str
    handle: str
    access_jwt: str
    refresh_jwt: str


def normalize_handle(handle: str) -> str:
    """Strip whitespace and the ``at://`` / ``@`` prefixes users paste in."""
    handle = handle.strip()
    handle = handle.removeprefix("at://")
    handle = handle.removeprefix("@")
    return handle


async def upstream_error(resp, method: str) -> UpstreamException:
    """Build an UpstreamException from a non-200 XRPC response."""
    message = f"{method} failed with status {resp.status}"
    try:
        body = await resp.json(content_type=None)
    except Exception:
        body = None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error") or message
    return UpstreamException(message, upstream_status=resp.status)


async def create_session(
    http_session: ClientSession, service_url: str, identifier: str, password: str
) -> AdminSession:
    url = f"{service_url}/xrpc/com.atproto.server.createSession"
    payload = {"identifier": identifier, "password": password}
    async with http_session.post(url, json=payload) as resp:
        if resp.status != 200:
            raise await upstream_error(resp, "com.atproto.server.createSession")
        body: Dict[str, Any] = await resp.json()
        return AdminSession(
            did=body.get("did", ""),
            handle=body.get("handle", identifier),
            access_jwt=body.get("accessJwt", ""),
            refresh_jwt=body.get("refreshJwt", ""),
        )


async def resolve_handle(
    http_session: ClientSession, service_url: str, handle: str
) -> str:
    url = f"{service_url}/xrpc/com.atproto.identity.resolveHandle"
    async with http_session.get(url, params={"handle": handle}) as resp:
        if resp.status != 200:
            raise await upstream_error(resp, "com.atproto.identity.resolveHandle")
        body: Dict[str, Any] = await resp.json()
        did = body.get("did")
        if not did:
            raise UpstreamException(f"Unable to resolve handle {handle}")
        return did


async def get_profile(
    http_session: ClientSession, appview_url: str, actor: str
) -> Dict[str, Any]:
    url = f"{appview_url}/xrpc/app.bsky.actor.getProfile"
    async with http_session.get(url, params={"actor": actor}) as resp:
        if resp.status != 200:
            raise await upstream_error(resp, "app.bsky.actor.getProfile")
        return await resp.json()


async def create_report(
    http_session: ClientSession,
    service_url: str,
    payload: Dict[str, Any],
    access_token: Optional[str] = None,
) -> Dict[str, Any]:
    url = f"{service_url}/xrpc/com.atproto.moderation.createReport"
    headers = {}
    if access_token is not None:
        headers["Authorization"] = f"Bearer {access_token}"
    async with http_session.post(url, json=payload, headers=headers) as resp:
        if resp.status != 200:
            raise await upstream_error(resp, "com.atproto.moderation.createReport")
        return await resp.json()

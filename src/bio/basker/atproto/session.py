import asyncio
import logging
from typing import Optional

from aiohttp import ClientSession
import sentry_sdk

from bio.basker.atproto.pds import AdminSession, create_session

logger = logging.getLogger(__name__)


class AdminCredentials:
    """
    Admin account used for calls that need an authenticated PDS session.

    The session is created on first use and then reused. Without a configured
    password the server stays unauthenticated and upstream services decide
    whether to accept the call.
    """

    def __init__(
        self,
        http_session: ClientSession,
        service_url: str,
        handle: str,
        password: Optional[str],
    ) -> None:
        self._http_session = http_session
        self._service_url = service_url
        self._handle = handle
        self._password = password
        self._session: Optional[AdminSession] = None
        self._lock = asyncio.Lock()

    @property
    def configured(self) -> bool:
        return bool(self._password)

    async def access_token(self) -> Optional[str]:
        if not self.configured:
            return None
        async with self._lock:
            if self._session is None:
                try:
                    self._session = await create_session(
                        self._http_session,
                        self._service_url,
                        self._handle,
                        self._password or "",
                    )
                except Exception as e:
                    sentry_sdk.capture_exception(e)
                    logger.exception("Failed to authenticate admin client")
                    raise
                logger.info("Admin client authenticated as %s", self._session.handle)
            return self._session.access_jwt

    def invalidate(self) -> None:
        self._session = None

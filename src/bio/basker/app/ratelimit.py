"""
Per-client request limiting for unauthenticated routes.

Counters live in process memory through the `limits` library, one fixed window per client address, so they reset
on restart like every other piece of Basker state.
"""

import logging
from time import time
from typing import Iterable, Tuple

from limits import parse
from limits.aio.storage import MemoryStorage
from limits.aio.strategies import FixedWindowRateLimiter

logger = logging.getLogger(__name__)

RATE_LIMITED_PREFIXES = ("/api/public-profile",)

TOO_MANY_REQUESTS = "Too many requests from this IP, please try again later."


class PathRateLimiter:
    """Limit requests per client address on a fixed set of path prefixes."""

    def __init__(self, limit: str, prefixes: Iterable[str] = RATE_LIMITED_PREFIXES):
        self.item = parse(limit)
        self.prefixes = tuple(prefixes)
        self._limiter = FixedWindowRateLimiter(MemoryStorage())

    def applies_to(self, path: str) -> bool:
        return path.startswith(self.prefixes)

    async def hit(self, client: str) -> Tuple[bool, int, int]:
        """
        Count one request from the client.

        Returns:
            Whether the request is allowed, the requests remaining in the window and the seconds until it resets
        """
        allowed = await self._limiter.hit(self.item, "path", client)
        stats = await self._limiter.get_window_stats(self.item, "path", client)
        reset_in = max(0, int(stats.reset_time - time()))
        if not allowed:
            logger.warning("Rate limit exceeded for %s", client)
        return allowed, stats.remaining, reset_in

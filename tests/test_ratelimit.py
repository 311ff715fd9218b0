"""
Unit tests for bio.basker.app.ratelimit
"""

import pytest

from bio.basker.app.ratelimit import PathRateLimiter


def test_applies_to_public_profile_only():
    limiter = PathRateLimiter("10 per minute")
    assert limiter.applies_to("/api/public-profile/alice.bsky.social")
    assert not limiter.applies_to("/api/health")
    assert not limiter.applies_to("/api/moderation/reports")


@pytest.mark.asyncio
async def test_clients_are_counted_separately():
    limiter = PathRateLimiter("1 per minute")

    allowed, remaining, reset_in = await limiter.hit("10.0.0.1")
    assert allowed is True
    assert remaining == 0
    assert 0 <= reset_in <= 60

    allowed, _, _ = await limiter.hit("10.0.0.1")
    assert allowed is False

    allowed, _, _ = await limiter.hit("10.0.0.2")
    assert allowed is True

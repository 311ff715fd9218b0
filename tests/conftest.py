"""
Shared test configuration and fixtures for Basker tests.

Every test that needs the web application gets a freshly built one, so the
admin gate and both registries start empty (apart from the seeded moderator).
"""

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestClient, TestServer

from bio.basker.app.config import Settings
from bio.basker.app.server import start_web_server
from bio.basker.moderation.backend import NoOpReportBackend


@pytest.fixture
def settings():
    """Settings with external services disabled."""
    return Settings(
        admin_dids=["did:plc:uw2cz5hnxy2i6jbmh6t2i7hi"],
        default_moderator_did="did:plc:uw2cz5hnxy2i6jbmh6t2i7hi",
        default_moderator_handle="basker.bio",
        metrics_backend="none",
        report_backend="none",
        sentry_dsn=None,
        static_root=None,
        health_tick_interval=60.0,
    )


@pytest.fixture
def report_backend():
    return NoOpReportBackend()


@pytest_asyncio.fixture
async def client(settings, report_backend):
    """aiohttp test client for a fresh application."""
    app = await start_web_server(settings, report_backend=report_backend)
    async with TestClient(TestServer(app)) as test_client:
        yield test_client

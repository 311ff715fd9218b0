"""
Configuration Module for the Basker server

Settings are loaded from environment variables with Pydantic, and shared objects are handed to request handlers
through typed aiohttp AppKeys. Registries are created once per web application, so every test that builds its own
application starts from a clean state.
"""

import asyncio
import logging
from typing import Annotated, Final, List, Literal, Optional

from aiohttp import ClientSession, web
from limits import parse
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode

from bio.basker.admin.gate import AdminGate
from bio.basker.admin.verification import VerificationRegistry
from bio.basker.app.health import HealthGauge
from bio.basker.app.metrics import MetricsClient
from bio.basker.app.ratelimit import PathRateLimiter
from bio.basker.moderation.backend import ReportBackend
from bio.basker.moderation.registry import ModerationRegistry

logger = logging.getLogger(__name__)

BASKER_DID = "did:plc:uw2cz5hnxy2i6jbmh6t2i7hi"


class Settings(BaseSettings):
    """
    Application settings for the Basker server.

    Environment variables map onto fields by name (ADMIN_DIDS, PDS_URL, ...). List settings accept a
    comma-separated string.
    """

    debug: bool = False
    """
    Enable debug mode: include exception types in 500 responses and allow localhost CORS origins.
    """

    http_port: int = Field(alias="port", default=5000)
    """HTTP port for the service to listen on. Set with PORT."""

    allowed_domains: Annotated[List[str], NoDecode] = [
        "https://basker.bio",
        "https://www.basker.bio",
    ]
    """Origins allowed by CORS. Set with ALLOWED_DOMAINS as a comma-separated list."""

    admin_dids: Annotated[List[str], NoDecode] = [BASKER_DID]
    """
    DIDs granted admin capability. Fixed for the lifetime of the process.
    Set with ADMIN_DIDS as a comma-separated list.
    """

    default_moderator_did: str = BASKER_DID
    """Moderator seeded at startup with every moderation capability."""

    default_moderator_handle: str = "basker.bio"

    pds_url: str = Field(
        "https://bsky.social",
        validation_alias=AliasChoices("pds_url", "service_url"),
    )
    """PDS used for handle resolution, admin login and report creation. Set with PDS_URL."""

    appview_url: str = "https://public.api.bsky.app"
    """AppView used for public profile lookups. Set with APPVIEW_URL."""

    ozone_url: str = "https://ozone.bsky.app"
    """Ozone moderation service advertised to moderators. Set with OZONE_URL."""

    admin_handle: str = "basker.bio"
    """Account the server logs in as to file moderation reports. Set with ADMIN_HANDLE."""

    admin_password: Optional[str] = None
    """App password for ADMIN_HANDLE. Without it the report client is unauthenticated."""

    allow_verification_rereview: bool = True
    """
    Allow approved or rejected verification requests to be reviewed again.
    Set with ALLOW_VERIFICATION_REREVIEW.
    """

    report_backend: Literal["atproto", "none"] = "atproto"
    """Where moderation reports are sent. 'none' keeps them in memory. Set with REPORT_BACKEND."""

    sentry_dsn: Optional[str] = None
    """Sentry DSN for error reporting. Optional, no error reporting if not set."""

    metrics_backend: Literal["telegraf", "none"] = "telegraf"
    """Metrics backend. Set with METRICS_BACKEND."""

    statsd_host: str = Field(alias="TELEGRAF_HOST", default="telegraf")
    statsd_port: int = Field(alias="TELEGRAF_PORT", default=8125)
    statsd_prefix: str = "basker"

    static_root: Optional[str] = None
    """Directory holding the built client. Served at / when set and present."""

    health_tick_interval: float = 1.0
    """Seconds between decrements of the failure gauge."""

    public_profile_rate_limit: str = "1000 per 15 minutes"
    """Requests allowed per client address on /api/public-profile. Set with PUBLIC_PROFILE_RATE_LIMIT."""

    @field_validator("allowed_domains", "admin_dids", mode="before")
    @classmethod
    def decode_comma_separated(cls, v) -> List[str]:
        """
        Accept either a list or a comma-separated string.

        Raises:
            ValueError: If the input is neither a list nor a string
        """
        if isinstance(v, (list, tuple, set, frozenset)):
            return [str(item).strip() for item in v if str(item).strip()]
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        raise ValueError("expected a list or a comma-separated string")

    @field_validator("public_profile_rate_limit")
    @classmethod
    def validate_rate_limit(cls, v: str) -> str:
        parse(v)
        return v


USER_DID_HEADER = "X-User-DID"
"""Request header carrying the caller's DID. Trusted as-is."""

SettingsAppKey: Final = web.AppKey("settings", Settings)
"""AppKey for accessing the application settings"""

SessionAppKey: Final = web.AppKey("http_session", ClientSession)
"""AppKey for accessing the shared aiohttp client session"""

AdminGateAppKey: Final = web.AppKey("admin_gate", AdminGate)
"""AppKey for the admin capability gate"""

VerificationRegistryAppKey: Final = web.AppKey(
    "verification_registry", VerificationRegistry
)
"""AppKey for the verification request registry"""

ModerationRegistryAppKey: Final = web.AppKey(
    "moderation_registry", ModerationRegistry
)
"""AppKey for the moderation registry"""

MetricsClientAppKey: Final = web.AppKey("metrics_client", MetricsClient)
"""AppKey for the metrics client"""

HealthGaugeAppKey: Final = web.AppKey("health_gauge", HealthGauge)
"""AppKey for the failure gauge backing /internal/ready"""

TickHealthTaskAppKey: Final = web.AppKey("tick_health_task", asyncio.Task[None])
"""AppKey for the background task that decays the failure gauge"""

ReportBackendAppKey: Final = web.AppKey("report_backend", ReportBackend)
"""AppKey for the report backend behind the moderation registry"""

RateLimiterAppKey: Final = web.AppKey("rate_limiter", PathRateLimiter)
"""AppKey for the per-client limiter on public routes"""

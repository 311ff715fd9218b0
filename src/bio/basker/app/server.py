import asyncio
import contextlib
import logging
import os
from time import time
from typing import Optional

import aiohttp
from aiohttp import web
import sentry_sdk
from sentry_sdk.integrations.aiohttp import AioHttpIntegration

from bio.basker.admin.gate import AdminGate
from bio.basker.admin.verification import VerificationRegistry
from bio.basker.app.config import (
    AdminGateAppKey,
    HealthGaugeAppKey,
    MetricsClientAppKey,
    ModerationRegistryAppKey,
    RateLimiterAppKey,
    ReportBackendAppKey,
    SessionAppKey,
    Settings,
    SettingsAppKey,
    TickHealthTaskAppKey,
    VerificationRegistryAppKey,
)
from bio.basker.app.cors import get_cors_headers
from bio.basker.app.handlers.admin import (
    handle_admin_status,
    handle_list_verification_requests,
    handle_review_verification_request,
    handle_submit_verification_request,
)
from bio.basker.app.handlers.internal import (
    handle_health,
    handle_internal_alive,
    handle_internal_ready,
)
from bio.basker.app.handlers.moderation import (
    handle_add_moderator,
    handle_create_report,
    handle_list_moderators,
    handle_list_reports,
    handle_moderation_status,
    handle_ozone_config,
    handle_remove_moderator,
    handle_resolve_report,
)
from bio.basker.app.handlers.profile import handle_public_profile
from bio.basker.app.health import HealthGauge, tick_health_task
from bio.basker.app.metrics import create_metrics_client
from bio.basker.app.ratelimit import TOO_MANY_REQUESTS, PathRateLimiter
from bio.basker.atproto.session import AdminCredentials
from bio.basker.errors import BaskerException, classify_exception
from bio.basker.moderation.backend import (
    AtprotoReportBackend,
    NoOpReportBackend,
    ReportBackend,
)
from bio.basker.moderation.registry import ModerationRegistry

logger = logging.getLogger(__name__)

CONTENT_SECURITY_POLICY = "; ".join(
    [
        "default-src 'self'",
        "style-src 'self' 'unsafe-inline' https://fonts.googleapis.com",
        "font-src 'self' https://fonts.gstatic.com",
        "img-src 'self' data: https: blob:",
        "script-src 'self' 'unsafe-inline' 'unsafe-eval'",
        "connect-src 'self' https://bsky.social https://bsky.app https://cdn.bsky.app"
        " https://api.bsky.app https://*.bsky.network https://*.host.bsky.network"
        " wss: wss://*.bsky.network wss://*.host.bsky.network",
        "object-src 'none'",
        "upgrade-insecure-requests",
    ]
)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
    "Content-Security-Policy": CONTENT_SECURITY_POLICY,
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains; preload",
}


def build_report_backend(
    settings: Settings, http_session: aiohttp.ClientSession
) -> ReportBackend:
    if settings.report_backend == "none":
        return NoOpReportBackend()
    credentials = AdminCredentials(
        http_session, settings.pds_url, settings.admin_handle, settings.admin_password
    )
    if not credentials.configured:
        logger.warning("No admin password set, using unauthenticated report client")
    return AtprotoReportBackend(http_session, settings.pds_url, credentials)


async def client_resources(app: web.Application):
    logger.info("Starting up")
    settings: Settings = app[SettingsAppKey]

    app[SessionAppKey] = aiohttp.ClientSession()

    metrics_client = create_metrics_client(
        settings.metrics_backend,
        host=settings.statsd_host,
        port=settings.statsd_port,
        debug=settings.debug,
    )
    await metrics_client.connect()
    app[MetricsClientAppKey] = metrics_client

    if ReportBackendAppKey not in app:
        app[ReportBackendAppKey] = build_report_backend(settings, app[SessionAppKey])

    moderation_registry = ModerationRegistry(
        app[ReportBackendAppKey],
        ozone_url=settings.ozone_url,
        service_url=settings.pds_url,
    )
    moderation_registry.seed_default_moderator(
        settings.default_moderator_did, settings.default_moderator_handle
    )
    app[ModerationRegistryAppKey] = moderation_registry

    app[TickHealthTaskAppKey] = asyncio.create_task(
        tick_health_task(
            app[HealthGaugeAppKey], metrics_client, settings.health_tick_interval
        )
    )

    logger.info("Startup complete")

    yield

    logger.info("Shutting down")

    app[TickHealthTaskAppKey].cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await app[TickHealthTaskAppKey]

    await app[ReportBackendAppKey].close()
    await app[SessionAppKey].close()
    await app[MetricsClientAppKey].close()


def error_body(e: Exception, debug: bool) -> dict:
    if isinstance(e, BaskerException):
        return {"error": e.message}
    body = {"error": "Internal Server Error"}
    if debug:
        body["error_type"] = type(e).__name__
        body["error_message"] = str(e)
    return body


@web.middleware
async def error_middleware(request: web.Request, handler):
    """Map every exception raised by a handler to a JSON error response."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception as e:
        status = classify_exception(e)
        if status >= 500:
            sentry_sdk.capture_exception(e)
            logger.exception("%s %s failed", request.method, request.path)
            await request.app[HealthGaugeAppKey].record_failure()
        else:
            logger.info(
                "%s %s rejected with %d: %s", request.method, request.path, status, e
            )
        settings = request.app[SettingsAppKey]
        return web.json_response(
            error_body(e, settings.debug), status=status
        )


@web.middleware
async def statsd_middleware(request: web.Request, handler):
    metrics_client = request.app[MetricsClientAppKey]
    request_method: str = request.method
    request_path = request.path

    start_time: float = time()
    response_status_code = 0

    try:
        response = await handler(request)
        response_status_code = response.status
        return response
    except Exception as e:
        metrics_client.increment(
            "basker.server.request.exception",
            1,
            tag_dict={
                "exception": type(e).__name__,
                "path": request_path,
                "method": request_method,
            },
        )
        raise e
    finally:
        metrics_client.timer(
            "basker.server.request.time",
            time() - start_time,
            tag_dict={"path": request_path, "method": request_method},
        )
        metrics_client.increment(
            "basker.server.request.count",
            1,
            tag_dict={
                "path": request_path,
                "method": request_method,
                "status": response_status_code,
            },
        )


@web.middleware
async def access_log_middleware(request: web.Request, handler):
    start_time = time()
    status = 500
    try:
        response = await handler(request)
        status = response.status
        return response
    except web.HTTPException as e:
        status = e.status
        raise
    finally:
        if request.path.startswith("/api"):
            duration_ms = int((time() - start_time) * 1000)
            logger.info(
                "%s %s %d in %dms", request.method, request.path, status, duration_ms
            )


@web.middleware
async def cors_middleware(request: web.Request, handler):
    settings = request.app[SettingsAppKey]
    headers = get_cors_headers(
        request.headers.get("Origin"),
        request.path,
        settings.allowed_domains,
        settings.debug,
    )

    if request.method == "OPTIONS":
        return web.Response(status=200, headers=headers)

    try:
        response = await handler(request)
    except web.HTTPException as e:
        e.headers.update(headers)
        raise
    response.headers.update(headers)
    return response


@web.middleware
async def security_headers_middleware(request: web.Request, handler):
    try:
        response = await handler(request)
    except web.HTTPException as e:
        for name, value in SECURITY_HEADERS.items():
            e.headers.setdefault(name, value)
        raise
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


@web.middleware
async def rate_limit_middleware(request: web.Request, handler):
    limiter = request.app[RateLimiterAppKey]
    if not limiter.applies_to(request.path):
        return await handler(request)

    allowed, remaining, reset_in = await limiter.hit(request.remote or "unknown")
    headers = {
        "RateLimit-Limit": str(limiter.item.amount),
        "RateLimit-Remaining": str(remaining),
        "RateLimit-Reset": str(reset_in),
    }
    if not allowed:
        headers["Retry-After"] = str(reset_in)
        return web.json_response(
            {"error": TOO_MANY_REQUESTS}, status=429, headers=headers
        )

    response = await handler(request)
    response.headers.update(headers)
    return response


def add_static_routes(app: web.Application, static_root: str) -> None:
    index_path = os.path.join(static_root, "index.html")

    async def handle_index(request: web.Request):
        return web.FileResponse(index_path)

    app.add_routes([web.get("/", handle_index)])
    app.add_routes([web.static("/", static_root)])


async def start_web_server(
    settings: Optional[Settings] = None,
    report_backend: Optional[ReportBackend] = None,
) -> web.Application:

    if settings is None:
        settings = Settings()  # type: ignore
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            send_default_pii=True,
            integrations=[AioHttpIntegration()],
        )

    app = web.Application(
        middlewares=[
            cors_middleware,
            security_headers_middleware,
            access_log_middleware,
            statsd_middleware,
            rate_limit_middleware,
            error_middleware,
        ]
    )

    app[SettingsAppKey] = settings
    app[HealthGaugeAppKey] = HealthGauge()
    app[RateLimiterAppKey] = PathRateLimiter(settings.public_profile_rate_limit)
    app[AdminGateAppKey] = AdminGate(settings.admin_dids)
    app[VerificationRegistryAppKey] = VerificationRegistry(
        allow_rereview=settings.allow_verification_rereview
    )
    if report_backend is not None:
        app[ReportBackendAppKey] = report_backend

    app.add_routes(
        [
            web.get("/api/health", handle_health),
            web.get("/api/public-profile/{handle}", handle_public_profile),
        ]
    )

    app.add_routes(
        [
            web.get("/internal/alive", handle_internal_alive),
            web.get("/internal/ready", handle_internal_ready),
        ]
    )

    app.add_routes(
        [
            web.get("/api/admin/status", handle_admin_status),
            web.get(
                "/api/admin/verification-requests", handle_list_verification_requests
            ),
            web.put(
                "/api/admin/verification-requests/{id}",
                handle_review_verification_request,
            ),
            web.post("/api/verification-requests", handle_submit_verification_request),
        ]
    )

    app.add_routes(
        [
            web.get("/api/moderation/status", handle_moderation_status),
            web.get("/api/moderation/ozone-config", handle_ozone_config),
            web.get("/api/moderation/reports", handle_list_reports),
            web.post("/api/moderation/reports", handle_create_report),
            web.post(
                "/api/moderation/reports/{report_id}/resolve", handle_resolve_report
            ),
            web.get("/api/moderation/moderators", handle_list_moderators),
            web.post("/api/moderation/moderators", handle_add_moderator),
            web.delete("/api/moderation/moderators/{did}", handle_remove_moderator),
        ]
    )

    if settings.static_root and os.path.isdir(settings.static_root):
        add_static_routes(app, settings.static_root)

    app.cleanup_ctx.append(client_resources)

    return app

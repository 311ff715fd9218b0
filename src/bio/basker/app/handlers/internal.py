from aiohttp import web

from bio.basker.app.config import HealthGaugeAppKey


async def handle_health(request: web.Request) -> web.Response:
    return web.json_response({"status": "healthy", "service": "basker"})


async def handle_internal_ready(request: web.Request) -> web.Response:
    health_gauge = request.app[HealthGaugeAppKey]
    if await health_gauge.is_healthy():
        return web.Response(status=200)
    return web.Response(status=503)


async def handle_internal_alive(request: web.Request) -> web.Response:
    return web.Response(status=200)

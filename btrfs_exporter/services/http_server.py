"""aiohttp application exposing the metrics endpoint."""

import logging

from aiohttp import web
from prometheus_client import CONTENT_TYPE_LATEST

from ..config.models import ServerConfig
from .scrape_gate import ScrapeGate

LANDING_PAGE = """<html>
<head><title>BTRFS Exporter</title></head>
<body>
<h1>BTRFS Exporter</h1>
<p><a href="{path}">Metrics</a></p>
</body>
</html>
"""


def create_app(gate: ScrapeGate, config: ServerConfig, logger: logging.Logger) -> web.Application:
    """
    Build the aiohttp application.

    Args:
        gate: Scrape gate that runs one cycle per metrics request
        config: Server configuration (metrics path)
        logger: Logger instance

    Returns:
        web.Application: Application with landing page and metrics routes
    """
    logger = logger.getChild("http")

    async def metrics(request: web.Request) -> web.Response:
        logger.debug(f"Scrape from {request.remote}")
        body = await gate.scrape()
        return web.Response(body=body, headers={"Content-Type": CONTENT_TYPE_LATEST})

    async def index(request: web.Request) -> web.Response:
        return web.Response(
            text=LANDING_PAGE.format(path=config.metrics_path),
            content_type="text/html"
        )

    app = web.Application()
    app.router.add_get(config.metrics_path, metrics)
    if config.metrics_path != "/":
        app.router.add_get("/", index)
    return app


async def start_server(app: web.Application, config: ServerConfig) -> web.AppRunner:
    """
    Start listening for scrapes.

    Returns:
        web.AppRunner: Runner to clean up on shutdown

    Raises:
        OSError: If the listener cannot bind
    """
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host=config.listen_address, port=config.port)
    try:
        await site.start()
    except OSError:
        await runner.cleanup()
        raise
    return runner

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from forest_host import __version__

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build the host application: request logging plus the health-check route.

    Everything else is served by whatever the admin agent mounts on the app.
    """

    app = FastAPI(title="Forest Admin Host", version=__version__)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.info(f"{request.method} {request.url.path} - {response.status_code}")
        return response

    # Healthcheck route for the load balancer
    @app.get("/", response_class=PlainTextResponse)
    async def healthcheck() -> str:
        return "ping"

    return app

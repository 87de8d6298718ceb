from typing import Optional

from aiohttp import web

from ..logging import BaseLogger
from .handlers import AdminSignalHandler, HealthManager, VersionHandler, metrics_handler

ADMIN_SIGNAL_PATH = "/admin/signal"


def register_routes(
    app: web.Application,
    health: HealthManager,
    version: VersionHandler,
    admin: Optional[AdminSignalHandler] = None,
    logger: Optional[BaseLogger] = None
) -> None:
    """Attach the health, version, metrics and (optional) admin routes."""
    app.router.add_get("/health", health.health)
    app.router.add_get("/health/live", health.liveness)
    app.router.add_get("/health/ready", health.readiness)
    app.router.add_get("/health/startup", health.startup)

    app.router.add_get("/version", version)

    app.router.add_get("/metrics", metrics_handler)

    if admin is None:
        if logger is not None:
            logger.log_debug("Admin signal endpoint disabled (no admin token set)")
        return

    app.router.add_post(ADMIN_SIGNAL_PATH, admin)
    if logger is not None:
        logger.log_info(
            "Admin signal endpoint enabled",
            path=ADMIN_SIGNAL_PATH,
            auth="bearer token",
            rate_limit="10/min, burst 5"
        )
        logger.log_warning("Admin endpoint enabled - ensure this server is not exposed to public internet")

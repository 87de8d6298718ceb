"""HTTP server built on aiohttp.web."""

import asyncio
from typing import Any, Dict, Optional

from aiohttp import web

from ..errors import ServerStartError
from ..logging import BaseLogger
from ..metrics import MetricsExporter
from ..shutdown import ShutdownCoordinator
from .handlers import AdminSignalHandler, HealthManager, VersionHandler
from .keys import LOGGER_KEY, METRICS_KEY
from .middleware import error_middleware, metrics_middleware, request_id_middleware
from .routes import register_routes


def create_app(
    logger: BaseLogger,
    health: HealthManager,
    version: VersionHandler,
    metrics: Optional[MetricsExporter] = None,
    coordinator: Optional[ShutdownCoordinator] = None,
    admin_token: Optional[str] = None
) -> web.Application:
    """
    Build the aiohttp application.

    Middlewares run outermost first: request id, metrics, errors. The
    admin route exists only when both a token and a coordinator are given.
    """
    app = web.Application(middlewares=[request_id_middleware, metrics_middleware, error_middleware])
    app[LOGGER_KEY] = logger
    if metrics is not None:
        app[METRICS_KEY] = metrics

    admin = None
    if admin_token and coordinator is not None:
        admin = AdminSignalHandler(admin_token, coordinator)
    register_routes(app, health, version, admin, logger)
    return app


class Server:
    """Owns the listener: start, wait, shutdown."""

    def __init__(
        self,
        app: web.Application,
        host: str,
        port: int,
        logger: BaseLogger,
        shutdown_timeout: float = 10.0,
        idle_timeout: float = 120.0
    ):
        self.app = app
        self.host = host
        self.port = port
        self.logger = logger
        self.shutdown_timeout = shutdown_timeout
        self.idle_timeout = idle_timeout
        self._runner: Optional[web.AppRunner] = None
        self._stopped: Optional[asyncio.Future] = None

    @property
    def bound_port(self) -> Optional[int]:
        """Actual listen port (useful when started on port 0)."""
        if self._runner is None or not self._runner.addresses:
            return None
        return self._runner.addresses[0][1]

    async def start(self) -> None:
        """
        Bind and start serving.

        Raises:
            ServerStartError: If the address cannot be bound
        """
        loop = asyncio.get_running_loop()
        self._stopped = loop.create_future()
        loop.set_exception_handler(self._on_loop_error)

        self._runner = web.AppRunner(
            self.app,
            handle_signals=False,
            access_log=None,
            shutdown_timeout=self.shutdown_timeout,
            keepalive_timeout=self.idle_timeout
        )
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        try:
            await site.start()
        except OSError as e:
            await self._runner.cleanup()
            self._runner = None
            raise ServerStartError(f"cannot listen on {self.host}:{self.port}: {e}") from e

        self.logger.log_info(
            "Starting HTTP server",
            host=self.host,
            port=self.bound_port,
            addr=f"{self.host}:{self.bound_port}"
        )

    def _on_loop_error(self, loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
        message = context.get("message", "unhandled event loop error")
        exception = context.get("exception")
        self.logger.log_error(message, error=str(exception) if exception else "")
        # A failing accept loop means the listener is gone
        if message.startswith("socket.accept()"):
            self.fail(exception or RuntimeError(message))

    def fail(self, error: BaseException) -> None:
        """Report a fatal listener error to whoever awaits wait()."""
        if self._stopped is not None and not self._stopped.done():
            self._stopped.set_exception(error)

    async def wait(self) -> None:
        """Resolve when the server has stopped; raise if it failed."""
        if self._stopped is None:
            raise RuntimeError("server was not started")
        await asyncio.shield(self._stopped)

    async def shutdown(self, timeout: Optional[float] = None) -> None:
        """Stop accepting connections and drain in-flight requests."""
        if self._runner is None:
            return
        self.logger.log_info("Shutting down HTTP server")
        runner, self._runner = self._runner, None
        try:
            await asyncio.wait_for(runner.cleanup(), timeout=timeout)
        finally:
            if self._stopped is not None and not self._stopped.done():
                self._stopped.set_result(None)
